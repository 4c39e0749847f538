"""
Typed failures for status fetching.
The fetcher returns these as values; the poll scheduler turns them into
user-facing status text.
"""

from typing import Optional


class FetchError(Exception):
    """Base class for every failure of a single status fetch."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def user_message(self) -> str:
        return self.message

    def __eq__(self, other):
        return type(self) is type(other) and self.args == other.args

    def __hash__(self):
        return hash((type(self), self.args))


class NotConfigured(FetchError):
    """Endpoint URL or API key is missing."""

    def __init__(self, integration: str = ""):
        super().__init__(f"{integration} API is not configured.".strip())
        self.integration = integration


class InvalidURL(FetchError):
    """Endpoint URL does not match the accepted URL grammar."""

    def __init__(self, url: str):
        super().__init__(f"Invalid API URL: {url}")
        self.url = url

    @property
    def user_message(self) -> str:
        return "Invalid API URL."


class TransportError(FetchError):
    """Timeout, DNS failure, refused connection..."""

    def __init__(self, description: str):
        super().__init__(description)
        self.description = description

    @property
    def user_message(self) -> str:
        return "Network error"


class ServerError(FetchError):
    """Server answered with something other than HTTP 200."""

    def __init__(self, status_code: int):
        super().__init__(f"Server returned an error: HTTP {status_code}")
        self.status_code = status_code


class DecodeError(FetchError):
    """Response body does not match the expected schema."""

    def __init__(self, detail: Optional[str] = None):
        message = "Unexpected response from server"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.detail = detail
