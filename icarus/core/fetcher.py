# icarus/core/fetcher.py
"""
One-shot status fetchers.
A fetcher is a stateless request/decode function of a Credential. Each
integration subclasses Fetcher and overrides the request and parsing hooks.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Type, Union

import requests
from urllib3.exceptions import HTTPError as Urllib3Error, LocationParseError

from .api_client import ApiClient
from .errors import (
    DecodeError, FetchError, InvalidURL, NotConfigured, ServerError, TransportError
)
from .models import Credential, PollSnapshot, Session
from .utils import parse_percent, validate_url

logger = logging.getLogger(__name__)

FetchOutcome = Union[PollSnapshot, FetchError]


class Fetcher:
    """
    Base fetcher. Subclasses describe how their integration is queried.
    """
    integration = ""

    def __init__(self, api_client: ApiClient):
        self.api_client = api_client

    # --- Properties for Overriding ---

    @property
    def status_path(self) -> str:
        """Path appended to the endpoint URL for the poll request."""
        raise NotImplementedError

    def build_params(self, credential: Credential) -> Dict[str, Any]:
        return {}

    def build_headers(self, credential: Credential) -> Dict[str, str]:
        return {"X-Api-Key": credential.api_key}

    def parse_sessions(self, payload: Any) -> List[Session]:
        """Turn a decoded JSON body into sessions. Raise DecodeError on schema mismatch."""
        raise NotImplementedError

    # --- Public API ---

    def fetch_status(self, credential: Credential) -> FetchOutcome:
        """
        Run a single poll against the integration.
        Returns a PollSnapshot, or a FetchError describing what went wrong.
        """
        try:
            return self._fetch(credential)
        except FetchError as e:
            logger.warning(f"{self.integration} fetch failed: {e}")
            return e

    def test_connection(self, credential: Credential) -> bool:
        """
        Lightweight reachability check against {endpoint}/status.
        The API key is sent in the Authorization header.
        """
        if not credential.is_configured or not validate_url(credential.endpoint_url):
            return False
        url = f"{credential.endpoint_url}/status"
        try:
            response = self.api_client.get(url, headers={"Authorization": credential.api_key})
        except (requests.exceptions.RequestException, Urllib3Error) as e:
            logger.warning(f"{self.integration} connection test failed: {e}")
            return False
        reachable = response.status_code == 200
        logger.info(f"{self.integration} connection test: HTTP {response.status_code}")
        return reachable

    # --- Internals ---

    def _fetch(self, credential: Credential) -> PollSnapshot:
        if not credential.is_configured:
            raise NotConfigured(self.integration)
        if not validate_url(credential.endpoint_url):
            raise InvalidURL(credential.endpoint_url)

        url = f"{credential.endpoint_url}{self.status_path}"
        try:
            response = self.api_client.get(
                url,
                params=self.build_params(credential),
                headers=self.build_headers(credential),
            )
        except LocationParseError as e:
            # requests lets urllib3 host parsing errors through unwrapped
            raise InvalidURL(credential.endpoint_url) from e
        except (requests.exceptions.RequestException, Urllib3Error) as e:
            raise TransportError(str(e) or type(e).__name__) from e

        if response.status_code != 200:
            raise ServerError(response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError("body is not valid JSON") from e

        sessions = self.parse_sessions(payload)
        logger.debug(f"{self.integration}: decoded {len(sessions)} sessions")
        return PollSnapshot(sessions=tuple(sessions))


class TautulliFetcher(Fetcher):
    """Current activity from Tautulli's v2 API."""
    integration = "Tautulli"

    @property
    def status_path(self) -> str:
        return "/api/v2"

    def build_params(self, credential: Credential) -> Dict[str, Any]:
        return {"cmd": "get_activity", "apikey": credential.api_key}

    def build_headers(self, credential: Credential) -> Dict[str, str]:
        # Tautulli authenticates through the apikey query parameter
        return {}

    def parse_sessions(self, payload: Any) -> List[Session]:
        try:
            raw_sessions = payload["response"]["data"]["sessions"]
        except (KeyError, TypeError) as e:
            raise DecodeError("missing response.data.sessions") from e
        if not isinstance(raw_sessions, list):
            raise DecodeError("sessions is not a list")

        sessions = []
        seen: Counter = Counter()
        for index, item in enumerate(raw_sessions):
            session = self._parse_session(index, item, seen)
            sessions.append(session)
        return sessions

    @staticmethod
    def _parse_session(index: int, item: Any, seen: Counter) -> Session:
        if not isinstance(item, dict):
            raise DecodeError(f"session {index} is not an object")

        title = item.get("title")
        user = item.get("user")
        if not isinstance(title, str) or not isinstance(user, str):
            raise DecodeError(f"session {index} lacks title/user")

        thumb = item.get("thumb")
        if thumb is not None and not isinstance(thumb, str):
            raise DecodeError(f"session {index} has a non-string thumb")

        session_key = item.get("session_key")
        if session_key is not None and session_key != "":
            session_id = Session.make_id(title, user, str(session_key))
        else:
            # Same title and user twice means one user on two devices
            occurrence = seen[(title, user)]
            seen[(title, user)] += 1
            session_id = Session.make_id(title, user, occurrence=occurrence)
        return Session(
            id=session_id,
            title=title,
            user=user,
            progress_percent=parse_percent(item.get("progress_percent")),
            thumb=thumb or None,
        )


FETCHERS: Dict[str, Type[Fetcher]] = {
    TautulliFetcher.integration: TautulliFetcher,
}


def fetcher_for(integration: str, api_client: ApiClient) -> Optional[Fetcher]:
    """Instantiate the fetcher registered for an integration, if any."""
    fetcher_class = FETCHERS.get(integration)
    if fetcher_class is None:
        return None
    return fetcher_class(api_client)
