"""
Shared data models for type-safe data transfer between components.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

# Namespace for session identifiers derived from payload fields
SESSION_NAMESPACE = uuid.UUID("6f1c3f5e-2b0e-4d59-9a43-0c6f0b8a1e27")


@dataclass(frozen=True)
class Credential:
    """Endpoint and API key for one integration."""
    endpoint_url: str = ""
    api_key: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint_url) and bool(self.api_key)


@dataclass(frozen=True)
class Session:
    """One active playback/activity entry reported by an integration."""
    id: str
    title: str
    user: str
    progress_percent: Optional[float] = None
    thumb: Optional[str] = None

    @staticmethod
    def make_id(title: str, user: str, session_key: Optional[str] = None, occurrence: int = 0) -> str:
        """
        Derive an identifier that stays the same across polls.
        `occurrence` tells apart entries sharing a title and user within one payload.
        """
        if session_key is not None:
            return str(uuid.uuid5(SESSION_NAMESPACE, f"key:{session_key}"))
        name = f"{title}\x1f{user}"
        if occurrence:
            name = f"{name}\x1f{occurrence}"
        return str(uuid.uuid5(SESSION_NAMESPACE, name))

    def full_thumbnail_url(self, endpoint_url: str) -> Optional[str]:
        if not endpoint_url or not self.thumb:
            return None
        return f"{endpoint_url}{self.thumb}"


@dataclass(frozen=True)
class PollSnapshot:
    """Latest list of sessions for an integration."""
    sessions: Tuple[Session, ...] = ()
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class PollState(Enum):
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


@dataclass(frozen=True)
class PollResult:
    """
    What the UI should show for an integration.
    Exactly one of loading, error(message) or ready(snapshot) holds.
    """
    state: PollState
    message: Optional[str] = None
    snapshot: Optional[PollSnapshot] = None

    @classmethod
    def loading(cls) -> "PollResult":
        return cls(PollState.LOADING)

    @classmethod
    def error(cls, message: str) -> "PollResult":
        return cls(PollState.ERROR, message=message)

    @classmethod
    def ready(cls, snapshot: PollSnapshot) -> "PollResult":
        return cls(PollState.READY, snapshot=snapshot)

    @property
    def is_loading(self) -> bool:
        return self.state is PollState.LOADING

    @property
    def is_error(self) -> bool:
        return self.state is PollState.ERROR

    @property
    def is_ready(self) -> bool:
        return self.state is PollState.READY
