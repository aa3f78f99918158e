"""Admin login session kept by the client under ``admin_session``."""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from bidsmart.client.api import BidSmartClient
from bidsmart.client.storage import LocalStorage
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

ADMIN_SESSION_KEY = "admin_session"


def _parse_time(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class AdminSessionStore:
    """Stores ``{token, expires_at, admin}`` from the admin login.

    An expired or unreadable entry is removed on read and reported as no session.
    """

    def __init__(self, storage: LocalStorage, now: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.storage = storage
        self.now = now

    def get(self) -> Optional[Dict[str, Any]]:
        """The stored admin merged with its ``session_token``, or None."""
        session = self.storage.get_json(ADMIN_SESSION_KEY)
        if session is None:
            return None

        expires_at = _parse_time(session.get("expires_at")) if isinstance(session, dict) else None
        if expires_at is None or not isinstance(session.get("token"), str) or expires_at < self.now():
            self.clear()
            return None

        admin = session.get("admin") if isinstance(session.get("admin"), dict) else {}
        return {**admin, "session_token": session["token"]}

    def save(self, token: str, expires_at: str, admin: Dict[str, Any]) -> None:
        self.storage.set_json(ADMIN_SESSION_KEY, {"token": token, "expires_at": expires_at, "admin": admin})

    def clear(self) -> None:
        self.storage.remove_item(ADMIN_SESSION_KEY)

    async def login(self, api: BidSmartClient, email: str, password: str) -> Dict[str, Any]:
        """Log in through the API and store the issued session.

        Raises:
            APIClientError: If the credentials are rejected; nothing is stored then
        """
        result = await api.admin_login(email, password)
        self.save(result["session_token"], result["expires_at"], result["admin"])
        LOGGER.info(f"Admin session stored for {email}")
        return {**result["admin"], "session_token": result["session_token"]}
