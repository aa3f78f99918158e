"""The locally remembered user of the client, stored under ``bidsmart_user``."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from bidsmart.client.storage import LocalStorage

USER_STORAGE_KEY = "bidsmart_user"
DEFAULT_EMAIL = "demo@theswitchison.org"
DEFAULT_NAME = "Demo User"


@dataclass(frozen=True)
class StoredUser:
    email: str
    name: str

    def to_storage(self) -> Dict[str, Any]:
        return {"email": self.email, "name": self.name}

    @classmethod
    def from_storage(cls, data: Any) -> Optional["StoredUser"]:
        if not isinstance(data, dict) or not isinstance(data.get("email"), str) or not data["email"]:
            return None
        name = data.get("name")
        return cls(email=data["email"], name=name if isinstance(name, str) and name else data["email"].split("@")[0])


class UserStore:
    """Remembers who is using the client. Storage failures never raise."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def get(self) -> Optional[StoredUser]:
        return StoredUser.from_storage(self.storage.get_json(USER_STORAGE_KEY))

    def save(self, user: StoredUser) -> None:
        self.storage.set_json(USER_STORAGE_KEY, user.to_storage())

    def clear(self) -> None:
        self.storage.remove_item(USER_STORAGE_KEY)

    def resolve(self, email: Optional[str] = None, name: Optional[str] = None) -> StoredUser:
        """Pick the active user.

        An explicitly given email wins and replaces the stored user. Otherwise
        the stored user is used, and with nothing stored the demo user is
        stored and returned. A missing name defaults to the email's local part.
        """
        if email:
            user = StoredUser(email=email, name=name or email.split("@")[0])
            self.save(user)
            return user

        stored = self.get()
        if stored is not None:
            return stored

        user = StoredUser(email=DEFAULT_EMAIL, name=DEFAULT_NAME)
        self.save(user)
        return user
