"""Client-side state for the guided bid comparison flow.

Phase progression, project loading with background polling, the analysis
status banner, the remembered user and the admin login session, persisted
through a small local key-value store.
"""

from bidsmart.client.admin import AdminSessionStore
from bidsmart.client.phase import Phase, PhaseController, PhaseState
from bidsmart.client.project import ProjectController
from bidsmart.client.storage import LocalStorage
from bidsmart.client.user import StoredUser, UserStore

__all__ = [
    "AdminSessionStore",
    "LocalStorage",
    "Phase",
    "PhaseController",
    "PhaseState",
    "ProjectController",
    "StoredUser",
    "UserStore",
]
