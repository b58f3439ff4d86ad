"""Voice Lead Collection - Runtime Package."""

from .state import FieldValue, LeadRecord, SessionState, SessionStatus, leads_from_sessions
from .store import SessionStore

__version__ = "0.1.0"

__all__ = [
    "FieldValue",
    "LeadRecord",
    "SessionState",
    "SessionStatus",
    "SessionStore",
    "leads_from_sessions",
]
