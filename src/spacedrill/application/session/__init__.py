# Application Session Package
from .engine import Command, ReviewSessionEngine, SessionPhase, SessionState, SessionSummary
from .outbox import DeleteItem, PersistenceOutbox, PersistRating, RestoreState
from .timer import SessionTimer, format_elapsed

__all__ = [
    "ReviewSessionEngine",
    "SessionState",
    "SessionSummary",
    "SessionPhase",
    "Command",
    "PersistenceOutbox",
    "PersistRating",
    "RestoreState",
    "DeleteItem",
    "SessionTimer",
    "format_elapsed",
]
