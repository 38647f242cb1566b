"""Error taxonomy for roster and registration workflows."""
from __future__ import annotations


class TeamHubError(Exception):
    """Base class. `code` is the machine-readable name sent to API clients."""

    code = "error"


class NotFound(TeamHubError):
    """Missing team, event, user, join request or registration."""

    code = "not_found"


class Conflict(TeamHubError):
    """Expected outcome that blocks the operation in the current state."""

    code = "conflict"


class AlreadyMember(Conflict):
    code = "already_member"


class DuplicateRequest(Conflict):
    code = "duplicate_request"


class AlreadyRegistered(Conflict):
    code = "already_registered"


class CapacityExceeded(Conflict):
    code = "capacity_exceeded"


class DeadlinePassed(Conflict):
    code = "deadline_passed"


class RosterFull(Conflict):
    code = "roster_full"


class EventClosed(Conflict):
    code = "event_closed"


class InvalidArgument(TeamHubError, ValueError):
    """Malformed input from the caller."""

    code = "invalid_argument"


class StorageError(TeamHubError):
    """Persistence failure. Every write is safe to retry."""

    code = "storage_error"
