"""Error taxonomy for perftrack.

Every error the core raises is a ``PerfTrackError`` with a stable ``kind``.
The HTTP layer maps kinds to status codes; nothing here is retried.
"""

from typing import Iterable, Optional


class PerfTrackError(Exception):
    """Base class for all typed core errors."""

    kind = "Error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message}


class InvalidSpecError(PerfTrackError):
    """Task creation (or approval input) with missing or out-of-range fields."""

    kind = "InvalidSpec"
    status_code = 422


class NotFoundError(PerfTrackError):
    """Referenced task, user, project or team does not exist."""

    kind = "NotFound"
    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidTransitionError(PerfTrackError):
    """Operation attempted from a status that does not permit it."""

    kind = "InvalidTransition"
    status_code = 409

    def __init__(self, task_id: str, current: str, attempted: str, required: Iterable[str]):
        self.task_id = task_id
        self.current = current
        self.attempted = attempted
        self.required = sorted(required)
        super().__init__(
            f"Cannot {attempted} task {task_id}: status is '{current}', "
            f"requires {' or '.join(repr(s) for s in self.required)}"
        )


class ForbiddenError(PerfTrackError):
    """Caller lacks the role or ownership required for the operation."""

    kind = "Forbidden"
    status_code = 403


class TaskUnavailableError(InvalidTransitionError):
    """Claim on a task that is no longer available (typically a lost race).

    A specialised invalid transition: it still names the status found.
    """

    kind = "TaskUnavailable"

    def __init__(self, task_id: str, current: Optional[str] = None):
        super().__init__(task_id, current or "unknown", "claim", ["available"])
        self.message = f"Task {task_id} is no longer available to claim (status is '{self.current}')"
        self.args = (self.message,)


class InvalidTargetError(PerfTrackError):
    """Productivity requested against a zero or negative monthly target."""

    kind = "InvalidTarget"
    status_code = 422
