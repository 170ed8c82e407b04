"""Examiner and assignment data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------


class WorkflowError(Exception):
    """Base exception for assignment and grading workflow errors."""

    pass


class InvalidTransitionError(WorkflowError):
    """An assignment status change that is not a forward step."""

    pass


# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------


class AssignmentStatus(str, Enum):
    """Progress of an examiner's work on a submission."""

    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


# Allowed forward moves; Completed is terminal
_TRANSITIONS = {
    AssignmentStatus.PENDING: {AssignmentStatus.IN_PROGRESS, AssignmentStatus.COMPLETED},
    AssignmentStatus.IN_PROGRESS: {AssignmentStatus.COMPLETED},
    AssignmentStatus.COMPLETED: set(),
}


@dataclass
class Examiner:
    """A person who grades submissions."""

    id: int
    name: str
    email: str = ""
    user_id: int | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Assignment:
    """Routing of one submission to one examiner."""

    id: int
    examiner_id: int
    submission_id: int
    exam_id: int
    status: AssignmentStatus = AssignmentStatus.PENDING
    assigned_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        """Check whether the assignment still blocks re-assignment."""
        return self.status != AssignmentStatus.COMPLETED

    def can_transition_to(self, status: AssignmentStatus) -> bool:
        return status in _TRANSITIONS[self.status]

    def transition_to(self, status: AssignmentStatus) -> None:
        """Move the assignment forward.

        Raises:
            InvalidTransitionError: If the move is not a forward step
        """
        if not self.can_transition_to(status):
            raise InvalidTransitionError(f"Cannot move assignment {self.id} from {self.status.value} to {status.value}")
        self.status = status
        if status == AssignmentStatus.COMPLETED:
            self.completed_at = utcnow()


@dataclass
class GradingProgress:
    """Assignment counts for one exam."""

    exam_id: int
    total_assignments: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0

    @property
    def completion_rate(self) -> float:
        """Percentage of completed assignments, 0 when there are none."""
        if self.total_assignments == 0:
            return 0.0
        return self.completed / self.total_assignments * 100
