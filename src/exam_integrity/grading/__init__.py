"""
Grading module.

Examiner assignment routing and violation-gated grading actions.
"""

from .models import (
    Assignment,
    AssignmentStatus,
    Examiner,
    GradingProgress,
    InvalidTransitionError,
    WorkflowError,
)
from .store import AssignmentNotFoundError, AssignmentStore, InMemoryAssignmentStore
from .workflow import (
    AssignmentWorkflow,
    BulkAssignmentResult,
    DuplicateAssignmentError,
    GradingWorkflow,
    NoAssignmentsCreatedError,
    NoUnresolvedViolationsError,
)

__all__ = [
    # Models
    "Assignment",
    "AssignmentStatus",
    "Examiner",
    "GradingProgress",
    # Stores
    "AssignmentStore",
    "InMemoryAssignmentStore",
    # Workflows
    "AssignmentWorkflow",
    "BulkAssignmentResult",
    "GradingWorkflow",
    # Exceptions
    "WorkflowError",
    "InvalidTransitionError",
    "AssignmentNotFoundError",
    "DuplicateAssignmentError",
    "NoAssignmentsCreatedError",
    "NoUnresolvedViolationsError",
]
