"""
Assignment and grading workflow.

Routes submissions to examiners while keeping at most one open
assignment per (examiner, submission) pair, reports grading progress,
and gates the confirm-zero-score action on unresolved violations.
"""

import threading
from dataclasses import dataclass, field
from typing import Iterable

from ..config.models import DEFAULT_ZERO_SCORE_COMMENT
from ..submissions.models import Grade
from ..submissions.store import SubmissionSource
from ..utils.logging import get_logger
from ..violations.stores import ViolationStore
from .models import Assignment, AssignmentStatus, GradingProgress, WorkflowError
from .store import AssignmentStore

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------


class DuplicateAssignmentError(WorkflowError):
    """The examiner already has an open assignment for the submission."""

    def __init__(self, examiner_id: int, submission_id: int):
        super().__init__(f"Submission {submission_id} is already assigned to examiner {examiner_id}")
        self.examiner_id = examiner_id
        self.submission_id = submission_id


class NoAssignmentsCreatedError(WorkflowError):
    """A bulk assignment created nothing."""

    def __init__(self, errors: list[str]):
        super().__init__("No new assignments could be created")
        self.errors = errors


class NoUnresolvedViolationsError(WorkflowError):
    """Confirm-zero was requested for a submission without unresolved violations."""

    def __init__(self, submission_id: int):
        super().__init__(f"Submission {submission_id} does not have any unresolved violations")
        self.submission_id = submission_id


# -----------------------------------------------------------------------------
# Data Classes
# -----------------------------------------------------------------------------


@dataclass
class BulkAssignmentResult:
    """Outcome of assigning several submissions to one examiner."""

    created: list[Assignment] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


# -----------------------------------------------------------------------------
# Workflows
# -----------------------------------------------------------------------------


class AssignmentWorkflow:
    """Creates examiner assignments and reports progress."""

    def __init__(self, store: AssignmentStore):
        self.store = store
        # Serializes the check-then-create sequence
        self._lock = threading.Lock()

    def assign(self, examiner_id: int, submission_id: int, exam_id: int) -> Assignment:
        """
        Assign a submission to an examiner.

        Args:
            examiner_id: Examiner receiving the work
            submission_id: Submission to grade
            exam_id: Exam the submission belongs to

        Returns:
            The new Pending assignment

        Raises:
            DuplicateAssignmentError: If a Pending/InProgress assignment exists
                for the same examiner and submission
        """
        with self._lock:
            if self.store.find_open(examiner_id, submission_id) is not None:
                raise DuplicateAssignmentError(examiner_id, submission_id)
            assignment = self.store.add(examiner_id, submission_id, exam_id)

        logger.info(f"Examiner {examiner_id} assigned to submission {submission_id}")
        return assignment

    def assign_bulk(
        self,
        examiner_id: int,
        submission_ids: Iterable[int],
        exam_id: int,
    ) -> BulkAssignmentResult:
        """
        Assign several submissions to one examiner.

        Each id is checked on its own; ids that already have an open
        assignment (including one created earlier in the same call) are
        reported in ``errors`` and skipped.

        Raises:
            ValueError: If no submission ids are given
            NoAssignmentsCreatedError: If every id was rejected
        """
        submission_ids = list(submission_ids)
        if not submission_ids:
            raise ValueError("At least one submission ID is required")

        result = BulkAssignmentResult()
        with self._lock:
            for submission_id in submission_ids:
                if self.store.find_open(examiner_id, submission_id) is not None:
                    result.errors.append(f"Submission {submission_id} is already assigned to this examiner")
                    continue
                result.created.append(self.store.add(examiner_id, submission_id, exam_id))

        if not result.created:
            raise NoAssignmentsCreatedError(result.errors)

        logger.info(f"Examiner {examiner_id} assigned to {len(result.created)} submissions")
        return result

    def list_assignments(self, exam_id: int | None = None, examiner_id: int | None = None) -> list[Assignment]:
        """List assignments, newest first."""
        assignments = self.store.list_assignments(exam_id=exam_id, examiner_id=examiner_id)
        return sorted(assignments, key=lambda a: a.assigned_at, reverse=True)

    def progress(self, exam_id: int) -> GradingProgress:
        """Count an exam's assignments by status."""
        assignments = self.store.list_assignments(exam_id=exam_id)
        return GradingProgress(
            exam_id=exam_id,
            total_assignments=len(assignments),
            pending=sum(1 for a in assignments if a.status == AssignmentStatus.PENDING),
            in_progress=sum(1 for a in assignments if a.status == AssignmentStatus.IN_PROGRESS),
            completed=sum(1 for a in assignments if a.status == AssignmentStatus.COMPLETED),
        )


class GradingWorkflow:
    """Grading actions that depend on violation state."""

    def __init__(
        self,
        violations: ViolationStore,
        submissions: SubmissionSource,
        default_comment: str = DEFAULT_ZERO_SCORE_COMMENT,
    ):
        self.violations = violations
        self.submissions = submissions
        self.default_comment = default_comment

    def confirm_zero_score(self, submission_id: int, examiner_id: int, comment: str | None = None) -> Grade:
        """
        Grade a submission with zero because of its violations.

        Args:
            submission_id: Submission to grade
            examiner_id: Examiner recorded on the grade
            comment: Grade comment; the configured default when omitted

        Returns:
            The Grade created by the submission source

        Raises:
            NoUnresolvedViolationsError: If the submission has no unresolved violations
        """
        if not self.violations.list_unresolved(submission_id):
            raise NoUnresolvedViolationsError(submission_id)

        grade = self.submissions.create_grade(
            submission_id,
            examiner_id,
            "{}",
            comment if comment is not None else self.default_comment,
            0,
        )
        logger.info(f"Zero score confirmed for submission {submission_id} by examiner {examiner_id}")
        return grade
