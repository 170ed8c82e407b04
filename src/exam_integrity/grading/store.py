"""Examiner/assignment store interface and the in-memory implementation."""

import itertools
import threading
from typing import Protocol

from ..utils.logging import get_logger
from .models import Assignment, AssignmentStatus, Examiner, WorkflowError

logger = get_logger(__name__)


class AssignmentNotFoundError(WorkflowError):
    """The requested assignment or examiner does not exist."""

    pass


class AssignmentStore(Protocol):
    """Persists examiners and their assignments."""

    def add_examiner(self, name: str, email: str = "", user_id: int | None = None) -> Examiner: ...

    def get_examiner(self, examiner_id: int) -> Examiner: ...

    def remove_examiner(self, examiner_id: int) -> int:
        """Delete an examiner and, with it, all of its assignments."""
        ...

    def add(self, examiner_id: int, submission_id: int, exam_id: int) -> Assignment: ...

    def get(self, assignment_id: int) -> Assignment: ...

    def find_open(self, examiner_id: int, submission_id: int) -> Assignment | None: ...

    def list_assignments(self, exam_id: int | None = None, examiner_id: int | None = None) -> list[Assignment]: ...

    def update_status(self, assignment_id: int, status: AssignmentStatus) -> Assignment: ...


class InMemoryAssignmentStore:
    """Thread-safe assignment store kept in process memory."""

    def __init__(self):
        self._lock = threading.Lock()
        self._examiners: dict[int, Examiner] = {}
        self._assignments: dict[int, Assignment] = {}
        self._examiner_ids = itertools.count(1)
        self._assignment_ids = itertools.count(1)

    # -------------------------------------------------------------------------
    # Examiners
    # -------------------------------------------------------------------------

    def add_examiner(self, name: str, email: str = "", user_id: int | None = None) -> Examiner:
        with self._lock:
            examiner = Examiner(id=next(self._examiner_ids), name=name, email=email, user_id=user_id)
            self._examiners[examiner.id] = examiner
        return examiner

    def get_examiner(self, examiner_id: int) -> Examiner:
        with self._lock:
            examiner = self._examiners.get(examiner_id)
        if examiner is None:
            raise AssignmentNotFoundError(f"Examiner not found: {examiner_id}")
        return examiner

    def remove_examiner(self, examiner_id: int) -> int:
        with self._lock:
            if self._examiners.pop(examiner_id, None) is None:
                raise AssignmentNotFoundError(f"Examiner not found: {examiner_id}")
            owned = [aid for aid, a in self._assignments.items() if a.examiner_id == examiner_id]
            for aid in owned:
                del self._assignments[aid]
        logger.info(f"Removed examiner {examiner_id} and {len(owned)} assignments")
        return len(owned)

    # -------------------------------------------------------------------------
    # Assignments
    # -------------------------------------------------------------------------

    def add(self, examiner_id: int, submission_id: int, exam_id: int) -> Assignment:
        with self._lock:
            assignment = Assignment(
                id=next(self._assignment_ids),
                examiner_id=examiner_id,
                submission_id=submission_id,
                exam_id=exam_id,
            )
            self._assignments[assignment.id] = assignment
        return assignment

    def get(self, assignment_id: int) -> Assignment:
        with self._lock:
            assignment = self._assignments.get(assignment_id)
        if assignment is None:
            raise AssignmentNotFoundError(f"Assignment not found: {assignment_id}")
        return assignment

    def find_open(self, examiner_id: int, submission_id: int) -> Assignment | None:
        with self._lock:
            for assignment in self._assignments.values():
                if (
                    assignment.examiner_id == examiner_id
                    and assignment.submission_id == submission_id
                    and assignment.is_open
                ):
                    return assignment
        return None

    def list_assignments(self, exam_id: int | None = None, examiner_id: int | None = None) -> list[Assignment]:
        with self._lock:
            assignments = list(self._assignments.values())

        if exam_id is not None:
            assignments = [a for a in assignments if a.exam_id == exam_id]
        if examiner_id is not None:
            assignments = [a for a in assignments if a.examiner_id == examiner_id]
        return assignments

    def update_status(self, assignment_id: int, status: AssignmentStatus) -> Assignment:
        with self._lock:
            assignment = self._assignments.get(assignment_id)
            if assignment is None:
                raise AssignmentNotFoundError(f"Assignment not found: {assignment_id}")
            assignment.transition_to(status)
        logger.info(f"Assignment {assignment_id} moved to {status.value}")
        return assignment
