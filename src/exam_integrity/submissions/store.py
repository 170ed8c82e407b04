"""Submission repository interfaces and the in-memory implementation."""

import itertools
import threading
from typing import Iterable, Protocol

from ..processing.filetypes import FileDescriptor
from ..utils.logging import get_logger
from .models import Grade, Submission, SubmissionFile, SubmissionStatus, utcnow

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------


class SubmissionError(Exception):
    """Base exception for submission repository errors."""

    pass


class SubmissionNotFoundError(SubmissionError):
    """The requested submission does not exist."""

    def __init__(self, submission_id: int):
        super().__init__(f"Submission not found: {submission_id}")
        self.submission_id = submission_id


# -----------------------------------------------------------------------------
# Interfaces
# -----------------------------------------------------------------------------


class SubmissionSource(Protocol):
    """Read access to submissions plus the grading primitive."""

    def get_submission(self, submission_id: int) -> Submission: ...

    def list_submissions(self, exam_id: int) -> list[Submission]: ...

    def create_grade(
        self,
        submission_id: int,
        examiner_id: int,
        scores: str,
        comment: str,
        total_score: float,
    ) -> Grade: ...


class SubmissionRepository(SubmissionSource, Protocol):
    """A submission source that also accepts new uploads."""

    def create_submission(self, student_id: str, student_name: str, exam_id: int) -> Submission: ...

    def add_files(self, submission_id: int, files: Iterable[FileDescriptor]) -> list[SubmissionFile]: ...


# -----------------------------------------------------------------------------
# In-memory implementation
# -----------------------------------------------------------------------------


class InMemorySubmissionStore:
    """Thread-safe submission repository kept in process memory."""

    def __init__(self):
        self._lock = threading.Lock()
        self._submissions: dict[int, Submission] = {}
        self._submission_ids = itertools.count(1)
        self._file_ids = itertools.count(1)
        self._grade_ids = itertools.count(1)

    def create_submission(self, student_id: str, student_name: str, exam_id: int) -> Submission:
        with self._lock:
            submission = Submission(
                id=next(self._submission_ids),
                student_id=student_id,
                student_name=student_name,
                exam_id=exam_id,
            )
            self._submissions[submission.id] = submission
        logger.info(f"Created submission {submission.id} for student {student_id} (exam {exam_id})")
        return submission

    def add_files(self, submission_id: int, files: Iterable[FileDescriptor]) -> list[SubmissionFile]:
        with self._lock:
            submission = self._get(submission_id)
            added = [
                SubmissionFile(
                    id=next(self._file_ids),
                    submission_id=submission_id,
                    file_name=f.name,
                    file_type=f.file_type,
                    file_path=str(f.path),
                    file_size=f.size_bytes,
                )
                for f in files
            ]
            submission.files.extend(added)
        return added

    def get_submission(self, submission_id: int) -> Submission:
        with self._lock:
            return self._get(submission_id)

    def list_submissions(self, exam_id: int) -> list[Submission]:
        with self._lock:
            return [s for s in self._submissions.values() if s.exam_id == exam_id]

    def create_grade(
        self,
        submission_id: int,
        examiner_id: int,
        scores: str,
        comment: str,
        total_score: float,
    ) -> Grade:
        with self._lock:
            submission = self._get(submission_id)
            grade = Grade(
                id=next(self._grade_ids),
                submission_id=submission_id,
                examiner_id=examiner_id,
                total_score=total_score,
                scores=scores,
                comment=comment,
            )
            submission.grades.append(grade)
            submission.total_score = total_score
            submission.status = SubmissionStatus.GRADED
            submission.updated_at = utcnow()
        logger.info(f"Submission {submission_id} graded {total_score} by examiner {examiner_id}")
        return grade

    def _get(self, submission_id: int) -> Submission:
        try:
            return self._submissions[submission_id]
        except KeyError:
            raise SubmissionNotFoundError(submission_id) from None
