"""Submission data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ..processing.filetypes import FileType


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    # Python < 3.11 refuses the trailing Z
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class SubmissionStatus(str, Enum):
    """Lifecycle of a submission."""

    SUBMITTED = "Submitted"
    GRADING = "Grading"
    GRADED = "Graded"
    REJECTED = "Rejected"


@dataclass(frozen=True)
class SubmissionFile:
    """A file extracted from a student's upload."""

    id: int
    submission_id: int
    file_name: str
    file_type: FileType
    file_path: str
    file_size: int = 0
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "SubmissionFile":
        """Create a SubmissionFile from submission service response data."""
        return cls(
            id=data.get("id", 0),
            submission_id=data.get("submissionId", 0),
            file_name=data.get("fileName") or "",
            file_type=FileType.parse(data.get("fileType")),
            file_path=data.get("filePath") or "",
            file_size=data.get("fileSize", 0),
            created_at=_parse_datetime(data.get("createdAt")) or utcnow(),
        )


@dataclass
class Grade:
    """A grade an examiner gave a submission."""

    id: int
    submission_id: int
    examiner_id: int
    total_score: float
    scores: str = "{}"
    comment: str = ""
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Grade":
        """Create a Grade from submission service response data."""
        return cls(
            id=data.get("id", 0),
            submission_id=data.get("submissionId", 0),
            examiner_id=data.get("examinerId", 0),
            total_score=float(data.get("totalScore", 0)),
            scores=data.get("scores") or "{}",
            comment=data.get("comment") or "",
            created_at=_parse_datetime(data.get("createdAt")) or utcnow(),
        )


@dataclass
class Submission:
    """One student's uploaded artifact set for one exam."""

    id: int
    student_id: str
    student_name: str
    exam_id: int
    status: SubmissionStatus = SubmissionStatus.SUBMITTED
    total_score: float | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None
    files: list[SubmissionFile] = field(default_factory=list)
    grades: list[Grade] = field(default_factory=list)

    @property
    def file_names(self) -> list[str]:
        return [f.file_name for f in self.files]

    @property
    def file_paths(self) -> list[str]:
        return [f.file_path for f in self.files]

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Submission":
        """Create a Submission from submission service response data."""
        total_score = data.get("totalScore")
        return cls(
            id=data["id"],
            student_id=data.get("studentId") or "",
            student_name=data.get("studentName") or "",
            exam_id=data.get("examId", 0),
            status=SubmissionStatus(data.get("status") or SubmissionStatus.SUBMITTED.value),
            total_score=float(total_score) if total_score is not None else None,
            created_at=_parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=_parse_datetime(data.get("updatedAt")),
            files=[SubmissionFile.from_api_response(f) for f in data.get("files") or [] if f],
            grades=[Grade.from_api_response(g) for g in data.get("grades") or [] if g],
        )
