"""Violation data models and severity ordering."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Severity(str, Enum):
    """Known severities, lowest first."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class ViolationType(str, Enum):
    """Violation tags emitted by detection. Consumers must accept others."""

    FILE_NAME = "FileName"
    KEYWORD = "KeywordViolation"
    FILE_NAME_MATCH = "FileNameMatch"


_SEVERITY_RANK = {
    Severity.CRITICAL.value: 4,
    Severity.HIGH.value: 3,
    Severity.MEDIUM.value: 2,
}


def severity_rank(severity: str | None) -> int:
    """Rank a severity: Critical=4, High=3, Medium=2, Low or unknown=1."""
    if isinstance(severity, Severity):
        severity = severity.value
    return _SEVERITY_RANK.get(severity, 1)


def highest_severity(severities: Iterable[str]) -> str | None:
    """Return the highest-ranked severity, the first one on ties."""
    best = None
    for severity in severities:
        if best is None or severity_rank(severity) > severity_rank(best):
            best = severity
    return best


@dataclass
class Violation:
    """An integrity concern detected on a submission."""

    submission_id: int
    type: str
    description: str
    severity: str = Severity.MEDIUM.value
    id: int | None = None
    created_at: datetime = field(default_factory=utcnow)
    is_resolved: bool = False


@dataclass
class ViolationKeyword:
    """A prohibited term screened for during detection."""

    keyword: str
    description: str = ""
    severity: str = Severity.MEDIUM.value
    is_active: bool = True
    id: int | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], keyword_id: int | None = None) -> "ViolationKeyword":
        return cls(
            id=data.get("id", keyword_id),
            keyword=str(data.get("keyword", "")).strip(),
            description=data.get("description") or "",
            severity=data.get("severity") or Severity.MEDIUM.value,
            is_active=data.get("active", data.get("is_active", True)),
        )
