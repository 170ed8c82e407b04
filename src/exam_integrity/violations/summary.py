"""Per-submission violation summaries ordered by severity."""

from dataclasses import dataclass, field
from typing import Iterable

from ..submissions.models import Submission
from .models import Violation, highest_severity, severity_rank
from .stores import ViolationStore


@dataclass
class SubmissionViolationSummary:
    """A submission together with its unresolved violations."""

    submission: Submission
    violations: list[Violation] = field(default_factory=list)

    @property
    def violation_count(self) -> int:
        return len(self.violations)

    @property
    def highest_severity(self) -> str | None:
        return highest_severity(v.severity for v in self.violations)


def sort_by_severity(violations: Iterable[Violation]) -> list[Violation]:
    """Order violations from most to least severe, keeping ties in order."""
    return sorted(violations, key=lambda v: severity_rank(v.severity), reverse=True)


def summarize_violations(
    submissions: Iterable[Submission],
    store: ViolationStore,
) -> list[SubmissionViolationSummary]:
    """
    Summarize the unresolved violations of each submission.

    Submissions without unresolved violations are left out. The rest are
    ordered by highest severity, then by violation count, both descending.

    Args:
        submissions: Submissions to look at (typically one exam's)
        store: Violation store to read from

    Returns:
        One summary per flagged submission
    """
    summaries = []
    for submission in submissions:
        unresolved = store.list_unresolved(submission.id)
        if unresolved:
            summaries.append(SubmissionViolationSummary(submission, sort_by_severity(unresolved)))

    summaries.sort(
        key=lambda s: (severity_rank(s.highest_severity), s.violation_count),
        reverse=True,
    )
    return summaries
