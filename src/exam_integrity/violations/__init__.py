"""
Violation module.

Violation models, the detection engine, and the stores it reads
keywords from and writes results to.
"""

from .detector import ViolationDetector
from .models import (
    Severity,
    Violation,
    ViolationKeyword,
    ViolationType,
    highest_severity,
    severity_rank,
)
from .stores import (
    InMemoryKeywordStore,
    InMemoryViolationStore,
    KeywordSource,
    ViolationStore,
    YamlKeywordSource,
)
from .summary import SubmissionViolationSummary, sort_by_severity, summarize_violations

__all__ = [
    # Detection
    "ViolationDetector",
    # Models
    "Severity",
    "Violation",
    "ViolationKeyword",
    "ViolationType",
    "severity_rank",
    "highest_severity",
    # Stores
    "KeywordSource",
    "ViolationStore",
    "InMemoryKeywordStore",
    "InMemoryViolationStore",
    "YamlKeywordSource",
    # Summaries
    "SubmissionViolationSummary",
    "sort_by_severity",
    "summarize_violations",
]
