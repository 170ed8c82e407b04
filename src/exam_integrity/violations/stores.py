"""Violation and keyword store interfaces with in-memory and YAML implementations."""

import itertools
import threading
from pathlib import Path
from typing import Iterable, Protocol

import yaml

from ..utils.logging import get_logger
from .models import Violation, ViolationKeyword

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Interfaces
# -----------------------------------------------------------------------------


class KeywordSource(Protocol):
    """Supplies the prohibited keywords currently in force."""

    def list_active_keywords(self) -> list[ViolationKeyword]: ...


class ViolationStore(Protocol):
    """Persists violations per submission."""

    def delete_all(self, submission_id: int) -> int: ...

    def insert_all(self, violations: Iterable[Violation]) -> list[Violation]: ...

    def replace_all(self, submission_id: int, violations: Iterable[Violation]) -> list[Violation]:
        """Delete every violation of the submission and insert the new set.

        Readers never observe the state between the two steps.
        """
        ...

    def list_unresolved(self, submission_id: int) -> list[Violation]: ...

    def list_by_submission(self, submission_id: int) -> list[Violation]: ...

    def mark_resolved(self, violation_id: int) -> Violation: ...


# -----------------------------------------------------------------------------
# Keyword sources
# -----------------------------------------------------------------------------


class InMemoryKeywordStore:
    """Keyword source backed by a list."""

    def __init__(self, keywords: Iterable[ViolationKeyword] = ()):
        self._keywords = list(keywords)

    def add(self, keyword: ViolationKeyword) -> ViolationKeyword:
        if keyword.id is None:
            keyword.id = len(self._keywords) + 1
        self._keywords.append(keyword)
        return keyword

    def list_active_keywords(self) -> list[ViolationKeyword]:
        return [k for k in self._keywords if k.is_active]


class YamlKeywordSource:
    """Keyword source reading a YAML file on every call.

    The file holds a ``keywords`` list; each item is either a bare string
    or a mapping with ``keyword``, ``description``, ``severity`` and
    ``active`` keys.
    """

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> list[ViolationKeyword]:
        if not self.path.exists():
            raise FileNotFoundError(f"Keyword file not found: {self.path}")

        with open(self.path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        keywords = []
        for index, item in enumerate(data.get("keywords") or [], start=1):
            if isinstance(item, str):
                item = {"keyword": item}
            keywords.append(ViolationKeyword.from_dict(item, keyword_id=index))
        return keywords

    def list_active_keywords(self) -> list[ViolationKeyword]:
        return [k for k in self.load() if k.is_active]


# -----------------------------------------------------------------------------
# Violation store
# -----------------------------------------------------------------------------


class InMemoryViolationStore:
    """Thread-safe violation store kept in process memory."""

    def __init__(self):
        self._lock = threading.Lock()
        self._violations: dict[int, Violation] = {}
        self._ids = itertools.count(1)

    def delete_all(self, submission_id: int) -> int:
        with self._lock:
            return self._delete(submission_id)

    def insert_all(self, violations: Iterable[Violation]) -> list[Violation]:
        with self._lock:
            return self._insert(violations)

    def replace_all(self, submission_id: int, violations: Iterable[Violation]) -> list[Violation]:
        with self._lock:
            removed = self._delete(submission_id)
            inserted = self._insert(violations)
        if removed:
            logger.info(f"Deleted {removed} existing violations for submission {submission_id}")
        return inserted

    def list_by_submission(self, submission_id: int) -> list[Violation]:
        with self._lock:
            return [v for v in self._violations.values() if v.submission_id == submission_id]

    def list_unresolved(self, submission_id: int) -> list[Violation]:
        return [v for v in self.list_by_submission(submission_id) if not v.is_resolved]

    def mark_resolved(self, violation_id: int) -> Violation:
        with self._lock:
            violation = self._violations.get(violation_id)
            if violation is None:
                raise KeyError(f"Violation not found: {violation_id}")
            violation.is_resolved = True
        return violation

    def _delete(self, submission_id: int) -> int:
        stale = [vid for vid, v in self._violations.items() if v.submission_id == submission_id]
        for vid in stale:
            del self._violations[vid]
        return len(stale)

    def _insert(self, violations: Iterable[Violation]) -> list[Violation]:
        inserted = []
        for violation in violations:
            violation.id = next(self._ids)
            self._violations[violation.id] = violation
            inserted.append(violation)
        return inserted
