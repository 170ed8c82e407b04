"""Shared fixtures for the exam integrity tests."""

import io
import tarfile
import zipfile
from pathlib import Path

import pytest

from exam_integrity.processing.filetypes import FileDescriptor, classify
from exam_integrity.submissions.store import InMemorySubmissionStore
from exam_integrity.violations.detector import ViolationDetector
from exam_integrity.violations.models import ViolationKeyword
from exam_integrity.violations.stores import InMemoryKeywordStore, InMemoryViolationStore


def build_zip(entries: dict[str, bytes]) -> bytes:
    """Build a ZIP archive in memory; names ending in / become directories."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            if name.endswith("/"):
                archive.writestr(zipfile.ZipInfo(name), b"")
            else:
                archive.writestr(name, data)
    return buffer.getvalue()


def build_tar(entries: dict[str, bytes]) -> bytes:
    """Build a gzipped TAR archive in memory."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, data in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def add_submission(
    store: InMemorySubmissionStore,
    exam_id: int,
    file_names: list[str],
    root: Path = Path("/srv/uploads"),
    student_id: str = "S1",
    student_name: str = "Student",
):
    """Create a submission whose files only exist as metadata."""
    submission = store.create_submission(student_id, student_name, exam_id)
    store.add_files(
        submission.id,
        [
            FileDescriptor(name=Path(name).name, path=root / name, size_bytes=0, file_type=classify(name))
            for name in file_names
        ],
    )
    return store.get_submission(submission.id)


@pytest.fixture
def submission_store():
    return InMemorySubmissionStore()


@pytest.fixture
def violation_store():
    return InMemoryViolationStore()


@pytest.fixture
def keyword_store():
    return InMemoryKeywordStore()


@pytest.fixture
def detector(keyword_store, violation_store, submission_store):
    return ViolationDetector(keyword_store, violation_store, submission_store)


@pytest.fixture
def cheat_keyword(keyword_store):
    return keyword_store.add(ViolationKeyword(keyword="cheat", description="Prohibited term", severity="High"))
