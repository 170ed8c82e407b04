"""Tests for upload ingestion and the end-to-end check."""

import os

import pytest

from exam_integrity.config import IntegrityConfig, StorageSettings
from exam_integrity.pipeline import InvalidUploadError, SubmissionPipeline, Upload
from exam_integrity.processing.extractor import ExtractionError
from exam_integrity.processing.filetypes import FileType
from exam_integrity.violations import InMemoryKeywordStore, ViolationKeyword, ViolationType

from conftest import build_tar, build_zip


@pytest.fixture
def pipeline(tmp_path):
    config = IntegrityConfig(storage=StorageSettings(uploads_dir=tmp_path / "uploads", max_upload_bytes=4096))
    keywords = InMemoryKeywordStore([ViolationKeyword(keyword="chatgpt", severity="High")])
    return SubmissionPipeline(config=config, keywords=keywords)


PROJECT = {
    "Project/Program.cs": b"class Program { static void Main() {} }",
    "Project/Helper.cs": b"class Helper {}",
    "Project/logo.png": b"\x89PNG",
    "Project/bin/Debug/Project.dll": b"MZ",
}


def test_zip_upload_records_classified_files(pipeline, tmp_path):
    submission = pipeline.ingest_upload("A1", "Ana", 3, "project.zip", build_zip(PROJECT))

    upload_dir = tmp_path / "uploads" / "3" / "A1" / str(submission.id)
    assert (upload_dir / "project.zip").exists()
    assert (upload_dir / "extracted" / "Project" / "Program.cs").exists()

    types = {f.file_name: f.file_type for f in submission.files}
    assert types == {
        "Program.cs": FileType.CODE,
        "Helper.cs": FileType.CODE,
        "logo.png": FileType.IMAGE,
        "Project.dll": FileType.OTHER,
    }
    assert all(f.submission_id == submission.id for f in submission.files)


def test_docx_upload_is_a_single_word_file(pipeline):
    data = build_zip({"word/document.xml": b"<w:document/>"})

    submission = pipeline.ingest_upload("A1", "Ana", 3, "essay.docx", data)

    assert [(f.file_name, f.file_type) for f in submission.files] == [("essay.docx", FileType.WORD)]


@pytest.mark.parametrize(
    "file_name, data",
    [
        ("project.zip", b""),
        ("project.zip", b"x" * 5000),
        ("project.7z", b"data"),
        ("", b"data"),
    ],
)
def test_refused_uploads(pipeline, file_name, data):
    with pytest.raises(InvalidUploadError):
        pipeline.ingest_upload("A1", "Ana", 3, file_name, data)

    assert pipeline.submissions.list_submissions(3) == []


def test_student_id_cannot_leave_upload_root(pipeline):
    with pytest.raises(InvalidUploadError):
        pipeline.ingest_upload("../A1", "Ana", 3, "project.zip", build_zip(PROJECT))


def test_corrupt_archive_records_no_files(pipeline):
    with pytest.raises(ExtractionError):
        pipeline.ingest_upload("A1", "Ana", 3, "project.zip", b"not really a zip")

    [submission] = pipeline.submissions.list_submissions(3)
    assert submission.files == []


def test_check_flags_copied_project(pipeline):
    first = pipeline.ingest_upload("A1", "Ana", 3, "project.zip", build_zip(PROJECT))
    copied = dict(PROJECT)
    copied["Project/bin/Debug/Other.dll"] = b"MZ"
    second = pipeline.ingest_upload("B2", "Ben", 3, "mine.zip", build_zip(copied))

    violations = pipeline.check(second.id)

    matches = [v for v in violations if v.type == ViolationType.FILE_NAME_MATCH.value]
    assert len(matches) == 1
    assert matches[0].severity == "Critical"
    assert f"#{first.id}" in matches[0].description
    assert pipeline.violations.list_unresolved(second.id) == violations

    grade = pipeline.grading.confirm_zero_score(second.id, examiner_id=1)
    assert grade.total_score == 0


def test_check_finds_keyword_in_content(pipeline):
    files = {"Program.cs": b"// generated with ChatGPT\nclass Program {}"}
    submission = pipeline.ingest_upload("A1", "Ana", 3, "work.zip", build_zip(files))

    violations = pipeline.check(submission.id)

    assert len(violations) == 1
    assert violations[0].type == ViolationType.KEYWORD.value
    assert violations[0].description.startswith("File content contains")


def test_ingest_many(pipeline):
    uploads = [
        Upload("A1", "Ana", 3, "a.zip", build_zip({"a.cs": b"a"})),
        Upload("B2", "Ben", 3, "b.exe", b"MZ"),
        Upload("C3", "Cai", 3, "c.zip", build_zip({"c.cs": b"c", "d.cs": b"d"})),
    ]

    results = pipeline.ingest_many(uploads, max_workers=3)

    assert results[0].file_names == ["a.cs"]
    assert isinstance(results[1], InvalidUploadError)
    assert sorted(results[2].file_names) == ["c.cs", "d.cs"]
    assert len(pipeline.submissions.list_submissions(3)) == 2


def test_ingest_many_keeps_going_past_a_truncated_archive(pipeline):
    truncated = build_tar({"x.bin": os.urandom(2048)})
    uploads = [
        Upload("A1", "Ana", 3, "a.zip", build_zip({"a.cs": b"a"})),
        Upload("B2", "Ben", 3, "b.zip", truncated[: len(truncated) // 2]),
    ]

    results = pipeline.ingest_many(uploads, max_workers=2)

    assert results[0].file_names == ["a.cs"]
    assert isinstance(results[1], ExtractionError)
    [failed] = [s for s in pipeline.submissions.list_submissions(3) if s.student_id == "B2"]
    assert failed.files == []
