"""Tests for the violation detection engine."""

from pathlib import Path

import pytest

from exam_integrity.violations.detector import ViolationDetector
from exam_integrity.violations.models import Severity, Violation, ViolationKeyword, ViolationType
from exam_integrity.violations.stores import InMemoryKeywordStore, InMemoryViolationStore

from conftest import add_submission


class BrokenSource:
    """Submission source whose every call fails."""

    def get_submission(self, submission_id):
        raise ConnectionError("submission service unavailable")

    def list_submissions(self, exam_id):
        raise ConnectionError("submission service unavailable")

    def create_grade(self, *args):
        raise ConnectionError("submission service unavailable")


class BrokenViolationStore(InMemoryViolationStore):
    def replace_all(self, submission_id, violations):
        raise RuntimeError("database is locked")


def _of_type(violations, violation_type):
    return [v for v in violations if v.type == violation_type.value]


# -----------------------------------------------------------------------------
# File names
# -----------------------------------------------------------------------------


def test_illegal_file_name_is_medium(detector):
    violations = detector.check_violations(99, 1, ["ok.cs", "bad/name.cs", "  "], ["/s/ok.cs", "/s/x", "/s/y"])

    file_name = _of_type(violations, ViolationType.FILE_NAME)
    assert len(file_name) == 1
    assert file_name[0].severity == "Medium"
    assert "bad/name.cs" in file_name[0].description


def test_empty_input_returns_nothing_and_keeps_store(detector, violation_store):
    violation_store.insert_all([Violation(submission_id=99, type="FileName", description="old")])

    assert detector.check_violations(99, 1, [], []) == []
    assert detector.check_violations(99, 1, ["a.cs"], []) == []
    assert len(violation_store.list_by_submission(99)) == 1


def test_count_mismatch_is_tolerated(detector):
    violations = detector.check_violations(99, 1, ["a.cs", "bad/x"], ["/s/a.cs"])

    assert len(_of_type(violations, ViolationType.FILE_NAME)) == 1


# -----------------------------------------------------------------------------
# Keywords
# -----------------------------------------------------------------------------


def test_content_match_yields_single_violation(tmp_path, detector, keyword_store, cheat_keyword):
    keyword_store.add(ViolationKeyword(keyword="answers", severity="Low"))
    source = tmp_path / "main.py"
    source.write_text("# CHEAT sheet\nprint('answers')\n", encoding="utf-8")

    violations = detector.check_violations(99, 1, ["main.py"], [str(source)])

    assert len(violations) == 1
    violation = violations[0]
    assert violation.type == ViolationType.KEYWORD.value
    assert violation.severity == "High"
    assert violation.description.startswith("File content contains")
    assert "'cheat'" in violation.description
    assert violation.description.endswith("Prohibited term")


def test_name_and_path_matches_are_all_recorded(tmp_path, detector, keyword_store, cheat_keyword):
    keyword_store.add(ViolationKeyword(keyword="notes", severity="Low"))
    source = tmp_path / "cheat_notes.png"
    source.write_bytes(b"\x89PNG cheat")

    violations = detector.check_violations(99, 1, ["cheat_notes.png"], [str(source)])

    # Two keywords each on the name and on the path; images are not content-scanned
    assert len(violations) == 4
    assert {v.severity for v in violations} == {"High", "Low"}
    assert sum("File name contains" in v.description for v in violations) == 2
    assert sum("File path contains" in v.description for v in violations) == 2


def test_content_is_scanned_even_when_name_matches(tmp_path, detector, cheat_keyword):
    source = tmp_path / "cheat.txt"
    source.write_text("a cheat inside", encoding="utf-8")

    violations = detector.check_violations(99, 1, ["cheat.txt"], [str(source)])

    assert len(violations) == 3
    assert sum(v.description.startswith("File content contains") for v in violations) == 1


def test_blank_and_inactive_keywords_are_ignored(tmp_path, violation_store):
    keywords = InMemoryKeywordStore([
        ViolationKeyword(keyword="   "),
        ViolationKeyword(keyword="main", is_active=False),
    ])
    detector = ViolationDetector(keywords, violation_store)
    source = tmp_path / "main.py"
    source.write_text("print('main')", encoding="utf-8")

    assert detector.check_violations(99, 1, ["main.py"], [str(source)]) == []


def test_content_above_ceiling_is_skipped(tmp_path, keyword_store, violation_store, cheat_keyword):
    detector = ViolationDetector(keyword_store, violation_store, max_content_bytes=16)
    source = tmp_path / "big.txt"
    source.write_text("x" * 32 + " cheat", encoding="utf-8")

    assert detector.check_violations(99, 1, ["big.txt"], [str(source)]) == []


def test_latin1_content_is_scanned(tmp_path, detector, cheat_keyword):
    source = tmp_path / "legacy.cs"
    source.write_bytes(b"// caf\xe9 cheat\n")

    violations = detector.check_violations(99, 1, ["legacy.cs"], [str(source)])

    assert len(violations) == 1


def test_missing_file_is_skipped(tmp_path, detector, cheat_keyword):
    violations = detector.check_violations(99, 1, ["gone.cs"], [str(tmp_path / "gone.cs")])

    assert violations == []


# -----------------------------------------------------------------------------
# Similarity
# -----------------------------------------------------------------------------


def test_exact_match_is_critical_and_stops(detector, submission_store):
    first = add_submission(submission_store, 1, ["a.cs", "b.cs", "c.cs"], student_id="S1", student_name="Ana")
    add_submission(submission_store, 1, ["a.cs", "b.cs", "c.cs"], student_id="S2", student_name="Ben")

    violations = detector.check_violations(
        99,
        1,
        ["C.CS", "a.cs", "B.cs", "app.dll"],
        ["/w/C.CS", "/w/a.cs", "/w/B.cs", "/w/bin/Debug/app.dll"],
    )

    matches = _of_type(violations, ViolationType.FILE_NAME_MATCH)
    assert len(matches) == 1
    assert matches[0].severity == "Critical"
    assert f"#{first.id}" in matches[0].description
    assert "Student: Ana, ID: S1" in matches[0].description


def test_partial_overlap_of_three_in_five_is_high(detector, submission_store):
    peer = add_submission(submission_store, 1, ["a.cs", "b.cs", "c.cs", "x.cs", "y.cs"])

    violations = detector.check_violations(
        99, 1, ["a.cs", "b.cs", "c.cs", "d.cs", "e.cs"], ["/w/a", "/w/b", "/w/c", "/w/d", "/w/e"]
    )

    matches = _of_type(violations, ViolationType.FILE_NAME_MATCH)
    assert len(matches) == 1
    assert matches[0].severity == "High"
    assert "60.0%" in matches[0].description
    assert f"#{peer.id}" in matches[0].description
    assert "a.cs, b.cs, c.cs" in matches[0].description


def test_partial_overlap_of_two_in_five_is_ignored(detector, submission_store):
    add_submission(submission_store, 1, ["a.cs", "b.cs", "v.cs", "x.cs", "y.cs"])

    violations = detector.check_violations(
        99, 1, ["a.cs", "b.cs", "c.cs", "d.cs", "e.cs"], ["/w/a", "/w/b", "/w/c", "/w/d", "/w/e"]
    )

    assert _of_type(violations, ViolationType.FILE_NAME_MATCH) == []


def test_other_exams_and_self_are_not_compared(detector, submission_store):
    add_submission(submission_store, 2, ["a.cs", "b.cs", "c.cs"])
    own = add_submission(submission_store, 1, ["a.cs", "b.cs", "c.cs"])

    violations = detector.check_violations(own.id, 1)

    assert _of_type(violations, ViolationType.FILE_NAME_MATCH) == []


def test_peer_artifacts_are_ignored(detector, submission_store):
    add_submission(submission_store, 1, ["a.cs", "b.cs", "obj/Debug/app.AssemblyInfo.cs"])

    violations = detector.check_violations(99, 1, ["b.cs", "a.cs"], ["/w/b.cs", "/w/a.cs"])

    assert len(_of_type(violations, ViolationType.FILE_NAME_MATCH)) == 1


def test_storage_directories_do_not_make_artifacts(detector, submission_store):
    root = "/srv/bin/uploads/1/S1/7/extracted"
    peer = add_submission(submission_store, 1, ["a.cs", "b.cs", "bin/Debug/app.dll"], root=Path(root))
    own = "/srv/bin/uploads/1/S2/8/extracted"

    violations = detector.check_violations(
        99, 1, ["a.cs", "b.cs", "app.dll"], [f"{own}/a.cs", f"{own}/b.cs", f"{own}/obj/app.dll"]
    )

    matches = _of_type(violations, ViolationType.FILE_NAME_MATCH)
    assert len(matches) == 1
    assert matches[0].severity == "Critical"
    assert f"#{peer.id}" in matches[0].description


# -----------------------------------------------------------------------------
# Canonical list, isolation and persistence
# -----------------------------------------------------------------------------


def test_stored_file_list_wins_over_caller(detector, submission_store, cheat_keyword):
    submission = add_submission(submission_store, 1, ["cheat_sheet.png"])

    violations = detector.check_violations(submission.id, 1, ["clean.cs"], ["/w/clean.cs"])

    assert any("cheat_sheet.png" in v.description for v in violations)
    assert not any("clean.cs" in v.description for v in violations)


def test_unavailable_source_keeps_other_stages(keyword_store, violation_store, cheat_keyword):
    detector = ViolationDetector(keyword_store, violation_store, BrokenSource())

    violations = detector.check_violations(99, 1, ["bad/name.cs", "cheat.png"], ["/w/1", "/w/cheat.png"])

    assert len(_of_type(violations, ViolationType.FILE_NAME)) == 1
    assert len(_of_type(violations, ViolationType.KEYWORD)) == 2
    assert violation_store.list_by_submission(99) == violations


def test_store_failure_still_returns_violations(keyword_store, cheat_keyword):
    detector = ViolationDetector(keyword_store, BrokenViolationStore())

    violations = detector.check_violations(99, 1, ["cheat.png"], ["/w/x.png"])

    assert len(violations) == 1


def test_rerun_replaces_instead_of_accumulating(detector, violation_store, submission_store, cheat_keyword):
    add_submission(submission_store, 1, ["a.cs", "b.cs", "c.cs"])
    args = (99, 1, ["a.cs", "b.cs", "c.cs", "cheat.png"], ["/w/a", "/w/b", "/w/c", "/w/d.png"])

    first = detector.check_violations(*args)
    second = detector.check_violations(*args)

    stored = violation_store.list_by_submission(99)
    assert len(first) == len(second) == len(stored) == 2
    assert [(v.type, v.description) for v in stored] == [(v.type, v.description) for v in first]


@pytest.mark.parametrize("severity", ["Critical", "High", "Medium", "Low"])
def test_keyword_severity_is_carried(severity, violation_store):
    keywords = InMemoryKeywordStore([ViolationKeyword(keyword="forbidden", severity=severity)])
    detector = ViolationDetector(keywords, violation_store)

    violations = detector.check_violations(99, 1, ["forbidden.png"], ["/w/a.png"])

    assert [v.severity for v in violations] == [severity]
    assert Severity(severity).value == severity
