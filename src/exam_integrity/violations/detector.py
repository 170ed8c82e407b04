"""
Violation detection engine.

Screens one submission for academic-integrity problems: illegal file
names, prohibited keywords in names, paths and text content, and file
lists that duplicate another submission of the same exam.

Each stage is isolated. A stage that raises is logged and skipped, and
whatever the other stages found is still persisted and returned.

Detection replaces the stored violation set of a submission. Two runs
for the same submission must not overlap; callers serialize them.
"""

from itertools import zip_longest
from pathlib import Path, PurePosixPath
from typing import Sequence

from ..config.models import DEFAULT_MAX_CONTENT_BYTES
from ..processing.filetypes import is_build_artifact, is_text_file
from ..processing.submissions import extraction_relative_path
from ..submissions.models import Submission
from ..submissions.store import SubmissionSource
from ..utils.files import has_invalid_filename_chars, normalize_entry_name
from ..utils.logging import get_logger
from .models import Severity, Violation, ViolationKeyword, ViolationType
from .stores import KeywordSource, ViolationStore

logger = get_logger(__name__)

# Partial file-list overlap that counts as suspicious
PARTIAL_MATCH_MIN_FILES = 3
PARTIAL_MATCH_MIN_PERCENT = 50.0


def _base_name(name: str) -> str:
    return PurePosixPath(normalize_entry_name(name)).name


def _is_artifact(file_path: str) -> bool:
    # Storage directories above the extraction root are not part of the project
    return is_build_artifact(extraction_relative_path(file_path))


def _read_text(path: Path) -> str:
    raw = path.read_bytes()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


class ViolationDetector:
    """Runs the detection stages for a submission and stores the result."""

    def __init__(
        self,
        keywords: KeywordSource,
        store: ViolationStore,
        submissions: SubmissionSource | None = None,
        max_content_bytes: int = DEFAULT_MAX_CONTENT_BYTES,
    ):
        """Initialize the detector.

        Args:
            keywords: Source of active prohibited keywords
            store: Violation store the result is written to
            submissions: Source of the authoritative file list and of peer
                submissions; without it only the caller's lists are used and
                the similarity stage is skipped
            max_content_bytes: Files larger than this are not content-scanned
        """
        self.keywords = keywords
        self.store = store
        self.submissions = submissions
        self.max_content_bytes = max_content_bytes

    def check_violations(
        self,
        submission_id: int,
        exam_id: int,
        file_names: Sequence[str] | None = None,
        file_paths: Sequence[str] | None = None,
    ) -> list[Violation]:
        """
        Detect violations for a submission, replacing any stored earlier.

        Args:
            submission_id: Submission to check
            exam_id: Exam whose other submissions are compared against
            file_names: Fallback file names when the submission source has none
            file_paths: Fallback storage paths, parallel to ``file_names``

        Returns:
            The violations found, even if storing them failed
        """
        file_names, file_paths = self._resolve_files(
            submission_id, list(file_names or []), list(file_paths or [])
        )

        if not file_names or not file_paths:
            logger.warning(f"No file names or paths to check for submission {submission_id}")
            return []

        if len(file_names) != len(file_paths):
            logger.warning(
                f"File name/path count mismatch for submission {submission_id}: "
                f"{len(file_names)} names, {len(file_paths)} paths"
            )

        violations: list[Violation] = []

        try:
            self._check_file_names(submission_id, file_names, violations)
        except Exception as e:
            logger.error(f"File name check failed for submission {submission_id}: {e}")

        try:
            self._check_keywords(submission_id, file_names, file_paths, violations)
        except Exception as e:
            logger.warning(f"Keyword check skipped for submission {submission_id}: {e}")

        try:
            self._check_similarity(submission_id, exam_id, file_names, file_paths, violations)
        except Exception as e:
            logger.warning(
                f"Could not compare file names with other submissions "
                f"(exam {exam_id}, submission {submission_id}): {e}"
            )

        try:
            self.store.replace_all(submission_id, violations)
        except Exception as e:
            logger.error(f"Error saving violations for submission {submission_id}: {e}")

        logger.info(f"Detected {len(violations)} violations for submission {submission_id}")
        return violations

    # -------------------------------------------------------------------------
    # Stage 1: canonical file list
    # -------------------------------------------------------------------------

    def _resolve_files(
        self,
        submission_id: int,
        file_names: list[str],
        file_paths: list[str],
    ) -> tuple[list[str], list[str]]:
        """Prefer the submission source's file list over the caller's."""
        if self.submissions is None:
            return file_names, file_paths

        try:
            submission = self.submissions.get_submission(submission_id)
        except Exception as e:
            logger.warning(
                f"Could not load submission {submission_id}, using provided file list: {e}"
            )
            return file_names, file_paths

        if submission.files:
            logger.info(f"Using {len(submission.files)} stored files for submission {submission_id}")
            return submission.file_names, submission.file_paths

        return file_names, file_paths

    # -------------------------------------------------------------------------
    # Stage 2: file-name validity
    # -------------------------------------------------------------------------

    def _check_file_names(self, submission_id: int, file_names: list[str], violations: list[Violation]) -> None:
        for file_name in file_names:
            if not file_name or not file_name.strip():
                continue

            if has_invalid_filename_chars(file_name):
                violations.append(
                    Violation(
                        submission_id=submission_id,
                        type=ViolationType.FILE_NAME.value,
                        description=f"Invalid file name format: {file_name!r}",
                        severity=Severity.MEDIUM.value,
                    )
                )

    # -------------------------------------------------------------------------
    # Stage 3: keyword scan
    # -------------------------------------------------------------------------

    def _check_keywords(
        self,
        submission_id: int,
        file_names: list[str],
        file_paths: list[str],
        violations: list[Violation],
    ) -> None:
        keywords = [k for k in self.keywords.list_active_keywords() if k.keyword and k.keyword.strip()]

        if not keywords:
            logger.info(f"No active keywords to check for submission {submission_id}")
            return

        logger.info(f"Checking {len(keywords)} active keywords for submission {submission_id}")

        for file_name in file_names:
            if not file_name or not file_name.strip():
                continue
            for keyword in keywords:
                if keyword.keyword.lower() in file_name.lower():
                    violations.append(
                        self._keyword_violation(
                            submission_id,
                            keyword,
                            f"File name contains prohibited keyword '{keyword.keyword}': {file_name}",
                        )
                    )

        for file_path in file_paths:
            if not file_path or not file_path.strip():
                continue

            for keyword in keywords:
                if keyword.keyword.lower() in file_path.lower():
                    violations.append(
                        self._keyword_violation(
                            submission_id,
                            keyword,
                            f"File path contains prohibited keyword '{keyword.keyword}': {file_path}",
                        )
                    )

            # Content is scanned even when the name already matched
            if is_text_file(file_path):
                self._check_content(submission_id, Path(file_path), keywords, violations)
            else:
                logger.debug(f"Skipping non-text file for content checking: {file_path}")

    def _check_content(
        self,
        submission_id: int,
        path: Path,
        keywords: list[ViolationKeyword],
        violations: list[Violation],
    ) -> None:
        """Record at most one content violation for a file."""
        try:
            if not path.is_file():
                logger.warning(f"File does not exist for keyword checking: {path}")
                return

            size = path.stat().st_size
            if size > self.max_content_bytes:
                logger.warning(f"File too large to check content: {path} ({size} bytes)")
                return

            content = _read_text(path).lower()
        except OSError as e:
            logger.warning(f"Could not read file content for keyword checking: {path}: {e}")
            return

        for keyword in keywords:
            if keyword.keyword.lower() in content:
                violations.append(
                    self._keyword_violation(
                        submission_id,
                        keyword,
                        f"File content contains prohibited keyword '{keyword.keyword}': {path.name}",
                    )
                )
                logger.info(f"Keyword '{keyword.keyword}' found in content of {path} (submission {submission_id})")
                break

    @staticmethod
    def _keyword_violation(submission_id: int, keyword: ViolationKeyword, description: str) -> Violation:
        if keyword.description:
            description = f"{description}. {keyword.description}"
        return Violation(
            submission_id=submission_id,
            type=ViolationType.KEYWORD.value,
            description=description,
            severity=keyword.severity,
        )

    # -------------------------------------------------------------------------
    # Stage 4: cross-submission similarity
    # -------------------------------------------------------------------------

    def _check_similarity(
        self,
        submission_id: int,
        exam_id: int,
        file_names: list[str],
        file_paths: list[str],
        violations: list[Violation],
    ) -> None:
        if self.submissions is None:
            logger.debug("No submission source configured, skipping similarity check")
            return

        current = sorted(
            _base_name(name).lower()
            for name, path in zip_longest(file_names, file_paths)
            if name and name.strip() and not _is_artifact(path or name)
        )
        current = [name for name in current if name]
        if not current:
            return

        peers = self.submissions.list_submissions(exam_id)

        for peer in peers:
            if peer is None or peer.id == submission_id:
                continue

            other = self._comparison_names(peer)
            if not other:
                continue

            if current == other:
                violations.append(
                    Violation(
                        submission_id=submission_id,
                        type=ViolationType.FILE_NAME_MATCH.value,
                        description=(
                            f"File name list matches submission #{peer.id} ({self._describe(peer)}). "
                            f"Possible plagiarism or collaboration."
                        ),
                        severity=Severity.CRITICAL.value,
                    )
                )
                break

            matching = sorted(set(current) & set(other))
            if not matching:
                continue

            percent = len(matching) / max(len(current), len(other)) * 100
            if percent > PARTIAL_MATCH_MIN_PERCENT and len(matching) >= PARTIAL_MATCH_MIN_FILES:
                violations.append(
                    Violation(
                        submission_id=submission_id,
                        type=ViolationType.FILE_NAME_MATCH.value,
                        description=(
                            f"High similarity ({percent:.1f}%) with submission #{peer.id} "
                            f"({self._describe(peer)}). Matching files: {', '.join(matching)}"
                        ),
                        severity=Severity.HIGH.value,
                    )
                )

    @staticmethod
    def _comparison_names(submission: Submission) -> list[str]:
        """Lower-cased, sorted file names of a peer, build artifacts removed."""
        return sorted(
            _base_name(f.file_name).lower()
            for f in submission.files
            if f is not None
            and f.file_name
            and f.file_name.strip()
            and not _is_artifact(f.file_path or f.file_name)
        )

    @staticmethod
    def _describe(submission: Submission) -> str:
        return f"Student: {submission.student_name or 'Unknown'}, ID: {submission.student_id or 'Unknown'}"
