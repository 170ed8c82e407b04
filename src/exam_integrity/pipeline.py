"""
Submission Pipeline

Wires ingestion, detection and the grading workflow together around
one set of stores.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import PurePosixPath

from .config.models import IntegrityConfig
from .grading.store import AssignmentStore, InMemoryAssignmentStore
from .grading.workflow import AssignmentWorkflow, GradingWorkflow
from .processing.extractor import ExtractionError
from .processing.submissions import SubmissionExtractor
from .submissions.models import Submission
from .submissions.store import InMemorySubmissionStore, SubmissionRepository
from .utils.files import ensure_dir, has_invalid_filename_chars
from .utils.logging import get_logger
from .violations.detector import ViolationDetector
from .violations.models import Violation
from .violations.stores import (
    InMemoryKeywordStore,
    InMemoryViolationStore,
    KeywordSource,
    ViolationStore,
    YamlKeywordSource,
)

logger = get_logger(__name__)


class InvalidUploadError(Exception):
    """The uploaded file is empty, too large, or of a refused type."""

    pass


@dataclass
class Upload:
    """One student's uploaded file."""

    student_id: str
    student_name: str
    exam_id: int
    file_name: str
    data: bytes


class SubmissionPipeline:
    """Ingests uploads and screens them for violations."""

    def __init__(
        self,
        config: IntegrityConfig | None = None,
        submissions: SubmissionRepository | None = None,
        keywords: KeywordSource | None = None,
        violations: ViolationStore | None = None,
        assignments: AssignmentStore | None = None,
    ):
        """Initialize the pipeline.

        Args:
            config: System configuration (defaults apply when omitted)
            submissions: Submission repository
            keywords: Keyword source; the configured YAML file when omitted
            violations: Violation store
            assignments: Examiner/assignment store
        """
        self.config = config or IntegrityConfig()
        self.submissions = submissions or InMemorySubmissionStore()
        self.violations = violations or InMemoryViolationStore()

        if keywords is None:
            keywords_file = self.config.scan.keywords_file
            keywords = YamlKeywordSource(keywords_file) if keywords_file else InMemoryKeywordStore()
        self.keywords = keywords

        self.extractor = SubmissionExtractor()
        self.detector = ViolationDetector(
            keywords=self.keywords,
            store=self.violations,
            submissions=self.submissions,
            max_content_bytes=self.config.scan.max_content_bytes,
        )
        self.assignments = AssignmentWorkflow(assignments or InMemoryAssignmentStore())
        self.grading = GradingWorkflow(
            violations=self.violations,
            submissions=self.submissions,
            default_comment=self.config.grading.zero_score_comment,
        )

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------

    def validate_upload(self, file_name: str, data: bytes) -> None:
        """Reject uploads the storage settings do not accept.

        Raises:
            InvalidUploadError: If the upload is refused
        """
        storage = self.config.storage

        if not data:
            raise InvalidUploadError("No file uploaded")

        if len(data) > storage.max_upload_bytes:
            raise InvalidUploadError(
                f"File size {len(data)} exceeds maximum allowed size {storage.max_upload_bytes}"
            )

        name = PurePosixPath(file_name.replace("\\", "/")).name
        if not name or has_invalid_filename_chars(name):
            raise InvalidUploadError(f"Invalid upload file name: {file_name!r}")

        suffix = PurePosixPath(name).suffix.lower()
        if suffix not in storage.allowed_extensions:
            allowed = ", ".join(storage.allowed_extensions)
            raise InvalidUploadError(f"File type '{suffix}' not allowed. Allowed: {allowed}")

    def ingest_upload(
        self,
        student_id: str,
        student_name: str,
        exam_id: int,
        file_name: str,
        data: bytes,
    ) -> Submission:
        """
        Store, extract and classify one upload.

        The upload lands in ``<uploads>/<exam>/<student>/<submission>/`` and
        its content in the ``extracted`` directory beside it.

        Returns:
            The new submission with its files

        Raises:
            InvalidUploadError: If the upload is refused
            ExtractionError: If the archive cannot be read; no files are recorded
        """
        self.validate_upload(file_name, data)
        name = PurePosixPath(file_name.replace("\\", "/")).name

        # Student ids become a directory name
        if not student_id or student_id in (".", "..") or has_invalid_filename_chars(student_id):
            raise InvalidUploadError(f"Invalid student id: {student_id!r}")

        submission = self.submissions.create_submission(student_id, student_name, exam_id)

        submission_dir = ensure_dir(
            self.config.storage.uploads_dir / str(exam_id) / student_id / str(submission.id)
        )
        upload_path = submission_dir / name
        upload_path.write_bytes(data)

        try:
            files = self.extractor.extract_submission(upload_path)
        except ExtractionError:
            logger.error(f"Could not extract upload {name} for submission {submission.id}")
            raise

        self.submissions.add_files(submission.id, files)
        logger.info(f"Ingested submission {submission.id}: {len(files)} files from {name}")
        return self.submissions.get_submission(submission.id)

    def ingest_many(self, uploads: list[Upload], max_workers: int = 4) -> list[Submission | Exception]:
        """
        Ingest independent uploads on a thread pool.

        Returns:
            Per upload, in order, the submission or the error it raised
        """
        def ingest(upload: Upload) -> Submission | Exception:
            try:
                return self.ingest_upload(
                    upload.student_id,
                    upload.student_name,
                    upload.exam_id,
                    upload.file_name,
                    upload.data,
                )
            except Exception as e:
                # One bad upload never costs the others their result
                logger.error(f"Ingestion failed for {upload.file_name} (student {upload.student_id}): {e}")
                return e

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(ingest, uploads))

    # -------------------------------------------------------------------------
    # Detection
    # -------------------------------------------------------------------------

    def check(self, submission_id: int) -> list[Violation]:
        """Run violation detection on an ingested submission."""
        submission = self.submissions.get_submission(submission_id)
        return self.detector.check_violations(
            submission.id,
            submission.exam_id,
            submission.file_names,
            submission.file_paths,
        )
