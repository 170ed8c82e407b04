"""
Submission file materialization.

Turns a stored upload into the flat, classified file list recorded for
the submission: archives are extracted, single Word documents are
copied as they are.
"""

import shutil
from pathlib import Path

from ..utils.files import ensure_dir, split_path_segments
from ..utils.logging import get_logger
from .extractor import extract_archive
from .filetypes import FileDescriptor, FileType, classify, list_files

logger = get_logger(__name__)

EXTRACTED_DIR_NAME = "extracted"


def is_single_document(file_name: str) -> bool:
    """Check whether an upload is a lone Word document rather than an archive.

    A ``.docx`` is a ZIP container itself and must not be exploded.
    """
    return classify(file_name) == FileType.WORD


def extraction_relative_path(file_path: str, extracted_dir_name: str = EXTRACTED_DIR_NAME) -> str:
    """Strip a stored file path down to the part inside its extraction directory.

    Only that part came from the student's archive; directories above it
    belong to the storage layout. Paths without an extraction directory
    segment are returned whole, with forward slashes.
    """
    segments = split_path_segments(file_path)
    for index in range(len(segments) - 2, -1, -1):
        if segments[index] == extracted_dir_name:
            return "/".join(segments[index + 1:])
    return "/".join(segments)


class SubmissionExtractor:
    """Extracts stored uploads next to the upload itself."""

    def __init__(self, extracted_dir_name: str = EXTRACTED_DIR_NAME):
        self.extracted_dir_name = extracted_dir_name

    def extract_submission(self, upload_path: Path) -> list[FileDescriptor]:
        """
        Extract a stored upload (archive or single document).

        Args:
            upload_path: Path of the stored upload file

        Returns:
            Classified files under the extraction directory

        Raises:
            ExtractionError: If the upload is an archive no reader can parse
        """
        extract_dir = ensure_dir(upload_path.parent / self.extracted_dir_name)

        if is_single_document(upload_path.name):
            target = extract_dir / upload_path.name
            shutil.copy2(upload_path, target)
            logger.info(f"Stored single document {upload_path.name}")
        else:
            with open(upload_path, "rb") as stream:
                extract_archive(stream, extract_dir)

        return list_files(extract_dir)
