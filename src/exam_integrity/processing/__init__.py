"""
Submission processing module.

Handles extraction and classification of uploaded submission archives.
"""

# File classification
from .filetypes import (
    FileType,
    FileDescriptor,
    classify,
    is_build_artifact,
    is_text_file,
    list_files,
    EXTENSION_MAP,
    TEXT_EXTENSIONS,
)

# Extraction
from .extractor import (
    ArchiveReader,
    RarReader,
    ZipReader,
    TarReader,
    ExtractionResult,
    ExtractionError,
    UnsupportedArchiveError,
    extract_archive,
    DEFAULT_READERS,
)

# Upload materialization
from .submissions import SubmissionExtractor, extraction_relative_path, is_single_document

__all__ = [
    # File types
    "FileType",
    "FileDescriptor",
    "classify",
    "is_build_artifact",
    "is_text_file",
    "list_files",
    "EXTENSION_MAP",
    "TEXT_EXTENSIONS",
    # Extraction
    "ArchiveReader",
    "RarReader",
    "ZipReader",
    "TarReader",
    "ExtractionResult",
    "ExtractionError",
    "UnsupportedArchiveError",
    "extract_archive",
    "DEFAULT_READERS",
    # Upload materialization
    "SubmissionExtractor",
    "is_single_document",
    "extraction_relative_path",
]
