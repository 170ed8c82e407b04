"""
File type classification.

Classifies submission files into the fixed Word / Code / Image / Other
taxonomy by extension, and recognises build-tool output that must not
take part in file-identity comparisons.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath

from ..utils.files import normalize_entry_name, split_path_segments
from ..utils.logging import get_logger

logger = get_logger(__name__)


class FileType(str, Enum):
    """Categories a submission file is classified into."""

    WORD = "Word"
    CODE = "Code"
    IMAGE = "Image"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str | None) -> "FileType":
        """Parse a stored type tag, falling back to OTHER."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


# -----------------------------------------------------------------------------
# Known Extensions
# -----------------------------------------------------------------------------

EXTENSION_MAP: dict[str, FileType] = {
    # Documents
    ".doc": FileType.WORD,
    ".docx": FileType.WORD,

    # Code
    ".cs": FileType.CODE,
    ".java": FileType.CODE,
    ".cpp": FileType.CODE,
    ".c": FileType.CODE,
    ".py": FileType.CODE,
    ".js": FileType.CODE,
    ".ts": FileType.CODE,
    ".html": FileType.CODE,
    ".css": FileType.CODE,

    # Images
    ".jpg": FileType.IMAGE,
    ".jpeg": FileType.IMAGE,
    ".png": FileType.IMAGE,
    ".gif": FileType.IMAGE,
    ".bmp": FileType.IMAGE,
}

# Extensions whose content is scanned for prohibited keywords
TEXT_EXTENSIONS: frozenset[str] = frozenset({
    ".cs", ".java", ".cpp", ".c", ".h", ".hpp",
    ".py", ".js", ".ts", ".jsx", ".tsx",
    ".html", ".css", ".scss", ".sass",
    ".json", ".xml", ".yaml", ".yml",
    ".txt", ".md", ".markdown",
    ".sql", ".sh", ".bat", ".ps1",
    ".config", ".csproj", ".sln",
    ".vue",
})

BUILD_OUTPUT_DIRS: frozenset[str] = frozenset({"bin", "obj"})

# Substrings of compiler/designer generated file names
BUILD_ARTIFACT_PATTERNS: tuple[str, ...] = (
    ".NETCoreApp",
    "AssemblyAttributes",
    "AssemblyInfo",
    ".AssemblyAttributes",
    ".g.cs",
    ".g.i.cs",
    ".Designer.cs",
    "TemporaryGeneratedFile",
    "GlobalUsings.g.cs",
)


# -----------------------------------------------------------------------------
# Data Classes
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FileDescriptor:
    """A regular file found under an extraction root."""

    name: str
    path: Path
    size_bytes: int
    file_type: FileType


# -----------------------------------------------------------------------------
# Classification Functions
# -----------------------------------------------------------------------------


def _extension(file_name: str) -> str:
    return PurePosixPath(normalize_entry_name(file_name)).suffix.lower()


def classify(file_name: str) -> FileType:
    """
    Classify a file by its extension.

    Args:
        file_name: File name or path

    Returns:
        The FileType for the extension, OTHER when unknown
    """
    return EXTENSION_MAP.get(_extension(file_name), FileType.OTHER)


def is_text_file(file_path: str | Path) -> bool:
    """Check whether a file's content is worth scanning as text."""
    return _extension(str(file_path)) in TEXT_EXTENSIONS


def is_build_artifact(file_path: str | Path) -> bool:
    """
    Check if a path points at build-tool output.

    A path is an artifact when one of its directory segments is a build
    output directory (``bin``, ``obj``) or its file name matches a
    generated-code pattern. Both checks ignore case.

    Args:
        file_path: File name or path, with either separator style

    Returns:
        True if the file should be left out of identity comparisons
    """
    segments = split_path_segments(str(file_path))
    if not segments:
        return False

    *directories, file_name = segments
    if any(d.lower() in BUILD_OUTPUT_DIRS for d in directories):
        return True

    lowered = file_name.lower()
    return any(pattern.lower() in lowered for pattern in BUILD_ARTIFACT_PATTERNS)


def list_files(root: Path) -> list[FileDescriptor]:
    """
    Enumerate and classify every regular file under a directory.

    Args:
        root: Extraction root to walk recursively

    Returns:
        FileDescriptors sorted by path
    """
    if not root.is_dir():
        logger.warning(f"Not a directory, nothing to list: {root}")
        return []

    files = [
        FileDescriptor(
            name=path.name,
            path=path,
            size_bytes=path.stat().st_size,
            file_type=classify(path.name),
        )
        for path in sorted(root.rglob("*"))
        if path.is_file() and not path.is_symlink()
    ]

    logger.info(f"Found {len(files)} files under {root}")
    return files
