"""
Submission archive extraction.

Opens an uploaded byte stream as an archive, trying each supported
format in turn, and materializes its entries under a destination
directory without letting any entry escape it.
"""

import io
import lzma
import shutil
import tarfile
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Callable, ContextManager, Iterator, Protocol, Sequence

import rarfile

from ..utils.files import ensure_dir, normalize_entry_name, resolve_within
from ..utils.logging import get_logger

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------


class ExtractionError(Exception):
    """Error during archive extraction."""

    pass


class UnsupportedArchiveError(ExtractionError):
    """No supported archive format could read the input."""

    pass


# -----------------------------------------------------------------------------
# Data Classes
# -----------------------------------------------------------------------------


@dataclass
class ArchiveEntry:
    """A single archive member as seen by the extraction loop."""

    name: str
    is_dir: bool
    open: Callable[[], ContextManager[BinaryIO]]


@dataclass
class ExtractionResult:
    """Result of an extraction operation."""

    output_dir: Path
    reader: str
    files: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        """Get total number of extracted files."""
        return len(self.files)

    @property
    def total_size(self) -> int:
        """Get total size of extracted files in bytes."""
        return sum(f.stat().st_size for f in self.files)


# -----------------------------------------------------------------------------
# Archive Readers
# -----------------------------------------------------------------------------

# Raised while member data is decompressed: truncated streams, bad deflate
# data, encrypted or unsupported members (NotImplementedError included)
ENTRY_READ_ERRORS: tuple[type[BaseException], ...] = (EOFError, zlib.error, lzma.LZMAError, RuntimeError)

# An entry colliding with a file or directory written by an earlier entry
ENTRY_CONFLICT_ERRORS: tuple[type[BaseException], ...] = (FileExistsError, NotADirectoryError, IsADirectoryError)


class ArchiveReader(Protocol):
    """A container format the extractor can try."""

    name: str
    errors: tuple[type[BaseException], ...]

    def entries(self, stream: BinaryIO) -> ContextManager[Iterator[ArchiveEntry]]:
        """Open the stream and iterate its members.

        Raises one of ``errors`` when the stream is not in this format or a
        member cannot be decompressed.
        """
        ...


class _ArchiveContext:
    """Keeps an opened archive alive while its entries are consumed."""

    def __init__(self, archive, iterate: Callable[[object], Iterator[ArchiveEntry]]):
        self._archive = archive
        self._iterate = iterate

    def __enter__(self) -> Iterator[ArchiveEntry]:
        return self._iterate(self._archive)

    def __exit__(self, *args) -> None:
        self._archive.close()


class RarReader:
    """RAR archives, read through ``rarfile``."""

    name = "rar"
    errors = (rarfile.Error, *ENTRY_READ_ERRORS)

    def entries(self, stream: BinaryIO) -> ContextManager[Iterator[ArchiveEntry]]:
        archive = rarfile.RarFile(stream)
        return _ArchiveContext(archive, self._iterate)

    @staticmethod
    def _iterate(archive: rarfile.RarFile) -> Iterator[ArchiveEntry]:
        for info in archive.infolist():
            yield ArchiveEntry(
                name=info.filename,
                is_dir=info.is_dir(),
                open=lambda info=info: archive.open(info),
            )


class ZipReader:
    """ZIP archives, read through ``zipfile``."""

    name = "zip"
    errors = (zipfile.BadZipFile, zipfile.LargeZipFile, *ENTRY_READ_ERRORS)

    def entries(self, stream: BinaryIO) -> ContextManager[Iterator[ArchiveEntry]]:
        archive = zipfile.ZipFile(stream, "r")
        return _ArchiveContext(archive, self._iterate)

    @staticmethod
    def _iterate(archive: zipfile.ZipFile) -> Iterator[ArchiveEntry]:
        for info in archive.infolist():
            yield ArchiveEntry(
                name=info.filename,
                is_dir=info.is_dir(),
                open=lambda info=info: archive.open(info),
            )


class TarReader:
    """TAR archives (plain, gzip, bzip2, xz), read through ``tarfile``."""

    name = "tar"
    errors = (tarfile.TarError, *ENTRY_READ_ERRORS)

    def entries(self, stream: BinaryIO) -> ContextManager[Iterator[ArchiveEntry]]:
        archive = tarfile.open(fileobj=stream, mode="r:*")
        return _ArchiveContext(archive, self._iterate)

    @staticmethod
    def _iterate(archive: tarfile.TarFile) -> Iterator[ArchiveEntry]:
        for member in archive.getmembers():
            # Links and devices are never materialized
            if not (member.isfile() or member.isdir()):
                continue
            yield ArchiveEntry(
                name=member.name,
                is_dir=member.isdir(),
                open=lambda member=member: archive.extractfile(member),
            )


DEFAULT_READERS: tuple[ArchiveReader, ...] = (RarReader(), ZipReader(), TarReader())


# -----------------------------------------------------------------------------
# Extraction Functions
# -----------------------------------------------------------------------------


def _extract_entries(entries: Iterator[ArchiveEntry], output_dir: Path, result: ExtractionResult) -> None:
    for entry in entries:
        if entry.is_dir:
            continue

        # Entries without a logical file name carry no content
        if not PurePosixPath(normalize_entry_name(entry.name)).name:
            continue

        target = resolve_within(output_dir, entry.name)
        if target is None:
            logger.warning(f"Rejected archive entry outside destination: {entry.name!r}")
            result.skipped.append(entry.name)
            continue

        try:
            ensure_dir(target.parent)
            dst = open(target, "wb")
        except ENTRY_CONFLICT_ERRORS as e:
            logger.warning(f"Rejected archive entry conflicting with an earlier one: {entry.name!r} ({e})")
            result.skipped.append(entry.name)
            continue

        with dst, entry.open() as src:
            shutil.copyfileobj(src, dst)

        result.files.append(target)


def extract_archive(
    source: bytes | BinaryIO,
    output_dir: Path,
    readers: Sequence[ArchiveReader] = DEFAULT_READERS,
) -> ExtractionResult:
    """
    Extract an uploaded archive.

    Each reader is tried in order; the stream is rewound before every
    attempt. Directory entries and entries with an empty name are
    skipped. Entries that would land outside ``output_dir``, or collide
    with a file or directory written by an earlier entry, are rejected
    and listed in ``skipped``. A member that fails to decompress fails
    the reader, and the next one is tried.

    Args:
        source: Archive bytes or a seekable binary stream
        output_dir: Directory to extract to (created if missing)
        readers: Archive readers in priority order

    Returns:
        ExtractionResult with the written files

    Raises:
        UnsupportedArchiveError: If no reader can parse the input completely
    """
    stream = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    ensure_dir(output_dir)

    failures = []
    for reader in readers:
        stream.seek(0)
        result = ExtractionResult(output_dir=output_dir, reader=reader.name)
        try:
            with reader.entries(stream) as entries:
                _extract_entries(entries, output_dir, result)
        except reader.errors as e:
            logger.debug(f"{reader.name} reader could not parse archive: {e}")
            failures.append(f"{reader.name}: {e}")
            continue

        logger.info(
            f"Extracted {result.file_count} files ({reader.name}) -> {output_dir}"
            + (f", rejected {len(result.skipped)} entries" if result.skipped else "")
        )
        return result

    logger.error(f"Could not extract archive into {output_dir}: {'; '.join(failures)}")
    raise UnsupportedArchiveError(f"Unsupported or corrupt archive ({', '.join(r.name for r in readers)} tried)")
