"""Zip archive access for installation archives (base and split APKs)."""

from __future__ import annotations

import zlib
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import TracebackType
from zipfile import BadZipFile, ZipFile

from framescope.exceptions import (
    ArchiveOpenError,
    ArchiveUnreadableError,
    EntryDecodeError,
    NotAZipError,
)
from framescope.utils.logging import get_logger

logger = get_logger(__name__)


class Archive:
    """A single open zip container with lazy, per-entry reads.

    Use as a context manager; the underlying file handle is released when
    the block exits, whatever the outcome.
    """

    def __init__(self, path: Path, zip_file: ZipFile):
        self.path = path
        self._zip = zip_file
        self._names = zip_file.namelist()
        self._name_set = set(self._names)

    @classmethod
    def open(cls, path: Path) -> Archive:
        """Open an archive for reading.

        Args:
            path: Path to the zip container.

        Returns:
            Open Archive. Callers must close it (or use ``with``).

        Raises:
            NotAZipError: If the file is not a valid zip container.
            ArchiveUnreadableError: If the file is missing or cannot be read.
        """
        path = Path(path)
        try:
            zip_file = ZipFile(path, "r")
        except BadZipFile as e:
            raise NotAZipError(path, f"not a valid ZIP file: {e}") from e
        except (NotImplementedError, ValueError) as e:
            # Unsupported zip version or undecodable entry names
            raise NotAZipError(path, f"unsupported ZIP structure: {e}") from e
        except OSError as e:
            raise ArchiveUnreadableError(path, str(e)) from e

        try:
            return cls(path, zip_file)
        except Exception:
            zip_file.close()
            raise

    def close(self) -> None:
        """Release the file handle. Safe to call more than once."""
        self._zip.close()

    def __enter__(self) -> Archive:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def entry_names(self) -> list[str]:
        """Entry names in container order."""
        return list(self._names)

    def has_entry(self, name: str) -> bool:
        """Check whether an entry with this exact name exists."""
        return name in self._name_set

    def _read(self, name: str) -> bytes:
        try:
            return self._zip.read(name)
        except (BadZipFile, zlib.error, EOFError) as e:
            raise EntryDecodeError(name, f"corrupt entry data: {e}") from e
        except (NotImplementedError, RuntimeError, ValueError) as e:
            # Unsupported compression, encrypted entry, or bad header name
            raise EntryDecodeError(name, str(e)) from e
        except OSError as e:
            raise EntryDecodeError(name, f"read failed: {e}") from e

    def read_bytes(self, name: str) -> bytes | None:
        """Read an entry's raw bytes.

        Args:
            name: Entry name.

        Returns:
            Entry content, or None if the entry is absent or unreadable.
        """
        if name not in self._name_set:
            return None

        try:
            return self._read(name)
        except EntryDecodeError as e:
            logger.debug(
                "entry_unreadable", archive=str(self.path), entry=name, error=e.reason
            )
            return None

    def read_text(self, name: str, errors: str = "strict") -> str | None:
        """Read an entry as UTF-8 text.

        Args:
            name: Entry name.
            errors: Codec error handler. "strict" rejects invalid UTF-8,
                "replace" decodes best-effort.

        Returns:
            Decoded text, or None if the entry is absent, unreadable, or
            (in strict mode) not valid UTF-8.
        """
        data = self.read_bytes(name)
        if data is None:
            return None

        try:
            return data.decode("utf-8", errors=errors)
        except UnicodeDecodeError as e:
            logger.debug(
                "entry_not_text", archive=str(self.path), entry=name, error=e.reason
            )
            return None


def iter_archives(paths: Iterable[Path]) -> Iterator[Archive]:
    """Open archives one at a time, in the given order.

    Each archive is closed before the next one is opened. Archives that fail
    to open are logged and skipped.

    Args:
        paths: Archive paths, base first.

    Yields:
        Open archives.
    """
    for path in paths:
        try:
            archive = Archive.open(Path(path))
        except ArchiveOpenError as e:
            logger.warning("archive_skipped", archive=str(e.path), reason=e.reason)
            continue

        with archive:
            yield archive
