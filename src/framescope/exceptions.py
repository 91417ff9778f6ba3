"""Typed exception hierarchy for framescope."""

from pathlib import Path


class FramescopeError(Exception):
    """Base exception for all framescope errors."""

    pass


class ArchiveOpenError(FramescopeError):
    """Raised when an archive cannot be opened as a zip container."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot open archive {path}: {reason}")


class NotAZipError(ArchiveOpenError):
    """Raised when a file exists but is not a valid zip container."""

    pass


class ArchiveUnreadableError(ArchiveOpenError):
    """Raised when an archive path is missing or cannot be read."""

    pass


class EntryDecodeError(FramescopeError):
    """Raised when an archive entry cannot be read or decoded."""

    def __init__(self, entry: str, reason: str):
        self.entry = entry
        self.reason = reason
        super().__init__(f"Cannot decode entry {entry}: {reason}")


class LockfileParseError(FramescopeError):
    """Raised when a bundled pubspec.lock is not a valid lockfile document."""

    pass


class TargetError(FramescopeError):
    """Raised when a batch target does not resolve to any archive."""

    pass
