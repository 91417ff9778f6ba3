"""Package extraction for Flutter applications.

Each heuristic is an independent function of one open archive. The lockfile
heuristic yields versions and is authoritative; every other heuristic yields
name-only observations that fill in names the lockfile did not cover.
"""

import re
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import yaml

from framescope.core.archive import Archive, iter_archives
from framescope.exceptions import LockfileParseError
from framescope.utils.logging import get_logger

logger = get_logger(__name__)

PUBSPEC_LOCK_ENTRY = "assets/pubspec.lock"

ASSET_PACKAGE_RE = re.compile(r"assets/packages/([^/]+)/")
FLUTTER_ASSET_PACKAGE_RE = re.compile(r"flutter_assets/packages/([^/]+)/")
NATIVE_LIB_RE = re.compile(r"lib/[^/]+/lib([A-Za-z0-9_-]+)\.so")
SIGNATURE_FILE_RE = re.compile(r"META-INF/([A-Za-z0-9_-]+)\.SF")
DART_PACKAGE_RE = re.compile(r"package:([A-Za-z0-9_-]+)/")

SNAPSHOT_FILE_NAMES = frozenset({"libapp.so", "app.dill", "kernel_blob.bin"})
ASSET_PREFIXES = ("assets/", "flutter_assets/")

NameHeuristic = Callable[[Archive], set[str]]


def parse_pubspec_lock(text: str) -> dict[str, str | None]:
    """Parse a pubspec.lock document into package versions.

    Args:
        text: Raw lockfile content.

    Returns:
        Mapping of package name to version (None when no version is listed).

    Raises:
        LockfileParseError: If the text is not YAML or not a mapping.
    """
    try:
        document: Any = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise LockfileParseError(f"Invalid pubspec.lock: {e}") from e
    except RecursionError as e:
        raise LockfileParseError("Invalid pubspec.lock: nesting too deep") from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise LockfileParseError("Invalid pubspec.lock: top level is not a mapping")

    packages = document.get("packages")
    if packages is None:
        return {}
    if not isinstance(packages, dict):
        raise LockfileParseError("Invalid pubspec.lock: 'packages' is not a mapping")

    versions: dict[str, str | None] = {}
    for name, info in packages.items():
        if not isinstance(info, dict):
            continue
        version = info.get("version")
        versions[str(name)] = str(version) if version is not None else None
    return versions


def lockfile_versions(archive: Archive) -> dict[str, str | None]:
    """Read package versions from the bundled pubspec.lock.

    Raises:
        LockfileParseError: If the lockfile is present but malformed.
    """
    text = archive.read_text(PUBSPEC_LOCK_ENTRY)
    if text is None:
        return {}
    return parse_pubspec_lock(text)


def _match_entry_names(archive: Archive, pattern: re.Pattern[str]) -> set[str]:
    names: set[str] = set()
    for entry in archive.entry_names():
        match = pattern.search(entry)
        if match:
            names.add(match.group(1))
    return names


def _scan_contents(archive: Archive, entries: list[str]) -> set[str]:
    names: set[str] = set()
    for entry in entries:
        text = archive.read_text(entry, errors="replace")
        if text is None:
            continue
        names.update(DART_PACKAGE_RE.findall(text))
    return names


def asset_package_names(archive: Archive) -> set[str]:
    """Packages shipping assets under assets/packages/<name>/."""
    return _match_entry_names(archive, ASSET_PACKAGE_RE)


def flutter_asset_package_names(archive: Archive) -> set[str]:
    """Packages shipping assets under flutter_assets/packages/<name>/."""
    return _match_entry_names(archive, FLUTTER_ASSET_PACKAGE_RE)


def native_library_names(archive: Archive) -> set[str]:
    """Native libraries, lib/<abi>/lib<name>.so."""
    return _match_entry_names(archive, NATIVE_LIB_RE)


def signature_file_names(archive: Archive) -> set[str]:
    """Signer names from META-INF/<name>.SF."""
    return _match_entry_names(archive, SIGNATURE_FILE_RE)


def snapshot_package_names(archive: Archive) -> set[str]:
    """package:<name>/ references inside compiled Dart snapshots."""
    entries = [
        entry
        for entry in archive.entry_names()
        if entry.rsplit("/", 1)[-1] in SNAPSHOT_FILE_NAMES
    ]
    return _scan_contents(archive, entries)


def asset_content_package_names(archive: Archive) -> set[str]:
    """package:<name>/ references inside asset files."""
    entries = [
        entry for entry in archive.entry_names() if entry.startswith(ASSET_PREFIXES)
    ]
    return _scan_contents(archive, entries)


NAME_HEURISTICS: tuple[NameHeuristic, ...] = (
    asset_package_names,
    flutter_asset_package_names,
    native_library_names,
    signature_file_names,
    snapshot_package_names,
    asset_content_package_names,
)


class FlutterExtractor:
    """Extract bundled Dart packages from a Flutter app's archives."""

    def __init__(
        self,
        archive_paths: Sequence[Path],
        heuristics: Sequence[NameHeuristic] = NAME_HEURISTICS,
    ):
        """Initialize Flutter extractor.

        Args:
            archive_paths: Base archive followed by split archives.
            heuristics: Name-only heuristics to run on every archive.
        """
        self.archive_paths = [Path(p) for p in archive_paths]
        self.heuristics = tuple(heuristics)
        self.archives_opened = 0

    def _read_lockfile(self, archive: Archive) -> dict[str, str | None]:
        try:
            return lockfile_versions(archive)
        except LockfileParseError as e:
            # Name-only heuristics still cover this archive
            logger.warning("lockfile_ignored", archive=str(archive.path), error=str(e))
            return {}

    def extract(self) -> dict[str, str | None]:
        """Run every heuristic over every archive and merge the results.

        Returns:
            Mapping of package name to version (None for name-only finds).
        """
        self.archives_opened = 0
        versions: dict[str, str | None] = {}
        observed: set[str] = set()

        for archive in iter_archives(self.archive_paths):
            self.archives_opened += 1
            # Later archives overwrite earlier lockfile entries
            versions.update(self._read_lockfile(archive))
            for heuristic in self.heuristics:
                observed |= heuristic(archive)

        for name in observed:
            versions.setdefault(name, None)

        logger.debug("flutter_packages_extracted", count=len(versions))
        return versions
