"""Package extraction for React Native applications."""

import re
from collections.abc import Sequence
from pathlib import Path

from framescope.core.archive import Archive, iter_archives
from framescope.core.flutter import NATIVE_LIB_RE, SIGNATURE_FILE_RE
from framescope.utils.logging import get_logger

logger = get_logger(__name__)

BUNDLE_ENTRY = "assets/index.android.bundle"

REQUIRE_RE = re.compile(r"""require\(['"]([^'"]+)['"]\)""")
IMPORT_FROM_RE = re.compile(r"""from ['"]([^'"]+)['"]""")
MODULE_DEFINE_RE = re.compile(r"""__d\(['"]([^'"]+)['"]""")
SCOPED_PACKAGE_RE = re.compile(r"@([A-Za-z0-9_-]+)/([A-Za-z0-9_-]+)")

# Module specifiers that are local files or the framework itself
EXCLUDED_PREFIXES = ("./", "../", "/", "react-native")


def is_external_module(spec: str) -> bool:
    """Check whether a module specifier names a third-party package."""
    return not spec.startswith(EXCLUDED_PREFIXES)


def scan_bundle(text: str) -> set[str]:
    """Collect package names referenced by a JavaScript bundle.

    Args:
        text: Bundle source.

    Returns:
        Module specifiers from require/import/__d calls that look external,
        plus every @scope/name token.
    """
    names: set[str] = set()
    for pattern in (REQUIRE_RE, IMPORT_FROM_RE, MODULE_DEFINE_RE):
        names.update(spec for spec in pattern.findall(text) if is_external_module(spec))
    names.update(f"@{org}/{name}" for org, name in SCOPED_PACKAGE_RE.findall(text))
    return names


def bundle_package_names(archive: Archive) -> set[str]:
    """Packages referenced by the archive's JavaScript bundle, if it has one."""
    if not archive.has_entry(BUNDLE_ENTRY):
        return set()

    text = archive.read_text(BUNDLE_ENTRY, errors="replace")
    if text is None:
        return set()
    return scan_bundle(text)


def entry_package_names(archive: Archive) -> set[str]:
    """Native library and signature-file names among the archive's entries."""
    names: set[str] = set()
    for entry in archive.entry_names():
        for pattern in (NATIVE_LIB_RE, SIGNATURE_FILE_RE):
            match = pattern.search(entry)
            if match:
                names.add(match.group(1))
    return names


class ReactNativeExtractor:
    """Extract bundled JavaScript packages from a React Native app's archives."""

    def __init__(self, archive_paths: Sequence[Path]):
        """Initialize React Native extractor.

        Args:
            archive_paths: Base archive followed by split archives.
        """
        self.archive_paths = [Path(p) for p in archive_paths]
        self.archives_opened = 0

    def extract(self) -> set[str]:
        """Scan every archive and return the union of package names.

        The bundle format carries no version metadata, so only names are
        returned.
        """
        self.archives_opened = 0
        names: set[str] = set()
        for archive in iter_archives(self.archive_paths):
            self.archives_opened += 1
            names |= bundle_package_names(archive)
            names |= entry_package_names(archive)

        logger.debug("react_native_packages_extracted", count=len(names))
        return names
