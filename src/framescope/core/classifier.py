"""Framework classification from archive entry-name signatures."""

from collections.abc import Iterable, Sequence
from contextlib import closing
from pathlib import Path

from framescope.core.archive import iter_archives
from framescope.models.detect import Framework
from framescope.utils.logging import get_logger

logger = get_logger(__name__)


class FrameworkClassifier:
    """Classify an application's UI framework from its archives."""

    # Checked in order; the first framework with a matching suffix wins
    FRAMEWORK_SIGNATURES: tuple[tuple[Framework, tuple[str, ...]], ...] = (
        (Framework.FLUTTER, ("libflutter.so",)),
        (Framework.REACT_NATIVE, ("libreactnativejni.so", "index.android.bundle")),
    )

    def __init__(self, archive_paths: Sequence[Path]):
        """Initialize framework classifier.

        Args:
            archive_paths: Base archive followed by split archives.
        """
        self.archive_paths = [Path(p) for p in archive_paths]

    @classmethod
    def classify_entries(cls, names: Iterable[str]) -> Framework:
        """Classify a single archive from its entry names.

        Args:
            names: Entry names of one archive.

        Returns:
            The matched framework, or Framework.UNKNOWN.
        """
        names = list(names)
        for framework, suffixes in cls.FRAMEWORK_SIGNATURES:
            for name in names:
                if name.endswith(suffixes):
                    logger.debug("signature_matched", framework=str(framework), entry=name)
                    return framework
        return Framework.UNKNOWN

    def classify(self) -> Framework:
        """Scan archives in order and return the first confirmed framework.

        Returns:
            Framework label; Framework.UNKNOWN if no archive carries a
            signature or none could be opened.
        """
        with closing(iter_archives(self.archive_paths)) as archives:
            for archive in archives:
                framework = self.classify_entries(archive.entry_names())
                if framework is not Framework.UNKNOWN:
                    return framework
        return Framework.UNKNOWN
