"""Detection orchestration: classify, extract, merge."""

import queue
import threading
import time
from collections.abc import Sequence
from pathlib import Path

from framescope.core.classifier import FrameworkClassifier
from framescope.core.flutter import FlutterExtractor
from framescope.core.react_native import ReactNativeExtractor
from framescope.models.app import AppDetection, AppTarget
from framescope.models.detect import DetectionResult, Framework
from framescope.utils.config import get_timeout, get_workers
from framescope.utils.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

# Upper bound on how long the batch loop sleeps between deadline checks
POLL_INTERVAL = 0.1


class PackageDetector:
    """Detect the framework and bundled packages of one application."""

    def __init__(self, archive_paths: Sequence[Path]):
        """Initialize package detector.

        Args:
            archive_paths: Base archive followed by split archives, in the
                order the host enumerated them.
        """
        self.archive_paths = [Path(p) for p in archive_paths]

    def _extract(self, framework: Framework) -> tuple[dict[str, str | None], int]:
        """Run the extractor for a framework.

        Returns:
            Package versions and the number of archives that opened.
        """
        if framework is Framework.FLUTTER:
            flutter = FlutterExtractor(self.archive_paths)
            return flutter.extract(), flutter.archives_opened
        if framework is Framework.REACT_NATIVE:
            react_native = ReactNativeExtractor(self.archive_paths)
            names = react_native.extract()
            return dict.fromkeys(names), react_native.archives_opened
        return {}, 0

    def detect(self, framework: Framework | None = None) -> DetectionResult:
        """Classify the application (unless told) and extract its packages.

        Archive, entry, and lockfile problems are logged and never raised.

        Args:
            framework: Framework already known for this app. Classification
                is skipped when given.

        Returns:
            DetectionResult with packages sorted by name. Framework.UNKNOWN
            with no packages when no archive could be opened.
        """
        if framework is None:
            framework = FrameworkClassifier(self.archive_paths).classify()
        else:
            framework = Framework(framework)

        if framework is Framework.UNKNOWN:
            return DetectionResult.empty()

        versions, archives_opened = self._extract(framework)
        if not archives_opened:
            return DetectionResult.empty()
        return DetectionResult.from_versions(framework, versions)


def detect(
    archive_paths: Sequence[Path], framework: Framework | None = None
) -> DetectionResult:
    """Detect framework and packages for one application's archives."""
    return PackageDetector(archive_paths).detect(framework)


def detect_app(target: AppTarget) -> AppDetection:
    """Detect one application and join the result with its metadata."""
    bind_context(package=target.package_name)
    try:
        result = detect(target.archive_paths)
        logger.info(
            "app_detected",
            framework=str(result.framework),
            packages=len(result.packages),
        )
        return AppDetection.from_result(target, result)
    finally:
        clear_context()


def _safe_detect_app(target: AppTarget) -> AppDetection:
    try:
        return detect_app(target)
    except Exception:
        logger.exception("app_detection_failed", package=target.package_name)
        return AppDetection.from_result(target, DetectionResult.empty())


def detect_many(
    targets: Sequence[AppTarget],
    *,
    workers: int | None = None,
    timeout: float | None = None,
) -> list[AppDetection]:
    """Detect many applications in parallel.

    Each application has a wall-clock budget counted from when a worker
    picks it up. Applications over budget are reported as Unknown with no
    packages and are not waited for. Workers are daemon threads, so a scan
    still running past its budget never holds up interpreter exit.

    Args:
        targets: Applications to analyze.
        workers: Worker thread count (defaults to config, then CPU count).
        timeout: Per-application budget in seconds (defaults to config).

    Returns:
        One AppDetection per target, in input order.
    """
    workers = get_workers(workers)
    timeout = get_timeout(timeout)

    jobs: queue.SimpleQueue[tuple[int, AppTarget]] = queue.SimpleQueue()
    for job in enumerate(targets):
        jobs.put(job)
    finished: queue.SimpleQueue[tuple[int, AppDetection]] = queue.SimpleQueue()
    started: dict[int, float] = {}

    def work() -> None:
        while True:
            try:
                index, target = jobs.get_nowait()
            except queue.Empty:
                return
            started[index] = time.monotonic()
            finished.put((index, _safe_detect_app(target)))

    for number in range(min(workers, len(targets))):
        thread = threading.Thread(target=work, name=f"framescope-{number}", daemon=True)
        thread.start()

    results: dict[int, AppDetection] = {}
    pending = set(range(len(targets)))

    while pending:
        try:
            index, detection = finished.get(timeout=min(POLL_INTERVAL, timeout))
        except queue.Empty:
            pass
        else:
            # Late results for apps already reported as timed out are dropped
            if index in pending:
                results[index] = detection
                pending.discard(index)
            continue

        now = time.monotonic()
        for index in sorted(pending):
            start = started.get(index)
            if start is None or now - start <= timeout:
                continue
            target = targets[index]
            logger.warning(
                "app_detection_timed_out",
                package=target.package_name,
                timeout=timeout,
            )
            results[index] = AppDetection.from_result(
                target, DetectionResult.empty(), timed_out=True
            )
            pending.discard(index)

    return [results[index] for index in range(len(targets))]
