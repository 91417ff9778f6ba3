"""Pydantic models for applications submitted to detection."""

from pathlib import Path

from pydantic import BaseModel

from framescope.models.detect import DetectionResult, Framework, PackageRecord


class AppTarget(BaseModel):
    """One installed application and its archives."""

    package_name: str
    """Full package name (e.g., com.example.app). Passed through untouched."""

    app_name: str | None = None
    """Human-readable application name. Passed through untouched."""

    archive_paths: list[Path]
    """Base archive first, followed by split archives in enumeration order."""


class AppDetection(BaseModel):
    """Detection result joined with the application's metadata."""

    package_name: str
    """Package name of the analyzed app."""

    app_name: str | None = None
    """Human-readable application name."""

    framework: Framework
    """Classified UI framework."""

    packages: list[PackageRecord] = []
    """Detected packages, sorted by name."""

    timed_out: bool = False
    """Whether detection exceeded its time budget and was abandoned."""

    @classmethod
    def from_result(
        cls,
        target: AppTarget,
        result: DetectionResult,
        *,
        timed_out: bool = False,
    ) -> "AppDetection":
        """Join a target's metadata with its detection result."""
        return cls(
            package_name=target.package_name,
            app_name=target.app_name,
            framework=result.framework,
            packages=result.packages,
            timed_out=timed_out,
        )
