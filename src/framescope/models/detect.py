"""Pydantic models for framework and package detection results."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Framework(StrEnum):
    """UI framework an application was built with.

    Values are the literal strings consumers match on.
    """

    FLUTTER = "Flutter"
    REACT_NATIVE = "React Native"
    UNKNOWN = "Unknown"


class PackageRecord(BaseModel):
    """A bundled third-party package."""

    model_config = ConfigDict(frozen=True)

    name: str
    """Package name (e.g., 'http', '@react-navigation/native')."""

    version: str | None = None
    """Resolved version, when the archive carries one."""


class DetectionResult(BaseModel):
    """Result of detecting one application's framework and packages."""

    framework: Framework
    """Classified UI framework."""

    packages: list[PackageRecord] = []
    """Detected packages, unique by name and sorted by name."""

    @classmethod
    def from_versions(
        cls, framework: Framework, versions: dict[str, str | None]
    ) -> "DetectionResult":
        """Build a result from a name -> optional version mapping.

        Args:
            framework: Classified framework.
            versions: Package names mapped to their version (or None).

        Returns:
            DetectionResult with packages in canonical (name-sorted) order.
        """
        packages = [
            PackageRecord(name=name, version=versions[name])
            for name in sorted(versions)
        ]
        return cls(framework=framework, packages=packages)

    @classmethod
    def empty(cls) -> "DetectionResult":
        """Result for an application nothing could be learned about."""
        return cls(framework=Framework.UNKNOWN, packages=[])
