"""Test configuration for framescope."""

import logging
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest
from rich.logging import RichHandler

from framescope.utils.config import CONFIG_ENV_VAR, reload_config
from framescope.utils.logging import configure_default_logging

ArchiveFactory = Callable[..., Path]


@pytest.fixture(autouse=True)
def default_logging():
    """Undo any setup_logging() a test performed."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        # pytest's own capture handlers subclass StreamHandler and are kept
        if isinstance(handler, RichHandler) or type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(logging.WARNING)
    configure_default_logging()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point configuration at an empty location for every test.

    Yields:
        Path: Config file path tests may write to before calling
            reload_config().
    """
    config_file = tmp_path / "config" / "config.json"
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
    reload_config()
    yield config_file
    reload_config()


@pytest.fixture
def make_archive(tmp_path) -> ArchiveFactory:
    """Factory that writes a zip archive from a name -> content mapping.

    Returns:
        Callable taking the archive file name and an entries mapping
        (str or bytes values) and returning the written path.
    """

    def _make(name: str, entries: dict[str, str | bytes]) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            for entry, content in entries.items():
                zf.writestr(entry, content)
        return path

    return _make


CENTRAL_DIRECTORY_SIGNATURE = b"PK\x01\x02"


@pytest.fixture
def patch_central_directory() -> Callable[[Path, dict[int, int]], Path]:
    """Factory that overwrites bytes of an archive's last central directory header.

    Offsets are relative to the header signature: +6 is the version needed
    to extract, +9 the high byte of the flags, +46 the first byte of the
    entry name.
    """

    def _patch(path: Path, patches: dict[int, int]) -> Path:
        raw = bytearray(path.read_bytes())
        header = raw.rfind(CENTRAL_DIRECTORY_SIGNATURE)
        for offset, value in patches.items():
            raw[header + offset] = value
        path.write_bytes(bytes(raw))
        return path

    return _patch


@pytest.fixture
def not_a_zip(tmp_path) -> Path:
    """A file with an .apk name that is not a zip container."""
    path = tmp_path / "broken.apk"
    path.write_bytes(b"this is not a zip archive at all")
    return path


PUBSPEC_LOCK = """\
# Generated by pub
packages:
  foo:
    dependency: "direct main"
    description:
      name: foo
      url: "https://pub.dev"
    source: hosted
    version: "1.2.3"
  http:
    dependency: "direct main"
    source: hosted
    version: "1.2.0"
sdks:
  dart: ">=3.0.0 <4.0.0"
"""


@pytest.fixture
def pubspec_lock() -> str:
    """A minimal pubspec.lock document."""
    return PUBSPEC_LOCK
