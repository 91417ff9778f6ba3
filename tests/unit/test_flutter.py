"""Unit tests for Flutter package extraction."""

import pytest

from framescope.core.archive import Archive
from framescope.core.flutter import (
    FlutterExtractor,
    asset_content_package_names,
    asset_package_names,
    flutter_asset_package_names,
    lockfile_versions,
    native_library_names,
    parse_pubspec_lock,
    signature_file_names,
    snapshot_package_names,
)
from framescope.exceptions import LockfileParseError

DEEPLY_NESTED_LOCK = "packages: " + "[" * 5000 + "]" * 5000


class TestParsePubspecLock:
    """Tests for pubspec.lock parsing."""

    def test_versions(self, pubspec_lock):
        assert parse_pubspec_lock(pubspec_lock) == {"foo": "1.2.3", "http": "1.2.0"}

    def test_missing_version(self):
        text = "packages:\n  foo:\n    source: sdk\n"
        assert parse_pubspec_lock(text) == {"foo": None}

    def test_unquoted_version_is_stringified(self):
        text = "packages:\n  foo:\n    version: 1.2\n"
        assert parse_pubspec_lock(text) == {"foo": "1.2"}

    def test_non_mapping_entries_skipped(self):
        text = "packages:\n  foo: oops\n  bar:\n    version: '0.1.0'\n"
        assert parse_pubspec_lock(text) == {"bar": "0.1.0"}

    def test_no_packages_key(self):
        assert parse_pubspec_lock("sdks:\n  dart: '>=3.0.0'\n") == {}

    def test_empty_document(self):
        assert parse_pubspec_lock("") == {}

    @pytest.mark.parametrize(
        "text",
        [
            "packages: [unclosed",
            "- just\n- a\n- list\n",
            "packages:\n  - foo\n",
        ],
    )
    def test_malformed(self, text):
        with pytest.raises(LockfileParseError):
            parse_pubspec_lock(text)

    def test_nesting_too_deep(self):
        with pytest.raises(LockfileParseError):
            parse_pubspec_lock(DEEPLY_NESTED_LOCK)


class TestNameHeuristics:
    """Tests for the individual name-only heuristics."""

    def test_asset_packages(self, make_archive):
        path = make_archive(
            "base.apk",
            {
                "assets/packages/cupertino_icons/assets/CupertinoIcons.ttf": b"",
                "assets/packages/no_trailing_slash": b"",
                "res/drawable/icon.png": b"",
            },
        )
        with Archive.open(path) as archive:
            assert asset_package_names(archive) == {"cupertino_icons"}

    def test_flutter_asset_packages(self, make_archive):
        path = make_archive(
            "base.apk",
            {"assets/flutter_assets/packages/font_awesome_flutter/lib/fonts/fa.ttf": b""},
        )
        with Archive.open(path) as archive:
            assert flutter_asset_package_names(archive) == {"font_awesome_flutter"}
            # The shorter pattern also matches inside flutter_assets/
            assert asset_package_names(archive) == {"font_awesome_flutter"}

    def test_native_libraries(self, make_archive):
        path = make_archive(
            "base.apk",
            {
                "lib/arm64-v8a/libflutter.so": b"",
                "lib/armeabi-v7a/libsqlite3-android.so": b"",
                "lib/libtoplevel.so": b"",
            },
        )
        with Archive.open(path) as archive:
            assert native_library_names(archive) == {"flutter", "sqlite3-android"}

    def test_signature_files(self, make_archive):
        path = make_archive(
            "base.apk",
            {"META-INF/CERT.SF": b"", "META-INF/CERT.RSA": b"", "META-INF/MANIFEST.MF": b""},
        )
        with Archive.open(path) as archive:
            assert signature_file_names(archive) == {"CERT"}

    def test_snapshot_contents(self, make_archive):
        snapshot = b"\x7fELF\x00\xff" + b"package:provider/provider.dart\x00package:dio/src/dio.dart"
        path = make_archive(
            "base.apk",
            {
                "lib/arm64-v8a/libapp.so": snapshot,
                "lib/arm64-v8a/libapp.so.bak": b"package:ignored/x.dart",
                "assets/flutter_assets/kernel_blob.bin": b"package:kernel_pkg/main.dart",
            },
        )
        with Archive.open(path) as archive:
            assert snapshot_package_names(archive) == {"provider", "dio", "kernel_pkg"}

    def test_asset_contents(self, make_archive):
        path = make_archive(
            "base.apk",
            {
                "assets/flutter_assets/NOTICES": "package:shared_preferences/shared_preferences.dart",
                "flutter_assets/AssetManifest.json": '{"package:url_launcher/x": []}',
                "res/raw/notes.txt": "package:not_an_asset/x.dart",
            },
        )
        with Archive.open(path) as archive:
            assert asset_content_package_names(archive) == {
                "shared_preferences",
                "url_launcher",
            }

    def test_lockfile_absent(self, make_archive):
        path = make_archive("base.apk", {"classes.dex": b""})
        with Archive.open(path) as archive:
            assert lockfile_versions(archive) == {}


class TestFlutterExtractor:
    """Tests for merging heuristics across archives."""

    def test_lockfile_precedence(self, make_archive):
        """Lockfile versions survive name-only observations of the same name."""
        path = make_archive(
            "base.apk",
            {
                "assets/pubspec.lock": 'packages:\n  foo:\n    version: "1.2.3"\n',
                "assets/packages/foo/x.png": b"\x89PNG",
                "assets/packages/bar/y.png": b"\x89PNG",
            },
        )

        assert FlutterExtractor([path]).extract() == {"foo": "1.2.3", "bar": None}

    def test_dedup_across_heuristics(self, make_archive):
        path = make_archive(
            "base.apk",
            {"lib/arm64-v8a/libbaz.so": b"", "META-INF/baz.SF": b""},
        )

        assert FlutterExtractor([path]).extract() == {"baz": None}

    def test_lockfile_last_archive_wins(self, make_archive):
        base = make_archive(
            "base.apk",
            {"assets/pubspec.lock": "packages:\n  foo:\n    version: '1.0.0'\n"},
        )
        split = make_archive(
            "split.apk",
            {"assets/pubspec.lock": "packages:\n  foo:\n    version: '2.0.0'\n"},
        )

        assert FlutterExtractor([base, split]).extract() == {"foo": "2.0.0"}

    def test_name_only_in_earlier_archive_gets_later_version(self, make_archive):
        base = make_archive("base.apk", {"assets/packages/foo/a.png": b""})
        split = make_archive(
            "split.apk",
            {"assets/pubspec.lock": "packages:\n  foo:\n    version: '3.1.4'\n"},
        )

        assert FlutterExtractor([base, split]).extract() == {"foo": "3.1.4"}

    def test_malformed_lockfile_degrades(self, make_archive):
        path = make_archive(
            "base.apk",
            {
                "assets/pubspec.lock": "packages: [unclosed",
                "assets/packages/bar/y.png": b"",
            },
        )

        assert FlutterExtractor([path]).extract() == {"bar": None}

    def test_deeply_nested_lockfile_degrades(self, make_archive):
        path = make_archive(
            "base.apk",
            {
                "assets/pubspec.lock": DEEPLY_NESTED_LOCK,
                "lib/arm64-v8a/libflutter.so": b"",
                "assets/packages/bar/y.png": b"",
            },
        )

        assert FlutterExtractor([path]).extract() == {"bar": None, "flutter": None}

    def test_counts_opened_archives(self, make_archive, not_a_zip):
        base = make_archive("base.apk", {"assets/packages/bar/y.png": b""})
        extractor = FlutterExtractor([not_a_zip, base])

        extractor.extract()

        assert extractor.archives_opened == 1

    def test_unreadable_split_contributes_nothing(self, make_archive, not_a_zip):
        base = make_archive("base.apk", {"assets/packages/bar/y.png": b""})

        assert FlutterExtractor([not_a_zip, base]).extract() == {"bar": None}

    def test_custom_heuristics(self, make_archive):
        path = make_archive(
            "base.apk",
            {"assets/packages/bar/y.png": b"", "lib/arm64-v8a/libbaz.so": b""},
        )

        extractor = FlutterExtractor([path], heuristics=[native_library_names])
        assert extractor.extract() == {"baz": None}
