"""
Tests for manifest.py module.

Tests version field parsing and first-match substitution that keeps the
rest of the manifest byte for byte.
"""

import pytest
import semver
from unittest.mock import patch

from git_semver.errors import ManifestIoFailed, VersionParseFailed
from git_semver.manifest import (
    parse_manifest_version,
    parse_version_string,
    read_manifest,
    replace_version_field,
    write_manifest_version,
)


CARGO = (
    '[package]\n'
    'name = "demo"\n'
    'version = "0.1.0"\n'
    'edition = "2021"\n'
    '\n'
    '[dependencies]\n'
    'serde = { version = "1.0" }\n'
    '\n'
    '[workspace.package]\n'
    'version = "9.9.9"\n'
)


class TestParseVersionString:
    """Test plain version string parsing."""

    def test_parse_plain(self):
        assert parse_version_string('1.2.3') == semver.Version(1, 2, 3)

    def test_parse_v_prefix(self):
        assert parse_version_string('v1.2.3') == semver.Version(1, 2, 3)

    def test_parse_prerelease(self):
        version = parse_version_string('0.1.1-dev.2')
        assert version.prerelease == 'dev.2'

    @pytest.mark.parametrize('value', ['1.2', 'latest', '1.2.3.4', ''])
    def test_parse_invalid(self, value):
        with pytest.raises(VersionParseFailed):
            parse_version_string(value, source='git tag')


class TestParseManifestVersion:
    """Test extracting the version field."""

    def test_first_field_wins(self):
        assert str(parse_manifest_version(CARGO)) == '0.1.0'

    def test_inline_version_not_matched(self):
        """Only a version field at the start of a line counts."""
        contents = 'serde = { version = "1.0.0" }\n'
        with pytest.raises(VersionParseFailed, match='not found'):
            parse_manifest_version(contents)

    def test_invalid_version(self):
        with pytest.raises(VersionParseFailed):
            parse_manifest_version('version = "one"\n')


class TestReplaceVersionField:
    """Test version substitution."""

    def test_only_first_match_replaced(self):
        replaced = replace_version_field(CARGO, '0.1.1-dev.1')
        assert replaced == CARGO.replace('version = "0.1.0"', 'version = "0.1.1-dev.1"')
        assert 'version = "9.9.9"' in replaced
        assert 'serde = { version = "1.0" }' in replaced

    def test_crlf_preserved(self):
        contents = '[package]\r\nversion = "0.1.0"\r\nname = "x"\r\n'
        replaced = replace_version_field(contents, semver.Version.parse('0.2.0'))
        assert replaced == '[package]\r\nversion = "0.2.0"\r\nname = "x"\r\n'

    def test_missing_field(self):
        with pytest.raises(ManifestIoFailed):
            replace_version_field('[package]\nname = "x"\n', '1.0.0')


class TestManifestFile:
    """Test reading and writing manifests on disk."""

    def test_write_manifest_version(self, tmp_path):
        path = tmp_path / 'Cargo.toml'
        path.write_bytes(CARGO.encode('utf-8'))

        write_manifest_version(str(path), semver.Version.parse('0.1.1-dev.1'))

        contents = path.read_bytes().decode('utf-8')
        assert contents == CARGO.replace('"0.1.0"', '"0.1.1-dev.1"', 1)

    def test_read_keeps_line_endings(self, tmp_path):
        path = tmp_path / 'Cargo.toml'
        path.write_bytes(b'version = "1.0.0"\r\n')
        assert read_manifest(str(path)) == 'version = "1.0.0"\r\n'

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(ManifestIoFailed, match='Error reading'):
            read_manifest(str(tmp_path / 'missing.toml'))

    def test_write_failure(self, tmp_path):
        path = tmp_path / 'Cargo.toml'
        path.write_text('version = "1.0.0"\n')
        real_open = open

        def fake_open(file, mode='r', *args, **kwargs):
            if 'w' in mode:
                raise PermissionError('read-only')
            return real_open(file, mode, *args, **kwargs)

        with patch('builtins.open', side_effect=fake_open):
            with pytest.raises(ManifestIoFailed, match='Error writing'):
                write_manifest_version(str(path), '1.0.1')
