"""
Manifest version field handling.

Reads and rewrites the single-line `version = "..."` field of a text
manifest (Cargo.toml, pyproject.toml, ...). Only the first matching line is
ever touched; every other byte of the file is preserved.
"""

import re

import semver
from loguru import logger

from .errors import ManifestIoFailed, VersionParseFailed

VERSION_FIELD_PATTERN = re.compile(r'^version = "([^"\r\n]+)"', re.MULTILINE)


def parse_version_string(value: str, source: str = 'manifest') -> semver.Version:
    """
    Parse a semantic version string, tolerating a leading 'v'.

    Args:
        value: Version string, e.g. "1.2.3" or "v1.2.3-dev.1"
        source: Description of where the string came from, for error messages

    Returns:
        semver.Version: Parsed version

    Raises:
        VersionParseFailed: If the string is not a valid semantic version
    """
    clean_value = value.strip()
    if clean_value.startswith('v'):
        clean_value = clean_value[1:]

    try:
        return semver.Version.parse(clean_value)
    except (ValueError, TypeError) as e:
        raise VersionParseFailed(f"error parsing version from {source} {value}") from e


def parse_manifest_version(contents: str) -> semver.Version:
    """
    Extract the declared version from manifest text.

    Raises:
        VersionParseFailed: If no version field exists or it is not valid semver
    """
    match = VERSION_FIELD_PATTERN.search(contents)
    if not match:
        raise VersionParseFailed("version number not found in manifest")
    return parse_version_string(match.group(1))


def replace_version_field(contents: str, version) -> str:
    """
    Substitute the first version field in manifest text.

    Raises:
        ManifestIoFailed: If the text has no version field to replace
    """
    new_contents, count = VERSION_FIELD_PATTERN.subn(
        lambda _match: f'version = "{version}"', contents, count=1
    )
    if count == 0:
        raise ManifestIoFailed("could not find a version field to update in manifest")
    return new_contents


def read_manifest(path: str) -> str:
    """Read the whole manifest, keeping line endings untouched."""
    try:
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return f.read()
    except OSError as e:
        raise ManifestIoFailed(f"Error reading `{path}`: {e}") from e


def write_manifest_version(path: str, version) -> None:
    """
    Persist a new version into the manifest at path.

    Args:
        path: Manifest file on disk
        version: New version (semver.Version or string)

    Raises:
        ManifestIoFailed: If the file cannot be read, written, or has no version field
    """
    contents = read_manifest(path)
    replaced = replace_version_field(contents, version)

    try:
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(replaced)
    except OSError as e:
        raise ManifestIoFailed(f"Error writing `{path}`: {e}") from e

    logger.debug(f"Wrote version {version} to {path}")
