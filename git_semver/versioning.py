"""
Version derivation and tag consistency rules.

Pure functions that decide whether the declared manifest version needs a
development bump, and whether a declared release has been tagged. Nothing
in this module touches the repository or the filesystem; callers gather
the inputs and act on the results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import semver

from .errors import MalformedPrereleaseTag, UntaggedRelease


class LabelingMode(str, Enum):
    """Grammar used to render the development pre-release label."""

    NUMERIC = 'numeric'
    DOTTED = 'dotted'
    DOTTED_WITH_COMMIT = 'dotted-with-commit'

    @classmethod
    def from_name(cls, name: str) -> 'LabelingMode':
        """
        Resolve a mode from its name or one of the legacy aliases.

        Args:
            name: Mode name, e.g. "dotted" or "semver" (case insensitive)

        Returns:
            LabelingMode: The matching mode

        Raises:
            ValueError: If the name is not a known mode or alias
        """
        key = name.strip().lower()
        if key in MODE_ALIASES:
            return MODE_ALIASES[key]
        return cls(key)


MODE_ALIASES = {
    'pep440': LabelingMode.NUMERIC,
    'semver': LabelingMode.DOTTED,
    'semver-commit': LabelingMode.DOTTED_WITH_COMMIT,
}

MODE_CHOICES = [mode.value for mode in LabelingMode] + list(MODE_ALIASES)


@dataclass(frozen=True)
class Decision:
    """Outcome of a version derivation."""

    needs_bump: bool
    candidate: Optional[semver.Version] = None


UP_TO_DATE = Decision(needs_bump=False)


def split_prerelease(prerelease: str) -> Tuple[int, str]:
    """
    Split a describe-style pre-release into commit distance and commit suffix.

    `git describe` reports a tag N commits behind HEAD as `<tag>-<N>-g<sha>`,
    which lands in the pre-release position as `<N>-g<sha>`.

    Args:
        prerelease: Pre-release string such as "3-gab12"

    Returns:
        tuple: (distance, suffix), e.g. (3, "gab12")

    Raises:
        MalformedPrereleaseTag: If the string is not exactly `<digits>-<suffix>`
    """
    parts = prerelease.split('-')
    if len(parts) != 2:
        raise MalformedPrereleaseTag(f"wrong tag format: can't create dev prerelease from tag {prerelease}")

    distance, suffix = parts
    if not distance.isdigit() or not suffix:
        raise MalformedPrereleaseTag(f"can't create dev prerelease from tag {prerelease}")

    return int(distance), suffix


def format_label(count: int, mode: LabelingMode, head_short_id: str = '') -> str:
    """Render a development label for the given iteration count."""
    if mode == LabelingMode.NUMERIC:
        return f"dev{count}"
    if mode == LabelingMode.DOTTED:
        return f"dev.{count}"
    return f"dev.{count}.g{head_short_id}"


def render_label(existing_pre: Optional[str], mode: LabelingMode, is_dirty: bool,
                 head_short_id: str = '') -> str:
    """
    Build the development pre-release label for the next candidate version.

    A tag sitting exactly at HEAD has no pre-release and always yields the
    first iteration. Otherwise the describe commit distance is reused, plus
    one when the working tree carries uncommitted changes.

    Args:
        existing_pre: Pre-release of the latest tag version (empty when at HEAD)
        mode: Label grammar
        is_dirty: Whether tracked files have uncommitted modifications
        head_short_id: Abbreviated HEAD commit id, used by DOTTED_WITH_COMMIT

    Returns:
        str: Rendered label, e.g. "dev.2"

    Raises:
        MalformedPrereleaseTag: If existing_pre is not in describe format
    """
    if not existing_pre:
        return format_label(1, mode, head_short_id)

    count, _suffix = split_prerelease(existing_pre)
    if is_dirty:
        count += 1
    return format_label(count, mode, head_short_id)


def derive(latest_tag: semver.Version, declared: semver.Version, is_dirty: bool,
           relevant_changed: bool, mode: LabelingMode, head_short_id: str = '') -> Decision:
    """
    Decide whether the declared version must be bumped.

    Args:
        latest_tag: Version described from the nearest tag (may carry `<N>-g<sha>`)
        declared: Version currently declared in the manifest
        is_dirty: Whether tracked files have uncommitted modifications
        relevant_changed: Whether source files changed since the tag
        mode: Label grammar for the development pre-release
        head_short_id: Abbreviated HEAD commit id

    Returns:
        Decision: needs_bump is True when declared is strictly behind the candidate
    """
    if not is_dirty and not relevant_changed:
        return UP_TO_DATE

    candidate = semver.Version(
        major=latest_tag.major,
        minor=latest_tag.minor,
        patch=latest_tag.patch + 1,
        prerelease=render_label(latest_tag.prerelease, mode, is_dirty, head_short_id),
    )

    if declared < candidate:
        return Decision(needs_bump=True, candidate=candidate)
    return Decision(needs_bump=False, candidate=candidate)


def check_tags(declared: semver.Version, latest_tag: semver.Version, is_dirty: bool) -> None:
    """
    Verify that a declared release version has been tagged.

    A clean tree and a declared development pre-release are always accepted.
    A dirty tree on top of a release version newer than the latest tag is not.

    Raises:
        UntaggedRelease: If the declared release is ahead of the latest tag
    """
    if not is_dirty:
        return

    if declared.prerelease:
        return

    if latest_tag < declared:
        raise UntaggedRelease()
