"""
Read-only git queries used by the version gate.

Wraps GitPython so the rest of the package deals in plain values: the
latest reachable tag as a TagVersion, dirty flags filtered by
file extension, and manifest contents read from the worktree, the index
or a given revision.
"""

import os
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterable, Optional

import git
import semver
from loguru import logger

from .errors import ManifestIoFailed, RepositoryNotFound, TagLookupFailed
from .manifest import parse_version_string


@dataclass(frozen=True)
class TagVersion:
    """Nearest reachable tag as reported by `git describe`."""

    tag_name: str
    version: semver.Version


def matches_extension(path: Optional[str], extension: Optional[str]) -> bool:
    """Check whether path carries the given extension (None matches everything)."""
    if not path:
        return False
    if not extension:
        return True
    return PurePosixPath(path).suffix == f".{extension.lstrip('.')}"


class RepositoryQuery:
    """Read-only view of a git repository."""

    def __init__(self, repo: git.Repo):
        self.repo = repo

    @classmethod
    def discover(cls, path: str = '.') -> 'RepositoryQuery':
        """
        Open the repository containing path, searching parent directories.

        Raises:
            RepositoryNotFound: If path is not inside a git working tree
        """
        try:
            repo = git.Repo(path, search_parent_directories=True)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
            raise RepositoryNotFound(f"Error opening repository at {path}: {e}") from e

        if repo.bare:
            raise RepositoryNotFound(f"Repository at {path} has no working tree")

        logger.debug(f"Opened repository at {repo.git_dir}")
        return cls(repo)

    @property
    def working_dir(self) -> str:
        return self.repo.working_tree_dir

    def relative_path(self, path: str) -> str:
        """Convert a filesystem path into a repository-relative posix path."""
        rel_path = os.path.relpath(os.path.realpath(path), os.path.realpath(self.working_dir))
        return PurePosixPath(*rel_path.split(os.sep)).as_posix()

    def head_short_id(self, length: int = 5) -> str:
        """Abbreviated hex id of the HEAD commit."""
        try:
            return self.repo.head.commit.hexsha[:length]
        except ValueError as e:
            raise TagLookupFailed(f"could not resolve HEAD: {e}") from e

    def describe(self, abbrev_length: int) -> str:
        """
        Run `git describe --tags` for HEAD.

        Raises:
            TagLookupFailed: If no tag is reachable or describe fails
        """
        try:
            description = self.repo.git.describe('--tags', f'--abbrev={abbrev_length}')
        except git.GitCommandError as e:
            raise TagLookupFailed(f"could not get tag: {e}") from e

        logger.debug(f"Found git version string {description}")
        return description.strip()

    def latest_tag(self, abbrev_length: int = 4) -> TagVersion:
        """
        Describe the nearest tag reachable from HEAD.

        Args:
            abbrev_length: Abbreviation length for the commit suffix; 0 returns the bare tag

        Returns:
            TagVersion: Bare tag name plus the parsed (possibly suffixed) version

        Raises:
            TagLookupFailed: If no tag is reachable
            VersionParseFailed: If the tag is not a semantic version
        """
        tag_name = self.describe(0)
        description = tag_name if abbrev_length == 0 else self.describe(abbrev_length)
        version = parse_version_string(description, source='git tag')
        return TagVersion(tag_name=tag_name, version=version)

    def _changed_paths(self, diffs: Iterable) -> Iterable[str]:
        for diff in diffs:
            for path in (diff.a_path, diff.b_path):
                if path:
                    yield path

    def is_dirty(self, extension: Optional[str] = None) -> bool:
        """
        Check for tracked changes, staged or not.

        Untracked and ignored files never count.

        Args:
            extension: Only consider files with this extension (None for all)
        """
        index = self.repo.index
        paths = set(self._changed_paths(index.diff(None)))
        if self.repo.head.is_valid():
            paths.update(self._changed_paths(index.diff(self.repo.head.commit)))

        dirty = any(matches_extension(path, extension) for path in paths)
        logger.debug(f"Working tree dirty={dirty} (extension filter: {extension or 'none'})")
        return dirty

    def files_changed_between(self, old_revision: str, new_revision: str = 'HEAD',
                              extension: Optional[str] = None) -> bool:
        """
        Check whether files with the extension differ between two revisions.

        Raises:
            git.BadName, ValueError, git.GitCommandError: If a revision cannot be resolved
        """
        old_tree = self.repo.commit(old_revision).tree
        new_tree = self.repo.commit(new_revision).tree

        for path in self._changed_paths(old_tree.diff(new_tree)):
            if matches_extension(path, extension):
                logger.debug(f"{path} changed between {old_revision} and {new_revision}")
                return True
        return False

    def read_file(self, path: str, revision: Optional[str] = None, stage: int = 0) -> str:
        """
        Read a tracked file's content.

        Args:
            path: Filesystem path of the file inside the working tree
            revision: Revision to read from (e.g. "HEAD"), or None for the index
            stage: Index stage used when revision is None

        Raises:
            ManifestIoFailed: If the file is missing at that revision or stage
        """
        rel_path = self.relative_path(path)
        where = 'index' if revision is None else revision
        try:
            if revision is None:
                blob = self.repo.index.entries[(rel_path, stage)].to_blob(self.repo)
            else:
                blob = self.repo.commit(revision).tree / rel_path
            data = blob.data_stream.read()
        except (KeyError, ValueError, git.BadName, git.GitCommandError) as e:
            raise ManifestIoFailed(f"Error reading {rel_path} from {where}: {e}") from e

        logger.debug(f"Read {rel_path} from {where}")
        try:
            return data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ManifestIoFailed(f"Error decoding {rel_path}: {e}") from e
