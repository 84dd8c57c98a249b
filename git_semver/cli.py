"""
Command-line interface for git-semver.

Main entry point that wires configuration, repository queries, manifest
access and the version rules together into the `bump` and `check-tags`
gates. Both commands exit 0 when nothing needs doing and 1 otherwise.
"""

import os
import sys
import argparse
from typing import List, Optional

import git
import semver
from loguru import logger
from rich.console import Console

from . import __version__
from .config import Config, load_config, VALID_LOG_LEVELS, VERSION_SOURCES
from .errors import GitSemverError, VersionOutdated
from .logging_config import setup_logging
from .manifest import parse_manifest_version, read_manifest, write_manifest_version
from .repository import RepositoryQuery
from .versioning import Decision, MODE_CHOICES, check_tags, derive

# Gate results go to stdout, logs and errors to stderr
console = Console()
err_console = Console(stderr=True)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='git-semver',
        description='Derive development versions from git tags and check release tagging'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--log-level', type=str.upper, choices=VALID_LOG_LEVELS, help='Logging level (default: INFO)')

    subparsers = parser.add_subparsers(dest='command', required=True)

    bump = subparsers.add_parser('bump', help='Bump manifest version from latest tag')
    bump.add_argument('paths', nargs='*', help='Files passed by pre-commit (ignored)')
    bump.add_argument('--mode', type=str.lower, choices=MODE_CHOICES, help='Pre-release label grammar (default: dotted)')
    bump.add_argument('--dry-run', action='store_true', default=None, help='Report the new version without writing it')
    bump.add_argument('--manifest', help='Manifest holding the version field (default: Cargo.toml)')
    bump.add_argument('--extension', help='Source file extension that triggers a bump (default: rs, "" for any file)')
    bump.add_argument('--version-source', type=str.lower, choices=VERSION_SOURCES, help='Where to read the declared version from (default: index)')
    bump.add_argument('--tag-abbrev', type=int, help='Commit suffix abbreviation passed to git describe, 4-40 (default: 4)')
    bump.add_argument('--commit-id-length', type=int, help='Length of the HEAD id in dotted-with-commit labels (default: 5)')

    check = subparsers.add_parser('check-tags', help='Check if last release was tagged')
    check.add_argument('--manifest', help='Manifest holding the version field (default: Cargo.toml)')

    return parser.parse_args(argv)


def open_repository(config: Config) -> RepositoryQuery:
    """Discover the repository that contains the manifest."""
    manifest_dir = os.path.dirname(os.path.abspath(config.manifest_path))
    return RepositoryQuery.discover(manifest_dir)


def read_declared_version(query: RepositoryQuery, config: Config, revision: Optional[str] = None) -> semver.Version:
    """
    Read the version declared in the manifest.

    Args:
        query: Repository to read from
        config: Configuration object
        revision: Revision to read the manifest at; None follows config.version_source
    """
    if revision is None and config.version_source == 'worktree':
        contents = read_manifest(config.manifest_path)
    else:
        contents = query.read_file(config.manifest_path, revision=revision)

    version = parse_manifest_version(contents)
    logger.debug(f"Found manifest version {version}")
    return version


def relevant_files_changed(query: RepositoryQuery, tag_name: str, extension: Optional[str]) -> bool:
    """Check for source changes since the tag, assuming changes when the diff fails."""
    try:
        return query.files_changed_between(tag_name, 'HEAD', extension)
    except (git.BadName, ValueError, git.GitCommandError) as e:
        logger.warning(f"Could not diff {tag_name}..HEAD, assuming files changed: {e}")
        return True


def run_bump(config: Config, query: Optional[RepositoryQuery] = None, paths: Optional[List[str]] = None) -> Decision:
    """
    Run the bump gate.

    Args:
        config: Configuration object
        query: Repository to query (discovered from the manifest if None)
        paths: Filenames passed by pre-commit, only logged

    Returns:
        Decision: The up-to-date decision

    Raises:
        VersionOutdated: If a new version was needed (and written unless dry-run)
        GitSemverError: On any repository or manifest failure
    """
    if paths:
        logger.debug(f"Ignoring {len(paths)} path argument(s): {', '.join(paths)}")

    if query is None:
        query = open_repository(config)

    head_short_id = query.head_short_id(config.commit_id_length)
    logger.debug(f"repo HEAD is at {head_short_id}")

    latest_tag = query.latest_tag(config.tag_abbrev_length)
    logger.debug(f"Parsed git version {latest_tag.version} (tag {latest_tag.tag_name})")

    declared = read_declared_version(query, config)
    is_dirty = query.is_dirty(config.source_extension)
    changed = relevant_files_changed(query, latest_tag.tag_name, config.source_extension)

    decision = derive(latest_tag.version, declared, is_dirty, changed, config.mode, head_short_id)

    if decision.candidate is None:
        kind = f".{config.source_extension}" if config.source_extension else "tracked"
        console.print(f"No {kind} files changed since last tag {latest_tag.tag_name}", markup=False, highlight=False)
        return decision

    if not decision.needs_bump:
        console.print(f"Version number {declared} is up-to-date", markup=False, highlight=False)
        return decision

    if config.dry_run:
        console.print(f"Created version number {decision.candidate} (dry-run)", markup=False, highlight=False)
    else:
        console.print(f"Created version number {decision.candidate}", markup=False, highlight=False)
        manifest_path = os.path.join(query.working_dir, query.relative_path(config.manifest_path))
        write_manifest_version(manifest_path, decision.candidate)

    raise VersionOutdated(declared, decision.candidate)


def run_check_tags(config: Config, query: Optional[RepositoryQuery] = None) -> None:
    """
    Run the tag consistency gate against the manifest committed at HEAD.

    Raises:
        UntaggedRelease: If a release version sits untagged under new changes
        GitSemverError: On any repository or manifest failure
    """
    if query is None:
        query = open_repository(config)

    if not query.is_dirty():
        console.print("No changes detected", markup=False, highlight=False)
        return

    declared = read_declared_version(query, config, revision='HEAD')
    latest_tag = query.latest_tag(0)
    logger.debug(f"Current repo version {latest_tag.version}")

    check_tags(declared, latest_tag.version, is_dirty=True)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the application."""
    # Set up logging with default level first
    setup_logging(console=err_console)

    args = parse_arguments(argv)
    if args.log_level:
        setup_logging(args.log_level, console=err_console)

    config = load_config(args)
    if config is None:
        sys.exit(1)

    setup_logging(config.log_level, console=err_console)

    try:
        if args.command == 'bump':
            run_bump(config, paths=args.paths)
        else:
            run_check_tags(config)
    except GitSemverError as e:
        err_console.print(str(e), markup=False, highlight=False)
        sys.exit(1)

    sys.exit(0)


if __name__ == '__main__':
    main()
