"""
Pytest configuration and shared fixtures for test suite.

Provides throwaway git repositories with a tagged manifest, plus a
config factory pointing at them.
"""

import os
import pytest
import git

from git_semver.config import Config
from git_semver.versioning import LabelingMode


CARGO_CONTENTS = '[package]\nname = "test package"\nversion = "0.1.0"\n'


def write_file(repo: git.Repo, name: str, contents: str) -> str:
    """Write a file into the repository working tree and return its path."""
    path = os.path.join(repo.working_tree_dir, name)
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(contents)
    return path


def commit_files(repo: git.Repo, names, message: str) -> None:
    """Stage the given files and commit them."""
    repo.index.add(list(names))
    repo.index.commit(message)


@pytest.fixture
def empty_repo(tmp_path):
    """Create a repository with a single empty initial commit and no tags."""
    repo = git.Repo.init(tmp_path)
    with repo.config_writer() as writer:
        writer.set_value('user', 'name', 'name')
        writer.set_value('user', 'email', 'email@example.com')
    repo.index.commit('initial\n\nbody')
    yield repo
    repo.close()


@pytest.fixture
def git_repo(empty_repo):
    """Create a repository with eight .rs files and a Cargo.toml tagged 0.1.0."""
    names = []
    for n in range(8):
        name = f'f{n}.rs'
        write_file(empty_repo, name, name)
        names.append(name)
    write_file(empty_repo, 'Cargo.toml', CARGO_CONTENTS)
    names.append('Cargo.toml')

    commit_files(empty_repo, names, 'another commit')
    empty_repo.create_tag('0.1.0', message='initial version')
    return empty_repo


@pytest.fixture
def manifest_path(git_repo):
    """Return the path of the tagged repository's Cargo.toml."""
    return os.path.join(git_repo.working_tree_dir, 'Cargo.toml')


@pytest.fixture
def make_config(manifest_path):
    """Return a factory building Config objects for the tagged repository."""
    def _make(**overrides):
        values = dict(
            manifest_path=manifest_path,
            version_source='index',
            source_extension=None,
            mode=LabelingMode.DOTTED,
            dry_run=False,
            tag_abbrev_length=4,
            commit_id_length=5,
            log_level='DEBUG',
        )
        values.update(overrides)
        return Config(**values)
    return _make
