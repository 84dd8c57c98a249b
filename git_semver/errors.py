"""
Error types for git-semver.

Every failure the CLI can report derives from GitSemverError so that
the entry point can turn it into a single error line and exit code 1.
"""


class GitSemverError(Exception):
    """Base exception for all git-semver failures."""
    pass


class RepositoryNotFound(GitSemverError):
    """No git repository could be discovered from the given path."""
    pass


class TagLookupFailed(GitSemverError):
    """No tag is reachable from HEAD or `git describe` failed."""
    pass


class VersionParseFailed(GitSemverError):
    """A manifest or tag string is not a valid semantic version."""
    pass


class MalformedPrereleaseTag(GitSemverError):
    """The tag pre-release does not match the `<count>-<suffix>` describe format."""
    pass


class ManifestIoFailed(GitSemverError):
    """The manifest could not be read or written."""
    pass


class UntaggedRelease(GitSemverError):
    """A release version was declared but never tagged before new changes."""

    def __init__(self, message: str = "Please tag the release commit before adding new changes."):
        super().__init__(message)


class VersionOutdated(GitSemverError):
    """The declared version is behind the version derived from the repository."""

    def __init__(self, declared, candidate):
        super().__init__(
            f"Manifest version `{declared}` is not up-to-date with repo `{candidate}`"
        )
        self.declared = declared
        self.candidate = candidate
