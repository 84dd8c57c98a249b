"""
git-semver

Derives development versions from git tags and guards release tagging.
Intended to run as a pre-commit or CI gate.
"""

from ._version import __version__

__description__ = "Derive semantic versions from git history and enforce release tagging"
