"""
Entry point for python -m git_semver

Allows running the package as a module:
    python -m git_semver bump --mode dotted
"""

from .cli import main

if __name__ == '__main__':
    main()
