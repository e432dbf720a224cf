"""Version handling for flowversion.

The version is primarily obtained from package metadata. When running from a
source checkout without installation, it falls back to ``git describe`` on the
surrounding repository.
"""

from importlib.metadata import version, PackageNotFoundError
from pathlib import Path


def get_version() -> str:
    """Get the flowversion version.

    Returns:
        Version string, e.g., "0.3.1", "v0.3.1-5-g1234abc", or "unknown" if the
        version cannot be determined.
    """
    try:
        return version("flowversion")
    except PackageNotFoundError:
        # Development mode without install - try git describe
        return _get_version_from_git()


def _get_version_from_git() -> str:
    """Get version from ``git describe --tags --dirty --always``.

    Returns:
        Version string from git describe, or "unknown" if git is not available
        or the command fails.
    """
    from .errors import RepositoryUnavailable
    from .git_utils import open_repo
    from git.exc import CommandError

    try:
        repo = open_repo(str(Path(__file__).parent))
        return repo.git.describe("--tags", "--dirty", "--always").strip()
    except (RepositoryUnavailable, CommandError):
        return "unknown"


# Module-level version string for convenience
__version__ = get_version()
