from dataclasses import dataclass
from typing import Optional, Tuple
from pathlib import Path
import logging
import os
import re

# Builds from a git archive export may run where no git executable exists;
# GitPython must not fail on import there.
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

from git import Repo
from git.exc import (
    CommandError,
    GitCommandNotFound,
    InvalidGitRepositoryError,
    NoSuchPathError,
)

from .errors import NoMatchingTag, RepositoryUnavailable
from .models import RawTagMatch

log = logging.getLogger(__name__)

# `git describe --long` output: <tag>-<distance>-g<hash>
_LONG_DESCRIBE_PATTERN = re.compile(r"^(?P<tag>.+)-(?P<distance>\d+)-g[0-9a-f]+$")


def tag_match_glob(tag_prefix: str) -> str:
    """Glob passed to ``git describe --match`` for tags with the given prefix."""
    return f"{tag_prefix}[0-9]*.[0-9]*"


def _tag_version_pattern(tag_prefix: str) -> re.Pattern:
    return re.compile(
        rf"^(?:{re.escape(tag_prefix)})?(\d+)\.(\d+)(?:\.(\d+))?(?:-(\d+))?"
    )


def parse_tag_description(description: str, tag_prefix: str) -> RawTagMatch:
    """Parse ``git describe`` output into a RawTagMatch.

    Accepts both the long form (``v1.4.2-3-gabc1234``) and a plain
    ``<prefix>M.N[.P][-D]`` tag name. Missing patch and distance are 0.

    Args:
        description: Output of ``git describe`` or a tag name.
        tag_prefix: Tag prefix, e.g. ``v``. Optional in the parsed string.

    Returns:
        The parsed RawTagMatch.

    Raises:
        NoMatchingTag: If the string does not carry a version.
    """
    description = description.strip()
    distance = None
    tag = description

    long_match = _LONG_DESCRIBE_PATTERN.match(description)
    if long_match:
        tag = long_match.group("tag")
        distance = int(long_match.group("distance"))

    match = _tag_version_pattern(tag_prefix).match(tag)
    if not match:
        raise NoMatchingTag(f"'{description}' does not match '{tag_prefix}X.Y[.Z]'")

    major, minor, patch, tag_distance = match.groups()
    if distance is None:
        distance = int(tag_distance) if tag_distance else 0

    return RawTagMatch(
        major=int(major),
        minor=int(minor),
        patch=int(patch) if patch else 0,
        distance=distance,
        tag=tag,
    )


def open_repo(directory: str) -> Repo:
    """Open the git repository containing ``directory``.

    Raises:
        RepositoryUnavailable: If the directory does not exist, is not inside
            a git work tree, or git cannot be executed.
    """
    if not Path(directory).is_dir():
        raise RepositoryUnavailable(f"Directory not found: {directory}")
    try:
        return Repo(directory, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise RepositoryUnavailable(f"Not a git repository: {directory} ({e})")
    except GitCommandNotFound as e:
        raise RepositoryUnavailable(f"git executable not found: {e}")


def find_latest_tag(repo: Repo, tag_prefix: str) -> RawTagMatch:
    """Find the nearest ancestor tag with the given prefix.

    Args:
        repo: GitPython Repo instance.
        tag_prefix: Prefix of the tags to consider, e.g. ``v`` or ``rc-``.

    Returns:
        RawTagMatch with the tag's version and the commit distance to HEAD.

    Raises:
        NoMatchingTag: If no reachable tag matches.
    """
    try:
        description = repo.git.describe(
            "--tags", "--long", f"--match={tag_match_glob(tag_prefix)}", "HEAD"
        )
    except CommandError:
        raise NoMatchingTag(f"No tag matching '{tag_match_glob(tag_prefix)}'")
    return parse_tag_description(description, tag_prefix)


def count_commits(repo: Repo) -> int:
    """Number of commits reachable from HEAD.

    Raises:
        RepositoryUnavailable: If HEAD has no commits or git fails.
    """
    try:
        return int(repo.git.rev_list("--count", "HEAD"))
    except (CommandError, ValueError) as e:
        raise RepositoryUnavailable(f"Could not count commits: {e}")


def is_dirty(repo: Repo) -> bool:
    """True if tracked files have local modifications."""
    try:
        return repo.is_dirty(untracked_files=False)
    except (CommandError, ValueError) as e:
        log.debug(f"Could not check for local modifications: {e}")
        return False


def get_current_branch(repo: Repo) -> Optional[str]:
    """Name of the checked out branch, or None when HEAD is detached."""
    try:
        return repo.active_branch.name
    except TypeError:
        # Detached HEAD state
        return None


def get_hashes(repo: Repo) -> Tuple[str, str]:
    """Short and full hash of HEAD.

    Raises:
        RepositoryUnavailable: If HEAD does not point to a commit.
    """
    try:
        short_hash = repo.git.rev_parse("--short", "HEAD")
        full_hash = repo.head.commit.hexsha
    except (CommandError, ValueError) as e:
        raise RepositoryUnavailable(f"Could not fetch version hash: {e}")
    return short_hash.strip(), full_hash


@dataclass(frozen=True)
class RepositoryState:
    """Everything queried from a live repository in one resolution pass.

    Attributes:
        tag: Nearest version tag, or ``0.0.0`` with the total commit count as
            distance when no tag matches.
        rc_tag: Nearest RC-start tag, None if there is none.
        branch_name: Checked out branch, None when HEAD is detached.
        is_dirty: Whether tracked files have local modifications.
        short_hash: Short hash of HEAD, None if it could not be fetched.
        full_hash: Full hash of HEAD, None if it could not be fetched.
    """

    tag: RawTagMatch
    rc_tag: Optional[RawTagMatch]
    branch_name: Optional[str]
    is_dirty: bool
    short_hash: Optional[str]
    full_hash: Optional[str]

    @property
    def has_hashes(self) -> bool:
        return bool(self.short_hash) and bool(self.full_hash)


def scan_repository(
    directory: str, tag_prefix: str, rc_start_tag_prefix: str
) -> RepositoryState:
    """Query all version related state of the repository at ``directory``.

    Each query that fails falls back to a neutral value; only a missing
    repository is raised.

    Raises:
        RepositoryUnavailable: If there is no usable repository.
    """
    repo = open_repo(directory)

    try:
        tag = find_latest_tag(repo, tag_prefix)
        log.debug(f"Nearest version tag: {tag.tag} (distance {tag.distance})")
    except NoMatchingTag as e:
        log.debug(str(e))
        try:
            distance = count_commits(repo)
        except RepositoryUnavailable as count_error:
            log.debug(str(count_error))
            distance = 0
        tag = RawTagMatch(major=0, minor=0, patch=0, distance=distance)

    try:
        rc_tag = find_latest_tag(repo, rc_start_tag_prefix)
    except NoMatchingTag:
        rc_tag = None

    short_hash = full_hash = None
    try:
        short_hash, full_hash = get_hashes(repo)
    except RepositoryUnavailable as e:
        log.warning(f"Version-Info: {e}")

    return RepositoryState(
        tag=tag,
        rc_tag=rc_tag,
        branch_name=get_current_branch(repo),
        is_dirty=is_dirty(repo),
        short_hash=short_hash,
        full_hash=full_hash,
    )
