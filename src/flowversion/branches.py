"""Git-flow branch classification.

Branch names are mapped to a ``BranchCategory``:

- the master branch (``master``)                    -> MASTER
- names starting with the release prefix (``release/1.3``) -> RELEASE
- names starting with the hotfix prefix (``hotfix/1.2.1``)  -> HOTFIX
- anything else (``develop``, ``feature/x``)        -> OTHER
- no name at all                                    -> UNKNOWN

Release and hotfix branches may carry the version they are preparing in their
name, which is extracted as an ``X.Y[.Z]`` triple.
"""

from typing import Iterable, Optional
import logging
import re

from .errors import BranchUndetermined, MalformedBranchVersion
from .models import BranchCategory, BranchInfo, VersionTriple

log = logging.getLogger(__name__)

DETACHED_HEAD = "HEAD"


def classify(
    branch_name: Optional[str],
    release_prefix: str,
    hotfix_prefix: str,
    master_branch: str = "master",
) -> BranchCategory:
    if not branch_name:
        return BranchCategory.UNKNOWN
    if branch_name == master_branch:
        return BranchCategory.MASTER
    if release_prefix and branch_name.startswith(release_prefix):
        return BranchCategory.RELEASE
    if hotfix_prefix and branch_name.startswith(hotfix_prefix):
        return BranchCategory.HOTFIX
    return BranchCategory.OTHER


def extract_embedded_version(branch_name: str, prefix: str) -> VersionTriple:
    """Extract the first ``X.Y[.Z]`` after ``prefix`` in a branch name.

    Examples:
        release/0.8     -> 0.8.0
        hotfix/v2.0.3   -> 2.0.3

    Raises:
        MalformedBranchVersion: If the name carries no version.
    """
    match = re.match(rf"^{re.escape(prefix)}.*?(\d+)\.(\d+)(?:\.(\d+))?", branch_name)
    if not match:
        raise MalformedBranchVersion(f"No X.Y[.Z] in branch name '{branch_name}'")
    major, minor, patch = match.groups()
    return VersionTriple(int(major), int(minor), int(patch) if patch else 0)


def resolve_branch_name(
    live_name: Optional[str], fallback_branch: Optional[str] = None
) -> str:
    """Pick the branch name to classify.

    A detached HEAD has no name; the ``FALLBACK_BRANCH`` hint is used instead
    (CI systems commonly check out a commit and export the branch name).

    Raises:
        BranchUndetermined: If HEAD is detached and there is no hint.
    """
    if live_name and live_name != DETACHED_HEAD:
        return live_name
    if fallback_branch:
        log.debug(f"Detached HEAD, using fallback branch '{fallback_branch}'")
        return fallback_branch
    raise BranchUndetermined("HEAD is detached and no fallback branch is set")


def classify_branch(
    branch_name: Optional[str],
    release_prefix: str,
    hotfix_prefix: str,
    master_branch: str = "master",
) -> BranchInfo:
    """Classify a branch and extract its embedded version where it applies."""
    category = classify(branch_name, release_prefix, hotfix_prefix, master_branch)

    embedded_version = None
    if category in (BranchCategory.RELEASE, BranchCategory.HOTFIX):
        prefix = release_prefix if category == BranchCategory.RELEASE else hotfix_prefix
        try:
            embedded_version = extract_embedded_version(branch_name, prefix)
        except MalformedBranchVersion as e:
            log.debug(str(e))

    return BranchInfo(
        name=branch_name, category=category, embedded_version=embedded_version
    )


def _strip_remote(ref: str, remotes: Iterable[str]) -> str:
    for remote in remotes:
        if ref.startswith(f"{remote}/"):
            return ref[len(remote) + 1 :]
    return ref


def parse_branch_descriptor(
    descriptor: Optional[str], remotes: Iterable[str] = ("origin",)
) -> Optional[str]:
    """Extract a branch name from a ``%D`` ref list of an archive export.

    Examples:
        "HEAD -> master, origin/master"          -> "master"
        "HEAD, origin/release/1.2"               -> "release/1.2"
        "tag: v1.0, origin/hotfix/1.0.1"         -> "hotfix/1.0.1"
        "HEAD", "tag: v1.0", ""                  -> None

    Args:
        descriptor: Comma separated ref names as substituted by ``git archive``.
        remotes: Remote names whose prefix is stripped from remote refs.

    Returns:
        The branch name, or None if the descriptor names no branch.
    """
    if not descriptor:
        return None

    refs = [ref.strip() for ref in descriptor.split(",") if ref.strip()]

    for ref in refs:
        if "->" in ref:
            target = ref.split("->", 1)[1].strip()
            if target:
                return _strip_remote(target, remotes)

    for ref in refs:
        if ref == DETACHED_HEAD or ref.startswith("tag:"):
            continue
        return _strip_remote(ref, remotes)

    return None
