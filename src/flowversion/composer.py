"""Version rules per branch category.

``compose`` is the single place where the version number, pre-release flag
and distance are derived. It does not care whether its inputs came from a
live repository or from an archive snapshot.

Rules (``M.m.p`` is the nearest version tag, ``0.0.0`` without one):

==========  =======================================  =========  ===========================
category    version                                  flag       distance
==========  =======================================  =========  ===========================
master      M.m.p                                    ""         commits since tag
release     branch version if greater than M.m.p,    rc         commits since RC-start tag,
            else M.(m+1).0                                      else since version tag
hotfix      branch version if greater than M.m.p,    rc         as release
            else M.m.(p+1)
other       M.(m+1).0                                alpha      commits since tag
unknown     0.0.0, or as master with a ``release``   unknown    0
            fallback version type
==========  =======================================  =========  ===========================

A release or hotfix branch without a version in its name uses ``M.(m+1).0``
as its candidate.
"""

from dataclasses import replace
from typing import Optional
import logging

from .models import (
    NOT_WITHIN_GIT_REPO,
    UNKNOWN,
    BranchCategory,
    BranchInfo,
    RawTagMatch,
    VersionComponents,
    VersionTriple,
)

log = logging.getLogger(__name__)

FALLBACK_TYPE_RELEASE = "release"


def _next_minor(version: VersionTriple) -> VersionTriple:
    return VersionTriple(version.major, version.minor + 1, 0)


def _next_patch(version: VersionTriple) -> VersionTriple:
    return VersionTriple(version.major, version.minor, version.patch + 1)


def release_version(
    category: BranchCategory,
    tag_version: VersionTriple,
    embedded_version: Optional[VersionTriple],
) -> VersionTriple:
    """Version of a release or hotfix build."""
    candidate = embedded_version or _next_minor(tag_version)
    if candidate > tag_version:
        return candidate
    if category == BranchCategory.HOTFIX:
        return _next_patch(tag_version)
    return _next_minor(tag_version)


def compose(
    branch: BranchInfo,
    tag: RawTagMatch,
    rc_tag: Optional[RawTagMatch] = None,
    alpha_flag: str = "alpha",
    rc_flag: str = "rc",
    fallback_version_type: Optional[str] = None,
) -> VersionComponents:
    """Apply the category rules.

    Args:
        branch: Classified branch.
        tag: Nearest version tag (``0.0.0`` with the total commit count as
            distance when the repository has no matching tag).
        rc_tag: Nearest RC-start tag, if any.
        alpha_flag: Flag for development builds.
        rc_flag: Flag for release and hotfix builds.
        fallback_version_type: ``release`` to build an undetermined branch
            as master.

    Returns:
        VersionComponents with version, flag, distance, category and branch
        set. Hash, dirty and success fields keep their defaults.
    """
    category = branch.category
    version = tag.version
    distance = tag.distance
    branch_name = branch.name or NOT_WITHIN_GIT_REPO

    if category == BranchCategory.UNKNOWN:
        if fallback_version_type == FALLBACK_TYPE_RELEASE:
            log.debug("Branch undetermined, building as release")
            category = BranchCategory.MASTER
        else:
            return VersionComponents(
                flag=UNKNOWN,
                distance=0,
                branch=branch_name,
                category=BranchCategory.UNKNOWN,
            )

    if category == BranchCategory.MASTER:
        flag = ""
    elif category in (BranchCategory.RELEASE, BranchCategory.HOTFIX):
        flag = rc_flag
        version = release_version(category, version, branch.embedded_version)
        if rc_tag is not None:
            distance = rc_tag.distance
    else:
        flag = alpha_flag
        version = _next_minor(version)

    return VersionComponents(
        major=version.major,
        minor=version.minor,
        patch=version.patch,
        flag=flag,
        distance=distance,
        branch=branch_name,
        category=category,
    )


def merge_override(
    components: VersionComponents, override: Optional[VersionTriple]
) -> VersionComponents:
    """Raise the version to ``override`` if it is strictly greater.

    Only major, minor and patch change; flag and distance are kept.
    """
    if override is None or not override > components.version:
        return components
    log.debug(f"Custom version {override} overrules {components.version}")
    return replace(
        components, major=override.major, minor=override.minor, patch=override.patch
    )
