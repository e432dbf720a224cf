"""One resolution pass: repository or archive data in, version record out.

Order of sources:

1. The live repository (tags, branch, hashes, dirty state).
2. If the live query produced no hashes, a successful archive record next
   to the sources is used as-is.
3. Otherwise the export-info snapshot supplies hashes and branch.
4. Otherwise every field keeps its placeholder (``unknown`` / 0).

Every failure on the way is recoverable and logged; only an invalid
configuration raises.
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Optional
import logging

from . import archive
from .branches import classify_branch, parse_branch_descriptor, resolve_branch_name
from .composer import compose, merge_override
from .config import FlowVersionConfig, VersionConfig
from .errors import (
    ArchiveSnapshotMissing,
    BranchUndetermined,
    ConfigurationError,
    RepositoryUnavailable,
)
from .formatter import finalize
from .git_utils import RepositoryState, scan_repository
from .models import UNKNOWN, FallbackSnapshot, RawTagMatch, VersionComponents

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Sources:
    tag: RawTagMatch
    rc_tag: Optional[RawTagMatch]
    branch_name: Optional[str]
    is_dirty: bool
    short_hash: str
    full_hash: str
    success: bool


def _load_record(config: VersionConfig) -> Optional[VersionComponents]:
    try:
        record = archive.load_archive_record(config.archive_record_path)
    except ArchiveSnapshotMissing as e:
        log.debug(str(e))
        return None
    if not record.success:
        log.debug("Ignoring archive record without version information")
        return None
    log.info("Version information from archive record.")
    if not record.version_string:
        record = finalize(record)
    return record


def _scan(config: VersionConfig) -> Optional[RepositoryState]:
    try:
        return scan_repository(
            config.directory, config.tag_prefix, config.rc_start_tag_prefix
        )
    except RepositoryUnavailable as e:
        log.warning(f"Version-Info: {e}. Possible incomplete version information.")
        return None


def _load_snapshot(config: VersionConfig) -> Optional[FallbackSnapshot]:
    try:
        snapshot = archive.load_snapshot(config.export_info_path)
    except ArchiveSnapshotMissing as e:
        log.debug(str(e))
        return None
    log.info("Using archive export info as fallback for version info.")
    return snapshot


def _gather(config: VersionConfig, state: Optional[RepositoryState]) -> _Sources:
    snapshot = None
    if state is None or not state.has_hashes:
        snapshot = _load_snapshot(config)

    if snapshot is not None:
        return _Sources(
            tag=state.tag if state else RawTagMatch(major=0, minor=0),
            rc_tag=state.rc_tag if state else None,
            branch_name=parse_branch_descriptor(
                snapshot.branch_descriptor, config.remotes
            ),
            is_dirty=False,
            short_hash=snapshot.short_hash,
            full_hash=snapshot.full_hash,
            success=True,
        )

    if state is None:
        return _Sources(
            tag=RawTagMatch(major=0, minor=0),
            rc_tag=None,
            branch_name=None,
            is_dirty=False,
            short_hash=UNKNOWN,
            full_hash=UNKNOWN,
            success=False,
        )

    try:
        branch_name = resolve_branch_name(state.branch_name, config.fallback_branch)
    except BranchUndetermined as e:
        log.warning(f"Version-Info: {e}")
        branch_name = None

    return _Sources(
        tag=state.tag,
        rc_tag=state.rc_tag,
        branch_name=branch_name,
        is_dirty=state.is_dirty,
        short_hash=state.short_hash or UNKNOWN,
        full_hash=state.full_hash or UNKNOWN,
        success=state.has_hashes,
    )


def resolve_version(config: VersionConfig) -> VersionComponents:
    """Resolve the version record for one target.

    Args:
        config: Target configuration.

    Returns:
        The resolved, immutable VersionComponents with ``version_string`` set.

    Raises:
        ConfigurationError: If no configuration or directory is given.
    """
    if config is None or not config.directory:
        raise ConfigurationError("Required option 'directory' is not set")

    state = _scan(config)
    if state is None or not state.has_hashes:
        record = _load_record(config)
        if record is not None:
            return record

    sources = _gather(config, state)

    branch = classify_branch(
        sources.branch_name,
        config.release_branch_prefix,
        config.hotfix_branch_prefix,
        config.master_branch,
    )
    components = compose(
        branch,
        sources.tag,
        rc_tag=sources.rc_tag,
        alpha_flag=config.alpha_flag,
        rc_flag=config.rc_flag,
        fallback_version_type=config.fallback_version_type,
    )
    components = merge_override(components, config.custom_version)
    components = finalize(
        replace(
            components,
            is_dirty=sources.is_dirty,
            short_hash=sources.short_hash,
            full_hash=sources.full_hash,
            success=sources.success,
        )
    )

    if not components.success:
        log.warning(
            "Version-Info: Failure during version retrieval. "
            "Possible incomplete version information!"
        )
    log.debug(f"Version info for '{config.directory}': {components.version_string}")
    return components


def resolve_targets(
    config: FlowVersionConfig, names: Optional[Iterable[str]] = None
) -> Dict[str, VersionComponents]:
    """Resolve several targets, one independent pass each, in order.

    Raises:
        ConfigurationError: If a named target is not configured.
    """
    names = list(names) if names else config.target_names()
    return {name: resolve_version(config.for_target(name)) for name in names}
