"""Semantic versions for git-flow repositories.

Example usage:
    from flowversion import VersionConfig, resolve_version

    components = resolve_version(VersionConfig(directory="."))
    components.version_string       # "1.5-alpha.7"
    components.to_dict()            # {"VERSION_MAJOR": 1, ...}
"""

from .config import FlowVersionConfig, VersionConfig, load_config
from .errors import (
    ArchiveSnapshotMissing,
    BranchUndetermined,
    ConfigurationError,
    FlowVersionError,
    MalformedBranchVersion,
    NoMatchingTag,
    RepositoryUnavailable,
)
from .formatter import render
from .models import (
    BranchCategory,
    BranchInfo,
    FallbackSnapshot,
    RawTagMatch,
    VersionComponents,
    VersionTriple,
)
from .resolver import resolve_targets, resolve_version
