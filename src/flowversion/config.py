"""Configuration file support for flowversion.

This module handles loading and parsing the .flowversion.yaml configuration
file and turning it into one immutable ``VersionConfig`` per build target.

Example:

    tags:
      prefix: v
      rc_start_prefix: rc-

    branches:
      master: master
      release_prefix: release
      hotfix_prefix: hotfix
      remotes: [origin]

    flags:
      alpha: alpha
      rc: rc

    targets:
      app:
        directory: .
      app-legacy:
        directory: .
        custom_version: 80.11.4
        fallback_version_type: develop
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple
import logging
import os
import yaml

from .errors import ConfigurationError
from .models import VersionTriple

log = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = ".flowversion.yaml"
DEFAULT_TARGET = "default"
FALLBACK_BRANCH_ENV = "FALLBACK_BRANCH"
FALLBACK_VERSION_TYPES = ("release", "develop")


@dataclass(frozen=True)
class VersionConfig:
    """Everything a single resolution pass needs.

    Attributes:
        directory: Directory to query git from. Required.
        tag_prefix: Prefix of final version tags (e.g. ``v`` for ``v1.2.0``).
        rc_start_tag_prefix: Prefix of tags marking the start of a release
            candidate cycle (e.g. ``rc-`` for ``rc-1.3``).
        master_branch: Name of the production branch.
        release_branch_prefix: Prefix of release branches (``release/1.3``).
        hotfix_branch_prefix: Prefix of hotfix branches (``hotfix/1.2.1``).
        alpha_flag: Pre-release identifier for development builds.
        rc_flag: Pre-release identifier for release and hotfix builds.
        fallback_branch: Branch name to use when HEAD is detached.
        custom_version: Minimum version; used when greater than the resolved one.
        fallback_version_type: ``release`` to build as master when the branch
            cannot be determined at all.
        remotes: Remote names stripped from refs in archive branch descriptors.
        export_info_file: Export-subst file, relative to ``directory``.
        archive_record_file: Pre-computed record file, relative to ``directory``.
    """

    directory: str = "."
    tag_prefix: str = "v"
    rc_start_tag_prefix: str = "rc-"
    master_branch: str = "master"
    release_branch_prefix: str = "release"
    hotfix_branch_prefix: str = "hotfix"
    alpha_flag: str = "alpha"
    rc_flag: str = "rc"
    fallback_branch: Optional[str] = None
    custom_version: Optional[VersionTriple] = None
    fallback_version_type: Optional[str] = None
    remotes: Tuple[str, ...] = ("origin",)
    export_info_file: str = ".flowversion-export"
    archive_record_file: str = ".flowversion-archive.json"

    def __post_init__(self):
        if not self.directory:
            raise ConfigurationError("Required option 'directory' is not set")
        if (
            self.fallback_version_type is not None
            and self.fallback_version_type not in FALLBACK_VERSION_TYPES
        ):
            raise ConfigurationError(
                f"fallback_version_type must be one of {', '.join(FALLBACK_VERSION_TYPES)}, "
                f"got '{self.fallback_version_type}'"
            )

    @property
    def export_info_path(self) -> Path:
        return Path(self.directory) / self.export_info_file

    @property
    def archive_record_path(self) -> Path:
        return Path(self.directory) / self.archive_record_file

    def with_overrides(self, **overrides: Any) -> "VersionConfig":
        """Return a copy with the given non-None values replaced.

        Used to layer CLI options on top of file configuration.
        """
        values = {key: value for key, value in overrides.items() if value is not None}
        if "custom_version" in values:
            values["custom_version"] = _parse_version_option(values["custom_version"])
        return replace(self, **values)


@dataclass
class FlowVersionConfig:
    """Configuration settings loaded from .flowversion.yaml.

    Attributes:
        base: Settings shared by all targets.
        targets: Per-target settings keyed by target name.
        _raw: Raw dictionary data.
    """

    base: VersionConfig = field(default_factory=VersionConfig)
    targets: Dict[str, VersionConfig] = field(default_factory=dict)
    _raw: Dict[str, Any] = field(default_factory=dict)

    def target_names(self) -> List[str]:
        return list(self.targets) or [DEFAULT_TARGET]

    def for_target(self, name: Optional[str] = None) -> VersionConfig:
        """Get the configuration of a target.

        Args:
            name: Target name, or None for the default target.

        Returns:
            The target's VersionConfig, or the base config for the default target.

        Raises:
            ConfigurationError: If the target is not configured.
        """
        if name is None or (name == DEFAULT_TARGET and name not in self.targets):
            return self.base
        if name not in self.targets:
            raise ConfigurationError(f"Unknown target '{name}'")
        return self.targets[name]

    @classmethod
    def from_dict(
        cls, data: dict, environ: Optional[Dict[str, str]] = None
    ) -> "FlowVersionConfig":
        """Create a FlowVersionConfig from a dictionary.

        Args:
            data: Dictionary with configuration values.
            environ: Environment to read FALLBACK_BRANCH from, defaults to os.environ.

        Returns:
            FlowVersionConfig with values from data, using defaults for missing keys.

        Raises:
            ConfigurationError: If a section or value is invalid.
        """
        environ = os.environ if environ is None else environ

        tags = _section(data, "tags")
        branches = _section(data, "branches")
        flags = _section(data, "flags")
        archive = _section(data, "archive")

        defaults = VersionConfig()
        remotes = branches.get("remotes", list(defaults.remotes))
        if isinstance(remotes, str):
            remotes = [remotes]

        base = _build_config(
            directory=str(data.get("directory", defaults.directory)),
            tag_prefix=str(tags.get("prefix", defaults.tag_prefix)),
            rc_start_tag_prefix=str(
                tags.get("rc_start_prefix", defaults.rc_start_tag_prefix)
            ),
            master_branch=str(branches.get("master", defaults.master_branch)),
            release_branch_prefix=str(
                branches.get("release_prefix", defaults.release_branch_prefix)
            ),
            hotfix_branch_prefix=str(
                branches.get("hotfix_prefix", defaults.hotfix_branch_prefix)
            ),
            alpha_flag=str(flags.get("alpha", defaults.alpha_flag)),
            rc_flag=str(flags.get("rc", defaults.rc_flag)),
            fallback_branch=environ.get(FALLBACK_BRANCH_ENV) or None,
            custom_version=_parse_version_option(data.get("custom_version")),
            fallback_version_type=data.get("fallback_version_type"),
            remotes=tuple(str(remote) for remote in remotes),
            export_info_file=str(
                archive.get("export_info_file", defaults.export_info_file)
            ),
            archive_record_file=str(
                archive.get("record_file", defaults.archive_record_file)
            ),
        )

        targets = {}
        for name, target_data in _section(data, "targets").items():
            target_data = target_data or {}
            if not isinstance(target_data, dict):
                raise ConfigurationError(f"Target '{name}' must be a mapping")
            directory = target_data.get("directory")
            targets[str(name)] = base.with_overrides(
                directory=str(directory) if directory is not None else None,
                custom_version=target_data.get("custom_version"),
                fallback_version_type=target_data.get("fallback_version_type"),
            )

        return cls(base=base, targets=targets, _raw=data)


def _section(data: dict, name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping")
    return section


def _build_config(**values: Any) -> VersionConfig:
    try:
        return VersionConfig(**values)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(str(e))


def _parse_version_option(value: Any) -> Optional[VersionTriple]:
    try:
        return VersionTriple.from_value(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid custom_version: {e}")


def load_config(
    config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None
) -> FlowVersionConfig:
    """Load configuration from a YAML file.

    If config_path is explicitly provided and the file doesn't exist, raises an error.
    If config_path is None and the default .flowversion.yaml doesn't exist, returns
    default config.

    Args:
        config_path: Path to the config file, or None to use the default path.
        environ: Environment mapping, defaults to os.environ.

    Returns:
        FlowVersionConfig instance with loaded or default values.

    Raises:
        ConfigurationError: If an explicit config file is missing, contains
            invalid YAML or invalid values.
    """
    explicit_path = config_path is not None
    path = Path(config_path) if config_path else Path(DEFAULT_CONFIG_PATH)

    if not path.exists():
        if explicit_path:
            raise ConfigurationError(f"Config file not found: {path}")
        log.debug(f"No config file at {path}, using defaults")
        return FlowVersionConfig.from_dict({}, environ)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {path}: {e}")

    # Handle empty file or file with only comments
    if data is None:
        return FlowVersionConfig.from_dict({}, environ)

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a YAML mapping (dictionary)"
        )

    return FlowVersionConfig.from_dict(data, environ)
