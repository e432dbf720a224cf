from typing import Any, Dict, List, Optional, Tuple
import click

from .config import FlowVersionConfig, VersionConfig
from .errors import ConfigurationError
from .models import VersionComponents
from .resolver import resolve_version


class AppContext:
    def __init__(self):
        self.config: FlowVersionConfig = FlowVersionConfig()

    def get_target_config(
        self, name: Optional[str] = None, **overrides: Any
    ) -> VersionConfig:
        """Target configuration with CLI options layered on top.

        Raises:
            click.ClickException: If the target or an option is invalid.
        """
        try:
            return self.config.for_target(name).with_overrides(**overrides)
        except ConfigurationError as e:
            raise click.ClickException(str(e))

    def target_name(self, name: Optional[str] = None) -> str:
        """Name of the one target a single-target command works on.

        Raises:
            click.ClickException: If no name is given and several targets
                are configured.
        """
        if name:
            return name
        names = self.config.target_names()
        if len(names) > 1:
            raise click.ClickException(
                f"Several targets configured, name one of: {', '.join(names)}"
            )
        return names[0]

    def resolve(
        self, names: Tuple[str, ...] = (), **overrides: Any
    ) -> Dict[str, VersionComponents]:
        """Resolve the named targets, or all configured ones, in order."""
        target_names: List[str] = list(names) or self.config.target_names()
        versions = {}
        for name in target_names:
            config = self.get_target_config(name, **overrides)
            try:
                versions[name] = resolve_version(config)
            except ConfigurationError as e:
                raise click.ClickException(str(e))
        return versions
