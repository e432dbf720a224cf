"""Template loading and rendering utilities for flowversion.

This module renders resolved version records with the Jinja2 templates from
the flowversion.templates package, and serializes them as JSON or as shell
style ``KEY=value`` assignments.
"""

import json
import re
from typing import Any, Dict, Optional
from jinja2 import Environment, PackageLoader

from .config import DEFAULT_TARGET
from .models import VersionComponents
from .output import OutputFormat


def _create_jinja_env() -> Environment:
    """Create and configure the Jinja2 environment.

    Returns:
        Configured Jinja2 Environment with custom filters.
    """
    env = Environment(
        loader=PackageLoader("flowversion", "templates"),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )

    env.filters["yes_no"] = lambda value: "yes" if value else "no"
    env.filters["or_none"] = lambda value: value if value else "(none)"

    return env


_jinja_env: Optional[Environment] = None


def get_jinja_env() -> Environment:
    """Get the global Jinja2 environment (creates it if needed)."""
    global _jinja_env
    if _jinja_env is None:
        _jinja_env = _create_jinja_env()
    return _jinja_env


def render_template(format: str, name: str, **context: Any) -> str:
    """Render ``<format>/<name>.jinja2`` with the given context.

    Raises:
        TemplateNotFound: If the template file doesn't exist.
    """
    template = get_jinja_env().get_template(f"{format}/{name}.jinja2")
    return template.render(**context)


def env_prefix(target: str) -> str:
    """Variable prefix for a target, a valid C/shell identifier."""
    prefix = re.sub(r"[^A-Za-z0-9_]", "_", target).upper()
    if prefix and prefix[0].isdigit():
        prefix = f"_{prefix}"
    return prefix


def to_env(record: Dict[str, Any], prefix: str = "") -> str:
    """Render a record as ``KEY=value`` lines. Booleans become 0/1."""
    lines = []
    for key, value in record.items():
        if isinstance(value, bool):
            value = int(value)
        name = f"{prefix}_{key}" if prefix else key
        lines.append(f"{name}={value}")
    return "\n".join(lines) + "\n"


def render_versions(
    format: str,
    versions: Dict[str, VersionComponents],
    pretty: bool = True,
    default_target: str = DEFAULT_TARGET,
) -> str:
    """Render resolved versions in the requested output format.

    Args:
        format: One of the OutputFormat values.
        versions: Resolved records keyed by target name.
        pretty: For JSON, whether to indent.
        default_target: Target rendered without name or prefix when it is the
            only one.

    Returns:
        The formatted output string.
    """
    single = len(versions) == 1 and default_target in versions

    if format == OutputFormat.JSON.value:
        if single:
            data = versions[default_target].to_dict()
        else:
            data = {name: version.to_dict() for name, version in versions.items()}
        return json.dumps(data, indent=2 if pretty else None) + "\n"

    if format == OutputFormat.ENV.value:
        return "".join(
            to_env(version.to_dict(), "" if single else env_prefix(name))
            for name, version in versions.items()
        )

    return render_template(
        format,
        "versions",
        versions=[(name, version.to_dict()) for name, version in versions.items()],
        show_names=not single,
    )
