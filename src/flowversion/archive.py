"""Version information for builds from exported sources.

Sources exported with ``git archive`` have no history, so two files can stand
in for the live repository:

1. The export-info file. It is committed with ``$Format:...$`` placeholders
   and marked ``export-subst`` in ``.gitattributes``, so ``git archive``
   replaces them with the hash and ref names of the exported commit. It is
   consulted when the live query produced no hashes.

2. The archive record. A complete resolved record written just before the
   export (``flowversion export-record``) with the same ``VERSION_*`` keys as
   the regular output. A successful record is used as-is.
"""

from pathlib import Path
from typing import Union
import json
import logging

from .errors import ArchiveSnapshotMissing
from .models import FallbackSnapshot, VersionComponents

log = logging.getLogger(__name__)

PathLike = Union[str, Path]

EXPORT_INFO_TEMPLATE = """\
# Version information substituted by 'git archive' (export-subst).
# Do not edit; read by flowversion when building without git history.
shorthash: $Format:%h$
fullhash: $Format:%H$
branch: $Format:%D$
"""

UNSUBSTITUTED_MARKER = "Format:"
GITATTRIBUTES_FILE = ".gitattributes"
JSON_INDENT = 2


def _read_export_fields(path: Path) -> dict:
    fields = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or ":" not in line:
            continue
        key, value = line.split(":", 1)
        fields[key.strip().lower()] = value.strip()
    return fields


def load_snapshot(path: PathLike) -> FallbackSnapshot:
    """Load the export-info file written by ``git archive``.

    Args:
        path: Path to the export-info file.

    Returns:
        The snapshot of the exported commit.

    Raises:
        ArchiveSnapshotMissing: If the file is absent, unreadable, was never
            substituted (the sources are a checkout, not an export), or lacks
            the hashes.
    """
    path = Path(path)
    if not path.is_file():
        raise ArchiveSnapshotMissing(f"No export info file at {path}")

    try:
        fields = _read_export_fields(path)
    except (OSError, UnicodeDecodeError) as e:
        raise ArchiveSnapshotMissing(f"Cannot read {path}: {e}")

    short_hash = fields.get("shorthash", "")
    full_hash = fields.get("fullhash", "")
    branch = fields.get("branch", "")

    if UNSUBSTITUTED_MARKER in short_hash or UNSUBSTITUTED_MARKER in full_hash:
        raise ArchiveSnapshotMissing(f"{path} was not substituted by git archive")
    if not short_hash or not full_hash:
        raise ArchiveSnapshotMissing(f"{path} has no commit hashes")
    if UNSUBSTITUTED_MARKER in branch:
        branch = ""

    return FallbackSnapshot(
        short_hash=short_hash, full_hash=full_hash, branch_descriptor=branch
    )


def write_export_info(directory: PathLike, filename: str) -> Path:
    """Write the export-info template and register it in .gitattributes.

    Args:
        directory: Repository root.
        filename: Export-info file name, relative to ``directory``.

    Returns:
        Path of the written export-info file.
    """
    directory = Path(directory)
    path = directory / filename
    path.write_text(EXPORT_INFO_TEMPLATE, encoding="utf-8")

    attributes_path = directory / GITATTRIBUTES_FILE
    entry = f"{filename} export-subst"
    existing = (
        attributes_path.read_text(encoding="utf-8").splitlines()
        if attributes_path.exists()
        else []
    )
    if entry not in (line.strip() for line in existing):
        existing.append(entry)
        attributes_path.write_text("\n".join(existing) + "\n", encoding="utf-8")
        log.info(f"Added '{entry}' to {attributes_path}")

    return path


def load_archive_record(path: PathLike) -> VersionComponents:
    """Load a pre-computed record written by ``write_archive_record``.

    Raises:
        ArchiveSnapshotMissing: If the file is absent or not a valid record.
    """
    path = Path(path)
    if not path.is_file():
        raise ArchiveSnapshotMissing(f"No archive record at {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ArchiveSnapshotMissing(f"Cannot read archive record {path}: {e}")

    if not isinstance(data, dict):
        raise ArchiveSnapshotMissing(f"Archive record {path} must be a JSON object")

    try:
        return VersionComponents.from_dict(data)
    except ValueError as e:
        raise ArchiveSnapshotMissing(f"Invalid archive record {path}: {e}")


def write_archive_record(path: PathLike, components: VersionComponents) -> Path:
    path = Path(path)
    data = components.to_dict()
    data["VERSION_CATEGORY"] = components.category.value
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=JSON_INDENT)
        f.write("\n")
    return path
