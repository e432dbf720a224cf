"""Data models for version resolution.

The models are plain frozen dataclasses. Every stage of a resolution pass
takes them as input and returns new instances, so a resolved
``VersionComponents`` can be handed to a template or serialized without any
risk of it changing afterwards.

Example usage:
    tag = RawTagMatch(major=1, minor=4, patch=2, distance=3)
    tag.version                      # VersionTriple(1, 4, 2)
    VersionTriple.parse("80.11.4") > tag.version  # True

    components.to_dict()["VERSION_STRING"]  # "1.4.2-3"
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Dict, Optional
import re

UNKNOWN = "unknown"
NOT_WITHIN_GIT_REPO = "not-within-git-repo"

_TRIPLE_PATTERN = re.compile(r"^\s*(\d+)(?:\.(\d+))?(?:\.(\d+))?\s*$")


class BranchCategory(StrEnum):
    """Git-flow classification of the branch a build is made from."""

    MASTER = "master"
    RELEASE = "release"
    HOTFIX = "hotfix"
    OTHER = "other"
    UNKNOWN = "unknown"


@dataclass(frozen=True, order=True)
class VersionTriple:
    """A ``major.minor.patch`` triple, ordered lexicographically."""

    major: int = 0
    minor: int = 0
    patch: int = 0

    def __post_init__(self):
        for name in ("major", "minor", "patch"):
            if getattr(self, name) < 0:
                raise ValueError(f"Version {name} must not be negative")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @classmethod
    def parse(cls, value: str) -> "VersionTriple":
        """Parse ``X``, ``X.Y`` or ``X.Y.Z``; missing parts are 0.

        Raises:
            ValueError: If the value is not a dotted numeric version.
        """
        match = _TRIPLE_PATTERN.match(str(value))
        if not match:
            raise ValueError(f"Invalid version '{value}', expected X.Y.Z")
        return cls(*(int(part) if part else 0 for part in match.groups()))

    @classmethod
    def from_value(cls, value: Any) -> Optional["VersionTriple"]:
        """Build a triple from a string, a mapping or a sequence.

        Used for config values, where ``custom_version`` may be written as
        ``"80.11.4"``, ``{major: 80, minor: 11, patch: 4}`` or ``[80, 11, 4]``.
        """
        if value is None or value == "":
            return None
        if isinstance(value, VersionTriple):
            return value
        if isinstance(value, dict):
            return cls(
                major=int(value.get("major", 0) or 0),
                minor=int(value.get("minor", 0) or 0),
                patch=int(value.get("patch", 0) or 0),
            )
        if isinstance(value, (list, tuple)):
            parts = [int(part) for part in value][:3]
            return cls(*parts)
        return cls.parse(str(value))


@dataclass(frozen=True)
class RawTagMatch:
    """Version and distance parsed from the nearest matching tag.

    Attributes:
        major: Major version from the tag name.
        minor: Minor version from the tag name.
        patch: Patch version, 0 when the tag has none.
        distance: Commits between the tag and HEAD, 0 when HEAD is tagged.
        tag: The tag name, if known.
    """

    major: int
    minor: int
    patch: int = 0
    distance: int = 0
    tag: Optional[str] = None

    @property
    def version(self) -> VersionTriple:
        return VersionTriple(self.major, self.minor, self.patch)


@dataclass(frozen=True)
class BranchInfo:
    """Result of classifying a branch name.

    Attributes:
        name: Branch name, or None if it could not be determined.
        category: The git-flow category of the branch.
        embedded_version: ``X.Y[.Z]`` found in a release or hotfix branch name.
    """

    name: Optional[str]
    category: BranchCategory
    embedded_version: Optional[VersionTriple] = None


@dataclass(frozen=True)
class FallbackSnapshot:
    """Commit data substituted by ``git archive`` into the export-info file."""

    short_hash: str
    full_hash: str
    branch_descriptor: str


@dataclass(frozen=True)
class VersionComponents:
    """The resolved version record.

    Every field is always populated; unresolved values use ``"unknown"`` or
    ``0``. ``success`` tells whether the hash fields are trustworthy.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    flag: str = UNKNOWN
    distance: int = 0
    is_dirty: bool = False
    short_hash: str = UNKNOWN
    full_hash: str = UNKNOWN
    branch: str = UNKNOWN
    success: bool = False
    category: BranchCategory = BranchCategory.UNKNOWN
    version_string: str = ""

    @property
    def version(self) -> VersionTriple:
        return VersionTriple(self.major, self.minor, self.patch)

    def to_dict(self) -> Dict[str, Any]:
        """Return the record handed to templates and code generators."""
        return {
            "VERSION_MAJOR": self.major,
            "VERSION_MINOR": self.minor,
            "VERSION_PATCH": self.patch,
            "VERSION_FLAG": self.flag,
            "VERSION_DISTANCE": self.distance,
            "VERSION_SHORTHASH": self.short_hash,
            "VERSION_FULLHASH": self.full_hash,
            "VERSION_STRING": self.version_string,
            "VERSION_ISDIRTY": self.is_dirty,
            "VERSION_BRANCH": self.branch,
            "VERSION_SUCCESS": self.success,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionComponents":
        """Create a record from the ``VERSION_*`` keys written by ``to_dict``.

        ``VERSION_CATEGORY`` is optional. Without it a record with an empty
        flag is treated as a master build.

        Raises:
            ValueError: If a numeric field is not an integer.
        """
        flag = str(data.get("VERSION_FLAG", UNKNOWN))
        category = data.get("VERSION_CATEGORY")
        if category:
            category = BranchCategory(category)
        else:
            category = BranchCategory.MASTER if flag == "" else BranchCategory.OTHER

        return cls(
            major=int(data.get("VERSION_MAJOR", 0)),
            minor=int(data.get("VERSION_MINOR", 0)),
            patch=int(data.get("VERSION_PATCH", 0)),
            flag=flag,
            distance=int(data.get("VERSION_DISTANCE", 0)),
            is_dirty=_to_bool(data.get("VERSION_ISDIRTY", False)),
            short_hash=str(data.get("VERSION_SHORTHASH", UNKNOWN)),
            full_hash=str(data.get("VERSION_FULLHASH", UNKNOWN)),
            branch=str(data.get("VERSION_BRANCH", UNKNOWN)),
            success=_to_bool(data.get("VERSION_SUCCESS", False)),
            category=category,
            version_string=str(data.get("VERSION_STRING", "")),
        )


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
