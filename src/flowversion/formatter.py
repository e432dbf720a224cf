"""Canonical version string.

The string is used by Debian and RPM packaging, so the punctuation rules must
not change:

- ``MAJOR.MINOR``, followed by ``.PATCH`` only when the patch is not 0
- ``-FLAG`` unless this is a master build with distance 0
- ``.`` after a non-empty flag
- ``DISTANCE`` under the same condition as the flag

    master, v1.4.0, distance 0  -> 1.4
    master, v1.4.2, distance 3  -> 1.4.2-3
    develop, v1.4.0, distance 7 -> 1.5-alpha.7
    release/2.0, rc distance 12 -> 2.0-rc.12
"""

from dataclasses import replace

from .models import BranchCategory, VersionComponents


def render(components: VersionComponents) -> str:
    version = f"{components.major}.{components.minor}"
    if components.patch != 0:
        version += f".{components.patch}"

    with_distance = not (
        components.category == BranchCategory.MASTER and components.distance == 0
    )
    if with_distance:
        version += f"-{components.flag}"
        if components.flag:
            version += "."
        version += str(components.distance)

    return version


def finalize(components: VersionComponents) -> VersionComponents:
    """Return a copy of ``components`` with ``version_string`` rendered."""
    return replace(components, version_string=render(components))
