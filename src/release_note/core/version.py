"""Semantic version parsing and bumping.

Versions follow ``MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]`` with an
optional leading ``v`` (as found in tags like ``v1.2.3``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import total_ordering

from release_note.exceptions import VersionParseError

SEMVER_PATTERN = re.compile(
    r"^[vV]?"
    r"(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


class BumpType(str, Enum):
    """Kind of version increment."""

    NONE = "none"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    def __str__(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        return _BUMP_RANK[self]


_BUMP_RANK = {
    BumpType.NONE: 0,
    BumpType.PATCH: 1,
    BumpType.MINOR: 2,
    BumpType.MAJOR: 3,
}


def _prerelease_key(prerelease: str | None) -> tuple:
    # A release sorts after any of its pre-releases.
    if prerelease is None:
        return (1,)
    parts = []
    for identifier in prerelease.split("."):
        if identifier.isdigit():
            parts.append((0, int(identifier), ""))
        else:
            parts.append((1, 0, identifier))
    return (0, tuple(parts))


@total_ordering
@dataclass(frozen=True)
class Version:
    """An immutable semantic version.

    Build metadata is carried for display but ignored for precedence.
    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a version string.

        Raises:
            VersionParseError: If the string is not a semantic version
        """
        match = SEMVER_PATTERN.match(value.strip())
        if not match:
            raise VersionParseError(value)

        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease"),
            build=match.group("build"),
        )

    @classmethod
    def initial(cls) -> Version:
        """The implicit version before a first release."""
        return cls(0, 0, 0)

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for ``bump_type``.

        Pre-release and build metadata are dropped by any real bump.
        """
        if bump_type == BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type == BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type == BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self

    def _key(self) -> tuple:
        return (self.major, self.minor, self.patch, _prerelease_key(self.prerelease))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        if self.build:
            version += f"+{self.build}"
        return version


def parse_version(value: str | Version | None) -> Version:
    """Coerce a caller-supplied previous version.

    ``None``, an empty string or ``"none"`` mean there is no previous
    release and resolve to ``0.0.0``.

    Raises:
        VersionParseError: If a string value is not a semantic version
    """
    if isinstance(value, Version):
        return value
    if value is None or value.strip().lower() in ("", "none"):
        return Version.initial()
    return Version.parse(value)


def is_version_tag(tag: str, prefix: str = "v") -> bool:
    """Check whether a tag name is a semantic version with ``prefix``."""
    if prefix and tag.startswith(prefix):
        tag = tag[len(prefix) :]
    return SEMVER_PATTERN.match(tag) is not None
