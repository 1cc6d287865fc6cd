"""Semantic version parsing and ordering.

Follows SemVer 2.0 precedence: numeric core first, then a version without a
pre-release outranks one with it, then pre-release identifiers are compared
left to right (numeric < alphanumeric, numeric compared as integers, shorter
list loses when all shared identifiers are equal). Build metadata is kept but
never affects ordering.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass

# 1.2.3, v1.2.3, =1.2.3, 1.2.3-beta.1+build.5
_SEMVER_RE = re.compile(
    r"^[v=]?\s*(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


class InvalidVersionError(ValueError):
    """Raised when a string is not a valid semantic version."""


@functools.total_ordering
@dataclass(frozen=True)
class SemVer:
    """A parsed semantic version."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    @classmethod
    def parse(cls, version_str: str) -> SemVer:
        """Parse ``version_str`` or raise :class:`InvalidVersionError`."""
        if not isinstance(version_str, str):
            raise InvalidVersionError(f"Invalid version: {version_str!r}")
        m = _SEMVER_RE.match(version_str.strip())
        if m is None:
            raise InvalidVersionError(f"Invalid version: {version_str!r}")
        pre = m.group("pre")
        build = m.group("build")
        return cls(
            major=int(m.group("major")),
            minor=int(m.group("minor")),
            patch=int(m.group("patch")),
            prerelease=tuple(pre.split(".")) if pre else (),
            build=tuple(build.split(".")) if build else (),
        )

    def _key(self) -> tuple:
        # A release sorts above all of its pre-releases
        if not self.prerelease:
            pre_key: tuple = ((1,),)
        else:
            pre_key = ((0,), *(_identifier_key(part) for part in self.prerelease))
        return (self.major, self.minor, self.patch, pre_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: SemVer) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


def _identifier_key(part: str) -> tuple[int, int, str]:
    if part.isdigit():
        return (0, int(part), "")
    return (1, 0, part)


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1 as *left* sorts below, equal to or above *right*.

    Raises :class:`InvalidVersionError` if either side is malformed.
    """
    a = SemVer.parse(left)
    b = SemVer.parse(right)
    if a == b:
        return 0
    return 1 if a > b else -1


def is_newer(candidate: str, current: str) -> bool:
    """Return True if *candidate* is a strictly newer semver than *current*.

    Raises :class:`InvalidVersionError` if either side is malformed.
    """
    return compare_versions(candidate, current) > 0
