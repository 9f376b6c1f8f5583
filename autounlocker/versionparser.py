"""Version numbers and a parser for HTML version listings."""

from __future__ import annotations

import re
from enum import Enum
from functools import total_ordering
from typing import Iterator

from . import config

_VERSION_RE = re.compile(r"(\d+)\.(\d+)\.(\d+)", re.ASCII)
_LISTING_RE = re.compile(config.VERSION_REGEX_PATTERN, re.IGNORECASE)


class VersionError(ValueError):
    """Raised for a string that is not a version number."""


class VersionNumberType(Enum):
    MAJOR = "major"
    MINOR = "minor"
    REVISION = "revision"


@total_ordering
class Version:
    """A major.minor.revision version, compared numerically."""

    def __init__(self, text: str) -> None:
        match = _VERSION_RE.fullmatch(text)
        if match is None:
            raise VersionError("Not a valid version string")
        self.text = text
        self.major, self.minor, self.revision = (int(g) for g in match.groups())

    def number(self, kind: VersionNumberType = VersionNumberType.MAJOR) -> int:
        return {
            VersionNumberType.MAJOR: self.major,
            VersionNumberType.MINOR: self.minor,
            VersionNumberType.REVISION: self.revision,
        }[kind]

    def _key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.revision)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Version({self.text!r})"


class VersionParser:
    """Versions listed in an HTML page, one link per line, newest first."""

    def __init__(self, html: str) -> None:
        self.html = html
        versions = []
        for line in html.split("\n"):
            match = _LISTING_RE.fullmatch(line)
            if match is None:
                continue
            try:
                versions.append(Version(match.group(1)))
            except VersionError:
                continue
        self._versions = sorted(versions, reverse=True)

    def latest(self) -> Version:
        if not self._versions:
            raise IndexError("No elements in the list")
        return self._versions[0]

    def __iter__(self) -> Iterator[Version]:
        return iter(self._versions)

    def __len__(self) -> int:
        return len(self._versions)