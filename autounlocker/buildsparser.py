"""Parser for HTML build listings."""

from __future__ import annotations

import re
from typing import Iterator

from . import config

_LISTING_RE = re.compile(config.VERSION_REGEX_PATTERN, re.IGNORECASE)


class BuildsParser:
    """Build names listed in an HTML page, one link per line, in page order."""

    def __init__(self, html: str) -> None:
        self.html = html
        self._builds = [
            match.group(1)
            for match in map(_LISTING_RE.fullmatch, html.split("\n"))
            if match is not None
        ]

    def latest(self) -> str:
        if not self._builds:
            raise IndexError("No elements in the list")
        return self._builds[0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._builds)

    def __len__(self) -> int:
        return len(self._builds)