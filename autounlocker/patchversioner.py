"""Marker file recording when and with which version the patch was applied."""

from __future__ import annotations

import re
import time
from pathlib import Path
from typing import Union

from . import config

_FIELD_SIZE = 256
_RECORD_SIZE = 2 * _FIELD_SIZE
_INT_RE = re.compile(r"\s*([+-]?\d+)")


class PatchVersionerError(RuntimeError):
    """Raised when the marker file cannot be written."""


def _field(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", "replace")


class PatchVersioner:
    """The patch marker file inside an install directory."""

    def __init__(self, install_path: Union[str, Path]) -> None:
        self.version_file = Path(install_path) / config.PATCH_VER_FILE
        self._timestamp = ""
        self._version = ""
        self._has_patch = False
        try:
            with open(self.version_file, "rb") as handle:
                raw = handle.read(_RECORD_SIZE)
        except OSError:
            return
        self._load(raw)
        self._has_patch = True

    def _load(self, raw: bytes) -> None:
        raw = raw.ljust(_RECORD_SIZE, b"\0")
        self._timestamp = _field(raw[:_FIELD_SIZE])
        self._version = _field(raw[_FIELD_SIZE:_RECORD_SIZE])

    def patch_time(self) -> int:
        """Seconds since the epoch at which the patch was written, or 0."""
        match = _INT_RE.match(self._timestamp)
        return int(match.group(1)) if match else 0

    def patch_version(self) -> str:
        return self._version

    def has_patch(self) -> bool:
        """Whether a marker file existed when this object was created."""
        return self._has_patch

    def write_patch_data(self) -> None:
        """Write the marker with the current time and program version."""
        timestamp = str(int(time.time())).encode("ascii")
        version = config.PROG_VERSION.encode("utf-8")
        record = timestamp.ljust(_FIELD_SIZE, b"\0") + version.ljust(_FIELD_SIZE, b"\0")
        try:
            with open(self.version_file, "wb") as handle:
                handle.write(record)
        except OSError as exc:
            raise PatchVersionerError(
                f"Can't open version file for writing at: {self.version_file}"
            ) from exc
        self._load(record)

    def remove_patch_version(self) -> None:
        self.version_file.unlink(missing_ok=True)