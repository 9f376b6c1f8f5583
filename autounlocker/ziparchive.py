"""Extraction of single files from zip archives."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Callable, Optional, Union

_BUFFER_SIZE = 16 * 1024

ProgressCallback = Callable[[float], None]


class ZipError(RuntimeError):
    """Raised when an archive cannot be opened or output cannot be written."""


class ZipArchive:
    """An open zip archive, read only."""

    def __init__(self, zip_file: Union[str, Path]) -> None:
        self.zip_file = str(zip_file)
        try:
            self._zip = zipfile.ZipFile(zip_file, "r")
        except (OSError, zipfile.BadZipFile) as exc:
            raise ZipError(f"Error while opening {self.zip_file}") from exc

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "ZipArchive":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def extract(
        self,
        file_name: str,
        to: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> bool:
        """Extract ``file_name`` to ``to``; False if it is missing or unreadable."""
        try:
            info = self._zip.getinfo(file_name)
        except KeyError:
            return False

        try:
            member = self._zip.open(info)
        except (RuntimeError, zipfile.BadZipFile, NotImplementedError):
            return False

        with member:
            try:
                out = open(to, "wb")
            except OSError as exc:
                raise ZipError(f"Can't open the file {to} for writing") from exc
            with out:
                elapsed = 0
                while chunk := member.read(_BUFFER_SIZE):
                    out.write(chunk)
                    elapsed += len(chunk)
                    if progress_callback is not None:
                        progress_callback(elapsed / info.file_size)
        return True