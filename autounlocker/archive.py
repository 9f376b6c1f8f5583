"""Archive extraction helpers that log failures instead of raising."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from . import log
from .tar import TarArchive
from .ziparchive import ZipArchive

PathLike = Union[str, Path]


def extraction_progress(progress: float) -> None:
    """Print extraction progress on a single terminal line."""
    print(f"Extraction progress: {progress * 100:.0f} %  ", end="\r", flush=True)


def extract_tar(source: PathLike, filename: str, to: PathLike) -> bool:
    """Extract ``filename`` from the tar at ``source`` to ``to``."""
    try:
        with TarArchive(source) as archive:
            if not archive.extract(filename, to, extraction_progress):
                log.error("TAR: Error while extracting %s. Not in the archive", filename)
                return False
    except Exception as exc:
        log.error("TAR: An error occurred while extracting %s. %s", str(source), exc)
        return False
    print()
    return True


def extract_zip(source: PathLike, filename: str, to: PathLike) -> bool:
    """Extract ``filename`` from the zip at ``source`` to ``to``."""
    try:
        with ZipArchive(source) as archive:
            if not archive.extract(filename, to, extraction_progress):
                log.error("ZIP: Error while extracting %s. Not in the archive", filename)
                return False
    except Exception as exc:
        log.error("ZIP: An error occurred while extracting %s. %s", str(source), exc)
        return False
    print()
    return True