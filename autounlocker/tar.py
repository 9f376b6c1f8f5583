"""Reader for POSIX tar archives that extracts single regular files."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, List, Optional, Union

TAR_BLOCK_SIZE = 512
_EXTRACT_BUFFER_SIZE = 16 * 1024
_OCTAL_RE = re.compile(rb"[ \t\n\v\f\r]*([+-]?[0-7]+)")

ProgressCallback = Callable[[float], None]


class TarError(RuntimeError):
    """Raised when an archive cannot be read or an entry cannot be extracted."""


class TarTypeFlag(str, Enum):
    REGTYPE = "0"
    AREGTYPE = "\0"
    LNKTYPE = "1"
    SYMTYPE = "2"
    CHRTYPE = "3"
    BLKTYPE = "4"
    DIRTYPE = "5"
    FIFOTYPE = "6"
    CONTTYPE = "7"
    XHDTYPE = "x"
    XGLTYPE = "g"


@dataclass(frozen=True)
class TarEntry:
    """One member of a tar archive; ``position`` is the offset of its data."""

    name: str
    mode: int
    owner_id: int
    group_id: int
    size: int
    last_modified: int
    typeflag: Union[TarTypeFlag, str]
    position: int
    linked_name: str = ""


def _c_string(field: bytes) -> str:
    return field.split(b"\0", 1)[0].decode("utf-8", "surrogateescape")


def _parse_octal(field: bytes) -> int:
    match = _OCTAL_RE.match(field.split(b"\0", 1)[0])
    return int(match.group(1), 8) if match else 0


def _parse_size(field: bytes) -> int:
    if field[0] in (0xFF, 0x80):
        raise TarError("base-256 file size not supported.")
    return _parse_octal(field)


def _type_flag(raw: bytes) -> Union[TarTypeFlag, str]:
    char = raw.decode("latin-1")
    try:
        return TarTypeFlag(char)
    except ValueError:
        return char


class TarArchive:
    """An open tar archive with its list of members."""

    def __init__(self, filename: Union[str, Path]) -> None:
        self.filename = str(filename)
        try:
            self._file: BinaryIO = open(filename, "rb")
        except OSError as exc:
            raise TarError(f"Couldn't open {self.filename}") from exc
        try:
            self._entries: List[TarEntry] = list(self._scan())
            self._file.seek(0)
        except BaseException:
            self._file.close()
            raise

    def _scan(self) -> Iterator[TarEntry]:
        while True:
            header = self._file.read(TAR_BLOCK_SIZE)
            if len(header) != TAR_BLOCK_SIZE:
                return
            chksum_field = header[148:156]
            checksum = sum(header) - sum(chksum_field) + 8 * ord(" ")
            if checksum != _parse_octal(chksum_field):
                continue
            entry = TarEntry(
                name=_c_string(header[0:100]),
                mode=_parse_octal(header[100:108]),
                owner_id=_parse_octal(header[108:116]),
                group_id=_parse_octal(header[116:124]),
                size=_parse_size(header[124:136]),
                last_modified=_parse_octal(header[136:148]),
                typeflag=_type_flag(header[156:157]),
                position=self._file.tell(),
                linked_name=_c_string(header[157:257]),
            )
            yield entry
            blocks = -(-entry.size // TAR_BLOCK_SIZE)
            self._file.seek(blocks * TAR_BLOCK_SIZE, 1)

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "TarArchive":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def files(self) -> List[TarEntry]:
        """All members in archive order."""
        return list(self._entries)

    def extract_entry(
        self,
        entry: TarEntry,
        to: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        """Write the data of a regular-file member to ``to``."""
        if entry.name.endswith("/"):
            raise TarError("Can't extract a directory. Operation not supported")
        if entry.typeflag not in (TarTypeFlag.REGTYPE, TarTypeFlag.AREGTYPE):
            raise TarError("Can't extract this type of file. Only regular files supported")

        self._file.seek(entry.position)
        try:
            out = open(to, "wb")
        except OSError as exc:
            raise TarError(f"Error while opening {to} for writing") from exc

        with out:
            remaining = entry.size
            while remaining > 0:
                to_copy = min(_EXTRACT_BUFFER_SIZE, remaining)
                out.write(self._file.read(to_copy))
                if progress_callback is not None:
                    progress_callback((entry.size - remaining) / entry.size)
                remaining -= to_copy

    def extract(
        self,
        file_name: str,
        to: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> bool:
        """Extract the first member named ``file_name``; False if there is none."""
        for entry in self._entries:
            if entry.name == file_name:
                self.extract_entry(entry, to, progress_callback)
                return True
        return False

    def contains(self, file_name: str) -> bool:
        return any(entry.name == file_name for entry in self._entries)

    def search(self, term: str) -> List[TarEntry]:
        """Members whose name contains ``term``."""
        return [entry for entry in self._entries if term in entry.name]