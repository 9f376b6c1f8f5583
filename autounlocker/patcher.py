"""Binary patching of SMC key tables, guest OS tables and ELF relocations."""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass, replace
from pathlib import Path
from typing import BinaryIO, ClassVar, Optional, Tuple, Union

from . import config, log

PathLike = Union[str, Path]
Source = Union[bytes, bytearray, memoryview, BinaryIO]

_KEY_STRUCT = struct.Struct("<4sB4sB6xQ")
_KEY_STRIDE = 72
_ELF_CLASS64 = 2
_SHT_RELA = 4
_SECTION_HEADER = struct.Struct("<IIQQQQIIQQ")
_RELA = struct.Struct("<QQq")
_MASK64 = (1 << 64) - 1
_DARWIN_RE = re.compile(config.DARWIN_REGEX)
_ROT13 = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz",
    "NOPQRSTUVWXYZABCDEFGHIJKLMnopqrstuvwxyzabcdefghijklm",
)


class PatchError(RuntimeError):
    """Raised when a file cannot be patched."""


@dataclass(frozen=True)
class SmcKey:
    """The 24-byte header of one SMC key table entry."""

    name: bytes
    length: int
    data_type: bytes
    attributes: int
    pointer: int

    SIZE: ClassVar[int] = _KEY_STRUCT.size

    @classmethod
    def from_bytes(cls, raw: bytes) -> "SmcKey":
        """Decode a header; a short buffer is padded with zeros."""
        return cls(*_KEY_STRUCT.unpack(bytes(raw[: cls.SIZE]).ljust(cls.SIZE, b"\0")))

    def to_bytes(self) -> bytes:
        return _KEY_STRUCT.pack(
            self.name, self.length, self.data_type, self.attributes, self.pointer
        )


def rot13(text: str) -> str:
    """Rotate ASCII letters by 13 places, leaving everything else alone."""
    return text.translate(_ROT13)


def hex_representation(value: Union[int, bytes, bytearray, str]) -> str:
    """An integer as 0x plus 16 hex digits, or bytes as space-terminated hex pairs."""
    if isinstance(value, int):
        return f"0x{value & _MASK64:016x}"
    data = value.encode("utf-8") if isinstance(value, str) else bytes(value)
    return "".join(f"{byte:02x} " for byte in data)


def _to_signed64(value: int) -> int:
    value &= _MASK64
    return value - (1 << 64) if value >= 1 << 63 else value


def _read_all(source: Source) -> bytes:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    source.seek(0)
    return source.read()


def search_for_offset(data: Source, sequence: bytes, start: int = 0) -> Optional[int]:
    """First offset of ``sequence`` at or after ``start``.

    Nothing is found when ``start`` is at or past the last position where
    the sequence could begin.
    """
    memory = _read_all(data)
    if start >= len(memory) - len(sequence):
        return None
    found = memory.find(sequence, start)
    return None if found < 0 else found


def search_for_last_offset(data: Source, sequence: bytes) -> Optional[int]:
    """Offset of the last occurrence of ``sequence``."""
    memory = _read_all(data)
    if not sequence:
        return None
    found = memory.rfind(sequence)
    return None if found < 0 else found


def format_key(index: int, offset: int, key: SmcKey, data: bytes) -> str:
    """One line describing a key table entry, for debug output."""
    name = key.name[::-1].decode("latin-1")
    data_type = key.data_type[::-1].replace(b"\0", b" ").decode("latin-1")
    return (
        f"{index + 1:03d} {hex_representation(offset)} {name} {key.length:02d} "
        f"{data_type} 0x{key.attributes:02x} {hex_representation(key.pointer)} "
        f"{hex_representation(data)}"
    )


def _open_for_patch(path: Path) -> BinaryIO:
    try:
        return open(path, "r+b")
    except OSError as exc:
        raise PatchError(f"Couldn't open file {path}") from exc


def _require(value: Optional[int], message: str) -> int:
    if value is None:
        raise PatchError(message)
    return value


def _read_key(file: BinaryIO, offset: int) -> Tuple[SmcKey, bytes]:
    file.seek(offset)
    raw = file.read(SmcKey.SIZE)
    if len(raw) < SmcKey.SIZE:
        raise PatchError("SMC key table ended before the OSK1 key was found")
    key = SmcKey.from_bytes(raw)
    data = file.read(key.length).ljust(key.length, b"\0")
    return key, data


def _rewrite_key(
    file: BinaryIO,
    index: int,
    offset: int,
    key: SmcKey,
    data: bytes,
    pointer: int,
    new_data: str,
    label: str,
) -> None:
    log.debug(f"{label} Key Before:")
    log.debug(format_key(index, offset, key, data))

    file.seek(offset)
    file.write(replace(key, pointer=pointer).to_bytes())
    file.seek(offset + SmcKey.SIZE)
    file.write(rot13(new_data).encode("ascii"))
    file.flush()

    key, data = _read_key(file, offset)
    log.debug(f"{label} Key After:")
    log.debug(format_key(index, offset, key, data))


def patch_keys(file: BinaryIO, key: int) -> Tuple[int, int]:
    """Patch the OSK0/OSK1 entries of the table at ``key``.

    Returns the old OSK1 data pointer and the +LKS pointer written in its place.
    """
    new_memptr = 0
    index = 0
    while True:
        offset = key + index * _KEY_STRIDE
        smc_key, data = _read_key(file, offset)
        if smc_key.name == b"SKL+":
            new_memptr = smc_key.pointer
            log.debug("+LKS Key: ")
            log.debug(format_key(index, offset, smc_key, data))
        elif smc_key.name == b"0KSO":
            _rewrite_key(
                file, index, offset, smc_key, data, new_memptr, config.SMC_NEW_DATA, "OSK0"
            )
        elif smc_key.name == b"1KSO":
            old_memptr = smc_key.pointer
            _rewrite_key(
                file, index, offset, smc_key, data, new_memptr, config.SMC_NEW_DATA2, "OSK1"
            )
            return old_memptr, new_memptr
        index += 1


def patch_smc(name: PathLike, is_shared_obj: bool) -> None:
    """Patch both vSMC key tables of a binary, and its ELF relocations if asked."""
    path = Path(name)
    with _open_for_patch(path) as handle:
        log.debug("Patching file: " + path.name)
        data = handle.read()

        header_v0 = _require(
            search_for_offset(data, config.SMC_HEADER_V0), "Couldn't find smc_header_v0_offset"
        ) - 8
        header_v1 = _require(
            search_for_offset(data, config.SMC_HEADER_V1), "Couldn't find smc_header_v1_offset"
        ) - 8
        key0 = _require(search_for_offset(data, config.KEY_KEY), "Couldn't find smc_key0 offset")
        key1 = _require(
            search_for_last_offset(data, config.KEY_KEY), "Couldn't find smc_key1 offset"
        )
        adr = _require(search_for_offset(data, config.ADR_KEY), "Couldn't find smc_adr offset")
        del data

        old_memptr = new_memptr = 0

        log.debug('appleSMCTableV0 (smc.version = "0")')
        log.debug("appleSMCTableV0 Address      : " + hex_representation(header_v0))
        log.debug("appleSMCTableV0 Private Key #: 0xF2/242")
        log.debug("appleSMCTableV0 Public Key  #: 0xF0/240")
        if adr - key0 != 72:
            log.debug("appleSMCTableV0 Table        : " + hex_representation(key0))
            old_memptr, new_memptr = patch_keys(handle, key0)
        elif adr - key1 != 72:
            log.debug("appleSMCTableV0 Table        : " + hex_representation(key1))
            old_memptr, new_memptr = patch_keys(handle, key1)
        log.debug("")

        log.debug('appleSMCTableV1 (smc.version = "1")')
        log.debug("appleSMCTableV1 Address      : " + hex_representation(header_v1))
        log.debug("appleSMCTableV1 Private Key #: 0x01B4/436")
        log.debug("appleSMCTableV1 Public Key  #: 0x01B0/432")
        if adr - key0 == 72:
            log.debug("appleSMCTableV1 Table        : " + hex_representation(key0))
            old_memptr, new_memptr = patch_keys(handle, key0)
        elif adr - key1 == 72:
            log.debug("appleSMCTableV1 Table        : " + hex_representation(key1))
            old_memptr, new_memptr = patch_keys(handle, key1)
        log.debug("")

        if is_shared_obj:
            old_signed = _to_signed64(old_memptr)
            new_signed = _to_signed64(new_memptr)
            log.debug(
                "Modifying RELA records from: "
                + hex_representation(old_signed)
                + " to "
                + hex_representation(new_signed)
            )
            patch_elf(handle, old_signed, new_signed)


def patch_base(name: PathLike) -> None:
    """Set the low bit of the flag byte after every darwin entry in the GOS table."""
    path = Path(name)
    log.debug("GOS Patching: " + path.name)
    with _open_for_patch(path) as handle:
        data = handle.read()
        log.verbose("Patching through REGEX")
        for match in _DARWIN_RE.finditer(data):
            pos = match.start()
            handle.seek(pos + 32)
            current = handle.read(1)
            flag = (current[0] if current else 0xFF) | 1
            handle.seek(pos + 32)
            handle.write(bytes([flag]))
            log.debug("GOS Patched flag @: " + hex_representation(pos))
        handle.flush()
    log.debug("GOS Patched: " + path.name)


def patch_vmkctl(name: PathLike) -> None:
    """Replace the first applesmc string with vmkernel."""
    path = Path(name)
    log.debug("smcPresent Patching: " + path.name)
    with _open_for_patch(path) as handle:
        offset = search_for_offset(handle, config.VMKCTL_FIND_STR)
        if offset is None:
            raise PatchError("Couldn't find Vmkctl offset")
        handle.seek(offset)
        handle.write(config.VMKCTL_REPLACE_STR)
        handle.flush()


def _read_padded(file: BinaryIO, size: int) -> bytes:
    return file.read(size).ljust(size, b"\0")


def patch_elf(file: BinaryIO, old_offset: int, new_offset: int) -> None:
    """Rewrite RELA addends equal to ``old_offset`` to ``new_offset`` in a 64-bit ELF."""
    file.seek(0)
    if file.read(4) != b"\x7fELF":
        raise PatchError("Not an ELF binary.")
    if file.read(1) != bytes([_ELF_CLASS64]):
        raise PatchError("Not a 64 bit binary.")

    file.seek(40)
    (e_shoff,) = struct.unpack("<Q", _read_padded(file, 8))
    file.seek(58)
    e_shentsize, e_shnum, e_shstrndx = struct.unpack("<HHH", _read_padded(file, 6))

    log.debug(
        "e_shoff: 0x%02X e_shentsize: 0x%02X e_shnum:0x%02X e_shstrndx:0x%02X\n",
        e_shoff,
        e_shentsize,
        e_shnum,
        e_shstrndx,
    )

    old_addend = _to_signed64(old_offset)
    new_addend = _to_signed64(new_offset)

    for index in range(e_shnum):
        file.seek(e_shoff + index * e_shentsize)
        raw = file.read(e_shentsize)[: _SECTION_HEADER.size].ljust(_SECTION_HEADER.size, b"\0")
        fields = _SECTION_HEADER.unpack(raw)
        sh_type, sh_offset, sh_size, sh_entsize = fields[1], fields[4], fields[5], fields[9]
        if sh_type != _SHT_RELA or sh_entsize == 0:
            continue
        for entry in range(sh_size // sh_entsize):
            position = sh_offset + sh_entsize * entry
            file.seek(position)
            raw = file.read(sh_entsize)[: _RELA.size].ljust(_RELA.size, b"\0")
            r_offset, r_info, r_addend = _RELA.unpack(raw)
            if r_addend == old_addend:
                file.seek(position)
                file.write(_RELA.pack(r_offset, r_info, new_addend))
                log.debug("Relocation modified at: " + hex_representation(position))
    file.flush()