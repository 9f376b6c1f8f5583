import io
import urllib.error
from pathlib import Path
from types import SimpleNamespace
from unittest import mock

import pytest

from autounlocker import config, installer, log
from autounlocker.logstrategy import LogStrategy


class Recorder(LogStrategy):
    def __init__(self):
        self.entries = []

    def verbose(self, message):
        self.entries.append(("verbose", message))

    def debug(self, message):
        self.entries.append(("debug", message))

    def info(self, message):
        self.entries.append(("info", message))

    def error(self, message):
        self.entries.append(("error", message))

    def of(self, level):
        return [m for lvl, m in self.entries if lvl == level]


class FakeResponse(io.BytesIO):
    def __init__(self, body):
        super().__init__(body)
        self.headers = {"Content-Length": str(len(body))}


@pytest.fixture
def recorder():
    rec = Recorder()
    log.init(rec)
    yield rec
    log.free()


@pytest.fixture
def vm(tmp_path, monkeypatch):
    root = tmp_path / "vmware"
    bin_dir = root / "bin"
    bin_dir.mkdir(parents=True)
    for name in config.VM_LNX_BINS:
        (bin_dir / name).write_bytes(b"original " + name.encode())
    lib_dir = root / "lib" / "libvmwarebase.so"
    lib_dir.mkdir(parents=True)
    lib = lib_dir / "libvmwarebase.so"
    lib.write_bytes(b"library")
    iso = root / "isoimages"
    iso.mkdir()

    monkeypatch.setattr(config, "VM_LNX_PATH", str(bin_dir))
    monkeypatch.setattr(
        config, "VM_LNX_BACKUP_FILES", tuple(str(bin_dir / n) for n in config.VM_LNX_BINS)
    )
    monkeypatch.setattr(
        config,
        "VM_LNX_LIB_CANDIDATES",
        (str(lib), str(root / "lib" / "libvmwarebase.so.0" / "libvmwarebase.so.0")),
    )
    monkeypatch.setattr(config, "VM_LNX_ISO_DESTPATH", str(iso))
    monkeypatch.setattr(config, "LNX_PATCH_VER_PATH", str(root))

    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return SimpleNamespace(root=root, bin_dir=bin_dir, lib=lib, iso=iso, work=work)


def write_tools(directory):
    directory.mkdir(exist_ok=True)
    (directory / config.FUSION_ZIP_TOOLS_NAME).write_bytes(b"iso")
    (directory / config.FUSION_ZIP_PRE15_TOOLS_NAME).write_bytes(b"iso pre15")


def test_prepare_patch_backs_up_binaries_and_library(vm, recorder):
    backup = vm.work / "backup"
    installer.prepare_patch(backup)
    for name in config.VM_LNX_BINS:
        assert (backup / name).read_bytes() == (vm.bin_dir / name).read_bytes()
    assert (backup / "libvmwarebase.so").read_bytes() == b"library"
    assert recorder.of("error") == []


def test_prepare_patch_logs_missing_file(vm, recorder):
    (vm.bin_dir / "vmware-vmx-stats").unlink()
    backup = vm.work / "backup"
    installer.prepare_patch(backup)
    assert (backup / "vmware-vmx").exists()
    assert not (backup / "vmware-vmx-stats").exists()
    assert len(recorder.of("error")) == 1


def test_copy_tools_copies_both_images(vm, recorder):
    tools = vm.work / "tools"
    write_tools(tools)
    installer.copy_tools(tools)
    assert (vm.iso / "darwin.iso").read_bytes() == b"iso"
    assert (vm.iso / "darwinPre15.iso").read_bytes() == b"iso pre15"
    assert recorder.of("error") == []
    messages = recorder.of("info")
    assert len(messages) == 2
    assert all(message.endswith('" copy done.') for message in messages)
    assert "darwin.iso" in messages[0]
    assert "darwinPre15.iso" in messages[1]


def test_copy_tools_logs_missing_images(vm, recorder):
    installer.copy_tools(vm.work / "absent")
    assert len(recorder.of("error")) == 2
    assert list(vm.iso.iterdir()) == []


def test_apply_patch_requires_vmx(vm, recorder):
    (vm.bin_dir / "vmware-vmx").unlink()
    with pytest.raises(FileNotFoundError, match="Vmx file not found"):
        installer.apply_patch()


def test_apply_patch_requires_library(vm, recorder):
    vm.lib.unlink()
    with pytest.raises(FileNotFoundError, match="Vmlib file not found"):
        installer.apply_patch()


def test_apply_patch_logs_patch_errors_and_patches_library(vm, recorder):
    entry = b"\x10\x00\x00\x00\x10\x00\x00\x00\x01" + b"\x00" * 23 + b"\x3e"
    vm.lib.write_bytes(b"\xaa" * 4 + entry)
    installer.apply_patch()
    assert recorder.of("error") == ["Couldn't find smc_header_v0_offset"] * 3
    assert vm.lib.read_bytes()[4 + 32] == 0x3F
    assert "GOS Patched: libvmwarebase.so" in recorder.of("debug")


def test_install_refuses_when_already_patched(vm, recorder):
    (vm.root / config.PATCH_VER_FILE).write_bytes(b"1")
    installer.install()
    assert recorder.of("error") == [
        "Patch is already installed. Uninstall it first before applying it again"
    ]
    assert not (vm.work / "backup").exists()


def test_install_with_existing_tools(vm, recorder):
    write_tools(vm.work / "tools")
    installer.install()
    assert (vm.root / config.PATCH_VER_FILE).exists()
    assert (vm.work / "backup" / "vmware-vmx").exists()
    assert (vm.iso / "darwin.iso").read_bytes() == b"iso"
    assert recorder.of("info")[-1] == "Patch complete."


def test_uninstall_without_patch(vm, recorder):
    installer.uninstall()
    assert recorder.of("error") == ["Patch is not installed"]


def test_uninstall_restores_and_cleans_up(vm, recorder):
    backup = vm.work / "backup"
    backup.mkdir()
    for name in config.VM_LNX_BINS:
        (backup / name).write_bytes(b"backup " + name.encode())
    (backup / "libvmwarebase.so").write_bytes(b"backup lib")
    write_tools(vm.work / "tools")
    (vm.iso / "darwin.iso").write_bytes(b"x")
    (vm.iso / "linux.iso").write_bytes(b"y")
    (vm.root / config.PATCH_VER_FILE).write_bytes(b"1")

    installer.uninstall()

    for name in config.VM_LNX_BINS:
        assert (vm.bin_dir / name).read_bytes() == b"backup " + name.encode()
    assert vm.lib.read_bytes() == b"backup lib"
    assert sorted(p.name for p in vm.iso.iterdir()) == ["linux.iso"]
    assert not (vm.root / config.PATCH_VER_FILE).exists()
    assert not backup.exists()
    assert not (vm.work / "tools").exists()
    assert recorder.of("info")[-1] == "Uninstall complete."


def test_download_tools_saves_images(tmp_path, recorder):
    target = tmp_path / "tools"
    with mock.patch(
        "urllib.request.urlopen", side_effect=lambda url, *a, **k: FakeResponse(url.encode())
    ):
        assert installer.download_tools(target) is True
    assert (target / "darwin.iso").read_bytes() == config.DARWIN_ISO_URL.encode()
    assert (target / "darwinPre15.iso").read_bytes() == config.DARWIN_PRE15_ISO_URL.encode()
    assert recorder.of("info")[-1] == "Tools successfully downloaded!"


def test_download_tools_reports_failure(tmp_path, recorder):
    target = tmp_path / "tools"
    with mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("offline")):
        assert installer.download_tools(target) is False
    assert target.is_dir()
    assert recorder.of("error")[-1] == "Couldn't download tools."