"""Installing and removing the patch on a Linux VMware installation."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable, Union

from . import config, log
from .network import Network
from .patcher import PatchError, patch_base, patch_smc
from .patchversioner import PatchVersioner
from .toolsdownloader import ToolsDownloader

PathLike = Union[str, Path]


def _tools_directory() -> Path:
    return Path(".") / config.TOOLS_DOWNLOAD_FOLDER


def _backup_directory() -> Path:
    return Path(".") / config.BACKUP_FOLDER


def _version_file() -> Path:
    return Path(config.LNX_PATCH_VER_PATH) / config.PATCH_VER_FILE


def _logging_patch_errors(action: Callable[..., None], *args) -> None:
    try:
        action(*args)
    except PatchError as exc:
        log.error(str(exc))


def download_tools(path: PathLike) -> bool:
    """Download the tool images into ``path``, creating it if needed."""
    network = Network()
    destination = Path(path)
    destination.mkdir(exist_ok=True)

    log.info("Downloading VMware tools directly from Broadcom")
    success = ToolsDownloader(network).download(destination)
    if success:
        log.info("Tools successfully downloaded!")
    else:
        log.error("Couldn't download tools.")
    return success


def copy_tools(tools_path: PathLike) -> None:
    """Copy the tool images from ``tools_path`` into VMware's ISO directory."""
    source = Path(tools_path)
    destination = Path(config.VM_LNX_ISO_DESTPATH)
    for name in (config.FUSION_ZIP_TOOLS_NAME, config.FUSION_ZIP_PRE15_TOOLS_NAME):
        try:
            shutil.copy(source / name, destination / name)
            log.info(f'File "{source / name}" copy done.')
        except OSError as exc:
            log.error(str(exc))


def prepare_patch(backup_path: PathLike) -> None:
    """Back up the binaries and the base library into ``backup_path``."""
    destination = Path(backup_path)

    for element in config.VM_LNX_BACKUP_FILES:
        source = Path(element)
        destination.mkdir(exist_ok=True)
        try:
            shutil.copy(source, destination / source.name)
            log.info(f'File "{source}" backup done.')
        except OSError as exc:
            log.error(str(exc))

    for candidate in config.VM_LNX_LIB_CANDIDATES:
        library = Path(candidate)
        if library.parent.exists():
            try:
                shutil.copy(library, destination / library.name)
                log.info(f'File "{library}" backup done.')
                break
            except OSError as exc:
                log.error(str(exc))


def apply_patch() -> None:
    """Patch the VMware binaries and base library in place."""
    bin_path = Path(config.VM_LNX_PATH)
    vmx, vmx_debug, vmx_stats = (bin_path / name for name in config.VM_LNX_BINS[:3])

    candidates = config.VM_LNX_LIB_CANDIDATES
    shared_object = True
    vmlib = Path(candidates[0])
    if not vmlib.exists():
        vmlib = Path(candidates[1])
        shared_object = False

    if not vmx.exists():
        raise FileNotFoundError("Vmx file not found")
    if not vmx_debug.exists():
        raise FileNotFoundError("Vmx-debug file not found")
    if not vmlib.exists():
        raise FileNotFoundError("Vmlib file not found")

    targets = [vmx, vmx_debug]
    if vmx_stats.exists():
        targets.append(vmx_stats)
    for target in targets:
        log.info("File: " + target.name)
        _logging_patch_errors(patch_smc, target, shared_object)

    log.info("File: " + vmlib.name)
    _logging_patch_errors(patch_base, vmlib)


def install() -> None:
    """Back up, patch, record the patch and put the tools in place."""
    versioner = PatchVersioner(config.LNX_PATCH_VER_PATH)
    if versioner.has_patch():
        log.error("Patch is already installed. Uninstall it first before applying it again")
        return

    tools_directory = _tools_directory()
    backup = _backup_directory()

    log.info("Killing services and backing up files...")
    prepare_patch(backup)

    log.info("Patching files...")
    apply_patch()

    versioner.write_patch_data()
    log.verbose(f"Written version file at {_version_file()}")

    log.info(f'Downloading tools into "{tools_directory}" directory...')
    has_tools = (tools_directory / config.FUSION_ZIP_TOOLS_NAME).exists() and (
        tools_directory / config.FUSION_ZIP_PRE15_TOOLS_NAME
    ).exists()
    if not has_tools:
        download_tools(tools_directory)
    else:
        log.info(
            "Tools have been found in the `tools` folder. Using them...\n"
            "Please check that the existing tools are working and are the most recent ones."
        )

    log.info("Copying tools into program directory...")
    copy_tools(tools_directory)

    log.info("Patch complete.")


def uninstall() -> None:
    """Restore the backed up files and remove tools, backup and patch marker."""
    versioner = PatchVersioner(config.LNX_PATCH_VER_PATH)
    if not versioner.has_patch():
        log.error("Patch is not installed")
        return

    tools_directory = _tools_directory()
    backup = _backup_directory()
    vmware_dir = Path(config.VM_LNX_PATH)

    log.info("Restoring files...")
    for name in config.VM_LNX_BINS:
        try:
            shutil.copy(backup / name, vmware_dir / name)
            log.info(f'File "{backup / name}" restored successfully')
        except OSError as exc:
            log.error(str(exc))

    for candidate in config.VM_LNX_LIB_CANDIDATES:
        library = Path(candidate)
        if library.parent.exists():
            try:
                shutil.copy(backup / library.name, library)
                log.info(f'File "{backup / library.name}" restored successfully')
            except OSError as exc:
                log.error(str(exc))
            break

    for entry in Path(config.VM_LNX_ISO_DESTPATH).iterdir():
        if entry.is_file() and entry.name.startswith("darwin"):
            entry.unlink()

    versioner.remove_patch_version()
    log.verbose(f"Removed version file from {_version_file()}")

    shutil.rmtree(backup, ignore_errors=True)
    shutil.rmtree(tools_directory, ignore_errors=True)

    log.info("Uninstall complete.")