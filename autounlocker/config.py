"""Paths, URLs, file names, patterns and patch data used across the package."""

PROG_VERSION = "v2.0.3"

# File used to record that the patch has been applied
PATCH_VER_FILE = ".unlocker"
LNX_PATCH_VER_PATH = "/usr/lib/vmware"

# 0 - none, 1 - info, 2 - debug, 3 - verbose
LOG_LEVEL = 3

ARCH = "x86_x64"

# Command line options
INSTALL_OPTION = "--install"
UNINSTALL_OPTION = "--uninstall"
DOWNLOADONLY_OPTION = "--download-tools"
HELP_OPTION = "--help"

# Working folders
TOOLS_DOWNLOAD_FOLDER = "tools"
BACKUP_FOLDER = "backup"

# Direct URLs to the tools
DARWIN_ISO_URL = "https://packages-prod.broadcom.com/tools/frozen/darwin/darwin.iso"
DARWIN_PRE15_ISO_URL = "https://packages-prod.broadcom.com/tools/frozen/darwin/darwinPre15.iso"

FUSION_ZIP_TOOLS_NAME = "darwin.iso"
FUSION_ZIP_PRE15_TOOLS_NAME = "darwinPre15.iso"

# Pattern used to parse version and build listings
VERSION_REGEX_PATTERN = r'<li><a href="[^"]+">([^<]+)<\/a><\/li>'

# Files to back up on Linux
VM_LNX_BACKUP_FILES = (
    "/usr/lib/vmware/bin/vmware-vmx",
    "/usr/lib/vmware/bin/vmware-vmx-debug",
    "/usr/lib/vmware/bin/vmware-vmx-stats",
)

# Files to patch on Windows (order matters)
VM_WIN_PATCH_FILES = (
    "vmware-vmx.exe",
    "vmware-vmx-debug.exe",
    "vmware-vmx-stats.exe",
    "vmwarebase.dll",
)

# Linux paths and files
VM_LNX_PATH = "/usr/lib/vmware/bin"
VM_LNX_BINS = (
    "vmware-vmx",
    "vmware-vmx-debug",
    "vmware-vmx-stats",
)
VM_LNX_LIB_CANDIDATES = (
    "/usr/lib/vmware/lib/libvmwarebase.so/libvmwarebase.so",
    "/usr/lib/vmware/lib/libvmwarebase.so.0/libvmwarebase.so.0",
)
VM_LNX_ISO_DESTPATH = "/usr/lib/vmware/isoimages"

# Patch data
SMC_HEADER_V0 = b"\xF2\x00\x00\x00\xF0\x00\x00\x00"
SMC_HEADER_V1 = b"\xB4\x01\x00\x00\xB0\x01\x00\x00"
KEY_KEY = b"\x59\x45\x4B\x23\x04\x32\x33\x69\x75"
ADR_KEY = b"\x72\x64\x41\x24\x04\x32\x33\x69\x75"

DARWIN_REGEX = (
    rb"\x10\x00\x00\x00[\x10|\x20]\x00\x00\x00[\x01|\x02]" + rb"\x00" * 23
)

SMC_NEW_DATA = "bheuneqjbexolgurfrjbeqfthneqrqcy"
SMC_NEW_DATA2 = "rnfrqbagfgrny(p)NccyrPbzchgreVap"

VMKCTL_FIND_STR = b"applesmc"
VMKCTL_REPLACE_STR = b"vmkernel"

# Terminal colours
ANSI_COLOR_RED = "\x1b[31m"
ANSI_COLOR_GREEN = "\x1b[32m"
ANSI_COLOR_YELLOW = "\x1b[33m"
ANSI_COLOR_BLUE = "\x1b[34m"
ANSI_COLOR_MAGENTA = "\x1b[35m"
ANSI_COLOR_CYAN = "\x1b[36m"
ANSI_COLOR_RESET = "\x1b[0m"