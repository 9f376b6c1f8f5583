# autounlocker

A command-line tool that patches a VMware Workstation / Player installation on
Linux so that macOS guests can be created and run. It also downloads the
`darwin.iso` and `darwinPre15.iso` tools images and copies them into
`/usr/lib/vmware/isoimages`.

It needs nothing beyond the Python standard library.

## Installation

```
pip install .
```

## Usage

The patch modifies files under `/usr/lib/vmware`, so run the command as root:

```
sudo auto-unlocker --install
```

When it is not run as root, the command warns and asks whether to continue;
any answer other than `y` or `Y` aborts.

Available options (matched case-insensitively; only the first argument is
looked at):

| Option             | Effect                                                     |
|--------------------|------------------------------------------------------------|
| `--install`        | back up the VMware binaries, patch them, fetch and copy tools |
| `--uninstall`      | restore the backed-up binaries and remove tools and backup |
| `--download-tools` | only download the tools into `./tools`                     |
| `--help`           | show the help message                                      |

An unknown option prints "Unrecognized command." followed by the help message.

With no option, `auto-unlocker` installs the patch. If a `backup` folder
already exists in the current directory, it asks whether the previous patch
should be uninstalled: `n` or `N` continues with installation, any other answer
uninstalls.

### What install does

1. Refuses to run if the marker file `/usr/lib/vmware/.unlocker` exists.
2. Copies `vmware-vmx`, `vmware-vmx-debug`, `vmware-vmx-stats` and
   `libvmwarebase.so` into `./backup`.
3. Patches the vSMC key tables of the `vmware-vmx*` binaries and the guest OS
   table of `libvmwarebase.so`. Errors from an individual file are logged and
   the remaining files are still patched.
4. Writes the marker file with the current time and the program version.
5. Downloads the tools images into `./tools`, unless both are already there.
6. Copies the images into `/usr/lib/vmware/isoimages`.

Uninstall copies the backed-up files back, deletes the `darwin*` files from
`/usr/lib/vmware/isoimages`, removes the marker file and deletes `./backup` and
`./tools`.

Both `./backup` and `./tools` are relative to the directory the command is run
from.

## Library use

The building blocks can also be used from Python:

- `autounlocker.patcher`: `patch_smc`, `patch_keys`, `patch_base`,
  `patch_vmkctl` and `patch_elf`, with helpers `rot13`, `hex_representation`,
  `search_for_offset`, `search_for_last_offset`, `format_key` and the
  `SmcKey` record. Failures raise `PatchError`.
- `autounlocker.tar.TarArchive` and `autounlocker.ziparchive.ZipArchive` are
  context managers that extract single files and report progress through a
  callback taking a fraction between 0 and 1. `TarArchive` also offers
  `files()`, `contains()` and `search()`; only regular files can be extracted.
- `autounlocker.archive.extract_tar` / `extract_zip` do the same but log
  failures and return `False` instead of raising.
- `autounlocker.patchversioner.PatchVersioner` reads and writes the `.unlocker`
  marker file in a given directory.
- `autounlocker.network.Network` performs HTTP GET requests (`get`,
  `download`) and raises `NetworkError` on failure.
- `autounlocker.toolsdownloader.ToolsDownloader` fetches both darwin images.
- `autounlocker.versionparser.VersionParser` (with `Version`) and
  `autounlocker.buildsparser.BuildsParser` parse directory-listing HTML.
- `autounlocker.log` routes messages to a strategy from
  `autounlocker.logstrategy`: `TerminalLogStrategy`, `StreamLogStrategy` or
  `CombinedLogStrategy`. Call `log.init(...)` before using any code that logs.

## What it does not do

- It works only on Linux installations with VMware under `/usr/lib/vmware`.
  There is no Windows support: no registry lookup of the install path and no
  stopping or restarting of VMware services or processes.
- There is no graphical interface; everything happens on the terminal.

## Running the tests

```
pip install .[test]
pytest
```