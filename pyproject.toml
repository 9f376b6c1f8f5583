[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "autounlocker"
version = "2.0.3"
description = "Patch a Linux VMware Workstation/Player installation for macOS guests and fetch the darwin tools images"
requires-python = ">=3.10"
dependencies = []
keywords = ["vmware", "unlocker", "patcher", "macos", "smc", "darwin"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
auto-unlocker = "autounlocker.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["autounlocker"]

[tool.pytest.ini_options]
addopts = "-ra"
