"""Patch Linux VMware installations for macOS guests and fetch the darwin tools."""

__version__ = "2.0.3"