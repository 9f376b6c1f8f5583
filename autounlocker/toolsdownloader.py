"""Downloading of the darwin tool images."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from . import config, log
from .network import Network


class ToolsDownloaderError(RuntimeError):
    """Raised when the tools cannot be downloaded."""


class ToolsDownloader:
    """Fetches both darwin ISO images into a directory."""

    def __init__(self, network: Network) -> None:
        self.network = network

    def download(self, to: Union[str, Path]) -> bool:
        """Download the images into ``to``; False (with an error logged) on failure."""
        destination = Path(to)
        downloads = (
            (config.DARWIN_ISO_URL, config.FUSION_ZIP_TOOLS_NAME),
            (config.DARWIN_PRE15_ISO_URL, config.FUSION_ZIP_PRE15_TOOLS_NAME),
        )
        try:
            for url, name in downloads:
                target = destination / name
                log.info(f"Downloading {name} from Broadcom")
                self.network.download(url, str(target))
                if not target.exists():
                    log.error(f"Failed to download {name}")
                    return False
            return True
        except Exception as exc:
            log.error(f"Error downloading tools: {exc}")
            return False