"""HTTP downloads with progress reporting."""

from __future__ import annotations

import time
import urllib.error
import urllib.request
from typing import Callable, Optional

ProgressCallback = Callable[[float, float, float, float], None]

_CHUNK_SIZE = 16 * 1024


class NetworkError(RuntimeError):
    """Raised when a request fails; ``code`` is the HTTP status if there was one."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


class _TerminalProgress:
    """Prints download progress, at most once per update period."""

    UPDATE_PERIOD_MS = 200

    def __init__(self) -> None:
        self.last_mbytes = 0.0
        self.last_update_ms = _now_ms()

    def __call__(self, dltotal: float, dlnow: float, ultotal: float, ulnow: float) -> None:
        if dltotal <= 0:
            return
        now = _now_ms()
        elapsed = now - self.last_update_ms
        if elapsed < self.UPDATE_PERIOD_MS:
            return
        mbytes_total = dltotal / 1024 / 1024
        mbytes_now = dlnow / 1024 / 1024
        rate = (mbytes_now - self.last_mbytes) / (elapsed / 1000.0)
        percent = min(100, max(0, int(dlnow * 100 / dltotal)))
        print(
            f"Download progress: {percent} %, {mbytes_now:.2f} MB / "
            f"{mbytes_total:.2f} MB, {rate:.3f} MB/s          ",
            end="\r",
            flush=True,
        )
        self.last_mbytes = mbytes_now
        self.last_update_ms = now


class Network:
    """Performs GET requests; failing HTTP statuses raise ``NetworkError``."""

    def __init__(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.progress_callback = progress_callback
        self.timeout = timeout

    def _transfer(
        self,
        url: str,
        sink: Callable[[bytes], object],
        report: Optional[ProgressCallback] = None,
    ) -> None:
        try:
            if self.timeout is None:
                response = urllib.request.urlopen(url)
            else:
                response = urllib.request.urlopen(url, timeout=self.timeout)
            with response:
                length = response.headers.get("Content-Length")
                total = float(length) if length and length.strip().isdigit() else 0.0
                received = 0
                while chunk := response.read(_CHUNK_SIZE):
                    sink(chunk)
                    received += len(chunk)
                    if report is not None:
                        report(total, float(received), 0.0, 0.0)
        except urllib.error.HTTPError as exc:
            raise NetworkError(
                f"Error in get request: HTTP response code said error: {exc.code}", exc.code
            ) from exc
        except urllib.error.URLError as exc:
            raise NetworkError(f"Error in get request: {exc.reason}") from exc
        except (OSError, ValueError) as exc:
            raise NetworkError(f"Error in get request: {exc}") from exc

    def download(self, url: str, file_name: str) -> None:
        """Save the body at ``url`` to ``file_name``, reporting progress."""
        report = self.progress_callback or _TerminalProgress()
        try:
            with open(file_name, "wb") as out:
                self._transfer(url, out.write, report)
        finally:
            print()

    def get(self, url: str) -> str:
        """Return the body at ``url`` as text."""
        body = bytearray()
        self._transfer(url, body.extend)
        return body.decode("utf-8", "replace")