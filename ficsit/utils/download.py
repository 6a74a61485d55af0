"""
File downloader built on aiohttp.

Each download is streamed to a ``.part`` file next to the destination and
renamed into place once complete, so a failed download never leaves a
truncated file under the final name. Transient failures are retried with
exponential backoff; a 404 is reported immediately as DownloadNotFoundError.
"""

import asyncio
import logging
import os
import ssl
from typing import Callable, Optional

import aiohttp
import certifi

from ..errors import DownloadError, DownloadNotFoundError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

# (label, version, downloaded_bytes, total_bytes)
ProgressCallback = Callable[[str, str, int, int], None]


class Downloader:
    """Downloads files over HTTP(S) with retries."""

    def __init__(
        self,
        max_attempts: int = 3,
        timeout: float = 300.0,
        backoff_factor: float = 1.0,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.backoff_factor = backoff_factor
        self.progress_callback = progress_callback
        self.session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self.session is None or self.session.closed:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            connector = aiohttp.TCPConnector(ssl=ssl_context, limit_per_host=4)
            self.session = aiohttp.ClientSession(connector=connector)
        return self.session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def download(self, url: str, destination: str, label: str = "", version: str = "") -> None:
        """Download a URL to a file.

        Args:
            url: URL to download
            destination: Final file path; parent directories are created
            label: Human-readable name for progress reporting
            version: Version context for progress reporting

        Raises:
            DownloadNotFoundError: Server answered 404
            DownloadError: Any other failure after all attempts
        """
        os.makedirs(os.path.dirname(destination) or '.', exist_ok=True)
        part_path = destination + '.part'
        last_error = "unknown error"

        for attempt in range(1, self.max_attempts + 1):
            try:
                logger.debug(f"[Download] {label or url} attempt {attempt}/{self.max_attempts}")
                await self._download_once(url, part_path, label, version)
                os.replace(part_path, destination)
                logger.info(f"[Download] Downloaded {label or url} to {destination}")
                return
            except DownloadNotFoundError:
                self._remove_part(part_path)
                raise
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError, DownloadError) as e:
                self._remove_part(part_path)
                last_error = str(e) or type(e).__name__
                logger.warning(f"[Download] Attempt {attempt} for {url} failed: {last_error}")

            if attempt < self.max_attempts:
                wait_time = self.backoff_factor * (2 ** (attempt - 1))
                logger.debug(f"[Download] Retrying in {wait_time}s...")
                await asyncio.sleep(wait_time)

        raise DownloadError(url, f"Download failed after {self.max_attempts} attempts: {last_error}")

    async def _download_once(self, url: str, part_path: str, label: str, version: str) -> None:
        session = await self._get_session()
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with session.get(url, timeout=timeout) as resp:
            if resp.status == 404:
                raise DownloadNotFoundError(url, "File not found")
            if resp.status != 200:
                raise DownloadError(url, f"HTTP {resp.status}")

            total = resp.content_length or 0
            downloaded = 0
            with open(part_path, 'wb') as f:
                async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                    f.write(chunk)
                    downloaded += len(chunk)
                    if self.progress_callback:
                        self.progress_callback(label, version, downloaded, total)

    @staticmethod
    def _remove_part(part_path: str) -> None:
        if os.path.exists(part_path):
            os.remove(part_path)
