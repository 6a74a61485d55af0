"""
SML artifact cache.

Each SML version is downloaded at most once into <cache_root>/<version>/:
    - UE4-SML-Win64-Shipping.dll (required)
    - SML.pak (optional, older releases shipped only the dll)

The version directory only becomes visible once the dll is in it: artifacts
are downloaded into a hidden temporary sibling which is renamed into place
on success and deleted on failure. Existence of the version directory is
therefore the only freshness signal.
"""

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional

from ..errors import NotFoundError
from ..utils.paths import (
    SML_CACHE_DIR,
    SML_DLL_FILE_NAME,
    SML_PAK_FILE_NAME,
    ensure_dir,
    get_sml_version_cache_dir,
)
from ..utils.semver import coerce_version

logger = logging.getLogger(__name__)


def _download_link(release_link: str, file_name: str) -> str:
    """Turn a GitHub release page link into a direct asset download link."""
    return f"{release_link.replace('/tag/', '/download/')}/{file_name}"


class SMLCache:
    """Maps SML versions to populated local cache directories."""

    def __init__(self, metadata_client, downloader, cache_dir: str = SML_CACHE_DIR):
        """
        Args:
            metadata_client: Object with async lookup_release_info(version)
            downloader: Object with async download(url, destination, label, version)
            cache_dir: Root directory of the SML cache
        """
        self.metadata = metadata_client
        self.downloader = downloader
        self.cache_dir = Path(cache_dir)
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, version: str) -> asyncio.Lock:
        lock = self._locks.get(version)
        if lock is None:
            lock = self._locks[version] = asyncio.Lock()
        return lock

    def _validate(self, version: str) -> str:
        valid_version = coerce_version(version)
        if not valid_version:
            raise NotFoundError(f"SML@{version} not found.", 'SML', version)
        return valid_version

    def get_version_dir(self, version: str) -> Path:
        return get_sml_version_cache_dir(self._validate(version), self.cache_dir)

    def is_cached(self, version: str) -> bool:
        """Check if a version is already in the cache (invalid versions never are)."""
        valid_version = coerce_version(version)
        return bool(valid_version) and (self.cache_dir / valid_version).is_dir()

    async def resolve(self, version: str) -> Path:
        """
        Get the cache directory of an SML version, downloading it if needed.

        Args:
            version: SML version, coerced to major.minor.patch

        Returns:
            Path of the populated cache directory

        Raises:
            NotFoundError: Version is not a valid version or has no release
            DownloadError: The dll could not be downloaded
        """
        valid_version = self._validate(version)
        version_dir = get_sml_version_cache_dir(valid_version, self.cache_dir)
        if version_dir.is_dir():
            return version_dir

        async with self._lock_for(valid_version):
            # Another task may have populated it while we waited
            if version_dir.is_dir():
                return version_dir

            logger.debug(f"[SML] SML@{version} is not cached. Downloading")
            release = await self.metadata.lookup_release_info(valid_version)
            release_link = release.link if release else None
            if not release_link:
                raise NotFoundError(f"SML@{version} not found.", 'SML', version)

            ensure_dir(str(self.cache_dir))
            staging_dir = Path(tempfile.mkdtemp(prefix=f'.{valid_version}-', dir=self.cache_dir))
            try:
                await self._populate(staging_dir, release_link, version, valid_version)
                self._publish(staging_dir, version_dir)
            finally:
                if staging_dir.exists():
                    shutil.rmtree(staging_dir, ignore_errors=True)

        return version_dir

    async def _populate(self, staging_dir: Path, release_link: str, version: str, valid_version: str) -> None:
        has_pak = True
        try:
            await self.downloader.download(
                _download_link(release_link, SML_PAK_FILE_NAME),
                str(staging_dir / SML_PAK_FILE_NAME),
                'SML (1/2)',
                valid_version,
            )
        except Exception as e:
            has_pak = False
            logger.debug(f"[SML] Pak of SML version {version} not found: {e}")

        await self.downloader.download(
            _download_link(release_link, SML_DLL_FILE_NAME),
            str(staging_dir / SML_DLL_FILE_NAME),
            f"SML {'(2/2)' if has_pak else '(1/1)'}",
            valid_version,
        )

    @staticmethod
    def _publish(staging_dir: Path, version_dir: Path) -> None:
        try:
            os.rename(staging_dir, version_dir)
            logger.info(f"[SML] Cached SML in {version_dir}")
        except OSError:
            # Another process published the same version first
            if not version_dir.is_dir():
                raise
            logger.debug(f"[SML] {version_dir} appeared while downloading, keeping existing copy")

    async def close(self) -> None:
        """Close the HTTP sessions of the metadata client and downloader."""
        await self.metadata.close()
        await self.downloader.close()

    def clear(self, version: Optional[str] = None) -> None:
        """Remove one cached version, or the whole cache if version is None."""
        if version is None:
            if self.cache_dir.exists():
                shutil.rmtree(self.cache_dir)
                logger.info(f"[SML] Cleared SML cache {self.cache_dir}")
            return

        version_dir = self.get_version_dir(version)
        if version_dir.exists():
            shutil.rmtree(version_dir)
            logger.info(f"[SML] Removed cached SML@{version}")
