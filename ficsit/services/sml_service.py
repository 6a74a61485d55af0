"""
SMLService - Installs and uninstalls the Satisfactory Mod Loader.

Responsibilities:
- Report the SML version installed in a game directory
- Copy SML from the artifact cache into <game>/loaders/
- Remove SML from a game directory
"""

import asyncio
import logging
import os
import shutil
from typing import Callable, Optional

from ..errors import NotFoundError
from ..utils.exe_version import read_product_version
from ..utils.paths import (
    SML_DLL_FILE_NAME,
    SML_DLL_RELATIVE_PATH,
    SML_PAK_FILE_NAME,
    SML_PAK_RELATIVE_PATH,
    get_mods_dir,
)
from ..utils.semver import coerce_version

logger = logging.getLogger(__name__)

# Returned when the dll exists but carries no readable version
UNKNOWN_SML_VERSION = '0'


class SMLService:
    """Service for installing and uninstalling SML."""

    def __init__(self, sml_cache, version_reader: Callable[[str], Optional[str]] = read_product_version):
        """Initialize SMLService.

        Args:
            sml_cache: SMLCache used to obtain the artifacts of a version
            version_reader: Reads the embedded version string of the SML dll
        """
        self.sml_cache = sml_cache
        self.version_reader = version_reader

    def get_installed_version(self, game_dir: str) -> Optional[str]:
        """Get the SML version installed in a game directory.

        Args:
            game_dir: Satisfactory installation directory

        Returns:
            Installed version, or None if SML is not installed
        """
        dll_path = os.path.join(game_dir, SML_DLL_RELATIVE_PATH)
        if not os.path.isfile(dll_path):
            return None

        raw_version = self.version_reader(dll_path)
        if not raw_version:
            logger.warning(f"[SML] Could not read the version of {dll_path}")
            return UNKNOWN_SML_VERSION
        return coerce_version(raw_version) or raw_version

    def get_mods_dir(self, game_dir: str) -> str:
        return get_mods_dir(game_dir)

    async def install(self, version: str, game_dir: str) -> bool:
        """Install an SML version into a game directory.

        Does nothing if any SML version is already installed; changing
        versions is an uninstall followed by an install (see upgrade()).

        Args:
            version: SML version to install
            game_dir: Satisfactory installation directory

        Returns:
            True if SML was installed, False if it was already present

        Raises:
            NotFoundError: Invalid version or no such release
            DownloadError: The dll could not be downloaded
            OSError: Copying failed; the destination is left as the failed
                copy left it
        """
        if not coerce_version(version):
            raise NotFoundError(f"SML@{version} not found.", 'SML', version)

        loop = asyncio.get_running_loop()
        if await loop.run_in_executor(None, self.get_installed_version, game_dir):
            logger.info("[SML] SML is already installed")
            return False

        logger.debug(f"[SML] Installing SML@{version} into {game_dir}")
        cache_dir = await self.sml_cache.resolve(version)

        await loop.run_in_executor(None, self._copy_artifacts, str(cache_dir), game_dir)
        logger.info(f"[SML] Installed SML@{version} into {game_dir}")
        return True

    @staticmethod
    def _copy_artifacts(cache_dir: str, game_dir: str) -> None:
        dll_dest = os.path.join(game_dir, SML_DLL_RELATIVE_PATH)
        pak_dest = os.path.join(game_dir, SML_PAK_RELATIVE_PATH)
        os.makedirs(os.path.dirname(dll_dest), exist_ok=True)
        os.makedirs(os.path.dirname(pak_dest), exist_ok=True)

        shutil.copyfile(os.path.join(cache_dir, SML_DLL_FILE_NAME), dll_dest)
        cached_pak = os.path.join(cache_dir, SML_PAK_FILE_NAME)
        if os.path.exists(cached_pak):
            shutil.copyfile(cached_pak, pak_dest)

    async def uninstall(self, game_dir: str) -> bool:
        """Remove SML from a game directory.

        Returns:
            True if SML was removed, False if none was installed
        """
        loop = asyncio.get_running_loop()
        if not await loop.run_in_executor(None, self.get_installed_version, game_dir):
            logger.info("[SML] No SML to uninstall")
            return False

        logger.debug(f"[SML] Uninstalling SML from {game_dir}")
        await loop.run_in_executor(None, self._remove_artifacts, game_dir)
        logger.info(f"[SML] Uninstalled SML from {game_dir}")
        return True

    @staticmethod
    def _remove_artifacts(game_dir: str) -> None:
        for relative_path in (SML_DLL_RELATIVE_PATH, SML_PAK_RELATIVE_PATH):
            path = os.path.join(game_dir, relative_path)
            if os.path.exists(path):
                os.remove(path)

    async def upgrade(self, version: str, game_dir: str) -> bool:
        """Replace the installed SML (if any) with another version.

        Returns:
            True if the requested version is now installed, False if it
            already was
        """
        wanted = coerce_version(version)
        if not wanted:
            raise NotFoundError(f"SML@{version} not found.", 'SML', version)

        loop = asyncio.get_running_loop()
        if await loop.run_in_executor(None, self.get_installed_version, game_dir) == wanted:
            logger.info(f"[SML] SML@{wanted} is already installed")
            return False

        # Make sure the new version is obtainable before removing the old one
        await self.sml_cache.resolve(wanted)
        await self.uninstall(game_dir)
        return await self.install(wanted, game_dir)
