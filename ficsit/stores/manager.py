"""
Install Discovery - Runs every install finder and merges their results.

Provides a unified view of Satisfactory installs across Steam, flatpak
Steam, Epic and manually configured directories.
"""
import logging
from typing import List, Optional

from .base import InstallFinder, InstallFindResult, gather_results
from .epic import EpicFinder
from .filesystem import FilesystemFinder
from .steam import SteamFinder, SteamFlatpakFinder
from ..utils.paths import is_windows
from ..utils.settings import Settings, load_settings

logger = logging.getLogger(__name__)


def default_finders(settings: Optional[Settings] = None) -> List[InstallFinder]:
    """Create the finders that make sense on the running platform."""
    settings = settings or load_settings()
    finders: List[InstallFinder] = [SteamFinder()]
    if not is_windows():
        finders.append(SteamFlatpakFinder())
    finders.append(EpicFinder())
    finders.append(FilesystemFinder(settings.extra_install_paths))
    return finders


class InstallDiscovery:
    """
    Manages multiple install finders.

    Every finder runs concurrently and independently: one that raises is
    logged and contributes nothing, the others still report their installs.
    """

    def __init__(self, finders: Optional[List[InstallFinder]] = None):
        self._finders: List[InstallFinder] = list(finders) if finders is not None else default_finders()

    def register_finder(self, finder: InstallFinder):
        """Register an additional finder."""
        self._finders.append(finder)
        logger.info(f"[Discovery] Registered finder: {finder.platform_name}")

    @property
    def finders(self) -> List[InstallFinder]:
        """Get all registered finders."""
        return self._finders

    async def discover(self) -> InstallFindResult:
        """
        Find all installs.

        Returns:
            InstallFindResult with deduplicated valid installs and the paths
            that look like installs but are broken
        """
        result = await gather_results(
            [finder.find_installs() for finder in self._finders],
            [finder.platform_name for finder in self._finders],
            'Discovery',
        )
        logger.info(
            f"[Discovery] Found {len(result.installs)} install(s), "
            f"{len(result.invalid_installs)} invalid install path(s)"
        )
        return result
