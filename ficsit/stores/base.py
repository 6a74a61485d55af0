"""
Base InstallFinder class defining the interface for all install finders.

All finder implementations (Steam, Steam flatpak, Epic, filesystem) should
inherit from this and implement find_installs().
"""
import asyncio
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence

from ..utils.paths import get_mods_dir

logger = logging.getLogger(__name__)

SetupAction = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class CandidateInstall:
    """Represents a Satisfactory installation found by any finder"""
    display_name: str
    game_version: str  # Build changelist, '0' if unknown
    branch: str  # 'EA', 'experimental', 'Experimental', ...
    install_path: str
    launch_command: str
    setup: Optional[SetupAction] = field(default=None, compare=False, repr=False)  # Run before launching

    @property
    def mods_dir(self) -> str:
        return get_mods_dir(self.install_path)

    async def run_setup(self) -> None:
        if self.setup is not None:
            await self.setup()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'display_name': self.display_name,
            'game_version': self.game_version,
            'branch': self.branch,
            'install_path': self.install_path,
            'launch_command': self.launch_command,
            'has_setup': self.setup is not None,
        }


@dataclass
class InstallFindResult:
    """Valid installs plus paths that looked like installs but failed validation"""
    installs: List[CandidateInstall] = field(default_factory=list)
    invalid_installs: List[str] = field(default_factory=list)

    @classmethod
    def merge(cls, results: Iterable['InstallFindResult']) -> 'InstallFindResult':
        """
        Combine results, dropping duplicates.

        The same directory can be reached through several roots (e.g.
        ~/.steam/steam is usually a symlink to ~/.local/share/Steam), so
        installs are compared by real path and the first one wins. A path
        that is valid in one result is never reported as invalid.
        """
        merged = cls()
        seen_valid = set()
        seen_invalid = set()
        for result in results:
            for install in result.installs:
                key = os.path.realpath(install.install_path)
                if key not in seen_valid:
                    seen_valid.add(key)
                    merged.installs.append(install)
            for path in result.invalid_installs:
                key = os.path.realpath(path)
                if key not in seen_invalid:
                    seen_invalid.add(key)
                    merged.invalid_installs.append(path)

        merged.invalid_installs = [
            path for path in merged.invalid_installs
            if os.path.realpath(path) not in seen_valid
        ]
        return merged


async def run_blocking(func: Callable, *args: Any) -> Any:
    """Run blocking I/O in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


async def gather_results(
    tasks: Sequence[Awaitable[InstallFindResult]],
    labels: Sequence[str],
    context: str,
) -> InstallFindResult:
    """
    Run independent discovery units concurrently and merge what succeeded.

    A unit that raises is logged and contributes nothing; it never cancels
    or hides the results of the other units.

    Args:
        tasks: One awaitable per unit of work
        labels: Human-readable name of each unit, for logging
        context: Log tag of the caller (e.g. 'Steam')

    Returns:
        Merged InstallFindResult of all successful units
    """
    results = await asyncio.gather(*tasks, return_exceptions=True)

    successful = []
    for label, result in zip(labels, results):
        if isinstance(result, Exception):
            logger.error(f"[{context}] Error while searching {label}: {result}", exc_info=result)
        elif isinstance(result, BaseException):
            raise result
        else:
            successful.append(result)
    return InstallFindResult.merge(successful)


class InstallFinder(ABC):
    """
    Abstract base class for install finders.

    Each finder handles one manifest dialect / launcher and turns what it
    finds on disk into CandidateInstall records.
    """

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Return the finder identifier (e.g., 'steam', 'epic')"""
        pass

    @abstractmethod
    async def find_installs(self) -> InstallFindResult:
        """
        Search for installations.

        Returns:
            InstallFindResult with valid and invalid installs. Finders should
            return partial results rather than raise when one location fails.
        """
        pass
