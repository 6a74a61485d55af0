"""
Filesystem install finder.

Probes directories the user configured by hand (settings.json
extra_install_paths), for installs no launcher knows about.
"""
import logging
import os
from typing import Callable, List

from .base import CandidateInstall, InstallFinder, InstallFindResult, gather_results, run_blocking
from ..utils.exe_version import get_game_version_from_exe
from ..utils.paths import GAME_EXE_RELATIVE_PATH

logger = logging.getLogger(__name__)


class FilesystemFinder(InstallFinder):
    """Checks a fixed list of directories for a Satisfactory install"""

    def __init__(
        self,
        paths: List[str],
        exe_version_reader: Callable[[str], str] = get_game_version_from_exe,
    ):
        self.paths = [os.path.expanduser(path) for path in paths if isinstance(path, str) and path]
        self.exe_version_reader = exe_version_reader

    @property
    def platform_name(self) -> str:
        return 'filesystem'

    async def find_installs(self) -> InstallFindResult:
        if not self.paths:
            return InstallFindResult()
        return await gather_results(
            [self.probe_directory(path) for path in self.paths],
            self.paths,
            'Filesystem',
        )

    async def probe_directory(self, path: str) -> InstallFindResult:
        if not os.path.isdir(path):
            logger.debug(f"[Filesystem] {path} does not exist")
            return InstallFindResult()

        game_exe = os.path.join(path, GAME_EXE_RELATIVE_PATH)
        if not os.path.isfile(game_exe):
            logger.info(f"[Filesystem] Game executable missing in {path}")
            return InstallFindResult(invalid_installs=[path])

        game_version = await run_blocking(self.exe_version_reader, game_exe)
        install = CandidateInstall(
            display_name=f"Satisfactory ({os.path.basename(os.path.normpath(path))})",
            game_version=game_version,
            branch='EA',
            install_path=path,
            launch_command=f'"{game_exe}"',
        )
        logger.info(f"[Filesystem] Found {install.display_name} at {path}")
        return InstallFindResult(installs=[install])
