"""
Steam install finders (native and flatpak).

Steam keeps a list of library folders in
<steam>/steamapps/libraryfolders.vdf, and for each installed app an
appmanifest_<appid>.acf inside <library>/steamapps/ that names the install
directory under <library>/steamapps/common/ and the selected beta branch.
"""
import logging
import os
from typing import Any, Callable, Dict, List, Optional

from .base import CandidateInstall, InstallFinder, InstallFindResult, SetupAction, gather_results, run_blocking
from ..services.steam_setup import SteamLaunchOptionsPatcher
from ..utils.exe_version import get_game_version_from_exe
from ..utils.paths import (
    GAME_EXE_RELATIVE_PATH,
    SATISFACTORY_APP_ID,
    STEAM_FLATPAK_ROOT,
    STEAM_NATIVE_ROOTS,
    STEAM_WINDOWS_ROOT,
    is_windows,
)
from ..utils.vdf import get_ci, get_path_ci, load_vdf

logger = logging.getLogger(__name__)

LIBRARY_FOLDERS_FILE = 'libraryfolders.vdf'
EXPERIMENTAL_BETA_KEY = 'experimental'
DEFAULT_BRANCH = 'EA'


def parse_library_folders(manifest: Dict[str, Any]) -> List[str]:
    """
    Get library root paths from a parsed libraryfolders.vdf.

    Two dialects exist and are reduced to the same list here:
        legacy:  "LibraryFolders" { "1" "D:\\SteamLibrary" ... }
        current: "libraryfolders" { "0" { "path" "/mnt/games" ... } ... }
    Non-numeric keys (TimeNextStatsReport, ContentStatsID) are ignored.
    """
    section = get_ci(manifest, 'libraryfolders')
    if not isinstance(section, dict):
        return []

    paths = []
    for key, value in section.items():
        if not str(key).isdigit():
            continue
        if isinstance(value, str):
            paths.append(value)
        elif isinstance(value, dict):
            path = get_ci(value, 'path')
            if path:
                paths.append(path)
    return paths


def read_library_folders(steam_root: str) -> List[str]:
    """
    Get all library roots of a Steam installation, including the Steam root.

    Raises:
        OSError, SyntaxError: libraryfolders.vdf exists but cannot be parsed
    """
    manifest_path = os.path.join(steam_root, 'steamapps', LIBRARY_FOLDERS_FILE)
    libraries = []
    if os.path.isfile(manifest_path):
        libraries = parse_library_folders(load_vdf(manifest_path))
    libraries.append(steam_root)
    return libraries


def _dedupe_paths(paths: List[str]) -> List[str]:
    seen = set()
    unique = []
    for path in paths:
        key = os.path.realpath(path)
        if key not in seen:
            seen.add(key)
            unique.append(path)
    return unique


class SteamFinder(InstallFinder):
    """Finds Satisfactory in native Steam libraries"""

    def __init__(
        self,
        steam_roots: Optional[List[str]] = None,
        launch_command: Optional[str] = None,
        setup: Optional[SetupAction] = None,
        app_id: str = SATISFACTORY_APP_ID,
        exe_version_reader: Callable[[str], str] = get_game_version_from_exe,
    ):
        if steam_roots is None:
            steam_roots = [STEAM_WINDOWS_ROOT] if is_windows() else list(STEAM_NATIVE_ROOTS)
        if launch_command is None:
            launch_command = (
                f'start "" "steam://rungameid/{app_id}"' if is_windows()
                else f'steam steam://rungameid/{app_id}'
            )
        self.steam_roots = steam_roots
        self.launch_command = launch_command
        self.setup = setup
        self.app_id = app_id
        self.exe_version_reader = exe_version_reader

    @property
    def platform_name(self) -> str:
        return 'steam'

    async def find_installs(self) -> InstallFindResult:
        """Probe every library folder of every Steam root concurrently"""
        libraries: List[str] = []
        for steam_root in self.steam_roots:
            if not os.path.isdir(os.path.join(steam_root, 'steamapps')):
                logger.debug(f"[Steam] No Steam installation at {steam_root}")
                continue
            try:
                libraries.extend(await run_blocking(read_library_folders, steam_root))
            except Exception as e:
                logger.error(f"[Steam] Could not read library folders of {steam_root}: {e}")
                libraries.append(steam_root)

        libraries = _dedupe_paths(libraries)
        if not libraries:
            return InstallFindResult()

        logger.debug(f"[Steam] Searching {len(libraries)} library folder(s) ({self.platform_name})")
        return await gather_results(
            [self.probe_library(library) for library in libraries],
            libraries,
            'Steam',
        )

    async def probe_library(self, library: str) -> InstallFindResult:
        """
        Look for Satisfactory in one library folder.

        Returns:
            Empty result if the library has no app manifest or an unusable one,
            the install path as invalid if the executable is missing, otherwise
            one CandidateInstall
        """
        manifest_path = os.path.join(library, 'steamapps', f'appmanifest_{self.app_id}.acf')
        if not os.path.isfile(manifest_path):
            return InstallFindResult()

        manifest = await run_blocking(load_vdf, manifest_path)
        app_state = get_ci(manifest, 'AppState')
        install_dir = get_ci(app_state, 'installdir') if isinstance(app_state, dict) else None
        if not install_dir:
            logger.info(f"[Steam] Invalid steam manifest {manifest_path}")
            return InstallFindResult()

        full_install_path = os.path.join(library, 'steamapps', 'common', install_dir)
        game_exe = os.path.join(full_install_path, GAME_EXE_RELATIVE_PATH)
        if not os.path.isfile(game_exe):
            logger.info(f"[Steam] Game executable missing in {full_install_path}")
            return InstallFindResult(invalid_installs=[full_install_path])

        game_version = await run_blocking(self.exe_version_reader, game_exe)
        beta_key = get_path_ci(app_state, 'UserConfig', 'betakey') or ''
        is_experimental = beta_key.lower() == EXPERIMENTAL_BETA_KEY
        name = get_ci(app_state, 'name') or 'Satisfactory'

        install = CandidateInstall(
            display_name=f"{name} {'Experimental' if is_experimental else 'Early Access'} (Steam)",
            game_version=game_version,
            branch=beta_key or DEFAULT_BRANCH,
            install_path=full_install_path,
            launch_command=self.launch_command,
            setup=self.setup,
        )
        logger.info(f"[Steam] Found {install.display_name} at {full_install_path}")
        return InstallFindResult(installs=[install])


class SteamFlatpakFinder(SteamFinder):
    """Finds Satisfactory in flatpak Steam, which also needs the launch options setup"""

    def __init__(
        self,
        steam_root: str = STEAM_FLATPAK_ROOT,
        app_id: str = SATISFACTORY_APP_ID,
        setup: Optional[SetupAction] = None,
        exe_version_reader: Callable[[str], str] = get_game_version_from_exe,
    ):
        super().__init__(
            steam_roots=[steam_root],
            launch_command=f'flatpak run com.valvesoftware.Steam steam://rungameid/{app_id}',
            setup=setup or SteamLaunchOptionsPatcher(steam_root=steam_root, app_id=app_id),
            app_id=app_id,
            exe_version_reader=exe_version_reader,
        )

    @property
    def platform_name(self) -> str:
        return 'steam-flatpak'

    async def find_installs(self) -> InstallFindResult:
        if not os.path.isdir(os.path.join(self.steam_roots[0], 'steamapps')):
            logger.debug("[Steam] Steam-flatpak is not installed")
            return InstallFindResult()
        return await super().find_installs()
