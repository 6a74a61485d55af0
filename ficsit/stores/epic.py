"""
Epic Games install finder.

Reads two manifest dialects that describe the same Epic installs:
- Epic Games Launcher: one JSON *.item file per installed app in
  %PROGRAMDATA%/Epic/EpicGamesLauncher/Data/Manifests
- legendary (also used by Heroic): installed.json, a JSON object keyed by
  app name
"""
import glob
import json
import logging
import os
from typing import Any, Callable, List, Optional, Tuple

from .base import CandidateInstall, InstallFinder, InstallFindResult, gather_results, run_blocking
from ..utils.exe_version import UNKNOWN_GAME_VERSION, get_game_version_from_exe, parse_game_version
from ..utils.paths import EPIC_MANIFESTS_DIR, GAME_EXE_RELATIVE_PATH, LEGENDARY_INSTALLED_JSON

logger = logging.getLogger(__name__)

# Epic app name -> (branch, branch display name)
SATISFACTORY_APP_NAMES = {
    'CrabEA': ('EA', 'Early Access'),
    'CrabTest': ('Experimental', 'Experimental'),
}

EGL_LAUNCH_COMMAND = 'start "" "com.epicgames.launcher://apps/{app_name}?action=launch&silent=true"'
LEGENDARY_LAUNCH_COMMAND = 'legendary launch {app_name}'
HEROIC_LAUNCH_COMMAND = 'xdg-open heroic://launch/legendary/{app_name}'


def _default_legendary_sources() -> List[Tuple[str, str]]:
    sources = []
    for path in LEGENDARY_INSTALLED_JSON:
        template = HEROIC_LAUNCH_COMMAND if 'heroic' in path else LEGENDARY_LAUNCH_COMMAND
        sources.append((path, template))
    return sources


def _read_json(path: str) -> Any:
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        return json.load(f)


class EpicFinder(InstallFinder):
    """Finds Satisfactory installed through Epic Games Launcher, legendary or Heroic"""

    def __init__(
        self,
        manifests_dir: str = EPIC_MANIFESTS_DIR,
        legendary_sources: Optional[List[Tuple[str, str]]] = None,
        exe_version_reader: Callable[[str], str] = get_game_version_from_exe,
    ):
        """
        Args:
            manifests_dir: Epic Games Launcher manifests directory
            legendary_sources: (installed.json path, launch command template) pairs
            exe_version_reader: Fallback game version reader
        """
        self.manifests_dir = manifests_dir
        self.legendary_sources = (
            legendary_sources if legendary_sources is not None else _default_legendary_sources()
        )
        self.exe_version_reader = exe_version_reader

    @property
    def platform_name(self) -> str:
        return 'epic'

    async def find_installs(self) -> InstallFindResult:
        tasks = []
        labels = []

        if os.path.isdir(self.manifests_dir):
            for item_path in sorted(glob.glob(os.path.join(self.manifests_dir, '*.item'))):
                tasks.append(self.probe_egl_manifest(item_path))
                labels.append(item_path)
        else:
            logger.debug(f"[Epic] No Epic Games Launcher manifests at {self.manifests_dir}")

        for installed_json, launch_template in self.legendary_sources:
            if os.path.isfile(installed_json):
                tasks.append(self.probe_legendary_installed(installed_json, launch_template))
                labels.append(installed_json)

        if not tasks:
            return InstallFindResult()
        return await gather_results(tasks, labels, 'Epic')

    async def probe_egl_manifest(self, item_path: str) -> InstallFindResult:
        """Check one Epic Games Launcher .item manifest"""
        manifest = await run_blocking(_read_json, item_path)
        if not isinstance(manifest, dict):
            logger.info(f"[Epic] Invalid Epic manifest {item_path}")
            return InstallFindResult()

        app_name = manifest.get('AppName') or manifest.get('MainGameAppName')
        if app_name not in SATISFACTORY_APP_NAMES:
            return InstallFindResult()

        return await self._build_result(
            app_name,
            manifest.get('InstallLocation'),
            manifest.get('AppVersionString'),
            EGL_LAUNCH_COMMAND.format(app_name=app_name),
            item_path,
        )

    async def probe_legendary_installed(self, installed_json: str, launch_template: str) -> InstallFindResult:
        """Check a legendary/Heroic installed.json for Satisfactory entries"""
        installed = await run_blocking(_read_json, installed_json)
        if not isinstance(installed, dict):
            logger.info(f"[Epic] Invalid legendary manifest {installed_json}")
            return InstallFindResult()

        results = []
        for app_name, entry in installed.items():
            if app_name not in SATISFACTORY_APP_NAMES or not isinstance(entry, dict):
                continue
            results.append(await self._build_result(
                app_name,
                entry.get('install_path'),
                entry.get('version'),
                launch_template.format(app_name=app_name),
                installed_json,
            ))
        return InstallFindResult.merge(results)

    async def _build_result(
        self,
        app_name: str,
        install_path: Optional[str],
        version_string: Optional[str],
        launch_command: str,
        source: str,
    ) -> InstallFindResult:
        if not install_path:
            logger.info(f"[Epic] No install location for {app_name} in {source}")
            return InstallFindResult()

        game_exe = os.path.join(install_path, GAME_EXE_RELATIVE_PATH)
        if not os.path.isfile(game_exe):
            logger.info(f"[Epic] Game executable missing in {install_path}")
            return InstallFindResult(invalid_installs=[install_path])

        game_version = parse_game_version(version_string)
        if game_version == UNKNOWN_GAME_VERSION:
            game_version = await run_blocking(self.exe_version_reader, game_exe)

        branch, branch_name = SATISFACTORY_APP_NAMES[app_name]
        install = CandidateInstall(
            display_name=f"Satisfactory {branch_name} (Epic Games)",
            game_version=game_version,
            branch=branch,
            install_path=install_path,
            launch_command=launch_command,
        )
        logger.info(f"[Epic] Found {install.display_name} at {install_path}")
        return InstallFindResult(installs=[install])
