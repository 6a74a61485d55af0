"""
Steam launch options setup for flatpak Steam.

Makes sure every local Steam profile launches Satisfactory with the
WINEDLLOVERRIDES SML needs, by patching
<steam>/userdata/<user>/config/localconfig.vdf.

Steam rewrites localconfig.vdf on exit, so the file is only written while
Steam is not running. Profiles are patched independently: a broken config in
one profile is logged and skipped, but "Steam is running" always reaches the
caller as a SetupError.
"""

import asyncio
import logging
import os
from typing import Any, Callable, Dict, Optional

from ..errors import SetupError
from ..utils.launch_options import LaunchOptionsState, patch_launch_options
from ..utils.paths import SATISFACTORY_APP_ID, STEAM_FLATPAK_ROOT
from ..utils.process import is_process_running
from ..utils.vdf import get_ci, get_path_ci, load_vdf, save_vdf

logger = logging.getLogger(__name__)

STEAM_SECTION_PATH = ('UserLocalConfigStore', 'Software', 'Valve', 'Steam')


def normalize_apps_section(config: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Get the per-app section of a parsed localconfig.vdf.

    Older Steam clients wrote the section as "Apps", newer ones as "apps".
    An existing "apps" section is always the one used, and any other
    spelling is left untouched next to it. Without an "apps" section the
    legacy one is moved under "apps", so the written file uses the current
    spelling.

    Returns:
        The apps mapping, or None if the config has no such section
    """
    steam_section = get_path_ci(config, *STEAM_SECTION_PATH)
    if not isinstance(steam_section, dict):
        return None

    if isinstance(steam_section.get('apps'), dict):
        return steam_section['apps']

    for key in list(steam_section.keys()):
        if key.lower() == 'apps' and isinstance(steam_section[key], dict):
            steam_section['apps'] = steam_section.pop(key)
            return steam_section['apps']
    return None


def _set_launch_options(app_entry: Dict[str, Any], value: str) -> None:
    for key in list(app_entry.keys()):
        if key.lower() == 'launchoptions' and key != 'LaunchOptions':
            del app_entry[key]
    app_entry['LaunchOptions'] = value


class SteamLaunchOptionsPatcher:
    """Patches Satisfactory's launch options in every local Steam profile."""

    def __init__(
        self,
        steam_root: str = STEAM_FLATPAK_ROOT,
        app_id: str = SATISFACTORY_APP_ID,
        process_checker: Callable[[str], bool] = is_process_running,
        process_name: str = 'steam',
    ):
        self.steam_root = steam_root
        self.app_id = app_id
        self.process_checker = process_checker
        self.process_name = process_name

    async def __call__(self) -> int:
        return await self.apply()

    async def apply(self) -> int:
        """Patch all user profiles.

        Returns:
            Number of profiles whose config was rewritten

        Raises:
            SetupError: A profile needed changes while Steam was running
        """
        userdata_dir = os.path.join(self.steam_root, 'userdata')
        if not os.path.isdir(userdata_dir):
            logger.debug(f"[SteamSetup] No userdata directory at {userdata_dir}")
            return 0

        users = sorted(
            entry for entry in os.listdir(userdata_dir)
            if os.path.isdir(os.path.join(userdata_dir, entry))
        )
        results = await asyncio.gather(
            *[self.patch_user(os.path.join(userdata_dir, user)) for user in users],
            return_exceptions=True,
        )

        changed = 0
        setup_error: Optional[SetupError] = None
        for user, result in zip(users, results):
            if isinstance(result, SetupError):
                setup_error = setup_error or result
            elif isinstance(result, Exception):
                logger.error(f"[SteamSetup] Error patching launch options for user {user}: {result}")
            elif isinstance(result, BaseException):
                raise result
            elif result:
                changed += 1

        if setup_error:
            raise setup_error
        return changed

    async def patch_user(self, user_dir: str) -> bool:
        """Patch the launch options of one profile.

        Args:
            user_dir: <steam>/userdata/<user> directory

        Returns:
            True if the config file was rewritten
        """
        config_path = os.path.join(user_dir, 'config', 'localconfig.vdf')
        if not os.path.isfile(config_path):
            logger.debug(f"[SteamSetup] No localconfig.vdf in {user_dir}")
            return False

        loop = asyncio.get_running_loop()
        config = await loop.run_in_executor(None, load_vdf, config_path)

        apps = normalize_apps_section(config)
        if apps is None:
            logger.error(f"[SteamSetup] Apps key not found in steam user config file {config_path}")
            return False

        app_entry = apps.setdefault(self.app_id, {})
        if not isinstance(app_entry, dict):
            logger.error(f"[SteamSetup] Unexpected entry for app {self.app_id} in {config_path}")
            return False

        state, launch_options = patch_launch_options(get_ci(app_entry, 'LaunchOptions'))
        if state == LaunchOptionsState.CONFORMANT:
            logger.debug(f"[SteamSetup] Launch options already set in {config_path}")
            return False

        if await loop.run_in_executor(None, self.process_checker, self.process_name):
            raise SetupError(
                'Could not set the WINEDLLOVERRIDES launch options because Steam is currently running. '
                'Please close Steam and retry.'
            )

        _set_launch_options(app_entry, launch_options)
        if not await loop.run_in_executor(None, save_vdf, config_path, config):
            raise OSError(f"Could not write {config_path}")

        logger.info(f"[SteamSetup] Updated launch options ({state.value}) in {config_path}")
        return True
