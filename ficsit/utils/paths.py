"""Ficsit file path constants and utilities."""

import os
import sys
from pathlib import Path


def _xdg_dir(env_var: str, default: str) -> str:
    value = os.environ.get(env_var)
    return value if value else os.path.expanduser(default)


# Ficsit data and cache directories
FICSIT_DATA_DIR = os.path.join(_xdg_dir("XDG_DATA_HOME", "~/.local/share"), "ficsit")
FICSIT_CACHE_DIR = os.path.join(_xdg_dir("XDG_CACHE_HOME", "~/.cache"), "ficsit")

# Cache and data files
SML_CACHE_DIR = os.path.join(FICSIT_CACHE_DIR, "smlCache")
SETTINGS_PATH = os.path.join(FICSIT_DATA_DIR, "settings.json")

# Game constants
SATISFACTORY_APP_ID = "526870"
GAME_EXE_RELATIVE_PATH = os.path.join("FactoryGame", "Binaries", "Win64", "FactoryGame-Win64-Shipping.exe")
MODS_DIR_NAME = "mods"

# SML artifacts and their location inside the game directory
SML_DLL_FILE_NAME = "UE4-SML-Win64-Shipping.dll"
SML_PAK_FILE_NAME = "SML.pak"
SML_DLL_RELATIVE_PATH = os.path.join("loaders", SML_DLL_FILE_NAME)
SML_PAK_RELATIVE_PATH = os.path.join("loaders", SML_PAK_FILE_NAME)

# Steam locations
STEAM_NATIVE_ROOTS = [
    os.path.expanduser("~/.steam/steam"),
    os.path.expanduser("~/.local/share/Steam"),
]
STEAM_WINDOWS_ROOT = os.path.join(os.environ.get("PROGRAMFILES(X86)", r"C:\Program Files (x86)"), "Steam")
STEAM_FLATPAK_ROOT = os.path.expanduser("~/.var/app/com.valvesoftware.Steam/.steam/steam")

# Epic / Heroic / legendary locations
EPIC_MANIFESTS_DIR = os.path.join(
    os.environ.get("PROGRAMDATA", r"C:\ProgramData"), "Epic", "EpicGamesLauncher", "Data", "Manifests"
)
LEGENDARY_INSTALLED_JSON = [
    os.path.expanduser("~/.config/legendary/installed.json"),
    os.path.expanduser("~/.config/heroic/legendaryConfig/legendary/installed.json"),
    os.path.expanduser("~/.var/app/com.heroicgameslauncher.hgl/config/heroic/legendaryConfig/legendary/installed.json"),
]


def is_windows() -> bool:
    return sys.platform.startswith("win")


def get_sml_version_cache_dir(version: str, cache_root: str = SML_CACHE_DIR) -> Path:
    """Get the cache directory for one normalized SML version.

    Args:
        version: Normalized major.minor.patch version string
        cache_root: Root of the SML cache

    Returns:
        Path of the version's cache directory (may not exist yet)
    """
    return Path(cache_root) / version


def get_mods_dir(game_dir: str) -> str:
    """Get the mods directory of a Satisfactory installation."""
    return os.path.join(game_dir, MODS_DIR_NAME)


def ensure_dir(path: str) -> str:
    """Ensure a directory exists (recursively) and return it."""
    os.makedirs(path, exist_ok=True)
    return path


def ensure_ficsit_dirs() -> None:
    """Ensure the ficsit data and cache directories exist."""
    ensure_dir(FICSIT_DATA_DIR)
    ensure_dir(SML_CACHE_DIR)
