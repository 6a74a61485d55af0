"""Version strings embedded in Windows PE binaries (game exe, SML dll)."""

import logging
import re
from typing import Dict, Optional

import pefile

logger = logging.getLogger(__name__)

# Satisfactory builds carry "...-CL-<changelist>" in their ProductVersion
GAME_VERSION_PATTERN = re.compile(r'CL-(?P<version>\d+)')
UNKNOWN_GAME_VERSION = '0'


def _get_string_file_info(pe: pefile.PE) -> Optional[Dict[str, str]]:
    if not hasattr(pe, 'FileInfo'):
        return None
    for file_info in pe.FileInfo:
        for info in file_info:
            if hasattr(info, 'StringTable'):
                for string_table in info.StringTable:
                    return {
                        k.decode('ascii', errors='ignore'): v.rstrip(b'\0').decode('ascii', errors='ignore')
                        for k, v in string_table.entries.items()
                    }
    return None


def read_pe_string_info(path: str) -> Optional[Dict[str, str]]:
    """Read the StringFileInfo table of a PE file.

    Returns:
        Mapping like {'ProductVersion': ..., 'FileVersion': ...}, or None if
        the file is missing, not a PE file, or carries no version resource
    """
    try:
        pe = pefile.PE(path, fast_load=True)
    except (OSError, ValueError, pefile.PEFormatError) as e:
        logger.debug(f"[ExeVersion] Could not open {path} as PE: {e}")
        return None

    try:
        pe.parse_data_directories(directories=[pefile.DIRECTORY_ENTRY['IMAGE_DIRECTORY_ENTRY_RESOURCE']])
        return _get_string_file_info(pe)
    except Exception:
        logger.exception(f"[ExeVersion] Something weird happened reading version info of {path}")
        return None
    finally:
        pe.close()


def read_product_version(path: str) -> Optional[str]:
    """Read the embedded ProductVersion (falling back to FileVersion) of a binary."""
    info = read_pe_string_info(path)
    if not info:
        return None
    return info.get('ProductVersion') or info.get('FileVersion') or None


def get_game_version_from_exe(exe_path: str) -> str:
    """Get the game build number (changelist) from the game executable.

    Returns:
        Changelist number as a string, or '0' if it cannot be determined
    """
    return parse_game_version(read_product_version(exe_path))


def parse_game_version(version_string: Optional[str]) -> str:
    """Extract the changelist number from a version string like '++FactoryGame+rel-main-0.3.0-CL-146869'."""
    if not version_string:
        return UNKNOWN_GAME_VERSION
    match = GAME_VERSION_PATTERN.search(version_string)
    return match.group('version') if match else UNKNOWN_GAME_VERSION
