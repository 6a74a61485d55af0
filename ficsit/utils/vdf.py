"""Text VDF/ACF file utilities using the ValvePython vdf library"""

import logging
import os
import shutil
from typing import Any, Dict, Optional

import vdf

logger = logging.getLogger(__name__)


def load_vdf(path: str) -> Dict[str, Any]:
    """Load and parse a text VDF/ACF file.

    Escaped quotes inside values (\\") are unescaped by the parser and
    escaped again by save_vdf.

    Raises:
        OSError: If the file cannot be read
        SyntaxError: If the file is not valid VDF
    """
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        return vdf.load(f)


def save_vdf(path: str, data: Dict[str, Any]) -> bool:
    """Save data to a text VDF file.

    A .backup copy of the previous file is kept; the write is fsynced and
    read back, and the backup is restored if the result does not parse.

    Returns:
        True if the file was written and validated
    """
    backup_path = path + '.backup'
    try:
        if os.path.exists(path):
            shutil.copyfile(path, backup_path)

        with open(path, 'w', encoding='utf-8') as f:
            f.write(vdf.dumps(data, pretty=True))
            f.flush()
            os.fsync(f.fileno())  # Force write to disk

        try:
            validation_data = load_vdf(path)
        except SyntaxError as e:
            logger.error(f"[VDF] Write validation failed for {path}: {e}")
            if os.path.exists(backup_path):
                shutil.copyfile(backup_path, path)
            return False

        if set(validation_data.keys()) != set(data.keys()):
            logger.error(f"[VDF] Write validation failed for {path}: top-level keys differ")
            if os.path.exists(backup_path):
                shutil.copyfile(backup_path, path)
            return False

        logger.debug(f"[VDF] Wrote {path}")
        return True
    except OSError as e:
        logger.error(f"[VDF] Error saving {path}: {e}")
        return False


def get_ci(mapping: Any, key: str, default: Any = None) -> Any:
    """Case-insensitive key lookup in a parsed VDF mapping.

    Valve's KeyValues are case-insensitive but the vdf library preserves
    whatever casing is on disk, so exact matches are tried first.
    """
    if not isinstance(mapping, dict):
        return default
    if key in mapping:
        return mapping[key]
    lowered = key.lower()
    for k, v in mapping.items():
        if isinstance(k, str) and k.lower() == lowered:
            return v
    return default


def get_path_ci(mapping: Any, *keys: str) -> Optional[Any]:
    """Follow a chain of case-insensitive keys; None if any link is missing."""
    current = mapping
    for key in keys:
        current = get_ci(current, key)
        if current is None:
            return None
    return current
