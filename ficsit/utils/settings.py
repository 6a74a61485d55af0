"""
User settings stored as JSON next to the other ficsit data.

Missing or malformed settings never stop discovery or installation: the
problem is logged and defaults are used instead.
"""

import json
import logging
import math
import os
from dataclasses import dataclass, asdict, field, fields
from typing import Any, Dict, List, Optional

from .paths import SETTINGS_PATH, SML_CACHE_DIR, ensure_dir

logger = logging.getLogger(__name__)

FICSIT_API_URL = "https://api.ficsit.app/v2/query"


@dataclass
class Settings:
    """Persisted user settings"""
    extra_install_paths: List[str] = field(default_factory=list)  # Probed by FilesystemFinder
    sml_cache_dir: str = SML_CACHE_DIR
    ficsit_api_url: str = FICSIT_API_URL
    download_retries: int = 3
    download_timeout: float = 300.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Settings':
        """Build settings from parsed JSON.

        Unknown keys (written by newer/older versions) are ignored. A value of
        the wrong type is logged and replaced by the default, so one bad entry
        never disables the others.
        """
        values = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = _VALIDATORS[f.name](data[f.name])
            if value is None:
                logger.warning(f"[Settings] Ignoring invalid value for {f.name}: {data[f.name]!r}")
                continue
            values[f.name] = value
        return cls(**values)


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _path_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    paths = [item for item in value if isinstance(item, str) and item]
    if len(paths) != len(value):
        logger.warning(f"[Settings] Dropping non-path entries from extra_install_paths: {value!r}")
    return paths


def _non_empty_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _positive_int(value: Any) -> Optional[int]:
    number = _as_float(value)
    if number is None or not number.is_integer() or number < 1:
        return None
    return int(number)


def _positive_float(value: Any) -> Optional[float]:
    number = _as_float(value)
    return number if number is not None and number > 0 else None


_VALIDATORS = {
    'extra_install_paths': _path_list,
    'sml_cache_dir': _non_empty_str,
    'ficsit_api_url': _non_empty_str,
    'download_retries': _positive_int,
    'download_timeout': _positive_float,
}


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from the settings file.

    Args:
        path: Settings file path (defaults to SETTINGS_PATH)

    Returns:
        Settings object; defaults if the file is missing or unreadable
    """
    path = path or SETTINGS_PATH
    if not os.path.exists(path):
        return Settings()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        settings = Settings.from_dict(data)
        logger.debug(f"[Settings] Loaded settings from {path}")
        return settings
    except Exception as e:
        logger.error(f"[Settings] Error loading settings from {path}: {e}")
        return Settings()


def save_settings(settings: Settings, path: Optional[str] = None) -> None:
    """Save settings to the settings file, creating its directory if needed."""
    path = path or SETTINGS_PATH
    ensure_dir(os.path.dirname(path))
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(settings.to_dict(), f, indent=2)
    logger.info(f"[Settings] Saved settings to {path}")
