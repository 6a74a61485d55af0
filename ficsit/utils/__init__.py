# Utils package
from .paths import (
    get_mods_dir,
    get_sml_version_cache_dir,
    ensure_dir,
    ensure_ficsit_dirs,
    FICSIT_DATA_DIR,
    FICSIT_CACHE_DIR,
    SML_CACHE_DIR,
    SETTINGS_PATH,
    SATISFACTORY_APP_ID,
)
from .semver import coerce_version, is_valid_version

__all__ = [
    'get_mods_dir',
    'get_sml_version_cache_dir',
    'ensure_dir',
    'ensure_ficsit_dirs',
    'FICSIT_DATA_DIR',
    'FICSIT_CACHE_DIR',
    'SML_CACHE_DIR',
    'SETTINGS_PATH',
    'SATISFACTORY_APP_ID',
    'coerce_version',
    'is_valid_version',
]
