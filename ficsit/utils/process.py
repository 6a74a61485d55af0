"""Process liveness checks."""

import logging

import psutil

logger = logging.getLogger(__name__)


def _normalize_name(name: str) -> str:
    name = name.lower()
    return name[:-4] if name.endswith('.exe') else name


def is_process_running(name: str) -> bool:
    """
    Check whether a process with the given name is running.

    Names are compared case-insensitively, with or without a trailing .exe,
    so 'steam' matches both 'steam' and 'Steam.exe'.

    Args:
        name: Process name to look for

    Returns:
        True if at least one matching process exists
    """
    wanted = _normalize_name(name)
    for proc in psutil.process_iter(['pid', 'name']):
        try:
            proc_name = proc.info.get('name') or ''
            if _normalize_name(proc_name) == wanted:
                logger.debug(f"[Process] Found {proc_name} (PID {proc.info['pid']})")
                return True
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    return False
