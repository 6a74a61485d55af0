"""
Semantic version coercion for loader versions.

Loose version strings coming from users, release tags or PE metadata
("v3.1", "SML 2.2.1-beta", "3.0.0.0") are reduced to a strict
major.minor.patch string before they are used as cache keys or sent to
the metadata API.

Examples:
    - "2.2.1" -> "2.2.1"
    - "v3.1" -> "3.1.0"
    - "SML v2.0" -> "2.0.0"
    - "3.4.1.0" -> "3.4.1"
    - "latest" -> None
"""

import re
from typing import Optional

from packaging.version import InvalidVersion, Version

# First run of up to three dot-separated numbers, anywhere in the string
COERCE_PATTERN = re.compile(r'(?<!\d)(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?(?!\d)')


def coerce_version(raw: Optional[str]) -> Optional[str]:
    """
    Coerce a loose version string into a normalized major.minor.patch string.

    Args:
        raw: Version string in any loose form

    Returns:
        Normalized version string, or None if no version can be extracted
    """
    if not raw:
        return None

    match = COERCE_PATTERN.search(str(raw))
    if not match:
        return None

    major, minor, patch = (int(part or 0) for part in match.groups())
    try:
        version = Version(f"{major}.{minor}.{patch}")
    except InvalidVersion:
        return None
    return f"{version.major}.{version.minor}.{version.micro}"


def is_valid_version(raw: Optional[str]) -> bool:
    """Check whether a string coerces to a semantic version."""
    return coerce_version(raw) is not None


def version_key(raw: str) -> Version:
    """Sort key for version strings; non-coercible strings sort first."""
    return Version(coerce_version(raw) or "0.0.0")
