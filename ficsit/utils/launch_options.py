"""
Launch Options Patcher - WINEDLLOVERRIDES state machine

Satisfactory run through flatpak Steam needs the msdia140/xinput1_3 DLL
overrides for SML to load. This module decides, from the current Steam
LaunchOptions string alone, which of five states it is in and what the
conformant string looks like. Reading and writing Steam's config is done by
services.steam_setup.

Override block: WINEDLLOVERRIDES="<segment>;<segment>;..."
(quotes as returned by the vdf parser, which unescapes \\")

States:
    - ABSENT: no launch options at all
    - FLAG_MISSING: options exist but have no WINEDLLOVERRIDES block
    - SUBVALUE_MISSING: a block exists without the required segment
    - DUPLICATED: the required segment repeats back to back (";R;R")
    - CONFORMANT: nothing to do

Examples:
    - "" -> 'WINEDLLOVERRIDES="msdia140.dll,xinput1_3.dll=n,b" %command%'
    - "-dx12 %command%"
        -> 'WINEDLLOVERRIDES="msdia140.dll,xinput1_3.dll=n,b" -dx12 %command%'
    - 'WINEDLLOVERRIDES="dxgi=n" %command%'
        -> 'WINEDLLOVERRIDES="dxgi=n;msdia140.dll,xinput1_3.dll=n,b" %command%'
"""

import re
from enum import Enum
from typing import Optional, Tuple

REQUIRED_DLL_OVERRIDES = 'msdia140.dll,xinput1_3.dll=n,b'
OVERRIDES_SEPARATOR = ';'

# Only the first block is considered, like Steam/Proton's own env handling
WINE_DLL_OVERRIDES_PATTERN = re.compile(r'WINEDLLOVERRIDES="(.*?)"')


class LaunchOptionsState(str, Enum):
    ABSENT = "absent"
    FLAG_MISSING = "flag_missing"
    SUBVALUE_MISSING = "subvalue_missing"
    DUPLICATED = "duplicated"
    CONFORMANT = "conformant"


def format_overrides_block(value: str) -> str:
    return f'WINEDLLOVERRIDES="{value}"'


def _has_adjacent_duplicate(segments: list, required: str) -> bool:
    return any(
        first == required and second == required
        for first, second in zip(segments, segments[1:])
    )


def _collapse_adjacent_duplicates(segments: list, required: str) -> list:
    collapsed = []
    for segment in segments:
        if segment == required and collapsed and collapsed[-1] == required:
            continue
        collapsed.append(segment)
    return collapsed


def classify_launch_options(launch_options: Optional[str], required: str = REQUIRED_DLL_OVERRIDES) -> LaunchOptionsState:
    """
    Decide which state a LaunchOptions string is in.

    Args:
        launch_options: Current LaunchOptions value (None if the key is absent)
        required: DLL override segment that must be present

    Returns:
        The LaunchOptionsState of the string
    """
    if not launch_options:
        return LaunchOptionsState.ABSENT

    match = WINE_DLL_OVERRIDES_PATTERN.search(launch_options)
    if not match:
        return LaunchOptionsState.FLAG_MISSING

    overrides = match.group(1)
    if required not in overrides:
        return LaunchOptionsState.SUBVALUE_MISSING

    if _has_adjacent_duplicate(overrides.split(OVERRIDES_SEPARATOR), required):
        return LaunchOptionsState.DUPLICATED

    return LaunchOptionsState.CONFORMANT


def patch_launch_options(launch_options: Optional[str], required: str = REQUIRED_DLL_OVERRIDES) -> Tuple[LaunchOptionsState, str]:
    """
    Compute the conformant LaunchOptions string.

    Applying the patch to its own output is always a no-op, and a string in
    the CONFORMANT state is returned unchanged.

    Args:
        launch_options: Current LaunchOptions value (None if the key is absent)
        required: DLL override segment that must be present

    Returns:
        Tuple of (state of the input, patched string)
    """
    state = classify_launch_options(launch_options, required)

    if state == LaunchOptionsState.ABSENT:
        return state, f'{format_overrides_block(required)} %command%'

    if state == LaunchOptionsState.FLAG_MISSING:
        return state, f'{format_overrides_block(required)} {launch_options}'

    if state == LaunchOptionsState.CONFORMANT:
        return state, launch_options

    match = WINE_DLL_OVERRIDES_PATTERN.search(launch_options)
    overrides = match.group(1)

    if state == LaunchOptionsState.SUBVALUE_MISSING:
        if overrides.endswith(OVERRIDES_SEPARATOR):
            overrides = overrides[:-len(OVERRIDES_SEPARATOR)]
        new_overrides = f'{overrides}{OVERRIDES_SEPARATOR}{required}' if overrides else required
    else:
        segments = _collapse_adjacent_duplicates(overrides.split(OVERRIDES_SEPARATOR), required)
        new_overrides = OVERRIDES_SEPARATOR.join(segments)

    patched = launch_options[:match.start()] + format_overrides_block(new_overrides) + launch_options[match.end():]
    return state, patched


def needs_patch(launch_options: Optional[str], required: str = REQUIRED_DLL_OVERRIDES) -> bool:
    """Check if the LaunchOptions string must be rewritten."""
    return classify_launch_options(launch_options, required) != LaunchOptionsState.CONFORMANT
