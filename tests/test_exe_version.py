from __future__ import annotations

from pathlib import Path

import pytest

from ficsit.utils.exe_version import (
    UNKNOWN_GAME_VERSION,
    get_game_version_from_exe,
    parse_game_version,
    read_pe_string_info,
    read_product_version,
)


@pytest.mark.parametrize(
    "version_string, expected",
    [
        ("++FactoryGame+rel-main-0.8.3-CL-365306", "365306"),
        ("CL-152331", "152331"),
        ("1.0.0.0", UNKNOWN_GAME_VERSION),
        ("", UNKNOWN_GAME_VERSION),
        (None, UNKNOWN_GAME_VERSION),
    ],
)
def test_parse_game_version(version_string, expected) -> None:
    assert parse_game_version(version_string) == expected


def test_missing_file(tmp_path: Path) -> None:
    missing = str(tmp_path / "missing.exe")
    assert read_pe_string_info(missing) is None
    assert read_product_version(missing) is None
    assert get_game_version_from_exe(missing) == UNKNOWN_GAME_VERSION


@pytest.mark.parametrize("content", [b"", b"MZ not really a PE file", b"\x00" * 4096])
def test_not_a_pe_file(tmp_path: Path, content: bytes) -> None:
    path = tmp_path / "FactoryGame-Win64-Shipping.exe"
    path.write_bytes(content)
    assert read_product_version(str(path)) is None
    assert get_game_version_from_exe(str(path)) == UNKNOWN_GAME_VERSION
