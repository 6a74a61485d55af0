from __future__ import annotations

from pathlib import Path
import sys

import pytest
import vdf

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

GAME_EXE_PARTS = ("FactoryGame", "Binaries", "Win64", "FactoryGame-Win64-Shipping.exe")


def make_game_dir(path: Path, with_exe: bool = True) -> Path:
    """Create a fake Satisfactory install directory."""
    path.mkdir(parents=True, exist_ok=True)
    if with_exe:
        exe = path.joinpath(*GAME_EXE_PARTS)
        exe.parent.mkdir(parents=True, exist_ok=True)
        exe.write_bytes(b"MZ not really a PE file")
    return path


def write_vdf(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(vdf.dumps(data, pretty=True), encoding="utf-8")
    return path


@pytest.fixture
def game_dir(tmp_path: Path) -> Path:
    return make_game_dir(tmp_path / "Satisfactory")
