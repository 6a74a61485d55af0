from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import Mock

import pytest

from conftest import make_game_dir, write_vdf
from ficsit.services import SteamLaunchOptionsPatcher
from ficsit.stores import SteamFinder, SteamFlatpakFinder
from ficsit.stores.steam import parse_library_folders, read_library_folders

APP_ID = "526870"


def write_app_manifest(library: Path, install_dir: str = "Satisfactory", beta_key: str = "") -> Path:
    app_state = {"appid": APP_ID, "name": "Satisfactory", "installdir": install_dir}
    if beta_key:
        app_state["UserConfig"] = {"betakey": beta_key}
    return write_vdf(library / "steamapps" / f"appmanifest_{APP_ID}.acf", {"AppState": app_state})


def write_library_folders(steam_root: Path, *libraries: Path) -> Path:
    folders = {"contentstatsid": "-123"}
    folders["0"] = {"path": str(steam_root), "apps": {APP_ID: "123"}}
    for index, library in enumerate(libraries, start=1):
        folders[str(index)] = {"path": str(library)}
    return write_vdf(steam_root / "steamapps" / "libraryfolders.vdf", {"libraryfolders": folders})


def make_finder(*roots: Path, **kwargs) -> SteamFinder:
    return SteamFinder(
        steam_roots=[str(root) for root in roots],
        launch_command="steam steam://rungameid/526870",
        exe_version_reader=Mock(return_value="211839"),
        **kwargs,
    )


def test_parse_library_folders_current_format() -> None:
    manifest = {
        "libraryfolders": {
            "contentstatsid": "-42",
            "0": {"path": "/home/user/.local/share/Steam", "label": ""},
            "1": {"path": "/mnt/games/SteamLibrary"},
        }
    }
    assert parse_library_folders(manifest) == ["/home/user/.local/share/Steam", "/mnt/games/SteamLibrary"]


def test_parse_library_folders_legacy_format() -> None:
    manifest = {
        "LibraryFolders": {
            "TimeNextStatsReport": "1600000000",
            "ContentStatsID": "-42",
            "1": "D:\\SteamLibrary",
        }
    }
    assert parse_library_folders(manifest) == ["D:\\SteamLibrary"]


def test_read_library_folders_without_manifest(tmp_path: Path) -> None:
    assert read_library_folders(str(tmp_path)) == [str(tmp_path)]


@pytest.mark.asyncio
async def test_finds_install_in_steam_root(tmp_path: Path) -> None:
    steam_root = tmp_path / "Steam"
    write_app_manifest(steam_root)
    make_game_dir(steam_root / "steamapps" / "common" / "Satisfactory")

    result = await make_finder(steam_root).find_installs()

    assert result.invalid_installs == []
    assert len(result.installs) == 1
    install = result.installs[0]
    assert install.display_name == "Satisfactory Early Access (Steam)"
    assert install.branch == "EA"
    assert install.game_version == "211839"
    assert install.install_path == str(steam_root / "steamapps" / "common" / "Satisfactory")
    assert install.launch_command == "steam steam://rungameid/526870"
    assert install.setup is None


@pytest.mark.asyncio
async def test_experimental_branch(tmp_path: Path) -> None:
    steam_root = tmp_path / "Steam"
    write_app_manifest(steam_root, beta_key="experimental")
    make_game_dir(steam_root / "steamapps" / "common" / "Satisfactory")

    result = await make_finder(steam_root).find_installs()

    assert result.installs[0].display_name == "Satisfactory Experimental (Steam)"
    assert result.installs[0].branch == "experimental"


@pytest.mark.asyncio
async def test_libraries_are_probed_independently(tmp_path: Path) -> None:
    steam_root = tmp_path / "Steam"
    valid_lib = tmp_path / "lib-valid"
    missing_exe_lib = tmp_path / "lib-missing-exe"
    corrupt_lib = tmp_path / "lib-corrupt"
    empty_lib = tmp_path / "lib-empty"
    (steam_root / "steamapps").mkdir(parents=True)
    write_library_folders(steam_root, valid_lib, missing_exe_lib, corrupt_lib, empty_lib)

    write_app_manifest(valid_lib)
    make_game_dir(valid_lib / "steamapps" / "common" / "Satisfactory")
    write_app_manifest(missing_exe_lib)
    make_game_dir(missing_exe_lib / "steamapps" / "common" / "Satisfactory", with_exe=False)
    corrupt_manifest = corrupt_lib / "steamapps" / f"appmanifest_{APP_ID}.acf"
    corrupt_manifest.parent.mkdir(parents=True)
    corrupt_manifest.write_text('"AppState"\n{\n\t"installdir"\t\t"Satisfactory"\n', encoding="utf-8")
    (empty_lib / "steamapps").mkdir(parents=True)

    result = await make_finder(steam_root).find_installs()

    assert [install.install_path for install in result.installs] == [
        str(valid_lib / "steamapps" / "common" / "Satisfactory")
    ]
    assert result.invalid_installs == [str(missing_exe_lib / "steamapps" / "common" / "Satisfactory")]


@pytest.mark.asyncio
async def test_manifest_without_installdir_is_ignored(tmp_path: Path) -> None:
    steam_root = tmp_path / "Steam"
    write_vdf(steam_root / "steamapps" / f"appmanifest_{APP_ID}.acf", {"AppState": {"appid": APP_ID}})

    result = await make_finder(steam_root).find_installs()

    assert result.installs == []
    assert result.invalid_installs == []


@pytest.mark.asyncio
async def test_unreadable_library_folders_falls_back_to_root(tmp_path: Path) -> None:
    steam_root = tmp_path / "Steam"
    write_app_manifest(steam_root)
    make_game_dir(steam_root / "steamapps" / "common" / "Satisfactory")
    (steam_root / "steamapps" / "libraryfolders.vdf").write_text('"libraryfolders"\n{\n', encoding="utf-8")

    result = await make_finder(steam_root).find_installs()

    assert len(result.installs) == 1


@pytest.mark.asyncio
async def test_symlinked_roots_are_reported_once(tmp_path: Path) -> None:
    steam_root = tmp_path / "Steam"
    write_app_manifest(steam_root)
    make_game_dir(steam_root / "steamapps" / "common" / "Satisfactory")
    link = tmp_path / "steam-link"
    os.symlink(steam_root, link)

    result = await make_finder(link, steam_root).find_installs()

    assert len(result.installs) == 1


@pytest.mark.asyncio
async def test_no_steam_installation(tmp_path: Path) -> None:
    result = await make_finder(tmp_path / "nothing").find_installs()
    assert result.installs == []
    assert result.invalid_installs == []


@pytest.mark.asyncio
async def test_flatpak_finder_attaches_setup(tmp_path: Path) -> None:
    steam_root = tmp_path / "flatpak-steam"
    write_app_manifest(steam_root)
    make_game_dir(steam_root / "steamapps" / "common" / "Satisfactory")
    finder = SteamFlatpakFinder(steam_root=str(steam_root), exe_version_reader=Mock(return_value="0"))

    result = await finder.find_installs()

    assert finder.platform_name == "steam-flatpak"
    install = result.installs[0]
    assert install.launch_command == "flatpak run com.valvesoftware.Steam steam://rungameid/526870"
    assert isinstance(install.setup, SteamLaunchOptionsPatcher)
    assert install.setup.steam_root == str(steam_root)
    assert install.to_dict()["has_setup"] is True


@pytest.mark.asyncio
async def test_flatpak_not_installed(tmp_path: Path) -> None:
    finder = SteamFlatpakFinder(steam_root=str(tmp_path / "missing"))
    result = await finder.find_installs()
    assert result.installs == []
