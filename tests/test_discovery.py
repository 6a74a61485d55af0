from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from ficsit.stores import (
    CandidateInstall,
    EpicFinder,
    FilesystemFinder,
    InstallDiscovery,
    InstallFinder,
    InstallFindResult,
    SteamFinder,
    SteamFlatpakFinder,
)
from ficsit.stores.manager import default_finders
from ficsit.utils.settings import Settings, load_settings


def make_install(path: str, name: str = "Satisfactory") -> CandidateInstall:
    return CandidateInstall(
        display_name=name,
        game_version="211839",
        branch="EA",
        install_path=path,
        launch_command="steam steam://rungameid/526870",
    )


class StaticFinder(InstallFinder):
    def __init__(self, name: str, result: InstallFindResult):
        self.name = name
        self.result = result

    @property
    def platform_name(self) -> str:
        return self.name

    async def find_installs(self) -> InstallFindResult:
        return self.result


class FailingFinder(StaticFinder):
    async def find_installs(self) -> InstallFindResult:
        raise RuntimeError("manifest directory exploded")


@pytest.mark.asyncio
async def test_failing_finder_does_not_hide_others(tmp_path: Path) -> None:
    install = make_install(str(tmp_path / "game"))
    discovery = InstallDiscovery([
        FailingFinder("broken", InstallFindResult()),
        StaticFinder("steam", InstallFindResult(installs=[install])),
    ])

    result = await discovery.discover()

    assert result.installs == [install]


@pytest.mark.asyncio
async def test_same_install_from_two_finders_is_reported_once(tmp_path: Path) -> None:
    game = tmp_path / "game"
    game.mkdir()
    first = make_install(str(game), "Satisfactory Early Access (Steam)")
    second = make_install(str(game) + "/", "Satisfactory (game)")
    discovery = InstallDiscovery([
        StaticFinder("steam", InstallFindResult(installs=[first])),
        StaticFinder("filesystem", InstallFindResult(installs=[second])),
    ])

    result = await discovery.discover()

    assert result.installs == [first]


@pytest.mark.asyncio
async def test_valid_install_is_not_also_reported_invalid(tmp_path: Path) -> None:
    game = str(tmp_path / "game")
    other = str(tmp_path / "other")
    discovery = InstallDiscovery([
        StaticFinder("a", InstallFindResult(invalid_installs=[game, other])),
        StaticFinder("b", InstallFindResult(installs=[make_install(game)])),
    ])

    result = await discovery.discover()

    assert [install.install_path for install in result.installs] == [game]
    assert result.invalid_installs == [other]


@pytest.mark.asyncio
async def test_register_finder(tmp_path: Path) -> None:
    discovery = InstallDiscovery([])
    install = make_install(str(tmp_path / "game"))

    discovery.register_finder(StaticFinder("extra", InstallFindResult(installs=[install])))

    assert [finder.platform_name for finder in discovery.finders] == ["extra"]
    assert (await discovery.discover()).installs == [install]


@pytest.mark.asyncio
async def test_candidate_install_setup() -> None:
    setup = AsyncMock()
    install = CandidateInstall("Satisfactory", "0", "EA", "/games/sf", "run", setup=setup)

    await install.run_setup()

    setup.assert_awaited_once_with()
    # setup is not part of equality
    assert install == CandidateInstall("Satisfactory", "0", "EA", "/games/sf", "run")
    assert install.mods_dir.endswith("mods")
    assert install.to_dict() == {
        "display_name": "Satisfactory",
        "game_version": "0",
        "branch": "EA",
        "install_path": "/games/sf",
        "launch_command": "run",
        "has_setup": True,
    }


@pytest.mark.asyncio
async def test_run_setup_without_setup_is_noop() -> None:
    await make_install("/games/sf").run_setup()


def test_default_finders_on_linux() -> None:
    settings = Settings(extra_install_paths=["/srv/satisfactory"])
    with patch("ficsit.stores.manager.is_windows", return_value=False):
        finders = default_finders(settings)

    assert [type(finder) for finder in finders] == [SteamFinder, SteamFlatpakFinder, EpicFinder, FilesystemFinder]
    assert finders[-1].paths == ["/srv/satisfactory"]


def test_default_finders_on_windows() -> None:
    with patch("ficsit.stores.manager.is_windows", return_value=True):
        finders = default_finders(Settings())

    assert SteamFlatpakFinder not in [type(finder) for finder in finders]


def test_bad_install_paths_setting_does_not_break_discovery(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text('{"extra_install_paths": [42, "/srv/satisfactory"]}', encoding="utf-8")
    settings = load_settings(str(settings_path))

    with patch("ficsit.stores.manager.is_windows", return_value=False):
        finders = default_finders(settings)

    assert finders[-1].paths == ["/srv/satisfactory"]
    assert FilesystemFinder([42, "", str(tmp_path)]).paths == [str(tmp_path)]
