from __future__ import annotations

from unittest.mock import Mock, patch

import psutil

from ficsit.utils.process import is_process_running


def fake_process(name, pid=1):
    return Mock(info={"pid": pid, "name": name})


class VanishingProcess:
    @property
    def info(self):
        raise psutil.NoSuchProcess(42)


def test_finds_process_case_insensitively():
    processes = [fake_process("bash"), fake_process("Steam.exe", 42)]
    with patch("ficsit.utils.process.psutil.process_iter", return_value=processes):
        assert is_process_running("steam") is True


def test_process_not_running():
    processes = [VanishingProcess(), fake_process(None), fake_process("steamwebhelper")]
    with patch("ficsit.utils.process.psutil.process_iter", return_value=processes):
        assert is_process_running("steam") is False
