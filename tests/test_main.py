from collections.abc import Callable

import pytest
from pytest import MonkeyPatch

from archbase import main
from archbase.lib.models.device import BlockDevice


@pytest.fixture
def as_root(monkeypatch: MonkeyPatch) -> None:
	monkeypatch.setattr('archbase.main.os.getuid', lambda: 0)
	monkeypatch.setattr('archbase.main._log_sys_info', lambda: None)


def test_list_scripts(capsys: pytest.CaptureFixture[str]) -> None:
	assert main.main(['--script', 'list']) == 0

	out = capsys.readouterr().out
	assert 'The following are viable --script options:' in out
	assert '    partition' in out
	assert '    list' not in out


def test_requires_root(monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.setattr('archbase.main.os.getuid', lambda: 1000)

	assert main.main(['--script', 'partition']) == 1
	assert 'requires root privileges' in capsys.readouterr().out


def test_cancelled_run_exits_with_error(
	as_root: None,
	devices: list[BlockDevice],
	answers: Callable[..., list[str]],
	monkeypatch: MonkeyPatch,
	capsys: pytest.CaptureFixture[str],
) -> None:
	monkeypatch.setattr('archbase.lib.interactions.disk_conf.list_candidate_disks', lambda min_size=None: devices)
	answers('1', 'no')

	assert main.main(['--script', 'partition']) == 1
	assert 'Operation cancelled by user' in capsys.readouterr().out


def test_no_disks(as_root: None, monkeypatch: MonkeyPatch) -> None:
	monkeypatch.setattr('archbase.lib.interactions.disk_conf.list_candidate_disks', lambda min_size=None: [])

	assert main.main(['--script', 'partition']) == 1


def test_unexpected_error_points_to_log(as_root: None, monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	def _boom(min_size: object = None) -> list[BlockDevice]:
		raise RuntimeError('lsblk vanished')

	monkeypatch.setattr('archbase.lib.interactions.disk_conf.list_candidate_disks', _boom)

	assert main.main(['--script', 'partition']) == 1

	out = capsys.readouterr().out
	assert 'RuntimeError: lsblk vanished' in out
	assert 'install.log' in out


def test_interrupt(as_root: None, monkeypatch: MonkeyPatch) -> None:
	def _interrupt(prompt: str = '') -> str:
		raise KeyboardInterrupt

	monkeypatch.setattr('builtins.input', _interrupt)
	monkeypatch.setattr('archbase.scripts.partition.plan_disk_layout', lambda config: input())

	assert main.main(['--script', 'partition']) == 130
