from dataclasses import dataclass
from pathlib import Path

import pytest
from pytest import MonkeyPatch

from archbase.lib.output import FormattedOutput, debug, info, logger
from archbase.lib.storage import storage


@dataclass
class _Row:
	name: str
	size: int


def test_table_from_dataclasses() -> None:
	table = FormattedOutput.as_table([_Row('sda', 100), _Row('nvme0n1', 500)], capitalize=True)
	lines = table.splitlines()

	assert lines[0] == 'Name    | Size'
	assert set(lines[1]) == {'-'}
	assert lines[2] == 'sda     |  100'
	assert lines[3] == 'nvme0n1 |  500'


def test_table_from_dicts() -> None:
	table = FormattedOutput.as_table([{'#': '1', 'path': '/dev/sda'}])

	assert table.splitlines()[2] == '1 | /dev/sda'


def test_log_file(log_directory: Path) -> None:
	info('written to the log')

	assert logger.path == log_directory / 'install.log'
	assert '- INFO - written to the log' in logger.path.read_text()


def test_debug_is_hidden_by_default(capsys: pytest.CaptureFixture[str]) -> None:
	debug('only in the log')

	assert capsys.readouterr().out == ''
	assert 'only in the log' in logger.path.read_text()


def test_debug_flag(capsys: pytest.CaptureFixture[str], monkeypatch: MonkeyPatch) -> None:
	monkeypatch.setitem(storage, 'DEBUG', True)
	debug('shown')

	assert capsys.readouterr().out == 'shown\n'
