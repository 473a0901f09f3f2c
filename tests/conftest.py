import shlex
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from pytest import MonkeyPatch

from archbase.lib.disk.utils import LsblkOutput
from archbase.lib.exceptions import SysCallError
from archbase.lib.models.device import BlockDevice, Size, Unit
from archbase.lib.storage import storage

_SYSCOMMAND_USERS = [
	'archbase.lib.checks',
	'archbase.lib.disk.device_handler',
	'archbase.lib.disk.utils',
	'archbase.lib.pacman',
	'archbase.lib.services',
	'archbase.scripts.docker',
]


class _FakeResult:
	def __init__(self, output: bytes) -> None:
		self._output = output
		self.exit_code = 0

	def decode(self, *args: str, **kwargs: str) -> str:
		return self._output.decode().strip()

	def output(self, remove_cr: bool = True) -> bytes:
		return self._output


class CommandRecorder:
	"""
	Takes the place of SysCommand, remembers what would have been executed
	"""

	def __init__(self) -> None:
		self.commands: list[list[str]] = []
		self._outputs: dict[str, str | Callable[[], str]] = {}
		self._failures: dict[str, int] = {}

	def respond(self, prefix: str, output: str | Callable[[], str]) -> None:
		self._outputs[prefix] = output

	def fail(self, prefix: str, exit_code: int = 1) -> None:
		self._failures[prefix] = exit_code

	def lines(self) -> list[str]:
		return [' '.join(cmd) for cmd in self.commands]

	def __call__(self, cmd: str | list[str], **kwargs: object) -> _FakeResult:
		if isinstance(cmd, str):
			cmd = shlex.split(cmd)

		self.commands.append(list(cmd))
		line = ' '.join(cmd)

		for prefix, exit_code in self._failures.items():
			if line.startswith(prefix):
				raise SysCallError(f'{cmd} exited with abnormal exit code [{exit_code}]', exit_code, worker_log=b'failure')

		for prefix, output in self._outputs.items():
			if line.startswith(prefix):
				text = output() if callable(output) else output
				return _FakeResult(text.encode())

		return _FakeResult(b'')


@pytest.fixture(autouse=True)
def log_directory(tmp_path: Path, monkeypatch: MonkeyPatch) -> Path:
	log_path = tmp_path / 'log'
	monkeypatch.setitem(storage, 'LOG_PATH', log_path)
	monkeypatch.setitem(storage, 'DEBUG', False)
	return log_path


@pytest.fixture
def recorder(monkeypatch: MonkeyPatch) -> CommandRecorder:
	fake = CommandRecorder()

	for module in _SYSCOMMAND_USERS:
		monkeypatch.setattr(f'{module}.SysCommand', fake)

	return fake


@pytest.fixture
def answers(monkeypatch: MonkeyPatch) -> Callable[..., list[str]]:
	"""
	Feeds the given answers to input() one by one and returns
	the list of prompts that were shown.
	"""

	def _feed(*values: str) -> list[str]:
		prompts: list[str] = []
		remaining: Iterator[str] = iter(values)

		def _input(prompt: str = '') -> str:
			prompts.append(prompt)
			try:
				return next(remaining)
			except StopIteration:
				raise EOFError

		monkeypatch.setattr('builtins.input', _input)
		return prompts

	return _feed


@pytest.fixture(scope='session')
def lsblk_fixture() -> Path:
	return Path(__file__).parent / 'data' / 'lsblk_output.json'


@pytest.fixture
def lsblk_output(lsblk_fixture: Path, monkeypatch: MonkeyPatch) -> LsblkOutput:
	output = LsblkOutput.model_validate_json(lsblk_fixture.read_text())
	monkeypatch.setattr('archbase.lib.disk.utils._fetch_lsblk_info', lambda dev_path=None: output)
	return output


@pytest.fixture
def devices() -> list[BlockDevice]:
	return [
		BlockDevice(Path('/dev/sda'), Size(100, Unit.GiB), 'Samsung SSD 870 EVO'),
		BlockDevice(Path('/dev/nvme0n1'), Size(500, Unit.GiB), 'WD Blue SN570 500GB'),
		BlockDevice(Path('/dev/vda'), Size(20, Unit.GiB), 'Unknown'),
	]
