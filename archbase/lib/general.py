from __future__ import annotations

import os
import re
import shlex
import stat
import subprocess
import time
from collections.abc import Iterator
from pathlib import Path
from shutil import which
from typing import override

from .exceptions import RequirementError, SysCallError
from .output import debug
from .storage import storage

_VT100_ESCAPE_REGEX = r'\x1B\[[?0-9;]*[a-zA-Z]'
_VT100_ESCAPE_REGEX_BYTES = _VT100_ESCAPE_REGEX.encode()


def locate_binary(name: str) -> str:
	if path := which(name):
		return path
	raise RequirementError(f'Binary {name} does not exist.')


def clear_vt100_escape_codes(data: bytes) -> bytes:
	return re.sub(_VT100_ESCAPE_REGEX_BYTES, b'', data)


class SysCommand:
	"""
	Runs an external utility to completion and keeps its combined
	stdout/stderr. A non-zero exit code raises SysCallError, a missing
	binary raises RequirementError.
	"""

	def __init__(
		self,
		cmd: str | list[str],
		environment_vars: dict[str, str] | None = None,
	):
		if isinstance(cmd, str):
			cmd = shlex.split(cmd)

		if cmd and not cmd[0].startswith(('/', './')):
			cmd[0] = locate_binary(cmd[0])

		self.cmd = cmd
		# define the standard locale for command outputs. For now the C ascii one.
		self.environment_vars = {'LC_ALL': 'C'}
		if environment_vars:
			self.environment_vars.update(environment_vars)

		self.exit_code: int | None = None
		self._trace_log = b''

		self._execute()

	def _execute(self) -> None:
		_log_cmd(self.cmd)
		debug(f'Executing: {" ".join(self.cmd)}')

		proc = subprocess.run(
			self.cmd,
			stdin=subprocess.DEVNULL,
			stdout=subprocess.PIPE,
			stderr=subprocess.STDOUT,
			env={**os.environ, **self.environment_vars},
		)

		self.exit_code = proc.returncode
		self._trace_log = proc.stdout or b''

		if self.exit_code != 0:
			raise SysCallError(
				f'{self.cmd} exited with abnormal exit code [{self.exit_code}]: {self.decode()[-500:]}',
				self.exit_code,
				worker_log=self._trace_log,
			)

	def __iter__(self) -> Iterator[bytes]:
		for line in self._trace_log.splitlines():
			if line:
				yield clear_vt100_escape_codes(line) + b'\n'

	@override
	def __repr__(self) -> str:
		return self.decode('UTF-8', errors='backslashreplace')

	def decode(self, encoding: str = 'utf-8', errors: str = 'backslashreplace', strip: bool = True) -> str:
		val = self._trace_log.decode(encoding, errors=errors)

		if strip:
			return val.strip()
		return val

	def output(self, remove_cr: bool = True) -> bytes:
		if remove_cr:
			return self._trace_log.replace(b'\r\n', b'\n')

		return self._trace_log


def _log_cmd(cmd: list[str]) -> None:
	history_logfile = Path(storage['LOG_PATH']) / 'cmd_history.txt'

	change_perm = False
	if history_logfile.exists() is False:
		change_perm = True

	try:
		with history_logfile.open('a') as cmd_log:
			cmd_log.write(f'{time.time()} {cmd}\n')

		if change_perm:
			history_logfile.chmod(stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP)
	except (PermissionError, FileNotFoundError):
		# If history_logfile does not exist, ignore the error
		pass
