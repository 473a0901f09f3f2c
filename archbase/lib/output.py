import logging
import os
import sys
from dataclasses import asdict, is_dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .storage import storage

_ANSI_COLORS = {
	'black': '30',
	'red': '31',
	'green': '32',
	'yellow': '33',
	'blue': '34',
	'magenta': '35',
	'cyan': '36',
	'white': '37',
	'gray': '38;5;246',
}


class FormattedOutput:
	@staticmethod
	def _as_record(obj: Any) -> dict[str, Any]:
		if isinstance(obj, dict):
			return obj
		if hasattr(obj, 'table_data'):
			return obj.table_data()
		if is_dataclass(obj) and not isinstance(obj, type):
			return asdict(obj)

		return vars(obj)

	@staticmethod
	def _is_number(value: Any) -> bool:
		return isinstance(value, int | float) or (isinstance(value, str) and value.isnumeric())

	@classmethod
	def as_table(cls, obj: list[Any], capitalize: bool = False) -> str:
		"""
		Renders a list of records (dicts, dataclasses or objects
		providing table_data()) as a plain text table, one record per line.
		Numeric cells are right aligned.
		"""
		records = [cls._as_record(o) for o in obj]

		widths: dict[str, int] = {}
		for record in records:
			for key, value in record.items():
				widths[key] = max(widths.get(key, len(key)), len(str(value)))

		headers = []
		for key, width in widths.items():
			header = key.replace('_', ' ')
			headers.append((header.capitalize() if capitalize else header).ljust(width))

		header_line = ' | '.join(headers)
		lines = [header_line, '-' * (len(header_line) + 1)]

		for record in records:
			cells = []
			for key, width in widths.items():
				value = record.get(key, '')
				cells.append(str(value).rjust(width) if cls._is_number(value) else str(value).ljust(width))
			lines.append(' | '.join(cells))

		return '\n'.join(lines) + '\n'


class Logger:
	"""
	Appends every message, including the ones not printed, to the log file
	in storage['LOG_PATH'].
	"""

	@property
	def directory(self) -> Path:
		return Path(storage['LOG_PATH'])

	@property
	def path(self) -> Path:
		return self.directory / storage['LOG_FILE']

	def _check_permissions(self) -> None:
		log_file = self.path

		try:
			self.directory.mkdir(exist_ok=True, parents=True)
			log_file.touch(exist_ok=True)
		except PermissionError:
			fallback = Path('./').absolute()
			if self.directory == fallback:
				raise

			# Fallback to creating the log file in the current folder
			storage['LOG_PATH'] = fallback

			warn(f'Not enough permission to place log file at {log_file}, creating it in {self.path} instead')

	def log(self, level: int, content: str) -> None:
		self._check_permissions()

		timestamp = datetime.now(tz=UTC).strftime('%Y-%m-%d %H:%M:%S')

		with self.path.open('a') as f:
			f.write(f'[{timestamp}] - {logging.getLevelName(level)} - {content}\n')


logger = Logger()


def _supports_color() -> bool:
	supported_platform = sys.platform != 'win32' or 'ANSICON' in os.environ
	is_a_tty = hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()

	return supported_platform and is_a_tty


def _stylize_output(text: str, fg: str) -> str:
	return f'\033[{_ANSI_COLORS[fg]}m{text}\033[0m'


def info(*msgs: str, fg: str = 'blue') -> None:
	log(*msgs, level=logging.INFO, fg=fg)


def success(*msgs: str, fg: str = 'green') -> None:
	log(*msgs, level=logging.INFO, fg=fg)


def debug(*msgs: str, fg: str = 'white') -> None:
	log(*msgs, level=logging.DEBUG, fg=fg)


def error(*msgs: str, fg: str = 'red') -> None:
	log(*msgs, level=logging.ERROR, fg=fg)


def warn(*msgs: str, fg: str = 'yellow') -> None:
	log(*msgs, level=logging.WARNING, fg=fg)


def log(*msgs: str, level: int = logging.INFO, fg: str = 'white') -> None:
	text = ' '.join([str(x) for x in msgs])

	logger.log(level, text)

	# debug messages only end up in the log file unless --debug is given
	if level == logging.DEBUG and not storage['DEBUG']:
		return

	if _supports_color():
		text = _stylize_output(text, fg)

	print(text)
