# Keeping this in a dict ensures that variables are shared across imports.
from pathlib import Path
from typing import TypedDict


class _StorageDict(TypedDict):
	LOG_PATH: Path
	LOG_FILE: str
	DEBUG: bool


storage: _StorageDict = {
	'LOG_PATH': Path('/var/log/archbase'),
	'LOG_FILE': 'install.log',
	'DEBUG': False,
}
