"""Guided Arch Linux base system preparation."""

import importlib
import os
import sys
import textwrap
import traceback

from .lib.args import SCRIPTS, ArgsHandler
from .lib.disk.utils import disk_layouts
from .lib.exceptions import DiskError, NoEligibleDisk, PackageError, RequirementError, ServiceException, UserCancelled
from .lib.hardware import SysInfo
from .lib.output import debug, error, logger, warn


def _log_sys_info() -> None:
	debug(f'UEFI mode: {SysInfo.has_uefi()}')

	# For support reasons, log the disk layout before anything gets touched
	debug(f'Disk states before partitioning:\n{disk_layouts()}')


def _list_scripts() -> str:
	lines = ['The following are viable --script options:']

	for script in SCRIPTS:
		if script != 'list':
			lines.append(f'    {script}')

	return '\n'.join(lines)


def run(argv: list[str] | None = None) -> int:
	"""
	Loads the script given with --script (default: guided) from the
	scripts/ folder and runs it.
	"""
	handler = ArgsHandler(argv)
	script = handler.args.script

	if script == 'list':
		print(_list_scripts())
		return 0

	if os.getuid() != 0:
		print('archbase requires root privileges to run. See --help for more.')
		return 1

	_log_sys_info()

	module = importlib.import_module(f'archbase.scripts.{script}')
	module.main(handler)

	return 0


def _error_message(exc: Exception) -> None:
	err = ''.join(traceback.format_exception(exc))
	error(err)

	text = textwrap.dedent(
		f"""\
		archbase experienced the above error.
		The log file "{logger.path}" has the details, including every command that was run.
		"""
	)
	warn(text)


def main(argv: list[str] | None = None) -> int:
	try:
		return run(argv)
	except KeyboardInterrupt:
		sys.stdout.write('\n')
		error('Operation cancelled by user')
		return 130
	except (NoEligibleDisk, UserCancelled, RequirementError, DiskError, PackageError, ServiceException) as err:
		error(str(err))
		return 1
	except Exception as exc:
		_error_message(exc)
		return 1


if __name__ == '__main__':
	sys.exit(main())
