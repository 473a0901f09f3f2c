import os

from .exceptions import ServiceException, SysCallError
from .general import SysCommand
from .output import info


def _unit_name(unit: str) -> str:
	if not os.path.splitext(unit)[1]:
		unit += '.service'  # Just to be safe
	return unit


def service_state(unit: str) -> str:
	state = SysCommand(
		f'systemctl show --no-pager -p SubState --value {_unit_name(unit)}',
		environment_vars={'SYSTEMD_COLORS': '0'},
	)

	return state.decode()


def enable_service(unit: str, now: bool = False) -> None:
	unit = _unit_name(unit)
	cmd = ['systemctl', 'enable']

	if now:
		cmd.append('--now')

	cmd.append(unit)

	info(f'Enabling {unit}')

	try:
		SysCommand(cmd)
	except SysCallError as err:
		raise ServiceException(f'Unable to enable {unit}: {err.message}') from err
