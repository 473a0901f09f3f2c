import time
from collections.abc import Callable

from .exceptions import RequirementError, SysCallError
from .general import SysCommand
from .hardware import SysInfo
from .networking import ping
from .output import debug, error, info, success, warn

MAX_ATTEMPTS = 3
WAIT_TIME = 2
PING_HOST = 'archlinux.org'


def _retry(probe: Callable[[], bool], fix: Callable[[], None] | None = None) -> bool:
	for attempt in range(1, MAX_ATTEMPTS + 1):
		info(f'Attempt {attempt}/{MAX_ATTEMPTS}...')

		if fix is not None:
			fix()

		time.sleep(WAIT_TIME)

		if probe():
			return True

		warn('Failed')

	return False


def check_uefi() -> bool:
	info('Checking for UEFI boot mode...')

	if SysInfo.has_uefi():
		bitness = SysInfo.uefi_platform_size()
		success(f'{bitness}-bit UEFI detected' if bitness else 'UEFI detected')
		return True

	error('System not booted in UEFI mode')
	return False


def _is_connected() -> bool:
	try:
		return ping(PING_HOST) >= 0
	except OSError as err:
		debug(f'Ping to {PING_HOST} failed: {err}')
		return False


def check_internet() -> bool:
	info('Checking internet connection...')

	if _is_connected():
		success('Connected')
		return True

	warn('No internet connection. Attempting to reconnect...')

	if _retry(_is_connected):
		success('Connected')
		return True

	error(f'No internet connection after {MAX_ATTEMPTS} attempts')
	return False


def _is_clock_synced() -> bool:
	try:
		return SysCommand('timedatectl show --property=NTPSynchronized --value').decode() == 'yes'
	except SysCallError as err:
		debug(f'Could not query time synchronization: {err}')
		return False


def _enable_ntp() -> None:
	try:
		SysCommand('timedatectl set-ntp true')
	except SysCallError as err:
		debug(f'Could not enable NTP: {err}')


def check_clock() -> bool:
	info('Checking system clock synchronization...')

	if _is_clock_synced():
		success('System clock is synchronized')
		return True

	warn('System clock is not synchronized. Attempting to fix...')

	if _retry(_is_clock_synced, fix=_enable_ntp):
		success('System clock successfully synchronized')
		return True

	error(f'Could not synchronize clock after {MAX_ATTEMPTS} attempts')
	return False


def run_checks(skip_ntp: bool = False) -> None:
	checks: list[Callable[[], bool]] = [check_uefi, check_internet]

	if not skip_ntp:
		checks.append(check_clock)
	else:
		info('Skipping the system clock check (this can cause issues if time is out of sync during installation)')

	for check in checks:
		if not check():
			raise RequirementError(f'System check failed: {check.__name__}')
		print('-' * 32)

	info('All system checks passed successfully')
