import time
from pathlib import Path

from ..exceptions import PackageError, SysCallError
from ..general import SysCommand
from ..output import info, warn

_PACMAN_DB_LOCK = Path('/var/lib/pacman/db.lck')
_LOCK_GRACE_PERIOD = 60 * 10


class Pacman:
	@staticmethod
	def run(args: str, default_cmd: str = 'pacman') -> SysCommand:
		"""
		A centralized function to call `pacman` from.
		It also protects us from colliding with other running pacman sessions (if used locally).
		The grace period is set to 10 minutes before giving up if another pacman instance is running.
		"""
		if _PACMAN_DB_LOCK.exists():
			warn('Pacman is already running, waiting maximum 10 minutes for it to terminate.')

		started = time.time()
		while _PACMAN_DB_LOCK.exists():
			time.sleep(0.25)

			if time.time() - started > _LOCK_GRACE_PERIOD:
				raise PackageError('Pre-existing pacman lock never exited. Please clean up any existing pacman sessions first.')

		return SysCommand(f'{default_cmd} {args}')

	@classmethod
	def install(cls, packages: list[str]) -> None:
		info(f'Installing packages: {packages}')

		try:
			cls.run(f'-Syu --noconfirm --needed {" ".join(packages)}')
		except SysCallError as err:
			raise PackageError(f'Could not install {packages}: {err.message}') from err
