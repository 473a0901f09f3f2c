import os
from pathlib import Path

from .output import debug


class SysInfo:
	@staticmethod
	def has_uefi() -> bool:
		return os.path.isdir('/sys/firmware/efi')

	@staticmethod
	def uefi_platform_size() -> int | None:
		"""
		32 or 64, the bitness of the firmware the system was booted from
		"""
		fw_platform_size = Path('/sys/firmware/efi/fw_platform_size')

		try:
			return int(fw_platform_size.read_text().strip())
		except (OSError, ValueError) as err:
			debug(f'Could not read {fw_platform_size}: {err}')
			return None
