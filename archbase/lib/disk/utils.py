import re
from pathlib import Path

from pydantic import BaseModel

from ..exceptions import DiskError, NoEligibleDisk, SysCallError
from ..general import SysCommand
from ..models.device import BlockDevice, LsblkInfo, Size
from ..output import debug, info, warn

_LIVE_MEDIUM_MOUNTPOINT = Path('/run/archiso')
_EXCLUDED_NAMES = re.compile(r'loop|sr\d|rom|airootfs|mmcblk\d+boot[01]|mmcblk\d+rpmb')


class LsblkOutput(BaseModel):
	blockdevices: list[LsblkInfo]


def _fetch_lsblk_info(dev_path: Path | str | None = None) -> LsblkOutput:
	cmd = ['lsblk', '--json', '--bytes', '--paths', '--output', ','.join(LsblkInfo.fields()).upper()]

	if dev_path:
		cmd.append(str(dev_path))

	try:
		worker = SysCommand(cmd)
	except SysCallError as err:
		# Get the output minus the message/info from lsblk if it returns a non-zero exit code.
		if err.worker_log:
			debug(f'Error calling lsblk: {err.worker_log.decode()}')

		if dev_path:
			raise DiskError(f'Failed to read disk "{dev_path}" with lsblk')

		raise err

	output = worker.output(remove_cr=False)
	return LsblkOutput.model_validate_json(output)


def get_lsblk_info(dev_path: Path | str) -> LsblkInfo:
	infos = _fetch_lsblk_info(dev_path)

	if infos.blockdevices:
		return infos.blockdevices[0]

	raise DiskError(f'lsblk failed to retrieve information for "{dev_path}"')


def get_all_lsblk_info() -> list[LsblkInfo]:
	return _fetch_lsblk_info().blockdevices


def disk_layouts() -> str:
	try:
		lsblk_output = _fetch_lsblk_info()
	except SysCallError as err:
		warn(f'Could not return disk layouts: {err}')
		return ''

	return lsblk_output.model_dump_json(indent=4)


def exclusion_reason(lsblk_info: LsblkInfo, min_size: Size | None = None) -> str | None:
	"""
	Returns why a device can not be used as an installation target,
	or None when it is a valid candidate.
	"""
	if lsblk_info.type != 'disk':
		return f'type is {lsblk_info.type}'

	if _EXCLUDED_NAMES.search(Path(lsblk_info.name).name):
		return 'loop, optical or embedded boot device'

	for mountpoint in lsblk_info.all_mountpoints():
		if mountpoint.is_relative_to(_LIVE_MEDIUM_MOUNTPOINT):
			return 'carries the live medium'

	if min_size is not None and lsblk_info.size < min_size:
		return f'smaller than {min_size.as_text()}'

	return None


def list_block_devices(min_size: Size | None = None) -> list[BlockDevice]:
	devices = []

	for lsblk_info in get_all_lsblk_info():
		reason = exclusion_reason(lsblk_info, min_size)
		devices.append(BlockDevice.from_lsblk(lsblk_info, reason))

	return devices


def list_candidate_disks(min_size: Size | None = None) -> list[BlockDevice]:
	candidates = []

	for device in list_block_devices(min_size):
		if device.is_eligible:
			candidates.append(device)
		elif min_size is not None and device.size < min_size:
			info(f'Skipping {device.path}: {device.excluded_reason}')
		else:
			debug(f'Skipping {device.path}: {device.excluded_reason}')

	if not candidates:
		raise NoEligibleDisk('No suitable disks found')

	return candidates


def partition_paths(dev_path: Path) -> list[Path]:
	"""
	The partition device paths of a disk, in on-disk order.
	"""
	lsblk_info = get_lsblk_info(dev_path)
	return [child.path for child in lsblk_info.children if child.type == 'part']
