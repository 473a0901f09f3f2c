from __future__ import annotations

import logging
from pathlib import Path

from ..exceptions import DiskError, SysCallError
from ..general import SysCommand
from ..models.device import FilesystemType, LayoutPlan, PlannedPartition, Size, Unit
from ..output import debug, error, info, log, success
from .utils import get_lsblk_info, partition_paths

# sgdisk aligns partition starts to 2048 sectors, the primary GPT sits in the first block
_GPT_ALIGNMENT = Size(1, Unit.MiB)
# backup GPT header and entries, 33 sectors even with 4 KiB sectors stay below this
_GPT_BACKUP_RESERVE = Size(1, Unit.MiB)


class DeviceHandler:
	"""
	Turns a confirmed LayoutPlan into a GPT partition table, filesystems
	and mounts. Every step shells out to the usual system utilities.
	"""

	def partition(self, plan: LayoutPlan) -> list[Path]:
		"""
		Wipe the device, create a fresh GPT and one partition per planned role.
		"""
		dev_path = plan.device_path

		self.check_fits(plan)

		info(f'Creating partitions on {dev_path}...')

		try:
			SysCommand(['sgdisk', '--zap-all', str(dev_path)])
			SysCommand(['sgdisk', '--clear', str(dev_path)])
		except SysCallError as err:
			raise DiskError(f'Failed to initialize partition table on {dev_path}: {err.message}') from err

		cmd = ['sgdisk']
		for number, part in enumerate(plan.partitions, start=1):
			cmd.extend(self._partition_args(number, part))
		cmd.append(str(dev_path))

		debug(f'Partitioning {dev_path}: {" ".join(cmd)}')

		try:
			SysCommand(cmd)
		except SysCallError as err:
			raise DiskError(f'Failed to create partitions on {dev_path}: {err.message}') from err

		self.partprobe(dev_path)
		self.udev_sync()

		paths = partition_paths(dev_path)
		if len(paths) != len(plan.partitions):
			raise DiskError(f'Expected {len(plan.partitions)} partitions on {dev_path}, found {len(paths)}')

		success('Partitions created successfully')
		return paths

	@staticmethod
	def required_size(plan: LayoutPlan) -> Size:
		"""
		What the partition table needs on disk: every partition starts on a
		1 MiB boundary, the first one after the primary GPT, and the backup
		GPT takes the end of the disk. A partition filling the remaining
		space needs at least one aligned block.
		"""
		required = _GPT_ALIGNMENT.byte_count + _GPT_BACKUP_RESERVE.byte_count

		for part in plan.partitions:
			if part.fills_remaining:
				required += _GPT_ALIGNMENT.byte_count
			else:
				required += -(-part.size.byte_count // _GPT_ALIGNMENT.byte_count) * _GPT_ALIGNMENT.byte_count

		return Size.from_bytes(required)

	def check_fits(self, plan: LayoutPlan) -> None:
		required = self.required_size(plan)

		if required > plan.total:
			raise DiskError(
				f'The layout needs {required.as_text()} including partition alignment and GPT, '
				f'but {plan.device_path} only has {plan.total.as_text()}. Nothing was changed on the disk'
			)

	@staticmethod
	def _partition_args(number: int, part: PlannedPartition) -> list[str]:
		if part.fills_remaining:
			end = '0'
		else:
			end = f'+{part.size.convert(Unit.KiB).value}K'

		return [
			f'--new={number}:0:{end}',
			f'--typecode={number}:{part.role.type_code}',
			f'--change-name={number}:{part.role.label}',
		]

	def format(self, fs_type: FilesystemType, path: Path) -> None:
		match fs_type:
			case FilesystemType.Fat32:
				cmd = ['mkfs.fat', '-F', '32', str(path)]
			case FilesystemType.Ext4:
				# Force create
				cmd = ['mkfs.ext4', '-F', str(path)]
			case FilesystemType.LinuxSwap:
				cmd = ['mkswap', str(path)]

		debug('Formatting filesystem:', ' '.join(cmd))

		try:
			SysCommand(cmd)
		except SysCallError as err:
			msg = f'Could not format {path} with {fs_type.value}: {err.message}'
			error(msg)
			raise DiskError(msg) from err

	def format_partitions(self, plan: LayoutPlan, paths: list[Path]) -> None:
		info('Formatting partitions...')

		for part, path in zip(plan.partitions, paths):
			if part.role.fs_type is None:
				info(f'Leaving {part.role.name} partition {path} unformatted')
				continue

			self.format(part.role.fs_type, path)

		success('Partitions formatted successfully')

	@staticmethod
	def swapon(path: Path) -> None:
		try:
			SysCommand(['swapon', str(path)])
		except SysCallError as err:
			raise DiskError(f'Could not enable swap {path}:\n{err.message}')

	def mount(self, dev_path: Path, target_mountpoint: Path) -> None:
		target_mountpoint.mkdir(parents=True, exist_ok=True)

		lsblk_info = get_lsblk_info(dev_path)
		if target_mountpoint in lsblk_info.mountpoints:
			info(f'Device already mounted at {target_mountpoint}')
			return

		cmd = ['mount', str(dev_path), str(target_mountpoint)]

		debug(f'Mounting {dev_path}: {" ".join(cmd)}')

		try:
			SysCommand(cmd)
		except SysCallError as err:
			raise DiskError(f'Could not mount {dev_path}: {" ".join(cmd)}\n{err.message}')

	def mount_partitions(self, plan: LayoutPlan, paths: list[Path], mountpoint: Path) -> None:
		info('Mounting partitions...')

		targets = [(part.role.mountpoint, path) for part, path in zip(plan.partitions, paths) if part.role.mountpoint is not None]

		# the root has to be mounted before anything below it
		for target, path in sorted(targets, key=lambda item: len(item[0].parts)):
			self.mount(path, mountpoint / target.relative_to('/'))

		for part, path in zip(plan.partitions, paths):
			if part.role.is_swap():
				self.swapon(path)

		success('Partitions mounted successfully')

	def apply(self, plan: LayoutPlan, mountpoint: Path) -> None:
		paths = self.partition(plan)
		self.format_partitions(plan, paths)
		self.mount_partitions(plan, paths, mountpoint)

		info(f'Disk partitioning completed successfully, the system is mounted at {mountpoint}')

	@staticmethod
	def partprobe(path: Path | None = None) -> None:
		if path is not None:
			command = f'partprobe {path}'
		else:
			command = 'partprobe'

		try:
			debug(f'Calling partprobe: {command}')
			SysCommand(command)
		except SysCallError as err:
			if 'have been written, but we have been unable to inform the kernel of the change' in str(err):
				log(f'Partprobe was not able to inform the kernel of the new disk state (ignoring error): {err}', fg='gray', level=logging.INFO)
			else:
				error(f'"{command}" failed to run (continuing anyway): {err}')

	@staticmethod
	def udev_sync() -> None:
		try:
			SysCommand('udevadm settle')
		except SysCallError as err:
			debug(f'Failed to synchronize with udev: {err}')
