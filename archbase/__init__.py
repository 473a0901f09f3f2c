"""Guided Arch Linux base system preparation: checks, disk layout planning, partitioning."""

from .lib.disk.allocation import AllocationState
from .lib.disk.device_handler import DeviceHandler
from .lib.disk.validators import parse_size
from .lib.exceptions import (
	CapacityExceeded,
	DiskError,
	InvalidDiskSelection,
	InvalidSizeFormat,
	NoEligibleDisk,
	PlannerError,
	RequirementError,
	SysCallError,
	UserCancelled,
)
from .lib.general import SysCommand
from .lib.interactions.disk_conf import plan_disk_layout
from .lib.models.device import BlockDevice, LayoutPlan, PartitionRole, PlannerConfig, Size, Unit
from .lib.output import debug, error, info, log, warn

__all__ = [
	'AllocationState',
	'BlockDevice',
	'CapacityExceeded',
	'DeviceHandler',
	'DiskError',
	'InvalidDiskSelection',
	'InvalidSizeFormat',
	'LayoutPlan',
	'NoEligibleDisk',
	'PartitionRole',
	'PlannerConfig',
	'PlannerError',
	'RequirementError',
	'Size',
	'SysCallError',
	'SysCommand',
	'Unit',
	'UserCancelled',
	'debug',
	'error',
	'info',
	'log',
	'parse_size',
	'plan_disk_layout',
	'warn',
]
