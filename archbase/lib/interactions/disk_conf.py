from __future__ import annotations

import json
from enum import Enum, auto

from ..disk.allocation import AllocationState
from ..disk.utils import list_candidate_disks
from ..disk.validators import parse_role_size
from ..exceptions import CapacityExceeded, InvalidDiskSelection, InvalidSizeFormat, NoEligibleDisk, UserCancelled
from ..models.device import (
	BlockDevice,
	FractionalPolicy,
	LayoutPlan,
	LeftoverPolicy,
	PartitionRole,
	PlannedPartition,
	PlannerConfig,
	Size,
)
from ..output import FormattedOutput, debug, info, success, warn
from .general_conf import ask_yes_no, confirm_exact, prompt


def _disk_by_index(devices: list[BlockDevice], answer: str) -> BlockDevice:
	answer = answer.strip()
	message = f'Please enter a valid number between 1 and {len(devices)}'

	if not answer.isdecimal():
		raise InvalidDiskSelection(message)

	try:
		index = int(answer)
	except ValueError:
		# beyond the int string conversion digit limit
		raise InvalidDiskSelection(message)

	if not 1 <= index <= len(devices):
		raise InvalidDiskSelection(message)

	return devices[index - 1]


def select_disk(devices: list[BlockDevice]) -> BlockDevice:
	"""
	Lists the devices with a 1-based index and asks until a valid
	index is given. There is no retry limit.
	"""
	if not devices:
		raise NoEligibleDisk('No suitable disks found')

	rows = [{'#': str(index), **device.table_data()} for index, device in enumerate(devices, start=1)]
	print('Available disks:')
	print(FormattedOutput.as_table(rows))

	while True:
		answer = prompt(f'Select disk number (1-{len(devices)}): ')

		try:
			device = _disk_by_index(devices, answer)
			break
		except InvalidDiskSelection as err:
			warn(str(err))

	info(f'Selected disk: {device.path}')
	return device


def confirm_wipe(device: BlockDevice) -> None:
	warn(f'WARNING: All data on {device.path} will be erased!')
	warn(f'         {device.size.as_text()} {device.model}')

	if not confirm_exact(f'Erase {device.path}?'):
		raise UserCancelled('Operation cancelled by user')


class PromptState(Enum):
	PROMPTING = auto()
	VALIDATING = auto()
	ACCEPTED = auto()
	REJECTED = auto()


class SizePrompt:
	"""
	Asks for the size of one role until an answer both parses and fits
	into what is still available. A rejected answer leaves the
	allocation state untouched.
	"""

	def __init__(self, role: PartitionRole, state: AllocationState, fractional: FractionalPolicy) -> None:
		self._role = role
		self._state = state
		self._fractional = fractional
		self._answer = ''
		self._partition: PlannedPartition | None = None
		self.prompt_state = PromptState.PROMPTING

	@property
	def text(self) -> str:
		name = self._role.name.upper()

		if self._role.may_consume_remaining:
			return f'Enter {name} partition size (empty for remaining space, or e.g., {self._role.example}): '
		return f'Enter {name} partition size (e.g., {self._role.example}): '

	def _validate(self) -> PromptState:
		try:
			size = parse_role_size(self._answer, self._role, self._fractional)

			if size is None:
				self._partition = self._state.allocate_remaining(self._role)
				info(f'{self._role.name} partition will use the remaining disk space')
			else:
				self._partition = self._state.allocate(self._role, size)
		except InvalidSizeFormat as err:
			warn(f'Please enter a valid size (e.g., {err.hint or self._role.example})')
			return PromptState.REJECTED
		except CapacityExceeded as err:
			requested = Size.from_bytes(err.requested).as_text()
			available = Size.from_bytes(err.available).as_text()
			warn(f'{requested} does not fit, it must be less than the {available} still available')
			return PromptState.REJECTED

		return PromptState.ACCEPTED

	def run(self) -> PlannedPartition:
		while True:
			match self.prompt_state:
				case PromptState.PROMPTING:
					self._answer = prompt(self.text)
					self.prompt_state = PromptState.VALIDATING
				case PromptState.VALIDATING:
					self.prompt_state = self._validate()
				case PromptState.REJECTED:
					self.prompt_state = PromptState.PROMPTING
				case PromptState.ACCEPTED:
					assert self._partition is not None
					return self._partition


def ask_partition_sizes(total: Size, config: PlannerConfig) -> AllocationState:
	state = AllocationState(total)

	for role in config.roles:
		info(f'Available space: {state.available.as_text()}')
		partition = SizePrompt(role, state, config.fractional).run()
		debug(f'Allocated {partition.size.byte_count} bytes to {role.name}')

	return state


def resolve_leftover(state: AllocationState, policy: LeftoverPolicy) -> None:
	if state.leftover == Size.from_bytes(0):
		return

	leftover = state.leftover.as_text()
	last = state.partitions[-1].role.name

	match policy:
		case LeftoverPolicy.REPORT:
			info(f'{leftover} will be left unallocated')
		case LeftoverPolicy.FOLD:
			state.fold_leftover()
			info(f'Added the remaining {leftover} to the {last} partition')
		case LeftoverPolicy.ASK:
			if ask_yes_no(f'{leftover} is left unallocated. Add it to the {last} partition?', default=True):
				state.fold_leftover()
				info(f'Added the remaining {leftover} to the {last} partition')
			else:
				info(f'{leftover} will be left unallocated')


def confirm_layout(plan: LayoutPlan) -> None:
	print(f'Partition layout for {plan.device_path} ({plan.total.as_text()}):')
	print(FormattedOutput.as_table(list(plan.partitions), capitalize=True))

	if plan.unallocated > Size.from_bytes(0):
		print(f'Unallocated: {plan.unallocated.as_text()}')

	if not confirm_exact('Proceed with this layout?'):
		raise UserCancelled('Operation cancelled by user')


def plan_disk_layout(config: PlannerConfig, devices: list[BlockDevice] | None = None) -> LayoutPlan:
	"""
	Walks the user through disk selection and partition sizing.
	Nothing on the disk is touched; the returned plan is final.
	"""
	if devices is None:
		devices = list_candidate_disks(config.min_disk_size)

	device = select_disk(devices)
	confirm_wipe(device)

	state = ask_partition_sizes(device.size, config)
	resolve_leftover(state, config.leftover)

	plan = LayoutPlan(device.path, device.size, tuple(state.partitions))
	confirm_layout(plan)

	debug(f'Confirmed layout: {json.dumps(plan.json())}')
	success('Partition layout confirmed')

	return plan
