from __future__ import annotations

from dataclasses import dataclass, field

from ..exceptions import CapacityExceeded, PlannerError
from ..models.device import PartitionRole, PlannedPartition, Size, Unit


@dataclass
class AllocationState:
	"""
	Running tally of a single planning run. `used` only ever grows and
	never passes `total`.
	"""

	total: Size
	used: Size = field(default_factory=lambda: Size(0, Unit.B))
	partitions: list[PlannedPartition] = field(default_factory=list)
	closed: bool = False

	@property
	def available(self) -> Size:
		return self.total - self.used

	@property
	def leftover(self) -> Size:
		return self.available

	def allocate(self, role: PartitionRole, size: Size) -> PlannedPartition:
		self._check_open(role)

		# strictly less than, the following roles need something to allocate from
		if size >= self.available:
			raise CapacityExceeded(size.byte_count, self.available.byte_count)

		partition = PlannedPartition(role, size)
		self.partitions.append(partition)
		self.used = self.used + size

		return partition

	def allocate_remaining(self, role: PartitionRole) -> PlannedPartition:
		self._check_open(role)

		if not role.may_consume_remaining:
			raise PlannerError(f'{role.name} may not consume the remaining capacity')

		partition = PlannedPartition(role, self.available, fills_remaining=True)
		self.partitions.append(partition)
		self.used = self.total
		self.closed = True

		return partition

	def fold_leftover(self) -> PlannedPartition | None:
		"""
		Grows the last planned partition by whatever is left unallocated.
		"""
		if not self.partitions or self.leftover == Size(0, Unit.B):
			return None

		last = self.partitions[-1]
		grown = PlannedPartition(last.role, last.size + self.leftover, fills_remaining=True)

		self.partitions[-1] = grown
		self.used = self.total
		self.closed = True

		return grown

	def _check_open(self, role: PartitionRole) -> None:
		if self.closed:
			raise PlannerError(f'Can not allocate {role.name}, all capacity has already been assigned')
