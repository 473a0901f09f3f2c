from __future__ import annotations

import functools
from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal, localcontext
from enum import Enum
from pathlib import Path
from typing import Any, TypedDict, override

from pydantic import BaseModel, Field, field_validator


class Unit(Enum):
	B = 1  # byte
	KiB = 1024**1  # kibibyte
	MiB = 1024**2  # mebibyte
	GiB = 1024**3  # gibibyte
	TiB = 1024**4  # tebibyte

	@staticmethod
	def get_binary_units() -> list[Unit]:
		return [u for u in Unit]

	@property
	def symbol(self) -> str:
		"""
		The single letter a user types for this unit, e.g. G for GiB
		"""
		return self.name[0]

	@classmethod
	def from_symbol(cls, symbol: str) -> Unit:
		for unit in cls:
			if unit != Unit.B and unit.symbol == symbol:
				return unit

		raise ValueError(f'Unknown unit symbol: {symbol}')


class _SizeSerialization(TypedDict):
	value: int
	unit: str


@functools.total_ordering
@dataclass(frozen=True)
class Size:
	value: int
	unit: Unit

	def __post_init__(self) -> None:
		if not isinstance(self.value, int) or self.value < 0:
			raise ValueError(f'Size value must be a non-negative integer: {self.value!r}')

	@classmethod
	def from_bytes(cls, value: int) -> Size:
		return cls(value, Unit.B)

	@property
	def byte_count(self) -> int:
		return self._normalize()

	def json(self) -> _SizeSerialization:
		return {
			'value': self.value,
			'unit': self.unit.name,
		}

	def convert(self, target_unit: Unit) -> Size:
		"""
		Converts to target_unit, truncating anything smaller than one target_unit
		"""
		if self.unit == target_unit:
			return self

		return Size(self._normalize() // target_unit.value, target_unit)

	def format_size(self, target_unit: Unit, precision: int = 1, include_unit: bool = True) -> str:
		norm = self._normalize()

		# enough digits for the whole integer part plus the decimals
		with localcontext() as ctx:
			ctx.prec = norm.bit_length() // 3 + precision + 2
			value = Decimal(norm) / Decimal(target_unit.value)
			formatted = str(value.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP))

		if '.' in formatted:
			formatted = formatted.rstrip('0').rstrip('.')

		if include_unit:
			return f'{formatted} {target_unit.name}'
		return formatted

	def binary_unit_highest(self, include_unit: bool = True) -> str:
		norm = self._normalize()
		unit = Unit.B

		for binary_unit in Unit.get_binary_units():
			if norm < binary_unit.value:
				break
			unit = binary_unit

		return self.format_size(unit, include_unit=include_unit)

	def as_text(self) -> str:
		return self.binary_unit_highest()

	def _normalize(self) -> int:
		"""
		will normalize the value of the unit to Byte
		"""
		return self.value * self.unit.value

	def __add__(self, other: Size) -> Size:
		return Size(self._normalize() + other._normalize(), Unit.B)

	def __sub__(self, other: Size) -> Size:
		return Size(self._normalize() - other._normalize(), Unit.B)

	def __lt__(self, other: Size) -> bool:
		return self._normalize() < other._normalize()

	@override
	def __eq__(self, other: object) -> bool:
		if not isinstance(other, Size):
			return NotImplemented

		return self._normalize() == other._normalize()

	@override
	def __hash__(self) -> int:
		return hash(self._normalize())


class LsblkInfo(BaseModel):
	name: str
	path: Path
	size: Size
	type: str | None
	rm: bool = False
	model: str | None = None
	tran: str | None = None
	mountpoints: list[Path] = Field(default_factory=list)
	children: list[LsblkInfo] = Field(default_factory=list)

	@field_validator('size', mode='before')
	@classmethod
	def convert_size(cls, v: int | str | Size) -> Size:
		if isinstance(v, Size):
			return v
		return Size(int(v), Unit.B)

	@field_validator('mountpoints', mode='before')
	@classmethod
	def remove_none(cls, v: list[Path | None] | None) -> list[Path]:
		if v is None:
			return []
		return [item for item in v if item is not None]

	@field_validator('model', mode='before')
	@classmethod
	def strip_model(cls, v: str | None) -> str | None:
		if v is None:
			return None
		return v.strip() or None

	@classmethod
	def fields(cls) -> list[str]:
		return [name for name in cls.model_fields if name != 'children']

	def all_mountpoints(self) -> list[Path]:
		mountpoints = list(self.mountpoints)
		for child in self.children:
			mountpoints += child.all_mountpoints()
		return mountpoints


@dataclass(frozen=True)
class BlockDevice:
	path: Path
	size: Size
	model: str
	removable: bool = False
	excluded_reason: str | None = None

	@classmethod
	def from_lsblk(cls, info: LsblkInfo, excluded_reason: str | None = None) -> BlockDevice:
		return cls(
			path=info.path,
			size=info.size,
			model=info.model or 'Unknown',
			removable=info.rm,
			excluded_reason=excluded_reason,
		)

	@property
	def is_eligible(self) -> bool:
		return self.excluded_reason is None

	def table_data(self) -> dict[str, Any]:
		return {
			'path': str(self.path),
			'size': self.size.as_text(),
			'model': self.model,
			'removable': 'yes' if self.removable else 'no',
		}


class FilesystemType(Enum):
	Fat32 = 'fat32'
	Ext4 = 'ext4'
	LinuxSwap = 'linux-swap'


class FractionalPolicy(Enum):
	NONE = 'none'
	GIB = 'gib'
	ALL = 'all'

	def allows(self, unit: Unit) -> bool:
		match self:
			case FractionalPolicy.NONE:
				return False
			case FractionalPolicy.GIB:
				return unit == Unit.GiB
			case FractionalPolicy.ALL:
				return True


class LeftoverPolicy(Enum):
	REPORT = 'report'
	FOLD = 'fold'
	ASK = 'ask'


@dataclass(frozen=True)
class PartitionRole:
	name: str
	example: str
	units: tuple[Unit, ...]
	fs_type: FilesystemType | None
	type_code: str
	label: str
	mountpoint: Path | None = None
	may_consume_remaining: bool = False

	def is_swap(self) -> bool:
		return self.fs_type == FilesystemType.LinuxSwap

	@staticmethod
	def defaults(encrypted: bool = False) -> tuple[PartitionRole, ...]:
		"""
		The fixed layout, in creation order. The last role is the only
		one allowed to take whatever capacity is left.
		"""
		roles = [
			PartitionRole('EFI', '512M, 1G', (Unit.MiB, Unit.GiB), FilesystemType.Fat32, 'ef00', 'EFI', Path('/boot/efi')),
			PartitionRole('Swap', '2G, 4G', (Unit.GiB,), FilesystemType.LinuxSwap, '8200', 'SWAP'),
			PartitionRole('Root', '30G, 50G', (Unit.GiB,), FilesystemType.Ext4, '8300', 'root', Path('/')),
		]

		if encrypted:
			roles.append(PartitionRole('Encrypted', '20G, 100G', (Unit.GiB,), None, '8309', 'crypt'))

		roles.append(PartitionRole('Home', '100G', (Unit.GiB,), FilesystemType.Ext4, '8302', 'home', Path('/home')))

		roles[-1] = replace(roles[-1], may_consume_remaining=True)
		return tuple(roles)


@dataclass(frozen=True)
class PlannerConfig:
	roles: tuple[PartitionRole, ...] = field(default_factory=PartitionRole.defaults)
	fractional: FractionalPolicy = FractionalPolicy.GIB
	leftover: LeftoverPolicy = LeftoverPolicy.ASK
	min_disk_size: Size | None = None

	def __post_init__(self) -> None:
		if not self.roles:
			raise ValueError('At least one partition role is required')

		for role in self.roles[:-1]:
			if role.may_consume_remaining:
				raise ValueError(f'Only the last role may consume the remaining capacity, not {role.name}')


class _PlannedPartitionSerialization(TypedDict):
	role: str
	size: _SizeSerialization
	fills_remaining: bool


@dataclass(frozen=True)
class PlannedPartition:
	role: PartitionRole
	size: Size
	fills_remaining: bool = False

	def json(self) -> _PlannedPartitionSerialization:
		return {
			'role': self.role.name,
			'size': self.size.json(),
			'fills_remaining': self.fills_remaining,
		}

	def table_data(self) -> dict[str, Any]:
		return {
			'partition': self.role.name,
			'size': self.size.as_text(),
			'filesystem': self.role.fs_type.value if self.role.fs_type else 'none',
			'mountpoint': str(self.role.mountpoint) if self.role.mountpoint else ('[SWAP]' if self.role.is_swap() else ''),
		}


@dataclass(frozen=True)
class LayoutPlan:
	device_path: Path
	total: Size
	partitions: tuple[PlannedPartition, ...]

	@property
	def allocated(self) -> Size:
		return sum((p.size for p in self.partitions), Size(0, Unit.B))

	@property
	def unallocated(self) -> Size:
		return self.total - self.allocated

	def json(self) -> dict[str, Any]:
		return {
			'device_path': str(self.device_path),
			'total': self.total.json(),
			'partitions': [p.json() for p in self.partitions],
		}
