import argparse
from argparse import ArgumentParser
from importlib.metadata import version
from pathlib import Path

from pydantic.dataclasses import dataclass as p_dataclass

from .disk.validators import parse_size
from .exceptions import InvalidSizeFormat
from .models.device import FractionalPolicy, LeftoverPolicy, PartitionRole, PlannerConfig, Size, Unit
from .storage import storage

SCRIPTS = ['guided', 'check', 'partition', 'docker', 'list']


def _parse_disk_size(text: str) -> Size:
	return parse_size(text, units=(Unit.MiB, Unit.GiB, Unit.TiB), fractional=FractionalPolicy.ALL)


@p_dataclass
class Arguments:
	script: str = 'guided'
	mountpoint: Path = Path('/mnt')
	encrypt: bool = False
	fractional: FractionalPolicy = FractionalPolicy.GIB
	leftover: LeftoverPolicy = LeftoverPolicy.ASK
	min_disk_size: str | None = None
	skip_ntp: bool = False
	user: str | None = None
	debug: bool = False


class ArgsHandler:
	def __init__(self, argv: list[str] | None = None) -> None:
		self._parser: ArgumentParser = self._define_arguments()
		self._args = self._parse_args(argv)

	@property
	def args(self) -> Arguments:
		return self._args

	def planner_config(self) -> PlannerConfig:
		min_disk_size: Size | None = None

		if self._args.min_disk_size:
			min_disk_size = _parse_disk_size(self._args.min_disk_size)

		return PlannerConfig(
			roles=PartitionRole.defaults(encrypted=self._args.encrypt),
			fractional=self._args.fractional,
			leftover=self._args.leftover,
			min_disk_size=min_disk_size,
		)

	@staticmethod
	def _get_version() -> str:
		try:
			return version('archbase')
		except Exception:
			return 'archbase version not found'

	def _define_arguments(self) -> ArgumentParser:
		parser = ArgumentParser(
			prog='archbase',
			description='Guided Arch Linux base system preparation',
			formatter_class=argparse.ArgumentDefaultsHelpFormatter,
		)
		parser.add_argument(
			'-v',
			'--version',
			action='version',
			version='%(prog)s ' + self._get_version(),
		)
		parser.add_argument(
			'--script',
			default='guided',
			choices=SCRIPTS,
			help='Script to run',
		)
		parser.add_argument(
			'--mountpoint',
			type=Path,
			default=Path('/mnt'),
			help='Where the new root partition gets mounted',
		)
		parser.add_argument(
			'--encrypt',
			action='store_true',
			default=False,
			help='Plan an additional partition for an encrypted volume between root and home',
		)
		parser.add_argument(
			'--fractional',
			type=FractionalPolicy,
			choices=list(FractionalPolicy),
			default=FractionalPolicy.GIB,
			metavar='{' + ','.join(p.value for p in FractionalPolicy) + '}',
			help='Which units accept fractional sizes such as 0.5G',
		)
		parser.add_argument(
			'--leftover',
			type=LeftoverPolicy,
			choices=list(LeftoverPolicy),
			default=LeftoverPolicy.ASK,
			metavar='{' + ','.join(p.value for p in LeftoverPolicy) + '}',
			help='What to do with capacity left after the last partition: report it, fold it into the last partition or ask',
		)
		parser.add_argument(
			'--min-disk-size',
			type=str,
			default=None,
			help='Hide disks smaller than this size (e.g. 10G)',
		)
		parser.add_argument(
			'--skip-ntp',
			action='store_true',
			default=False,
			help='Skip the system clock synchronization check',
		)
		parser.add_argument(
			'--user',
			type=str,
			default=None,
			help='User to add to the docker group (defaults to $SUDO_USER)',
		)
		parser.add_argument(
			'--debug',
			action='store_true',
			default=False,
			help='Print debug messages as well',
		)

		return parser

	def _parse_args(self, argv: list[str] | None) -> Arguments:
		argparse_args = vars(self._parser.parse_args(argv))
		args = Arguments(**argparse_args)

		if args.min_disk_size:
			try:
				_parse_disk_size(args.min_disk_size)
			except InvalidSizeFormat as err:
				self._parser.error(f'argument --min-disk-size: {err}')

		storage['DEBUG'] = args.debug

		return args
