import re
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext

from ..exceptions import InvalidSizeFormat
from ..models.device import FractionalPolicy, PartitionRole, Size, Unit

_SIZE_REGEX = re.compile(r'(?P<value>[0-9]+(?:\.[0-9]+)?)(?P<unit>[A-Za-z]+)')
_MAX_VALUE_LENGTH = 64


def parse_size(
	text: str,
	units: tuple[Unit, ...] = (Unit.MiB, Unit.GiB),
	fractional: FractionalPolicy = FractionalPolicy.GIB,
	hint: str = '',
) -> Size:
	"""
	Converts a token such as 512M, 30G or 0.5G into an exact byte count.
	The multiplication is done in decimal so that fractional values never
	drift; anything below one byte is truncated.
	"""
	token = text.strip()
	match = _SIZE_REGEX.fullmatch(token)

	if not match:
		raise InvalidSizeFormat(token, hint)

	str_value, symbol = match.group('value'), match.group('unit')

	# far beyond any disk, keeps byte counts printable
	if len(str_value) > _MAX_VALUE_LENGTH:
		raise InvalidSizeFormat(token[:_MAX_VALUE_LENGTH] + '...', hint)

	try:
		unit = Unit.from_symbol(symbol)
	except ValueError:
		raise InvalidSizeFormat(token, hint)

	if unit not in units:
		raise InvalidSizeFormat(token, hint)

	if '.' in str_value and not fractional.allows(unit):
		raise InvalidSizeFormat(token, hint)

	# the default 28 digit context would round long tokens
	with localcontext() as ctx:
		ctx.prec = len(str_value) + len(str(unit.value)) + 2

		try:
			value = Decimal(str_value)
		except InvalidOperation:
			raise InvalidSizeFormat(token, hint)

		byte_count = int((value * unit.value).to_integral_value(rounding=ROUND_DOWN))

	if byte_count <= 0:
		raise InvalidSizeFormat(token, hint)

	return Size(byte_count, Unit.B)


def parse_role_size(text: str, role: PartitionRole, fractional: FractionalPolicy) -> Size | None:
	"""
	Parses the answer given for a role. None means "use all remaining
	capacity" and is only returned for the role allowed to do so.
	"""
	if not text.strip():
		if role.may_consume_remaining:
			return None
		raise InvalidSizeFormat(text, role.example)

	return parse_size(text, role.units, fractional, hint=role.example)
