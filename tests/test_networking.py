import struct

from archbase.lib.networking import build_icmp, calc_checksum


def test_echo_request_header() -> None:
	packet = build_icmp(b'')

	assert struct.unpack('!BBHHH', packet) == (8, 0, 0xF7FE, 0, 1)


def test_echo_request_payload() -> None:
	packet = build_icmp(b'ab')

	assert packet[8:] == b'ab'
	assert struct.unpack('!H', packet[2:4])[0] == 0x969C


def test_checksum_odd_length() -> None:
	# the trailing byte is padded with zero
	assert calc_checksum(b'\x01') == calc_checksum(b'\x01\x00')


def test_checksum_folds_carries() -> None:
	assert calc_checksum(b'\xff\xff\xff\xff') == 0
	assert calc_checksum(b'\xff\xff\x00\x02') == 0xFFFD
