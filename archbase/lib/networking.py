import random
import select
import socket
import struct
import time

from .output import debug

_ICMP_ECHO_REQUEST = 8
_ICMP_ECHO_REPLY = 0
_IP_HEADER_LENGTH = 20


def calc_checksum(icmp_packet: bytes) -> int:
	"""
	RFC 1071 internet checksum, an odd trailing byte is padded with zero
	"""
	if len(icmp_packet) % 2:
		icmp_packet += b'\x00'

	total = sum(word for (word,) in struct.iter_unpack('!H', icmp_packet))

	while total >> 16:
		total = (total >> 16) + (total & 0xFFFF)

	return ~total & 0xFFFF


def build_icmp(payload: bytes, sequence: int = 1) -> bytes:
	header = struct.pack('!BBHHH', _ICMP_ECHO_REQUEST, 0, 0, 0, sequence)
	checksum = calc_checksum(header + payload)

	return struct.pack('!BBHHH', _ICMP_ECHO_REQUEST, 0, checksum, 0, sequence) + payload


def _is_reply(response: bytes, identifier: bytes) -> bool:
	icmp_type = response[_IP_HEADER_LENGTH]
	return icmp_type == _ICMP_ECHO_REPLY and response.endswith(identifier)


def ping(hostname: str, timeout: int = 5) -> int:
	"""
	Sends a single ICMP echo request and returns the latency in ms,
	or -1 if no reply arrived within timeout seconds.
	Resolution and socket errors are raised as OSError.
	"""
	identifier = f'archbase-{random.randint(1000, 9999)}'.encode()

	# A raw socket requires root, which should be fine on archiso
	icmp_socket = socket.socket(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_ICMP)
	poller = select.epoll()

	latency = -1

	try:
		poller.register(icmp_socket, select.EPOLLIN)

		started = time.monotonic()
		icmp_socket.sendto(build_icmp(identifier), (hostname, 0))

		while latency == -1 and time.monotonic() - started < timeout:
			if not poller.poll(0.1):
				continue

			response, _ = icmp_socket.recvfrom(1024)
			if _is_reply(response, identifier):
				latency = round((time.monotonic() - started) * 1000)
	finally:
		poller.close()
		icmp_socket.close()

	debug(f'Ping {hostname}: {latency} ms')
	return latency
