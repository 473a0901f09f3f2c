import os

from archbase.lib.args import ArgsHandler
from archbase.lib.exceptions import RequirementError, SysCallError
from archbase.lib.general import SysCommand
from archbase.lib.output import debug, info, success, warn
from archbase.lib.pacman import Pacman
from archbase.lib.services import enable_service, service_state

PACKAGES = ['docker', 'docker-compose']


def add_to_group(user: str, group: str) -> None:
	info(f"Adding {user} to the '{group}' group...")

	try:
		SysCommand(['usermod', '-aG', group, user])
	except SysCallError as err:
		raise RequirementError(f'Could not add {user} to {group}: {err.message}') from err


def main(handler: ArgsHandler) -> None:
	user = handler.args.user or os.environ.get('SUDO_USER')

	info("Start install 'docker'...")
	Pacman.install(PACKAGES)

	info('Enable systemd units (docker.socket)...')
	enable_service('docker.socket', now=True)
	debug(f'docker.socket state: {service_state("docker.socket")}')

	if user:
		add_to_group(user, 'docker')
		info(f'{user} has to log in again for the group change to apply')
	else:
		warn('No user given with --user and SUDO_USER is unset, skipping the docker group')

	print(SysCommand('docker info').decode())
	success("Finished install 'docker'")
