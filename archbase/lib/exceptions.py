class RequirementError(Exception):
	pass


class DiskError(Exception):
	pass


class SysCallError(Exception):
	def __init__(self, message: str, exit_code: int | None = None, worker_log: bytes = b'') -> None:
		super().__init__(message)
		self.message = message
		self.exit_code = exit_code
		self.worker_log = worker_log


class ServiceException(Exception):
	pass


class PackageError(Exception):
	pass


class PlannerError(Exception):
	"""
	Base for everything the disk layout planner raises.
	"""


class InvalidSizeFormat(PlannerError):
	def __init__(self, token: str, hint: str = '') -> None:
		message = f'Invalid size "{token}"'
		if hint:
			message += f', expected e.g. {hint}'

		super().__init__(message)
		self.token = token
		self.hint = hint


class CapacityExceeded(PlannerError):
	def __init__(self, requested: int, available: int) -> None:
		super().__init__(f'Requested {requested} bytes but only {available} bytes are available')
		self.requested = requested
		self.available = available


class InvalidDiskSelection(PlannerError):
	pass


class NoEligibleDisk(PlannerError):
	pass


class UserCancelled(PlannerError):
	pass
