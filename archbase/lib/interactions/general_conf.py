import sys

from ..exceptions import UserCancelled
from ..output import warn


def prompt(text: str) -> str:
	try:
		return input(text)
	except EOFError:
		# To make sure any output that may follow
		# will be on the line after the prompt
		sys.stdout.write('\n')
		sys.stdout.flush()

		raise UserCancelled('Input stream closed')


def ask_yes_no(text: str, default: bool = False) -> bool:
	suffix = '(Y/n)' if default else '(y/N)'

	while True:
		answer = prompt(f'{text} {suffix}: ').strip().lower()

		if not answer:
			return default
		if answer in ('y', 'yes'):
			return True
		if answer in ('n', 'no'):
			return False

		warn('Please answer y or n')


def confirm_exact(text: str, token: str = 'yes') -> bool:
	"""
	A higher friction gate than ask_yes_no(), only the exact token passes.
	"""
	return prompt(f"{text} Type '{token}' to confirm: ") == token
