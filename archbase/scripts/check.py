from archbase.lib.args import ArgsHandler
from archbase.lib.checks import run_checks


def main(handler: ArgsHandler) -> None:
	run_checks(skip_ntp=handler.args.skip_ntp)
