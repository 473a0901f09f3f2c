from archbase.lib.args import ArgsHandler
from archbase.scripts import check, partition


def main(handler: ArgsHandler) -> None:
	check.main(handler)
	partition.main(handler)
