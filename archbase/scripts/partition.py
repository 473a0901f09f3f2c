from archbase.lib.args import ArgsHandler
from archbase.lib.disk.device_handler import DeviceHandler
from archbase.lib.interactions.disk_conf import plan_disk_layout


def main(handler: ArgsHandler) -> None:
	plan = plan_disk_layout(handler.planner_config())

	DeviceHandler().apply(plan, handler.args.mountpoint)
