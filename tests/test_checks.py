import pytest
from pytest import MonkeyPatch

from archbase.lib import checks
from archbase.lib.exceptions import RequirementError
from conftest import CommandRecorder


@pytest.fixture(autouse=True)
def no_wait(monkeypatch: MonkeyPatch) -> None:
	monkeypatch.setattr('archbase.lib.checks.WAIT_TIME', 0)


@pytest.fixture
def uefi(monkeypatch: MonkeyPatch) -> None:
	monkeypatch.setattr('archbase.lib.checks.SysInfo.has_uefi', staticmethod(lambda: True))
	monkeypatch.setattr('archbase.lib.checks.SysInfo.uefi_platform_size', staticmethod(lambda: 64))


def _pings(monkeypatch: MonkeyPatch, results: list[int | OSError]) -> list[str]:
	hosts: list[str] = []
	remaining = iter(results)

	def _ping(hostname: str, timeout: int = 5) -> int:
		hosts.append(hostname)
		result = next(remaining)
		if isinstance(result, OSError):
			raise result
		return result

	monkeypatch.setattr('archbase.lib.checks.ping', _ping)
	return hosts


def test_uefi(uefi: None, capsys: pytest.CaptureFixture[str]) -> None:
	assert checks.check_uefi()
	assert '64-bit UEFI detected' in capsys.readouterr().out


def test_bios_boot(monkeypatch: MonkeyPatch) -> None:
	monkeypatch.setattr('archbase.lib.checks.SysInfo.has_uefi', staticmethod(lambda: False))
	assert not checks.check_uefi()


def test_internet_first_try(monkeypatch: MonkeyPatch) -> None:
	hosts = _pings(monkeypatch, [12])

	assert checks.check_internet()
	assert hosts == ['archlinux.org']


def test_internet_comes_back(monkeypatch: MonkeyPatch) -> None:
	hosts = _pings(monkeypatch, [-1, OSError('Network is unreachable'), 20])

	assert checks.check_internet()
	assert len(hosts) == 3


def test_internet_gives_up(monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	hosts = _pings(monkeypatch, [-1] * (checks.MAX_ATTEMPTS + 1))

	assert not checks.check_internet()
	assert len(hosts) == checks.MAX_ATTEMPTS + 1
	assert 'No internet connection after 3 attempts' in capsys.readouterr().out


def test_clock_synchronized(recorder: CommandRecorder) -> None:
	recorder.respond('timedatectl show', 'yes\n')

	assert checks.check_clock()
	assert recorder.lines() == ['timedatectl show --property=NTPSynchronized --value']


def test_clock_is_fixed(recorder: CommandRecorder) -> None:
	state = {'synced': 'no'}

	def _set_ntp() -> str:
		state['synced'] = 'yes'
		return ''

	recorder.respond('timedatectl show', lambda: state['synced'])
	recorder.respond('timedatectl set-ntp', _set_ntp)

	assert checks.check_clock()
	assert recorder.lines() == [
		'timedatectl show --property=NTPSynchronized --value',
		'timedatectl set-ntp true',
		'timedatectl show --property=NTPSynchronized --value',
	]


def test_clock_never_syncs(recorder: CommandRecorder) -> None:
	recorder.respond('timedatectl show', 'no')

	assert not checks.check_clock()
	assert recorder.lines().count('timedatectl set-ntp true') == checks.MAX_ATTEMPTS


def test_run_checks(uefi: None, recorder: CommandRecorder, monkeypatch: MonkeyPatch) -> None:
	_pings(monkeypatch, [5])
	recorder.respond('timedatectl show', 'yes')

	checks.run_checks()


def test_run_checks_skips_clock(uefi: None, recorder: CommandRecorder, monkeypatch: MonkeyPatch) -> None:
	_pings(monkeypatch, [5])

	checks.run_checks(skip_ntp=True)

	assert recorder.commands == []


def test_failed_check_stops_the_run(monkeypatch: MonkeyPatch, recorder: CommandRecorder) -> None:
	monkeypatch.setattr('archbase.lib.checks.SysInfo.has_uefi', staticmethod(lambda: False))
	hosts = _pings(monkeypatch, [5])

	with pytest.raises(RequirementError, match='check_uefi'):
		checks.run_checks()

	assert hosts == []
	assert recorder.commands == []
