"""Shared test fixtures for batheart."""

from pathlib import Path

import pytest

from batheart.battery import BatterySample, ReadError


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config/state dirs at tmp_path so tests never touch ~/.config."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    return tmp_path


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Path to a config file inside tmp_path (not created)."""
    return tmp_path / "batheart" / "config.toml"


class FakeReader:
    """BatteryReader stand-in that replays a list of samples.

    Entries may be BatterySample or ReadError instances (raised when reached).
    The last entry repeats once the list is exhausted.
    """

    def __init__(self, *samples: BatterySample | ReadError) -> None:
        self.samples = list(samples)
        self.calls = 0

    def sample(self) -> BatterySample:
        item = self.samples[min(self.calls, len(self.samples) - 1)]
        self.calls += 1
        if isinstance(item, ReadError):
            raise item
        return item


class FakeSwitch:
    """ConservationSwitch stand-in that records applied values."""

    def __init__(self) -> None:
        self.applied: list[bool] = []

    def apply(self, enable: bool) -> None:
        self.applied.append(enable)


def make_sample(capacity: int = 50, charging: bool = True) -> BatterySample:
    """Create a BatterySample for testing."""
    return BatterySample(capacity=capacity, charging=charging)
