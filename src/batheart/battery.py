"""Battery state reader.

Reads the kernel's sysfs battery node directly. psutil's sensors_battery()
is only used on machines without that node.
"""

from dataclasses import dataclass
from pathlib import Path

import psutil
import structlog

log = structlog.get_logger()

BATTERY_DIR = Path("/sys/class/power_supply/BAT0")


class ReadError(Exception):
    """Battery state is unavailable or malformed."""


@dataclass(frozen=True)
class BatterySample:
    """One reading of the battery. Produced fresh each poll cycle."""

    capacity: int  # 0-100
    charging: bool


def _parse_capacity(raw: object) -> int:
    try:
        capacity = round(float(raw))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError) as e:
        raise ReadError(f"Non-numeric battery capacity: {raw!r}") from e
    if not 0 <= capacity <= 100:
        raise ReadError(f"Battery capacity out of range: {capacity}")
    return capacity


class BatteryReader:
    """Reads instantaneous capacity and charging status.

    No throttling or caching here; the daemon decides how often to call.
    """

    def __init__(self, battery_dir: Path = BATTERY_DIR) -> None:
        self.battery_dir = battery_dir

    @property
    def capacity_path(self) -> Path:
        return self.battery_dir / "capacity"

    @property
    def status_path(self) -> Path:
        return self.battery_dir / "status"

    def sample(self) -> BatterySample:
        """Read the battery once.

        A failed charging-status read is logged and reported as not charging.

        Raises:
            ReadError: If capacity can't be read.
        """
        if not self.battery_dir.exists():
            return self._sample_psutil()

        capacity = _parse_capacity(self._read(self.capacity_path))
        try:
            # "Not charging" (conservation mode holding) and "Full" are valid False
            charging = self._read(self.status_path) == "Charging"
        except ReadError as e:
            log.warning("charging_read_failed", source="sysfs", error=str(e))
            charging = False
        return BatterySample(capacity=capacity, charging=charging)

    def _read(self, path: Path) -> str:
        try:
            return path.read_text().strip()
        except OSError as e:
            raise ReadError(f"Can't read {path}: {e}") from e

    def _sample_psutil(self) -> BatterySample:
        if not hasattr(psutil, "sensors_battery"):
            raise ReadError(f"No battery at {self.battery_dir} and no OS battery accessor")
        try:
            battery = psutil.sensors_battery()
        except (OSError, RuntimeError) as e:
            raise ReadError(f"OS battery accessor failed: {e}") from e
        if battery is None:
            raise ReadError(f"No battery at {self.battery_dir} or via psutil")

        capacity = _parse_capacity(battery.percent)
        if battery.power_plugged is None:
            # psutil reports None for "Not charging" when it finds no AC0/AC node
            log.debug("charging_status_unknown", source="psutil")
            return BatterySample(capacity=capacity, charging=False)
        return BatterySample(capacity=capacity, charging=bool(battery.power_plugged))
