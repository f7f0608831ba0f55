"""Conservation mode switch (ideapad_acpi control node)."""

from pathlib import Path

import structlog

log = structlog.get_logger()

CONSERVATION_PATH = Path("/sys/bus/platform/drivers/ideapad_acpi/VPC2004:00/conservation_mode")


class ConservationSwitch:
    """Writes the conservation mode flag. Fire-and-forget: no read-back."""

    def __init__(self, path: Path = CONSERVATION_PATH) -> None:
        self.path = path

    def apply(self, enable: bool) -> None:
        """Write "1" or "0" to the control file.

        Write errors are logged, never raised. The next poll cycle writes
        again if the decision still holds.
        """
        value = b"1" if enable else b"0"
        try:
            self.path.write_bytes(value)
        except OSError as e:
            log.warning("conservation_write_failed", path=str(self.path), error=str(e))
            return

        log.info("conservation_mode_changed", enabled=enable)
