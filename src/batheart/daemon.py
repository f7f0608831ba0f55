"""Background daemon for batheart."""

import asyncio
import signal
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import structlog

from batheart.battery import BatteryReader, ReadError
from batheart.config import Config
from batheart.conservation import ConservationSwitch
from batheart.logging import configure as configure_logging
from batheart.threshold import INITIAL_INTERVAL, Decision, decide
from batheart.watcher import ConfigWatcher

log = structlog.get_logger()


class LoopPhase(Enum):
    """Where the main loop is."""

    IDLE = "idle"  # Waiting on timer, signal or config change
    POLLING = "polling"  # Read -> decide -> apply in progress
    TERMINATING = "terminating"


@dataclass
class PollState:
    """Loop state carried between poll cycles. Lives only as long as the process."""

    previous_capacity: int = 0
    interval: float = INITIAL_INTERVAL
    phase: LoopPhase = LoopPhase.IDLE
    poll_count: int = 0

    def record_poll(self) -> None:
        """Count a completed read."""
        self.poll_count += 1


class Daemon:
    """Adaptive polling loop: battery reader -> threshold evaluator -> switch."""

    def __init__(
        self,
        config: Config,
        reader: BatteryReader | None = None,
        switch: ConservationSwitch | None = None,
        config_path: Path | None = None,
        watch_interval: float = 1.0,
    ):
        self._config = config
        self.reader = reader or BatteryReader()
        self.switch = switch or ConservationSwitch()
        self.state = PollState()

        self.watcher = ConfigWatcher(
            config_path or config.config_path,
            on_change=self.replace_config,
            poll_interval=watch_interval,
        )
        self._shutdown_event = asyncio.Event()

    @property
    def config(self) -> Config:
        """Current config snapshot."""
        return self._config

    def replace_config(self, config: Config) -> None:
        """Swap in a freshly parsed config.

        Only the reference changes. The poll interval is left alone and no
        poll is forced.
        """
        old = self._config
        self._config = config
        log.info("config_reloaded", old_threshold=old.threshold, threshold=config.threshold)

    def poll_once(self) -> Decision | None:
        """Run one poll cycle.

        Returns:
            The decision, or None if the battery couldn't be read.
        """
        config = self._config
        self.state.phase = LoopPhase.POLLING
        try:
            try:
                sample = self.reader.sample()
            except ReadError as e:
                log.error("battery_read_failed", error=str(e))
                return None

            self.state.record_poll()
            decision = decide(sample, self.state.previous_capacity, config.threshold)
            if decision.skip:
                return decision

            self.state.previous_capacity = sample.capacity
            log.info(
                "battery_changed",
                capacity=sample.capacity,
                charging=sample.charging,
                threshold=config.threshold,
            )

            if decision.next_interval is not None and decision.next_interval != self.state.interval:
                log.info(
                    "poll_interval_changed",
                    old=self.state.interval,
                    new=decision.next_interval,
                )
                self.state.interval = decision.next_interval

            self.switch.apply(decision.enable_conservation)
            return decision
        finally:
            if self.state.phase is LoopPhase.POLLING:
                self.state.phase = LoopPhase.IDLE

    def request_shutdown(self) -> None:
        """Ask the main loop to exit at its next wakeup."""
        self._shutdown_event.set()

    async def start(self) -> None:
        """Start the daemon and run until shutdown."""
        from importlib.metadata import PackageNotFoundError, version

        try:
            pkg_version = version("batheart")
        except PackageNotFoundError:
            pkg_version = "unknown"
        log.info("daemon_starting", version=pkg_version, threshold=self._config.threshold)

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, lambda s=sig: self._handle_signal(s))

        await self.watcher.start()

        log.info("daemon_started", interval=self.state.interval)
        await self._main_loop()

    async def stop(self) -> None:
        """Stop the daemon. Safe to call more than once."""
        self.state.phase = LoopPhase.TERMINATING
        self._shutdown_event.set()

        await self.watcher.stop()

        try:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.remove_signal_handler(sig)
        except (RuntimeError, NotImplementedError):
            pass

        log.info("daemon_stopped")

    def _handle_signal(self, sig: signal.Signals) -> None:
        """Handle shutdown signals."""
        log.info("signal_received", signal=sig.name)
        self._shutdown_event.set()

    async def _main_loop(self) -> None:
        """Wait one interval, poll, repeat until the shutdown event is set.

        The interval is re-read after every wait, so a poll that changes it
        takes effect for the next wait.
        """
        while not self._shutdown_event.is_set():
            try:
                try:
                    await asyncio.wait_for(
                        self._shutdown_event.wait(), timeout=self.state.interval
                    )
                    break  # Shutdown requested during wait
                except asyncio.TimeoutError:
                    pass  # Timer expired, poll

                self.poll_once()

            except asyncio.CancelledError:
                log.info("main_loop_cancelled")
                break
            except Exception as e:
                log.exception("poll_failed", error=str(e))

        self.state.phase = LoopPhase.TERMINATING


async def run_daemon(config: Config | None = None) -> None:
    """Run the daemon until shutdown.

    Args:
        config: Optional config, loads from file if not provided
    """
    if config is None:
        config = Config.load()

    configure_logging(config)

    daemon = Daemon(config)

    try:
        await daemon.start()
    except Exception as e:
        log.exception("daemon_crashed", error=str(e))
        raise
    finally:
        await daemon.stop()
