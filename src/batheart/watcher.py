"""Config file hot-reload.

Polls the config file's stat signature and reparses it when it changes.
"""

import asyncio
from collections.abc import Callable
from pathlib import Path

import structlog

from batheart.config import Config, ConfigError

log = structlog.get_logger()

Signature = tuple[int, int]  # (st_mtime_ns, st_size)


def _file_signature(path: Path) -> Signature | None:
    try:
        st = path.stat()
    except FileNotFoundError:
        return None
    return (st.st_mtime_ns, st.st_size)


class ConfigWatcher:
    """Watches a config file and hands fresh Config objects to a callback.

    The callback receives a new Config; the watcher never mutates the old
    one. Reload failures are logged and the callback is not called, so the
    receiver keeps the last good config.
    """

    def __init__(
        self,
        path: Path,
        on_change: Callable[[Config], None],
        poll_interval: float = 1.0,
    ) -> None:
        self.path = path
        self.on_change = on_change
        self.poll_interval = poll_interval

        self._signature = _file_signature(path)
        self._missing_logged = False
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def check(self) -> bool:
        """Compare the file against the last seen signature, reloading on change.

        Returns:
            True if a new config was delivered to the callback.
        """
        try:
            signature = _file_signature(self.path)
        except OSError as e:
            log.error("config_watch_failed", path=str(self.path), error=str(e))
            return False

        if signature is None:
            if not self._missing_logged:
                log.warning("config_missing", path=str(self.path))
                self._missing_logged = True
            self._signature = None
            return False
        self._missing_logged = False

        if signature == self._signature:
            return False
        self._signature = signature

        log.info("config_changed", path=str(self.path))
        try:
            config = Config.load(self.path)
        except (ConfigError, OSError) as e:
            log.error("config_reload_failed", path=str(self.path), error=str(e))
            return False

        self.on_change(config)
        return True

    async def start(self) -> None:
        """Start watching in a background task."""
        if self.running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._watch())
        log.info("config_watch_started", path=str(self.path))

    async def stop(self) -> None:
        """Stop the background task and wait for it to finish."""
        if self._task is None:
            return
        self._stop_event.set()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _watch(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.poll_interval)
                break
            except asyncio.TimeoutError:
                self.check()
