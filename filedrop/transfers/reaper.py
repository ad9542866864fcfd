import asyncio
import logging

from filedrop.transfers.registry import TransferRegistry

log = logging.getLogger(__name__)


class RetentionReaper:
    """Periodically purges expired transfers and their stored files."""

    def __init__(self, registry: TransferRegistry, interval: float = 3600):
        self.registry = registry
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        # file deletion is blocking I/O; keep it off the event loop
        return await asyncio.to_thread(self.registry.sweep_expired)

    async def _loop(self):
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.run_once()
            except Exception:
                log.exception("retention sweep failed")

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        log.info("retention reaper started (every %ss)", self.interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        log.info("retention reaper stopped")
