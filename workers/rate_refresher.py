import asyncio
import logging
import signal
import time

from api.dependencies import bootstrap, build_refresh_orchestrator, cleanup_dependencies, init_dependencies
from application.services.refresh_service import RefreshOrchestrator
from config.logging_config import setup_logging
from config.settings import get_settings

logger = logging.getLogger(__name__)


class RateRefreshWorker:
    """
    Background worker that periodically refreshes exchange rates.

    This runs independently of the FastAPI server so the history and the
    cache stay fresh regardless of request traffic.
    """

    def __init__(self, orchestrator: RefreshOrchestrator, interval: float = 3600):
        """
        Args:
            orchestrator: Runs one aggregate/store/cache cycle
            interval: Seconds between refresh cycles
        """
        self.orchestrator = orchestrator
        self.interval = interval
        self.is_running = False
        self._stop_event = asyncio.Event()

    async def run_once(self) -> int:
        cycle_start = time.time()
        updated = await self.orchestrator.refresh()
        logger.info(f"Refresh cycle completed in {time.time() - cycle_start:.2f}s: {updated} pairs updated")
        return updated

    async def run(self) -> None:
        """Main worker loop. Runs until stop() is called."""
        self.is_running = True
        self._stop_event.clear()
        logger.info(f"Rate refresh worker started, interval {self.interval}s")

        cycle_count = 0
        while self.is_running:
            cycle_count += 1
            logger.info(f"Cycle #{cycle_count}")
            try:
                await self.run_once()
            except asyncio.CancelledError:
                logger.info("Worker received cancellation signal")
                break
            except Exception as e:
                logger.error(f"Error in refresh cycle: {e}", exc_info=True)

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            except TimeoutError:
                pass

        self.is_running = False
        logger.info("Rate refresh worker stopped")

    def stop(self) -> None:
        logger.info("Stopping rate refresh worker...")
        self.is_running = False
        self._stop_event.set()


async def main() -> None:
    settings = get_settings()
    setup_logging(settings)

    init_dependencies()
    await bootstrap()

    worker = RateRefreshWorker(build_refresh_orchestrator(), interval=settings.REFRESH_INTERVAL_SECONDS)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, worker.stop)

    try:
        await worker.run()
    finally:
        await cleanup_dependencies()
        logger.info("Cleanup completed")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
