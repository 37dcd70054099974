"""
Background scheduler that flushes the buffers on a fixed interval.
"""
import logging
import threading
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    STOPPED = 'stopped'
    RUNNING = 'running'
    TERMINATED = 'terminated'


class FlushScheduler:
    """Runs a flush callback every flush_interval seconds on a daemon thread."""

    def __init__(self, flush_interval: float, flush: Callable[[], None], name: str = 'direct-ingestion-flush'):
        """
        Initialize the scheduler.

        Args:
            flush_interval (float): Seconds between flushes
            flush (callable): Called with no arguments on every tick
            name (str): Name of the background thread
        """
        self.flush_interval = flush_interval
        self.name = name
        self.state = SchedulerState.STOPPED

        self._flush = flush
        self._flush_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _run_flush(self) -> None:
        with self._flush_lock:
            self._flush()

    def _run_loop(self) -> None:
        """Run the flush loop."""
        logger.info("Starting flush loop with interval %s seconds", self.flush_interval)

        while not self._stop_event.wait(self.flush_interval):
            try:
                self._run_flush()
            except Exception as e:
                logger.error(f"Error in flush loop: {str(e)}")

    def start(self) -> None:
        """Start flushing in a separate thread."""
        if self.state is not SchedulerState.STOPPED:
            raise RuntimeError(f"Cannot start scheduler in state {self.state.value}")

        self.state = SchedulerState.RUNNING
        self._thread = threading.Thread(target=self._run_loop, name=self.name, daemon=True)
        self._thread.start()
        logger.info("Flush scheduler started")

    def stop(self) -> None:
        """
        Stop the scheduler and run one final flush.

        Waits for a flush in progress to finish. The scheduler cannot be
        restarted afterwards.

        Raises:
            RuntimeError: If the scheduler is not running
        """
        if self.state is not SchedulerState.RUNNING:
            raise RuntimeError(f"Cannot stop scheduler in state {self.state.value}")

        self.state = SchedulerState.TERMINATED
        self._stop_event.set()
        self._thread.join()
        self._thread = None

        try:
            self._run_flush()
        finally:
            logger.info("Flush scheduler stopped")

    @property
    def running(self) -> bool:
        return self.state is SchedulerState.RUNNING
