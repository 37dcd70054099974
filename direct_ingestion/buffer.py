"""
Bounded buffer holding encoded points until the next flush.
"""
import logging
import threading
from collections import deque
from typing import List

logger = logging.getLogger(__name__)


class BoundedBuffer:
    """Thread-safe FIFO with a fixed capacity.

    Producers block in push() while the buffer is full; nothing is ever
    dropped. The flush side empties the buffer in one step with drain_all().
    """

    def __init__(self, max_size: int):
        """
        Initialize the buffer.

        Args:
            max_size (int): Maximum number of resident points

        Raises:
            ValueError: If max_size is not a positive integer
        """
        if isinstance(max_size, bool) or not isinstance(max_size, int) or max_size <= 0:
            raise ValueError(f"max_size must be a positive integer, got {max_size!r}")

        self._max_size = max_size
        self._items = deque()
        self._not_full = threading.Condition(threading.Lock())
        self._closed = False

    @property
    def max_size(self) -> int:
        return self._max_size

    def push(self, point: str) -> None:
        """
        Append a point, waiting for free space if the buffer is full.

        Args:
            point (str): Encoded point

        Raises:
            RuntimeError: If the buffer is closed, including while waiting
        """
        with self._not_full:
            if len(self._items) >= self._max_size and not self._closed:
                logger.debug("Buffer full (%s points), waiting for drain", self._max_size)
            while not self._closed and len(self._items) >= self._max_size:
                self._not_full.wait()
            if self._closed:
                raise RuntimeError("Buffer is closed")
            self._items.append(point)

    def drain_all(self) -> List[str]:
        """
        Remove and return every resident point in insertion order.

        Returns:
            list: The drained points, possibly empty
        """
        with self._not_full:
            points = list(self._items)
            self._items.clear()
            self._not_full.notify_all()
        return points

    def close(self) -> None:
        """Refuse further pushes and wake every producer waiting for space."""
        with self._not_full:
            self._closed = True
            self._not_full.notify_all()

    @property
    def closed(self) -> bool:
        with self._not_full:
            return self._closed

    def __len__(self) -> int:
        with self._not_full:
            return len(self._items)
