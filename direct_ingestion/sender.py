"""
Buffered sender shared by every data type.
"""
import logging
from typing import List, Sequence

from .batching import chunks, gzip_compress, join_points
from .buffer import BoundedBuffer
from .data_types import DataType
from .transport import ReportOutcome, ReportResult, Transport

logger = logging.getLogger(__name__)


class BufferedSender:
    """Buffers points of one data type and reports them in batches."""

    def __init__(self, data_type: DataType, max_queue_size: int, batch_size: int, transport: Transport):
        self.data_type = data_type
        self.batch_size = batch_size
        self.transport = transport
        self.buffer = BoundedBuffer(max_queue_size)

    def enqueue(self, point: str) -> None:
        """Add a point to the buffer, blocking while it is full.

        Raises:
            RuntimeError: If the sender was closed, even while waiting for space
        """
        self.buffer.push(point)

    def close(self) -> None:
        """Stop accepting points; already buffered points stay until the next flush."""
        self.buffer.close()

    def _send_batch(self, batch: List[str]) -> ReportResult:
        payload = gzip_compress(join_points(batch))
        return self.transport.send(payload, self.data_type.data_format)

    def _log_failure(self, batch: List[str], result: ReportResult) -> None:
        if result.outcome is ReportOutcome.TRANSPORT_ERROR:
            logger.error(
                "Failed to report batch of %s %s points: %s",
                len(batch), self.data_type.name.lower(), result.error
            )
        elif result.outcome is ReportOutcome.INGESTION_ERROR:
            logger.error(
                "Error reporting batch of %s %s points, Response %s",
                len(batch), self.data_type.name.lower(), result.status_code
            )

    def report(self, points: Sequence[str]) -> List[ReportResult]:
        """
        Send points in batches, attempting every batch even after a failure.

        Args:
            points (list): Encoded points

        Returns:
            list: One ReportResult per batch
        """
        results = []
        for batch in chunks(points, self.batch_size):
            result = self._send_batch(batch)
            self._log_failure(batch, result)
            results.append(result)
        return results

    def report_now(self, points: Sequence[str]) -> List[ReportResult]:
        """
        Send points in batches, stopping at the first transport error.

        Args:
            points (list): Encoded points

        Returns:
            list: One ReportResult per batch sent

        Raises:
            requests.RequestException: If a batch could not be sent at all
        """
        results = []
        for batch in chunks(points, self.batch_size):
            result = self._send_batch(batch)
            self._log_failure(batch, result)
            result.raise_for_transport_error()
            results.append(result)
        return results

    def flush(self) -> List[ReportResult]:
        """Drain the buffer and report everything it held."""
        points = self.buffer.drain_all()
        if not points:
            return []
        logger.debug("Flushing %s %s points", len(points), self.data_type.name.lower())
        return self.report(points)
