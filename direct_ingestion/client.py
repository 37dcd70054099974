"""
Direct ingestion client.

Sends metrics, distributions and tracing spans straight to a Wavefront
cluster through the direct ingestion API.
"""
import logging
from typing import Dict, List, Optional, Sequence

from . import config
from .data_types import DataType
from .line_data import (
    histogram_to_line_data,
    metric_to_line_data,
    tracing_span_to_line_data,
)
from .scheduler import FlushScheduler
from .sender import BufferedSender
from .transport import ReportResult, Transport

logger = logging.getLogger(__name__)


def _require_positive_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


class DirectClient:
    """Client buffering points per data type and flushing them periodically."""

    def __init__(
        self,
        server: str,
        token: str,
        max_queue_size: int = config.MAX_QUEUE_SIZE,
        batch_size: int = config.BATCH_SIZE,
        flush_interval: float = config.FLUSH_INTERVAL,
        request_timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        default_source: Optional[str] = None
    ):
        """
        Construct the client and start its flush scheduler.

        Args:
            server (str): Server address, e.g. https://INSTANCE.wavefront.com
            token (str): Token with direct data ingestion permission
            max_queue_size (int): Size of the buffer for each data type, 50000 by default
            batch_size (int): Points sent by one API call, 10000 by default
            flush_interval (float): Seconds between flushes, 5 by default
            request_timeout (float, optional): Request timeout in seconds. Defaults to config.REQUEST_TIMEOUT.
            max_retries (int, optional): Total attempts on connection errors. Defaults to config.MAX_RETRIES.
            retry_delay (float, optional): Delay between attempts in seconds. Defaults to config.RETRY_DELAY.
            default_source (str, optional): Source for points reported without one. Defaults to config.DEFAULT_SOURCE.

        Raises:
            ValueError: If any setting is missing or not positive
        """
        if not server:
            raise ValueError("server is required")
        if not token:
            raise ValueError("token is required")
        _require_positive_int('max_queue_size', max_queue_size)
        _require_positive_int('batch_size', batch_size)
        if isinstance(flush_interval, bool) or not isinstance(flush_interval, (int, float)) or flush_interval <= 0:
            raise ValueError(f"flush_interval must be positive, got {flush_interval!r}")

        self._server = server
        self._max_queue_size = max_queue_size
        self._batch_size = batch_size
        self._flush_interval = flush_interval
        self._default_source = default_source or config.DEFAULT_SOURCE
        self._closed = False

        self._transport = Transport(
            server,
            token,
            request_timeout=request_timeout,
            max_retries=max_retries,
            retry_delay=retry_delay
        )
        self._senders: Dict[DataType, BufferedSender] = {
            data_type: BufferedSender(data_type, max_queue_size, batch_size, self._transport)
            for data_type in DataType
        }

        self._scheduler = FlushScheduler(flush_interval, self._flush_all)
        self._scheduler.start()

    @property
    def server(self) -> str:
        return self._server

    @property
    def max_queue_size(self) -> int:
        return self._max_queue_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def flush_interval(self) -> float:
        return self._flush_interval

    @property
    def default_source(self) -> str:
        return self._default_source

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Client is closed")

    def _flush_all(self) -> None:
        for data_type, sender in self._senders.items():
            try:
                sender.flush()
            except Exception as e:
                logger.error("Error flushing %s buffer: %s", data_type.name.lower(), str(e))

    # Buffered sends

    def send_metric(self, line_data: str) -> None:
        """
        Buffer one metric point.

        Blocks while the metric buffer is full. The point is sent on the
        next flush.

        Args:
            line_data (str): Point built with line_data.metric_to_line_data()
        """
        self._ensure_open()
        self._senders[DataType.METRIC].enqueue(line_data)

    def send_histogram(self, line_data: str) -> None:
        """Buffer one distribution point."""
        self._ensure_open()
        self._senders[DataType.HISTOGRAM].enqueue(line_data)

    # Alias for the Wavefront naming
    send_distribution = send_histogram

    def send_span(self, line_data: str) -> None:
        """Buffer one tracing span."""
        self._ensure_open()
        self._senders[DataType.SPAN].enqueue(line_data)

    # Immediate sends

    def send_metrics_now(self, metrics: Sequence[str]) -> List[ReportResult]:
        """
        Send a list of metrics immediately, bypassing the buffer.

        Have to construct the data manually by calling
        line_data.metric_to_line_data()

        Args:
            metrics (list): Metric points in line data format

        Returns:
            list: One ReportResult per batch

        Raises:
            requests.RequestException: If a batch could not be sent at all
        """
        self._ensure_open()
        return self._senders[DataType.METRIC].report_now(metrics)

    def send_histograms_now(self, distributions: Sequence[str]) -> List[ReportResult]:
        """
        Send a list of distributions immediately.

        Args:
            distributions (list): Points built with line_data.histogram_to_line_data()
        """
        self._ensure_open()
        return self._senders[DataType.HISTOGRAM].report_now(distributions)

    send_distributions_now = send_histograms_now

    def send_spans_now(self, spans: Sequence[str]) -> List[ReportResult]:
        """
        Send a list of spans immediately.

        Args:
            spans (list): Spans built with line_data.tracing_span_to_line_data()
        """
        self._ensure_open()
        return self._senders[DataType.SPAN].report_now(spans)

    # Encoding helpers

    def report_metric(self, name, value, timestamp=None, source=None, tags=None) -> None:
        """
        Encode and buffer a metric.

        Example:
            client.report_metric('new-york.power.usage', 42422, 1533531013,
                                 'localhost', {'datacenter': 'dc1'})
        """
        self.send_metric(metric_to_line_data(name, value, timestamp, source, tags, self._default_source))

    def report_distribution(self, name, centroids, histogram_granularities, timestamp=None, source=None, tags=None) -> None:
        """Encode and buffer a distribution."""
        self.send_histogram(histogram_to_line_data(
            name, centroids, histogram_granularities, timestamp, source, tags, self._default_source
        ))

    def report_span(self, name, start_millis, duration_millis, source, trace_id, span_id,
                    parents=None, follows_from=None, tags=None) -> None:
        """Encode and buffer a tracing span."""
        self.send_span(tracing_span_to_line_data(
            name, start_millis, duration_millis, source, trace_id, span_id,
            parents, follows_from, tags, self._default_source
        ))

    # Lifecycle

    def flush_now(self) -> None:
        """Drain and report every buffer on the calling thread."""
        self._ensure_open()
        self._flush_all()

    def get_failure_count(self) -> int:
        """
        Get the number of reports that did not succeed.

        Returns:
            int: Ingestion and transport failures so far
        """
        return self._transport.failure_count

    def get_buffered_count(self) -> int:
        """
        Get the number of buffered points across all data types.

        Returns:
            int: Number of buffered points
        """
        return sum(len(sender.buffer) for sender in self._senders.values())

    def close(self) -> None:
        """
        Stop the scheduler, flush what is left and release the connection.

        Producers still waiting for buffer space get a RuntimeError, so the
        final flush is the last drain any buffer sees.

        Raises:
            RuntimeError: If the client was already closed
        """
        self._ensure_open()
        self._closed = True
        for sender in self._senders.values():
            sender.close()
        try:
            self._scheduler.stop()
        finally:
            self._transport.close()
        logger.info("Direct client for %s closed", self._server)

    def __enter__(self) -> 'DirectClient':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
