"""
HTTP transport for the direct ingestion report endpoint.
"""
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

import requests
from retrying import retry

from . import config

logger = logging.getLogger(__name__)

SUCCESS_STATUS_CODES = (200, 202)


class ReportOutcome(Enum):
    SUCCESS = 'success'
    INGESTION_ERROR = 'ingestion_error'
    TRANSPORT_ERROR = 'transport_error'


@dataclass(frozen=True)
class ReportResult:
    """Outcome of a single report request."""
    outcome: ReportOutcome
    status_code: Optional[int] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.outcome is ReportOutcome.SUCCESS

    def raise_for_transport_error(self) -> None:
        """Re-raise the underlying exception if the request never completed."""
        if self.outcome is ReportOutcome.TRANSPORT_ERROR:
            raise self.error


class Transport:
    """Sends compressed payloads to `<server>/report`."""

    def __init__(
        self,
        server: str,
        token: str,
        request_timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None
    ):
        """
        Initialize the transport.

        Args:
            server (str): Server address, e.g. https://INSTANCE.wavefront.com
            token (str): Token with direct data ingestion permission
            request_timeout (float, optional): Request timeout in seconds. Defaults to config.REQUEST_TIMEOUT.
            max_retries (int, optional): Total attempts on connection errors. Defaults to config.MAX_RETRIES.
            retry_delay (float, optional): Delay between attempts in seconds. Defaults to config.RETRY_DELAY.
        """
        if urlparse(server).scheme != 'https':
            logger.warning("Server %s does not use https", server)

        self.url = f"{server.rstrip('/')}/report"
        self.request_timeout = request_timeout if request_timeout is not None else config.REQUEST_TIMEOUT
        self.max_retries = max_retries or config.MAX_RETRIES
        self.retry_delay = retry_delay if retry_delay is not None else config.RETRY_DELAY

        self.session = requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/octet-stream',
            'Content-Encoding': 'gzip',
            'Authorization': f'Bearer {token}'
        })

        self._failure_count = 0
        self._failure_lock = threading.Lock()

    def _retry_if_connection_error(self, exception: Exception) -> bool:
        """Return True if we should retry (in this case when it's a connection error)"""
        return isinstance(exception, (requests.ConnectionError, requests.Timeout))

    def _post(self, payload: bytes, data_format: str) -> requests.Response:
        @retry(
            retry_on_exception=self._retry_if_connection_error,
            stop_max_attempt_number=self.max_retries,
            wait_fixed=self.retry_delay * 1000  # milliseconds
        )
        def _send_request():
            return self.session.post(
                self.url,
                data=payload,
                headers={'f': data_format},
                timeout=self.request_timeout
            )

        return _send_request()

    def send(self, payload: bytes, data_format: str) -> ReportResult:
        """
        Issue one report request.

        Args:
            payload (bytes): Gzip compressed line data
            data_format (str): Format discriminator (wavefront, histogram or trace)

        Returns:
            ReportResult: SUCCESS for 200/202, INGESTION_ERROR for any other
            status, TRANSPORT_ERROR if no response was received
        """
        try:
            response = self._post(payload, data_format)
        except requests.exceptions.RequestException as e:
            self._increment_failure_count()
            return ReportResult(ReportOutcome.TRANSPORT_ERROR, error=e)

        if response.status_code not in SUCCESS_STATUS_CODES:
            self._increment_failure_count()
            return ReportResult(ReportOutcome.INGESTION_ERROR, status_code=response.status_code)

        logger.debug("Reported %s payload of %s bytes", data_format, len(payload))
        return ReportResult(ReportOutcome.SUCCESS, status_code=response.status_code)

    def _increment_failure_count(self) -> None:
        with self._failure_lock:
            self._failure_count += 1

    @property
    def failure_count(self) -> int:
        """Number of reports that did not succeed."""
        with self._failure_lock:
            return self._failure_count

    def close(self) -> None:
        self.session.close()
