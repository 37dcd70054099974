"""
Base collector class for standardizing metric collection.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class Collector(ABC):
    """
    Abstract base class for all metric collectors.

    All collectors should inherit from this class and implement the required methods:
    - collect(): Implement the specific data collection logic
    - format_metrics(): Turn the raw readings into metric line data
    """

    @abstractmethod
    def collect(self) -> Dict[str, Any]:
        """
        Collect metrics.

        Returns:
            dict: The collected metrics
        """
        pass

    @property
    def name(self) -> str:
        """
        Get the name of the collector.

        Returns:
            str: The name of the collector (class name by default)
        """
        return self.__class__.__name__

    def safe_collect(self) -> Dict[str, Any]:
        """
        Safely collect metrics, catching any exceptions.

        Returns:
            dict: The collected metrics or an error dict if collection fails
        """
        try:
            return self.collect()
        except Exception as e:
            logger.error("Error collecting metrics from %s: %s", self.name, str(e))
            return {'error': str(e)}

    @abstractmethod
    def format_metrics(self, raw_metrics: Dict[str, Any]) -> List[str]:
        """
        Format the raw metrics as line data.

        Args:
            raw_metrics (dict): Raw metrics from collect()

        Returns:
            list: Metric points in line data format
        """
        pass

    def collect_and_send(self, client=None, dry_run: bool = False) -> Dict[str, Any]:
        """
        Collect, format and buffer metrics on the client.

        Args:
            client (DirectClient, optional): Client receiving the points. Required unless dry_run.
            dry_run (bool): If True, only log the points

        Returns:
            dict: Collected metrics or error information
        """
        metrics = self.safe_collect()

        if 'error' in metrics:
            logger.error("%s collection error: %s", self.name, metrics['error'])
            return metrics

        lines = self.format_metrics(metrics)

        if dry_run:
            logger.info("DRY RUN: Would send %s metrics: %s", self.name, lines)
        else:
            for line in lines:
                client.send_metric(line)
            logger.debug("Buffered %s points from %s", len(lines), self.name)

        return metrics
