import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import psutil
import pytz

from direct_ingestion.collector import Collector
from direct_ingestion.line_data import metric_to_line_data

logger = logging.getLogger(__name__)


class SystemCollector(Collector):
    """Collector for CPU, memory and disk usage."""

    def __init__(self, source: Optional[str] = None, prefix: str = 'system', disk_path: str = '/'):
        self.source = source
        self.prefix = prefix
        self.disk_path = disk_path

    def collect(self):
        """Collect system usage.

        Returns:
            dict: Usage percentages and the UTC collection timestamp
        """
        readings = {
            'cpu.usage': psutil.cpu_percent(interval=None),
            'memory.usage': psutil.virtual_memory().percent,
            'disk.usage': psutil.disk_usage(self.disk_path).percent,
            'timestamp': int(datetime.now(pytz.UTC).timestamp())
        }
        logger.debug("Collected system usage: %s", readings)
        return readings

    def format_metrics(self, raw_metrics: Dict[str, Any]) -> List[str]:
        timestamp = raw_metrics.get('timestamp')
        lines = []
        for key, value in raw_metrics.items():
            if key == 'timestamp':
                continue
            lines.append(metric_to_line_data(
                f'{self.prefix}.{key}', value, timestamp, self.source, {'unit': 'percent'}
            ))
        return lines
