"""
Client library for Wavefront direct data ingestion.
"""
from .buffer import BoundedBuffer
from .client import DirectClient
from .collector import Collector
from .data_types import DataType
from .line_data import (
    HistogramGranularity,
    histogram_to_line_data,
    metric_to_line_data,
    tracing_span_to_line_data,
)
from .scheduler import FlushScheduler
from .transport import ReportOutcome, ReportResult, Transport

__version__ = '0.1.0'

__all__ = [
    'BoundedBuffer',
    'Collector',
    'DataType',
    'DirectClient',
    'FlushScheduler',
    'HistogramGranularity',
    'ReportOutcome',
    'ReportResult',
    'Transport',
    'histogram_to_line_data',
    'metric_to_line_data',
    'tracing_span_to_line_data',
]
