"""
Data types accepted by the direct ingestion API.
"""
from enum import Enum


class DataType(Enum):
    """Kinds of telemetry, each sent with its own format discriminator."""

    METRIC = 'wavefront'
    HISTOGRAM = 'histogram'
    SPAN = 'trace'

    @property
    def data_format(self) -> str:
        """Value of the `f` format indicator sent with each report."""
        return self.value
