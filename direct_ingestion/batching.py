"""
Helpers for splitting points into batches and building report payloads.
"""
import gzip
from typing import Iterator, List, Sequence


def chunks(points: Sequence[str], batch_size: int) -> Iterator[List[str]]:
    """
    Split points into consecutive batches of at most batch_size.

    Args:
        points (list): Ordered encoded points
        batch_size (int): Maximum points per batch

    Yields:
        list: The next batch, in original order

    Raises:
        ValueError: If batch_size is not positive
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    points = list(points)
    for start in range(0, len(points), batch_size):
        yield points[start:start + batch_size]


def join_points(batch: Sequence[str]) -> str:
    """Join a batch into newline separated text with a trailing newline."""
    return "\n".join(batch) + "\n"


def gzip_compress(text: str) -> bytes:
    """
    Gzip compress UTF-8 text.

    Args:
        text (str): The report body

    Returns:
        bytes: Compressed body
    """
    return gzip.compress(text.encode('utf-8'))
