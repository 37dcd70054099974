"""
Encoders producing Wavefront line data.

Metric format:
    "<metricName>" <metricValue> [<timestamp>] source="<source>" ["<k>"="<v>" ...]

Distribution format (one line per granularity):
    !M [<timestamp>] #<count> <mean> [#<count> <mean> ...] "<name>" source="<source>" [tags]

Span format:
    "<name>" source="<source>" traceId=<uuid> spanId=<uuid> [parent=<uuid>] [followsFrom=<uuid>] [tags] <startMillis> <durationMillis>
"""
import re
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from . import config

DELTA_PREFIXES = ('∆', 'Δ')
_INVALID_NAME_CHARS = re.compile(r'[^a-zA-Z0-9_.\-]')

TagsType = Union[Dict[str, str], Sequence[Tuple[str, str]], None]


class HistogramGranularity(Enum):
    MINUTE = '!M'
    HOUR = '!H'
    DAY = '!D'


def sanitize(name: str) -> str:
    """Quote a metric name, replacing characters Wavefront does not accept with '-'."""
    name = name.strip()
    prefix = ''
    for candidate in ('~',) + DELTA_PREFIXES:
        if name.startswith(candidate):
            prefix = candidate
            name = name[len(candidate):]
            break
    return '"' + prefix + _INVALID_NAME_CHARS.sub('-', name) + '"'


def sanitize_tag_key(key) -> str:
    """Quote a tag key, replacing characters Wavefront does not accept with '-'."""
    return '"' + _INVALID_NAME_CHARS.sub('-', str(key).strip()) + '"'


def sanitize_value(value) -> str:
    """Quote a source or tag value, escaping embedded quotes."""
    return '"' + str(value).strip().replace('"', '\\"') + '"'


def _resolve_source(source: Optional[str], default_source: Optional[str]) -> str:
    if source is None or not str(source).strip():
        return default_source or config.DEFAULT_SOURCE
    return source


def _tag_pairs(tags: TagsType) -> List[Tuple[str, str]]:
    if not tags:
        return []
    pairs = list(tags.items()) if isinstance(tags, dict) else list(tags)
    for key, value in pairs:
        if not key or not str(key).strip():
            raise ValueError("Tag key cannot be blank")
        if value is None or not str(value).strip():
            raise ValueError(f"Tag value for key {key!r} cannot be blank")
    return pairs


def _format_tags(tags: TagsType) -> str:
    return ''.join(f' {sanitize_tag_key(key)}={sanitize_value(value)}' for key, value in _tag_pairs(tags))


def metric_to_line_data(
    name: str,
    value: float,
    timestamp: Optional[int],
    source: Optional[str],
    tags: TagsType,
    default_source: Optional[str] = None
) -> str:
    """
    Encode a single metric point.

    Example:
        '"new-york.power.usage" 42422 1533531013 source="localhost" "datacenter"="dc1"'

    Raises:
        ValueError: If the name or any tag is blank
    """
    if not name or not name.strip():
        raise ValueError("Metric name cannot be blank")

    parts = [sanitize(name), str(value)]
    if timestamp is not None:
        parts.append(str(int(timestamp)))
    parts.append('source=' + sanitize_value(_resolve_source(source, default_source)))
    return ' '.join(parts) + _format_tags(tags)


def histogram_to_line_data(
    name: str,
    centroids: Sequence[Tuple[float, int]],
    histogram_granularities: Iterable[HistogramGranularity],
    timestamp: Optional[int],
    source: Optional[str],
    tags: TagsType,
    default_source: Optional[str] = None
) -> str:
    """
    Encode a distribution, one line per requested granularity.

    Args:
        centroids (list): (mean, count) pairs
        histogram_granularities (set): Granularities to report

    Raises:
        ValueError: If the name is blank or no centroids or granularities are given
    """
    if not name or not name.strip():
        raise ValueError("Histogram name cannot be blank")
    if not centroids:
        raise ValueError("A distribution should have at least one centroid")
    granularities = set(histogram_granularities or ())
    if not granularities:
        raise ValueError("Histogram granularities cannot be empty")

    body = ''.join(f' #{int(count)} {mean}' for mean, count in centroids)
    suffix = (
        f' {sanitize(name)} source={sanitize_value(_resolve_source(source, default_source))}'
        + _format_tags(tags)
    )
    stamp = f' {int(timestamp)}' if timestamp is not None else ''

    lines = []
    for granularity in HistogramGranularity:
        if granularity in granularities:
            lines.append(granularity.value + stamp + body + suffix)
    return '\n'.join(lines)


def tracing_span_to_line_data(
    name: str,
    start_millis: int,
    duration_millis: int,
    source: Optional[str],
    trace_id,
    span_id,
    parents: Optional[Sequence] = None,
    follows_from: Optional[Sequence] = None,
    tags: TagsType = None,
    default_source: Optional[str] = None
) -> str:
    """
    Encode a tracing span.

    Raises:
        ValueError: If the name or any tag is blank
    """
    if not name or not name.strip():
        raise ValueError("Span name cannot be blank")

    line = (
        f'{sanitize_value(name)} source={sanitize_value(_resolve_source(source, default_source))}'
        f' traceId={trace_id} spanId={span_id}'
    )
    for parent in parents or ():
        line += f' parent={parent}'
    for item in follows_from or ():
        line += f' followsFrom={item}'
    line += _format_tags(tags)
    return f'{line} {int(start_millis)} {int(duration_millis)}'
