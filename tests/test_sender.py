"""Tests for the per data type buffered sender."""

import gzip
from unittest.mock import Mock

import pytest
import requests

from direct_ingestion.data_types import DataType
from direct_ingestion.sender import BufferedSender
from direct_ingestion.transport import ReportOutcome, ReportResult, Transport

from conftest import SERVER, TOKEN

SUCCESS = ReportResult(ReportOutcome.SUCCESS, status_code=202)
REJECTED = ReportResult(ReportOutcome.INGESTION_ERROR, status_code=503)


def transport_error(message="connection refused"):
    return ReportResult(ReportOutcome.TRANSPORT_ERROR, error=requests.ConnectionError(message))


@pytest.fixture
def mock_transport():
    transport = Mock(spec=Transport)
    transport.send.return_value = SUCCESS
    return transport


def sent_batches(transport):
    return [gzip.decompress(c.args[0]).decode("utf-8") for c in transport.send.call_args_list]


def test_data_type_formats():
    assert DataType.METRIC.data_format == "wavefront"
    assert DataType.HISTOGRAM.data_format == "histogram"
    assert DataType.SPAN.data_format == "trace"


def test_report_splits_into_batches(mock_transport):
    sender = BufferedSender(DataType.HISTOGRAM, 100, 2, mock_transport)

    results = sender.report(["a", "b", "c", "d", "e"])

    assert results == [SUCCESS, SUCCESS, SUCCESS]
    assert sent_batches(mock_transport) == ["a\nb\n", "c\nd\n", "e\n"]
    assert {c.args[1] for c in mock_transport.send.call_args_list} == {"histogram"}


def test_report_attempts_every_batch_after_failures(mock_transport):
    mock_transport.send.side_effect = [transport_error(), REJECTED, SUCCESS]
    sender = BufferedSender(DataType.METRIC, 100, 1, mock_transport)

    results = sender.report(["a", "b", "c"])

    assert [r.outcome for r in results] == [
        ReportOutcome.TRANSPORT_ERROR,
        ReportOutcome.INGESTION_ERROR,
        ReportOutcome.SUCCESS,
    ]
    assert mock_transport.send.call_count == 3


def test_report_now_raises_on_transport_error(mock_transport):
    mock_transport.send.side_effect = [SUCCESS, transport_error(), SUCCESS]
    sender = BufferedSender(DataType.SPAN, 100, 1, mock_transport)

    with pytest.raises(requests.ConnectionError):
        sender.report_now(["a", "b", "c"])

    assert mock_transport.send.call_count == 2


def test_report_now_does_not_raise_on_ingestion_error(mock_transport):
    mock_transport.send.side_effect = [REJECTED, SUCCESS]
    sender = BufferedSender(DataType.METRIC, 100, 1, mock_transport)

    results = sender.report_now(["a", "b"])

    assert [r.ok for r in results] == [False, True]


def test_flush_drains_buffer_in_order(mock_transport):
    sender = BufferedSender(DataType.METRIC, 10, 3, mock_transport)
    for i in range(5):
        sender.enqueue(f"p{i}")

    sender.flush()

    assert len(sender.buffer) == 0
    assert sent_batches(mock_transport) == ["p0\np1\np2\n", "p3\np4\n"]


def test_flush_of_empty_buffer_sends_nothing(mock_transport):
    sender = BufferedSender(DataType.METRIC, 10, 3, mock_transport)

    assert sender.flush() == []
    mock_transport.send.assert_not_called()


@pytest.mark.parametrize("method", ["report", "report_now"])
def test_each_rejected_batch_is_logged_once(mock_transport, caplog, method):
    mock_transport.send.side_effect = [REJECTED, SUCCESS]
    sender = BufferedSender(DataType.METRIC, 100, 1, mock_transport)

    with caplog.at_level("DEBUG"):
        getattr(sender, method)(["a", "b"])

    errors = [r for r in caplog.records if r.levelname == "ERROR"]
    assert len(errors) == 1
    assert errors[0].name == "direct_ingestion.sender"
    assert "503" in errors[0].getMessage()


def test_transport_error_is_logged_once_through_real_transport(fake_server, caplog):
    fake_server.respond_with(requests.ConnectionError("down"), 500)
    transport = Transport(SERVER, TOKEN, retry_delay=0)
    sender = BufferedSender(DataType.METRIC, 100, 1, transport)

    with caplog.at_level("DEBUG"):
        sender.report(["a", "b"])

    errors = [r for r in caplog.records if r.levelname == "ERROR"]
    assert [r.name for r in errors] == ["direct_ingestion.sender", "direct_ingestion.sender"]


def test_enqueue_after_close_raises(mock_transport):
    sender = BufferedSender(DataType.METRIC, 100, 10, mock_transport)
    sender.enqueue("a")
    sender.close()

    with pytest.raises(RuntimeError):
        sender.enqueue("b")

    sender.flush()
    assert sent_batches(mock_transport) == ["a\n"]
