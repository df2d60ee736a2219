"""
Module: test_runner.py
Description: Unit tests for the sink polling runner.

Uses a mocked sink and a recording sleep so backoff pacing can be
checked without waiting.
"""

import pytest
from unittest.mock import MagicMock

from event_shipper.delivery.runner import SinkRunner
from event_shipper.models.outcome import Status


@pytest.fixture
def mock_sink():
    sink = MagicMock(name="sink")
    sink.name = "test-sink"
    return sink


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def runner(mock_sink, runner_settings, sleeps):
    return SinkRunner(mock_sink, runner_settings, sleep=sleeps.append)


class TestRunOnce:
    """Test cases for a single READY-or-stop cycle."""

    def test_ready_returns_without_sleeping(self, runner, mock_sink, sleeps):
        """Test READY is returned straight away."""
        mock_sink.process.return_value = Status.READY

        assert runner.run_once() is Status.READY
        assert sleeps == []
        mock_sink.process.assert_called_once()

    def test_backoff_sleeps_increase_until_ready(self, runner, mock_sink, sleeps):
        """Test consecutive backoffs sleep longer, capped at the maximum."""
        mock_sink.process.side_effect = [
            Status.BACKOFF, Status.BACKOFF, Status.BACKOFF, Status.BACKOFF, Status.READY
        ]

        assert runner.run_once() is Status.READY
        assert sleeps == [
            pytest.approx(0.1), pytest.approx(0.2), pytest.approx(0.25), pytest.approx(0.25)
        ]

    def test_backoff_resets_after_ready(self, runner, mock_sink, sleeps):
        """Test the sleep starts over after a READY outcome."""
        mock_sink.process.side_effect = [
            Status.BACKOFF, Status.BACKOFF, Status.READY, Status.BACKOFF, Status.READY
        ]

        runner.run_once()
        runner.run_once()

        assert sleeps == [pytest.approx(0.1), pytest.approx(0.2), pytest.approx(0.1)]

    def test_stop_interrupts_backoff(self, runner, mock_sink, sleeps):
        """Test a stop request ends the cycle with the last BACKOFF."""
        def process():
            runner.stop()
            return Status.BACKOFF

        mock_sink.process.side_effect = process

        assert runner.run_once() is Status.BACKOFF
        assert sleeps == []

    def test_stop_during_sleep_skips_next_attempt(self, mock_sink, runner_settings, sleeps):
        """Test a stop request made while sleeping does not poll the sink again."""
        def sleep(seconds):
            sleeps.append(seconds)
            runner.stop()

        runner = SinkRunner(mock_sink, runner_settings, sleep=sleep)
        mock_sink.process.return_value = Status.BACKOFF

        assert runner.run_once() is Status.BACKOFF
        mock_sink.process.assert_called_once()
        assert sleeps == [pytest.approx(0.1)]

    def test_fault_propagates(self, runner, mock_sink):
        """Test exceptions from process() are not retried."""
        mock_sink.process.side_effect = MemoryError()

        with pytest.raises(MemoryError):
            runner.run_once()

        mock_sink.process.assert_called_once()


class TestRun:
    """Test cases for the full polling loop."""

    def test_run_until_stopped(self, runner, mock_sink):
        """Test the loop drives the sink and its lifecycle."""
        outcomes = iter([Status.READY, Status.READY, Status.BACKOFF])

        def process():
            status = next(outcomes)
            if status is Status.BACKOFF:
                runner.stop()
            return status

        mock_sink.process.side_effect = process

        runner.run()

        assert mock_sink.process.call_count == 3
        mock_sink.start.assert_called_once()
        mock_sink.stop.assert_called_once()
        assert runner.stopped

    def test_run_publishes_counters(self, mock_sink, runner_settings, sleeps):
        """Test counters are published to the metrics client on exit."""
        metrics_client = MagicMock(name="metrics_client")
        runner = SinkRunner(mock_sink, runner_settings, metrics_client=metrics_client, sleep=sleeps.append)

        def process():
            runner.stop()
            return Status.READY

        mock_sink.process.side_effect = process

        runner.run()

        mock_sink.counter.publish.assert_called_once_with(metrics_client)

    def test_run_stops_sink_on_fault(self, runner, mock_sink):
        """Test an unrecoverable fault stops the sink and propagates."""
        mock_sink.process.side_effect = SystemError("interpreter state")

        with pytest.raises(SystemError):
            runner.run()

        mock_sink.stop.assert_called_once()
