"""
Module: delivery/runner.py
Description: Polling loop driving an HTTP sink.

Calls HttpSink.process() until stopped. READY outcomes loop straight
back; consecutive BACKOFF outcomes sleep for an increasing interval,
capped at the configured maximum, using tenacity's retry machinery.
"""

import threading
from typing import Any, Callable, Optional

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_result,
    stop_when_event_set,
    wait_incrementing,
)

from event_shipper.config.settings import RunnerSettings, load_runner_settings
from event_shipper.delivery.sink import HttpSink
from event_shipper.models.outcome import Status
from event_shipper.utils.logger import get_logger
from event_shipper.utils.metrics import MetricsClient

logger = get_logger(__name__)


def _is_backoff(status: Status) -> bool:
    return status is Status.BACKOFF


def _last_status(retry_state: RetryCallState) -> Status:
    # Stop was requested while backing off
    return retry_state.outcome.result()


class SinkRunner:
    """Runs a sink on the calling thread until stop() is called."""

    def __init__(
        self,
        sink: HttpSink,
        settings: Optional[RunnerSettings] = None,
        metrics_client: Optional[MetricsClient] = None,
        sleep: Optional[Callable[[float], Any]] = None
    ):
        self.sink = sink
        self.settings = settings or load_runner_settings()
        self.metrics_client = metrics_client
        self._stop_event = threading.Event()

        increment = self.settings.backoff_increment_ms / 1000.0
        self._retrying = Retrying(
            retry=retry_if_result(_is_backoff),
            wait=wait_incrementing(
                start=increment,
                increment=increment,
                max=self.settings.max_backoff_ms / 1000.0
            ),
            stop=stop_when_event_set(self._stop_event),
            sleep=sleep or self._stop_event.wait,
            before_sleep=self._log_backoff,
            retry_error_callback=_last_status,
            reraise=True
        )

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Request the loop to exit; interrupts a backoff sleep."""
        self._stop_event.set()

    def run_once(self) -> Status:
        """
        Process until a READY outcome or a stop request.

        Returns:
            The last Status returned by the sink
        """
        last_status: Optional[Status] = None

        def attempt() -> Status:
            nonlocal last_status
            # Stopped during the backoff sleep; no further attempt
            if last_status is not None and self.stopped:
                return last_status
            last_status = self.sink.process()
            return last_status

        return self._retrying(attempt)

    def run(self) -> None:
        """
        Drive the sink until stop() is called.

        Raises:
            Exception: Whatever unrecoverable fault the sink re-raised
        """
        self.sink.start()
        try:
            while not self.stopped:
                self.run_once()
        except Exception as e:
            logger.error(
                "Sink runner stopped by unrecoverable error",
                sink=self.sink.name,
                error=str(e),
                error_type=type(e).__name__
            )
            raise
        finally:
            self.sink.stop()
            if self.metrics_client is not None:
                self.sink.counter.publish(self.metrics_client)

    def _log_backoff(self, retry_state: RetryCallState) -> None:
        logger.debug(
            "Sink backing off",
            sink=self.sink.name,
            consecutive_backoffs=retry_state.attempt_number,
            sleep_seconds=retry_state.next_action.sleep if retry_state.next_action else None
        )
