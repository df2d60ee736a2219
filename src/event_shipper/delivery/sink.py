"""
Module: delivery/sink.py
Description: HTTP sink draining a transactional channel.

Takes events from the channel one at a time and sends each to a remote
service using an HTTP POST request, with the event body as the POST
body. Any transient error is retried forever, and events the endpoint
can never accept are discarded:

- 200 (OK): event consumed.
- 503 (Service Unavailable): BACKOFF, event not consumed.
- 400-499: event consumed and discarded, logged as an error.
- Unreadable status line: BACKOFF, event not consumed, no error log.
- Any other status: event consumed, logged as an error.
- Connection, write or read failure, or the server disconnecting: BACKOFF,
  event not consumed.
"""

import httpx
from typing import Optional

from event_shipper.channel import Channel, transaction_scope
from event_shipper.config.settings import DeliverySettings
from event_shipper.delivery.policy import classify
from event_shipper.models.outcome import DeliveryDecision, SendResult, Status
from event_shipper.utils.logger import get_logger
from event_shipper.utils.metrics import SinkCounter

logger = get_logger(__name__)

# Exception subclasses that signal a broken runtime rather than a bad event
_UNRECOVERABLE = (MemoryError, SystemError)

# Protocol errors raised when the peer drops the connection, not a bad status line
_DISCONNECT_MESSAGES = ("server disconnected", "peer closed connection")


def _is_disconnect(error: httpx.RemoteProtocolError) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in _DISCONNECT_MESSAGES)


class HttpSink:
    """
    Synchronous HTTP sink for one channel.

    One call to process() is one attempted delivery of at most one
    event inside its own transaction.
    """

    def __init__(
        self,
        channel: Channel,
        settings: DeliverySettings,
        name: str = "http-sink",
        counter: Optional[SinkCounter] = None
    ):
        """
        Initialize HTTP sink.

        Args:
            channel: Transactional channel to drain
            settings: Validated delivery settings
            name: Sink name used in logs and metric dimensions
            counter: Counter to record activity in, created if omitted
        """
        self.channel = channel
        self.settings = settings
        self.name = name
        self.counter = counter or SinkCounter(name)
        self.headers = {
            'Content-Type': settings.content_type_header,
            'Accept': settings.accept_header
        }

        logger.info(
            "HTTP sink initialized",
            sink=name,
            endpoint=settings.endpoint,
            connect_timeout_ms=settings.connect_timeout,
            request_timeout_ms=settings.request_timeout,
            content_type=settings.content_type_header,
            accept=settings.accept_header
        )

    def start(self) -> None:
        logger.info("Starting HTTP sink", sink=self.name)

    def stop(self) -> None:
        logger.info("Stopping HTTP sink", sink=self.name, counters=self.counter.snapshot())

    def process(self) -> Status:
        """
        Take one event from the channel and deliver it.

        Returns:
            Status.READY when an event was consumed, Status.BACKOFF when
            nothing was consumed and the caller should pause

        Raises:
            MemoryError, SystemError, BaseException: Unrecoverable faults,
                re-raised after the transaction is rolled back
        """
        with transaction_scope(self.channel) as txn:
            try:
                event = self.channel.take()
                if event is None or not event.body:
                    txn.commit()
                    self.counter.increment_batch_empty()

                    logger.debug("Processed empty event", sink=self.name)
                    return Status.BACKOFF

                self.counter.increment_event_drain_attempt()
                decision = classify(self._send(event.body))

                if decision.commit:
                    txn.commit()
                    if decision.error is None:
                        self.counter.increment_event_drain_success()
                    else:
                        self.counter.increment_event_dropped()
                else:
                    txn.rollback()

                self._log_decision(decision)
                return decision.status

            except Exception as e:
                txn.rollback()

                logger.error(
                    "Error sending HTTP request, retrying",
                    sink=self.name,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True
                )

                if isinstance(e, _UNRECOVERABLE):
                    raise
                return Status.BACKOFF

            except BaseException:
                txn.rollback()
                raise

    def _send(self, body: bytes) -> SendResult:
        """
        POST the body to the endpoint and read the status line.

        Transport failures are returned, not raised. The connection is
        closed before returning.
        """
        logger.debug(
            "Sending request",
            sink=self.name,
            endpoint=self.settings.endpoint,
            body_size=len(body)
        )

        self.counter.increment_connection_created()
        try:
            with httpx.Client(timeout=self.settings.timeout) as client:
                try:
                    response = client.post(
                        self.settings.endpoint,
                        content=body,
                        headers=self.headers
                    )

                except httpx.RemoteProtocolError as e:
                    if not _is_disconnect(e):
                        return SendResult(transport_error=e, unreadable=True)
                    self.counter.increment_connection_failed()
                    return SendResult(transport_error=e)

                except httpx.TransportError as e:
                    self.counter.increment_connection_failed()
                    return SendResult(transport_error=e)

                logger.debug(
                    "Got status code",
                    sink=self.name,
                    status_code=response.status_code
                )
                return SendResult(status_code=response.status_code)

        finally:
            self.counter.increment_connection_closed()
            logger.debug("Connection closed", sink=self.name)

    def _log_decision(self, decision: DeliveryDecision) -> None:
        log = logger.error if decision.log_level == "error" else logger.debug
        log(
            decision.message,
            sink=self.name,
            endpoint=self.settings.endpoint,
            status=decision.status.value,
            committed=decision.commit,
            status_code=decision.error.status_code if decision.error else 200,
            error=str(decision.error) if decision.error else None
        )
