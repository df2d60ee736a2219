"""
Module: delivery/policy.py
Description: Decision table mapping HTTP outcomes to transaction actions.

503 and unreadable responses are transient: the transaction is rolled
back so the event is redelivered. 4xx and unexpected statuses are
permanent or unclassified: the transaction is committed so a single
bad event cannot block the queue. Transport failures are transient.
"""

from event_shipper.exceptions import (
    PermanentDeliveryError,
    TransientDeliveryError,
    UnclassifiedDeliveryError,
)
from event_shipper.models.outcome import DeliveryDecision, SendResult, Status

HTTP_OK = 200
HTTP_UNAVAILABLE = 503


def classify(result: SendResult) -> DeliveryDecision:
    """
    Decide commit/rollback and the Status for one HTTP exchange.

    Args:
        result: Outcome of the POST

    Returns:
        DeliveryDecision for the sink to apply
    """
    if result.transport_error is not None and not result.unreadable:
        return DeliveryDecision(
            commit=False,
            status=Status.BACKOFF,
            log_level="error",
            message="Error opening connection",
            error=TransientDeliveryError(str(result.transport_error))
        )

    status_code = result.status_code

    if status_code == HTTP_OK:
        return DeliveryDecision(
            commit=True,
            status=Status.READY,
            log_level="debug",
            message="Successful write, event consumed"
        )

    if status_code == HTTP_UNAVAILABLE:
        return DeliveryDecision(
            commit=False,
            status=Status.BACKOFF,
            log_level="debug",
            message="Service Unavailable (503), retrying",
            error=TransientDeliveryError("Service unavailable", status_code)
        )

    if status_code is not None and 400 <= status_code < 500:
        return DeliveryDecision(
            commit=True,
            status=Status.READY,
            log_level="error",
            message="Bad request, event consumed",
            error=PermanentDeliveryError("Endpoint rejected event", status_code)
        )

    if result.unreadable or status_code is None or status_code < 100:
        return DeliveryDecision(
            commit=False,
            status=Status.BACKOFF,
            log_level="debug",
            message="Malformed response returned from server, retrying",
            error=TransientDeliveryError("Unreadable status line")
        )

    return DeliveryDecision(
        commit=True,
        status=Status.READY,
        log_level="error",
        message="Unexpected status code returned for event",
        error=UnclassifiedDeliveryError("Unexpected status code", status_code)
    )
