"""
Module: metrics.py
Description: Per-sink counters, published as CloudWatch custom metrics.

HttpSink records connection and drain activity in a SinkCounter. When
a SinkRunner is given a MetricsClient, the counter values are sent to
CloudWatch in one PutMetricData call, dimensioned by sink name, as the
runner exits.

Dependencies: boto3, botocore
"""

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from typing import Dict, List, Mapping, Optional

from event_shipper.utils.logger import get_logger

logger = get_logger(__name__)

COUNTER_NAMES = (
    "ConnectionCreated",
    "ConnectionClosed",
    "ConnectionFailed",
    "EventDrainAttempt",
    "EventDrainSuccess",
    "EventDropped",
    "BatchEmpty",
)


def _dimension_list(dimensions: Optional[Mapping[str, str]]) -> List[dict]:
    return [{'Name': name, 'Value': value} for name, value in (dimensions or {}).items()]


class MetricsClient:
    """Writes data points to one CloudWatch namespace."""

    def __init__(self, namespace: str = "EventShipper", region_name: Optional[str] = None):
        self.namespace = namespace
        self.cloudwatch = boto3.client('cloudwatch', region_name=region_name)

        logger.info(
            "Metrics client initialized",
            namespace=namespace,
            region=self.cloudwatch.meta.region_name
        )

    def put_metric(
        self,
        metric_name: str,
        value: float,
        unit: str = 'Count',
        dimensions: Optional[Mapping[str, str]] = None
    ) -> bool:
        """Publish a single data point. See put_metrics()."""
        return self.put_metrics({metric_name: value}, unit=unit, dimensions=dimensions)

    def put_metrics(
        self,
        values: Mapping[str, float],
        unit: str = 'Count',
        dimensions: Optional[Mapping[str, str]] = None
    ) -> bool:
        """
        Publish several data points sharing a unit and dimensions.

        CloudWatch and botocore errors are logged as warnings and not
        raised.

        Args:
            values: Metric name to value
            unit: CloudWatch unit for every data point
            dimensions: Dimension name to value, applied to every data point

        Returns:
            True if CloudWatch accepted the data (or there was none to send)
        """
        if not values:
            return True

        dimension_list = _dimension_list(dimensions)
        metric_data = []
        for name, value in values.items():
            datum = {'MetricName': name, 'Value': value, 'Unit': unit}
            if dimension_list:
                datum['Dimensions'] = dimension_list
            metric_data.append(datum)

        try:
            self.cloudwatch.put_metric_data(
                Namespace=self.namespace,
                MetricData=metric_data
            )
        except (BotoCoreError, ClientError) as e:
            logger.warning(
                "Failed to publish metrics",
                metric_names=list(values),
                error=str(e),
                namespace=self.namespace
            )
            return False

        logger.debug(
            "Metrics published to CloudWatch",
            metric_count=len(metric_data),
            dimensions=dict(dimensions) if dimensions else None,
            namespace=self.namespace
        )
        return True


class SinkCounter:
    """
    Counts connection and drain activity for one sink.

    Not synchronized: each sink instance is driven by a single thread.
    """

    def __init__(self, name: str):
        self.name = name
        self._counts: Dict[str, int] = {counter: 0 for counter in COUNTER_NAMES}

    def _increment(self, counter: str) -> int:
        self._counts[counter] += 1
        return self._counts[counter]

    def increment_connection_created(self) -> int:
        return self._increment("ConnectionCreated")

    def increment_connection_closed(self) -> int:
        return self._increment("ConnectionClosed")

    def increment_connection_failed(self) -> int:
        return self._increment("ConnectionFailed")

    def increment_event_drain_attempt(self) -> int:
        return self._increment("EventDrainAttempt")

    def increment_event_drain_success(self) -> int:
        return self._increment("EventDrainSuccess")

    def increment_event_dropped(self) -> int:
        return self._increment("EventDropped")

    def increment_batch_empty(self) -> int:
        return self._increment("BatchEmpty")

    def get(self, counter: str) -> int:
        """Current value of a counter by metric name."""
        return self._counts[counter]

    def snapshot(self) -> Dict[str, int]:
        return dict(self._counts)

    def publish(self, metrics_client: MetricsClient) -> bool:
        """Send every counter in one batch, dimensioned by sink name."""
        return metrics_client.put_metrics(self.snapshot(), dimensions={'Sink': self.name})
