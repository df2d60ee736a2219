"""
Module: extractor.py
Description: Extract a single top-level string field from JSON events.

The original event body is discarded and replaced with the extracted
value. Events with invalid JSON formatting, or where the extracted
value is not a simple string, are dropped.

The body is walked as a stream of ijson parse events rather than
loaded as a document, so memory stays bounded for large bodies and
nested structures are skipped without being materialized.
"""

import io
import ijson
from typing import Iterable, Iterator, List, Optional, Tuple

from event_shipper.config.settings import ExtractorSettings
from event_shipper.exceptions import ParseError, ShapeError
from event_shipper.models.event import Event
from event_shipper.models.outcome import ExtractionResult
from event_shipper.utils.logger import get_logger

logger = get_logger(__name__)

_CONTAINER_START = ('start_map', 'start_array')
_CONTAINER_END = ('end_map', 'end_array')

ParseEvent = Tuple[str, object]


def _skip_children(events: Iterator[ParseEvent]) -> None:
    """Consume parse events up to the end of the container just opened."""
    depth = 1
    for kind, _ in events:
        if kind in _CONTAINER_START:
            depth += 1
        elif kind in _CONTAINER_END:
            depth -= 1
            if depth == 0:
                return


class FieldExtractor:
    """
    Replaces each event body with one top-level string field.

    Only keys directly inside the outermost object are considered; the
    first matching key wins.
    """

    def __init__(self, settings: ExtractorSettings):
        """
        Initialize the extractor.

        Args:
            settings: Validated extractor settings
        """
        self.property_name = settings.property_name

        logger.info(
            "Field extractor initialized",
            property_name=self.property_name
        )

    def extract(self, body: Optional[bytes]) -> ExtractionResult:
        """
        Find the configured field in a JSON body.

        Args:
            body: Raw event body

        Returns:
            ExtractionResult with the string value, or a drop carrying a
            ParseError/ShapeError (None for a silent drop)
        """
        if not body:
            return ExtractionResult.dropped()

        try:
            with io.BytesIO(body) as stream:
                return self._match(iter(ijson.basic_parse(stream)))
        except (ijson.JSONError, UnicodeDecodeError) as e:
            return ExtractionResult.dropped(
                ParseError(f"Invalid JSON formatting: {e}")
            )
        except OSError as e:
            return ExtractionResult.dropped(
                ParseError(f"Problem reading the event contents: {e}")
            )

    def _match(self, events: Iterator[ParseEvent]) -> ExtractionResult:
        token = next(events, None)
        # Read past the top level start of object
        if token is not None and token[0] == 'start_map':
            token = next(events, None)

        while token is not None and token[0] != 'end_map':
            kind, value = token

            if kind == 'map_key':
                if value == self.property_name:
                    kind, value = next(events, (None, None))
                    if kind == 'string':
                        return ExtractionResult.matched(value)
                    return ExtractionResult.dropped(
                        ShapeError(f"non-string property value ({kind})")
                    )

            elif kind in _CONTAINER_START:
                _skip_children(events)

            token = next(events, None)

        return ExtractionResult.dropped()

    def intercept(self, event: Event) -> Optional[Event]:
        """
        Replace the event body with the extracted field value.

        Args:
            event: Event whose body is expected to be a JSON object

        Returns:
            The same event with its new body, or None if it is dropped
        """
        result = self.extract(event.body)

        if result.extracted:
            event.body = result.value.encode('utf-8', errors='replace')
            return event

        if isinstance(result.error, ParseError):
            logger.warning(
                "Discarding event with invalid JSON formatting",
                property_name=self.property_name,
                error=str(result.error)
            )
        elif isinstance(result.error, ShapeError):
            logger.warning(
                "Discarding event with non-string property value",
                property_name=self.property_name,
                error=str(result.error)
            )
        else:
            logger.debug(
                "Discarding event without top-level property",
                property_name=self.property_name
            )

        return None

    def intercept_batch(self, events: Iterable[Event]) -> List[Event]:
        """Intercept each event, keeping only those that were not dropped."""
        intercepted = (self.intercept(event) for event in events)
        return [event for event in intercepted if event is not None]
