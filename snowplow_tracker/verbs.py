from __future__ import annotations

from collections.abc import Mapping, Sequence

from snowplow_tracker.enums import EventSymbol
from snowplow_tracker.events import Event, StructuredEvent, UnstructuredEvent
from snowplow_tracker.exceptions import ContractFailure
from snowplow_tracker.protocol.grammar import to_field_mapping, to_payload
from snowplow_tracker.protocol.payload import Context, Payload
from snowplow_tracker.typing import CollectorTag, FieldMapping

EVENT_SYMBOLS: frozenset[EventSymbol] = frozenset(EventSymbol)


def as_event_hash(symbol: EventSymbol | str) -> FieldMapping:
    """Convert an event symbol into the C{e} field of the payload.

    @type symbol: L{EventSymbol}
    @param symbol: Whether a structured or an unstructured event is
        performed. The codes C{"se"} and C{"ue"} are accepted as well.
    @rtype: dict
    @return: C{{"e": "se"}} or C{{"e": "ue"}}.
    @raise ContractFailure: If the symbol is not a known event symbol.
    """
    if not isinstance(symbol, str) or symbol not in {
        s.value for s in EVENT_SYMBOLS
    }:
        raise ContractFailure(f"Unknown event symbol: {symbol!r}")
    return to_field_mapping([("e", EventSymbol(symbol).value, "raw")])


def performs(
    event: Event,
    context: Context | None = None,
    *,
    base: Sequence[Mapping[str, str]] = (),
    collectors: Sequence[CollectorTag] = (),
    encode_base64: bool = True,
) -> Payload:
    """Subject performs a custom event, either a Google Analytics-style
    structured event or a MixPanel-style unstructured one.

    @type event: L{Event}
    @param event: The custom structured or unstructured event.
    @type context: Optional[L{Context}]
    @param context: Optional context in which this event takes place.
    @type base: Sequence[Mapping[str, str]]
    @param base: Fragments placed before the event fields, e.g. the
        tracker and subject fields.
    @type collectors: Sequence[str]
    @param collectors: Tags of the collectors the payload is meant for.
        Empty means the default collector.
    @type encode_base64: bool
    @param encode_base64: Whether JSON fields of the event are
        base64-encoded.
    @rtype: L{Payload}
    @return: The assembled payload.
    @raise ContractFailure: If C{event} is neither variant.
    """
    match event:
        case StructuredEvent():
            fragments = _struct_event_fragments(event)
        case UnstructuredEvent():
            fragments = _unstruct_event_fragments(event, encode_base64)
        case _:
            raise ContractFailure(
                "Expected a StructuredEvent or UnstructuredEvent, "
                f"got {type(event).__name__}."
            )
    return to_payload(
        [*base, *fragments],
        {"context": context, "collectors": collectors},
    )


def _struct_event_fragments(event: StructuredEvent) -> list[FieldMapping]:
    return [
        as_event_hash(EventSymbol.STRUCTURED),
        to_field_mapping(event.tuples()),
    ]


def _unstruct_event_fragments(
    event: UnstructuredEvent, encode_base64: bool
) -> list[FieldMapping]:
    return [
        as_event_hash(EventSymbol.UNSTRUCTURED),
        to_field_mapping(event.tuples(encode_base64)),
    ]
