"""Helpers for building payloads which follow the tracker protocol.

A protocol tuple describes one payload field and takes one of two
forms:

    1. C{(key, value)}
    2. C{(key, value, encoding)}

The supported encodings are C{escape} (the default), C{raw} and
C{base64}. A C{None} value drops the field from the payload.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from loguru import logger

from snowplow_tracker.enums import Encoding
from snowplow_tracker.exceptions import ContractFailure
from snowplow_tracker.protocol import encoding as encoders
from snowplow_tracker.protocol.payload import Context, Payload
from snowplow_tracker.typing import (
    CollectorTag,
    FieldMapping,
    ProtocolTuple,
    check_type,
)

ENCODINGS: frozenset[Encoding] = frozenset(Encoding)

MODIFIERS: frozenset[str] = frozenset({"context", "collectors"})
"""Keys accepted in the modifiers of L{to_payload}."""

_ENCODERS: dict[Encoding, Callable[[str], str]] = {
    Encoding.RAW: encoders.raw,
    Encoding.ESCAPE: encoders.escape,
    Encoding.BASE64: encoders.base64,
}


def is_valid_encoding(value: Any) -> bool:
    return isinstance(value, str) and value in {e.value for e in ENCODINGS}


def is_valid_tuple(value: Any) -> bool:
    """Checks whether C{value} is a well-formed protocol tuple.

    @type value: Any
    @param value: Candidate tuple or list.
    @rtype: bool
    @return: C{True} if C{value} has two elements, or three elements
        with a known encoding as the last one. The key must be a string
        and the value a string or C{None}.
    """
    if not isinstance(value, (tuple, list)):
        return False
    if len(value) not in (2, 3):
        return False
    if len(value) == 3 and not is_valid_encoding(value[2]):
        return False
    return isinstance(value[0], str) and (
        value[1] is None or isinstance(value[1], str)
    )


def add_field(key: str, value: str | None, encoding: Encoding) -> FieldMapping:
    """Build a single-entry mapping for one field.

    @type key: str
    @param key: Field name.
    @type value: Optional[str]
    @param value: Field value. If C{None}, an empty mapping is returned.
    @type encoding: L{Encoding}
    @param encoding: Encoding to apply to the value.
    @rtype: dict
    @return: C{{key: encoded value}} or C{{}}.
    @raise ContractFailure: If the key is not a string, the value is
        neither a string nor C{None}, or the encoding is unknown.
    """
    if not isinstance(key, str):
        raise ContractFailure(f"Field key must be a string, got {key!r}.")
    if not is_valid_encoding(encoding):
        raise ContractFailure(f"Unknown encoding {encoding!r} for '{key}'.")
    if value is None:
        return {}
    if not isinstance(value, str):
        raise ContractFailure(
            f"Value of '{key}' must be a string or None, got {value!r}."
        )
    return {key: _ENCODERS[Encoding(encoding)](value)}


def add_escaped(key: str, value: str | None) -> FieldMapping:
    """L{add_field} with the URL-escape encoding."""
    return add_field(key, value, Encoding.ESCAPE)


def add_raw(key: str, value: str | None) -> FieldMapping:
    """L{add_field} without any encoding."""
    return add_field(key, value, Encoding.RAW)


def add_base64(key: str, value: str | None) -> FieldMapping:
    """L{add_field} with the URL-safe base64 encoding."""
    return add_field(key, value, Encoding.BASE64)


def to_unary_hash(value: ProtocolTuple | Sequence[Any]) -> FieldMapping:
    """Convert one protocol tuple to a mapping with at most one entry.

    @raise ContractFailure: If C{value} is not a valid protocol tuple.
    """
    if not is_valid_tuple(value):
        raise ContractFailure(f"Invalid protocol tuple: {value!r}")
    encoding = Encoding(value[2]) if len(value) == 3 else Encoding.ESCAPE
    return add_field(value[0], value[1], encoding)


def to_field_mapping(
    tuples: Iterable[ProtocolTuple | Sequence[Any]],
) -> FieldMapping:
    """Convert protocol tuples into a single mapping.

    Later tuples overwrite earlier ones sharing the same key.

    @type tuples: Iterable[ProtocolTuple]
    @param tuples: The tuples to convert.
    @rtype: dict
    @return: All key/value pairs. Could be empty.
    @raise ContractFailure: If any of the tuples is malformed.
    """
    return merge_fragments(to_unary_hash(t) for t in tuples)


def merge_fragments(fragments: Iterable[Mapping[str, str]]) -> FieldMapping:
    """Merge mappings left to right, last write wins."""
    merged: FieldMapping = {}
    for fragment in fragments:
        merged.update(fragment)
    return merged


def to_payload(
    fragments: Sequence[Mapping[str, str]],
    modifiers: Mapping[str, Any] | None = None,
) -> Payload:
    """Assemble fragments and optional modifiers into a L{Payload}.

    @type fragments: Sequence[Mapping[str, str]]
    @param fragments: Field mappings that make up the event.
    @type modifiers: Optional[Mapping[str, Any]]
    @param modifiers: May contain C{"context"}, a L{Context} merged in
        after the fragments, and C{"collectors"}, the tags of the
        collectors this payload should be sent to.
    @rtype: L{Payload}
    @return: The assembled payload.
    @raise ContractFailure: If the fragments are not all string
        mappings, or the modifiers are malformed.
    """
    modifiers = modifiers or {}
    if not isinstance(modifiers, Mapping):
        raise ContractFailure(
            f"Modifiers must be a mapping, got {type(modifiers).__name__}."
        )
    unknown = set(modifiers) - MODIFIERS
    if unknown:
        raise ContractFailure(
            f"Unknown payload modifiers: {sorted(map(str, unknown))}. "
            f"Expected any of {sorted(MODIFIERS)}."
        )
    if isinstance(fragments, (str, bytes, Mapping)) or not isinstance(
        fragments, Iterable
    ):
        raise ContractFailure(
            "Payload fragments must be a sequence of string mappings."
        )
    all_fragments = list(fragments)
    if not check_type(all_fragments, list[Mapping[str, str]]):
        raise ContractFailure(
            "Payload fragments must be a sequence of string mappings."
        )

    context = modifiers.get("context")
    collectors = _validate_collectors(modifiers.get("collectors"))

    if context is not None:
        if not isinstance(context, Context):
            raise ContractFailure(
                f"Context modifier must be a Context, got {type(context).__name__}."
            )
        all_fragments.append(context.hash())

    fields = merge_fragments(all_fragments)
    logger.debug(
        f"Assembled payload with {len(fields)} fields "
        f"for collectors {list(collectors) or ['<default>']}"
    )
    return Payload(fields, collectors)


def _validate_collectors(
    collectors: Sequence[CollectorTag] | None,
) -> tuple[CollectorTag, ...]:
    if collectors is None:
        return ()
    if isinstance(collectors, (str, bytes)) or not isinstance(
        collectors, Iterable
    ):
        raise ContractFailure(
            f"Collectors must be a sequence of tags, got {collectors!r}."
        )
    tags = tuple(collectors)
    if not check_type(tags, tuple[str, ...]):
        raise ContractFailure(
            f"Collector tags must be strings, got {list(tags)!r}."
        )
    return tags
