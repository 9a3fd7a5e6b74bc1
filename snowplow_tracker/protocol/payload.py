from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from snowplow_tracker.exceptions import ContractFailure
from snowplow_tracker.protocol.encoding import base64
from snowplow_tracker.typing import CollectorTag, FieldMapping

REQUIRED_FIELDS = ("p", "e", "dtm")
"""Fields every fully assembled payload carries."""


@dataclass(frozen=True)
class Payload:
    """Final representation of an event before it is sent to one or
    more collectors.

    Holds a read-only flat mapping of protocol fields and the tags of
    the collectors that should receive it. An empty C{collectors}
    tuple means the default collector.

    By the time a payload is fully assembled it must contain the C{p},
    C{e} and C{dtm} fields. This is not enforced at construction time,
    see L{missing_fields}.
    """

    fields: Mapping[str, str]
    collectors: tuple[CollectorTag, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))
        object.__setattr__(self, "collectors", tuple(self.collectors))

    def __getitem__(self, key: str) -> str:
        return self.fields[key]

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.fields.get(key, default)

    @property
    def missing_fields(self) -> list[str]:
        """Required protocol fields not present in this payload."""
        return [key for key in REQUIRED_FIELDS if key not in self.fields]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields

    def to_dict(self) -> FieldMapping:
        """Return a mutable copy of the payload fields."""
        return dict(self.fields)


class Context:
    """Accumulates supplementary key/value data for a single event.

    A context is owned by the code building one event and must not be
    shared between concurrent writers.

    Example:

        >>> context = Context()
        >>> context.add("key1", "value1")
        >>> context.add_json({"a": {"b": [23, 54]}}, False)
        >>> context.hash()
        {'key1': 'value1', 'co': '{"a":{"b":[23,54]}}'}
    """

    def __init__(self) -> None:
        self._context: FieldMapping = {}

    def __repr__(self) -> str:
        return f"Context({self._context!r})"

    @property
    def context(self) -> FieldMapping:
        return self.hash()

    def add(self, key: str, value: str | None) -> None:
        """Add a single key/value pair verbatim.

        A C{None} value is skipped. Adding an existing key overwrites
        the previous value.

        @type key: str
        @param key: Field name.
        @type value: Optional[str]
        @param value: Field value.
        @raise ContractFailure: If the key or value is not a string.
        """
        if not isinstance(key, str):
            raise ContractFailure(f"Context key must be a string, got {key!r}.")
        if value is None:
            return
        if not isinstance(value, str):
            raise ContractFailure(
                f"Context value for '{key}' must be a string, got {value!r}."
            )
        self._context[key] = value

    def add_dict(self, mapping: Mapping[str, str | None]) -> None:
        """Add every pair of C{mapping}, one entry at a time.

        @type mapping: Mapping[str, Optional[str]]
        @param mapping: Pairs to add. Later writes win.
        @raise ContractFailure: If C{mapping} is not a mapping.
        """
        if not isinstance(mapping, Mapping):
            raise ContractFailure(
                f"Expected a mapping, got {type(mapping).__name__}."
            )
        for key, value in mapping.items():
            self.add(key, value)

    def add_json(
        self,
        obj: Any,
        encode_base64: bool,
        base64_key: str = "cx",
        raw_key: str = "co",
    ) -> None:
        """Serialize C{obj} to compact JSON and add it under one key.

        Object keys keep their insertion order and no whitespace is
        emitted, so the output is byte-for-byte reproducible.

        @type obj: Any
        @param obj: JSON-serializable structure.
        @type encode_base64: bool
        @param encode_base64: If C{True}, the URL-safe base64 of the
            JSON string is stored under C{base64_key}. Otherwise the raw
            JSON string is stored under C{raw_key}.
        @type base64_key: str
        @param base64_key: Key for the encoded JSON.
        @type raw_key: str
        @param raw_key: Key for the raw JSON.
        @raise ContractFailure: If C{obj} is not JSON-serializable or
            holds non-finite floats.
        """
        serialized = dumps(obj)
        if encode_base64:
            self.add(base64_key, base64(serialized))
        else:
            self.add(raw_key, serialized)

    def hash(self) -> FieldMapping:
        """Return the accumulated mapping."""
        return dict(self._context)


def dumps(obj: Any) -> str:
    """Compact, insertion-ordered JSON used for every JSON field.

    @raise ContractFailure: If C{obj} is not JSON-serializable or holds
        C{NaN} or infinite floats.
    """
    try:
        return json.dumps(
            obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        )
    except (TypeError, ValueError) as e:
        raise ContractFailure(
            f"Cannot serialize {type(obj).__name__} to JSON: {e}"
        ) from e
