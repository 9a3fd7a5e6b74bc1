from __future__ import annotations

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, TypeAlias

from snowplow_tracker.exceptions import ContractFailure
from snowplow_tracker.protocol.payload import dumps

UNSTRUCT_EVENT_SCHEMA = (
    "iglu:com.snowplowanalytics.snowplow/unstruct_event/jsonschema/1-0-0"
)
CONTEXTS_SCHEMA = (
    "iglu:com.snowplowanalytics.snowplow/contexts/jsonschema/1-0-1"
)
SCREEN_VIEW_SCHEMA = (
    "iglu:com.snowplowanalytics.snowplow/screen_view/jsonschema/1-0-0"
)


@dataclass(frozen=True)
class SelfDescribingJson:
    """JSON data together with the Iglu schema it conforms to.

    @type schema: str
    @ivar schema: Iglu URI of the schema, e.g.
        C{"iglu:com.acme/viewed_product/jsonschema/1-0-0"}.
    @type data: Any
    @ivar data: The JSON-serializable data.
    """

    schema: str
    data: Any = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.schema, str) or not self.schema:
            raise ContractFailure(
                f"Schema must be a non-empty string, got {self.schema!r}."
            )

    def to_dict(self) -> dict[str, Any]:
        return {"schema": self.schema, "data": self.data}

    def to_string(self) -> str:
        return dumps(self.to_dict())


@dataclass(frozen=True)
class StructuredEvent:
    """A Google Analytics-style custom structured event.

    @type category: str
    @ivar category: Name for the group of objects interacted with.
    @type action: str
    @ivar action: The action performed.
    @type label: Optional[str]
    @ivar label: Refers to the object the action was performed on.
    @type property: Optional[str]
    @ivar property: A property associated with the object or action.
    @type value: Optional[float]
    @ivar value: A value associated with the action.
    """

    category: str
    action: str
    label: str | None = None
    property: str | None = None
    value: float | int | None = None

    def __post_init__(self) -> None:
        for name in ("category", "action"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ContractFailure(
                    f"Structured event {name} must be a non-empty string, "
                    f"got {value!r}."
                )
        if self.value is not None and (
            isinstance(self.value, bool)
            or not isinstance(self.value, Real)
            or not math.isfinite(self.value)
        ):
            raise ContractFailure(
                "Structured event value must be a finite number, "
                f"got {self.value!r}."
            )

    def tuples(self) -> list[tuple[str, str | None]]:
        """Protocol tuples for the event's own fields."""
        return [
            ("se_ca", self.category),
            ("se_ac", self.action),
            ("se_la", self.label),
            ("se_pr", self.property),
            ("se_va", format_number(self.value)),
        ]


@dataclass(frozen=True)
class UnstructuredEvent:
    """A MixPanel- or KISSmetrics-style custom unstructured event.

    @type event: L{SelfDescribingJson}
    @ivar event: The event data and its schema.
    """

    event: SelfDescribingJson

    def __post_init__(self) -> None:
        if not isinstance(self.event, SelfDescribingJson):
            raise ContractFailure(
                "Unstructured event data must be a SelfDescribingJson, "
                f"got {type(self.event).__name__}."
            )

    @property
    def envelope(self) -> SelfDescribingJson:
        return SelfDescribingJson(UNSTRUCT_EVENT_SCHEMA, self.event.to_dict())

    def tuples(
        self, encode_base64: bool = True
    ) -> list[tuple[str, str | None, str]]:
        """Protocol tuples for the event's own fields.

        @type encode_base64: bool
        @param encode_base64: Send the envelope base64-encoded under
            C{ue_px} instead of raw under C{ue_pr}.
        """
        serialized = self.envelope.to_string()
        if encode_base64:
            return [("ue_px", serialized, "base64")]
        return [("ue_pr", serialized, "raw")]


Event: TypeAlias = StructuredEvent | UnstructuredEvent
"""Closed set of event variants a subject can perform."""


def format_number(value: float | int | None) -> str | None:
    """Render a number for the payload, integral floats without
    C{.0}."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def contexts_json(contexts: list[SelfDescribingJson]) -> dict[str, Any]:
    """Wrap custom contexts in the contexts envelope."""
    return SelfDescribingJson(
        CONTEXTS_SCHEMA, [c.to_dict() for c in contexts]
    ).to_dict()
