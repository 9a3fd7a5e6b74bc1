from __future__ import annotations

import time
from collections.abc import Callable, Mapping, Sequence
from typing import Any
from uuid import uuid4

from loguru import logger

from snowplow_tracker import __version__
from snowplow_tracker.config import TrackerConfig
from snowplow_tracker.emitters.base import Emitter
from snowplow_tracker.emitters.noop import NoopEmitter
from snowplow_tracker.emitters.stdout import StdoutEmitter
from snowplow_tracker.events import (
    SCREEN_VIEW_SCHEMA,
    Event,
    SelfDescribingJson,
    StructuredEvent,
    UnstructuredEvent,
    contexts_json,
)
from snowplow_tracker.exceptions import ContractFailure
from snowplow_tracker.protocol.grammar import to_field_mapping
from snowplow_tracker.protocol.payload import Context, Payload
from snowplow_tracker.subject import Subject
from snowplow_tracker.suppression import is_suppressed
from snowplow_tracker.typing import CollectorTag, FieldMapping, check_type
from snowplow_tracker.verbs import performs

VERSION = f"py-{__version__}"
DEFAULT_COLLECTOR: CollectorTag = "default"

EmitterFactory = Callable[[TrackerConfig], Emitter]


class Tracker:
    """Builds tracker protocol payloads and hands them to emitters."""

    _emitter_factories: dict[str, EmitterFactory] = {}
    _logged_disabled_notice: bool = False

    def __init__(
        self,
        emitters: Emitter
        | Sequence[Emitter]
        | Mapping[CollectorTag, Emitter]
        | None = None,
        subject: Subject | None = None,
        *,
        namespace: str | None = None,
        app_id: str | None = None,
        encode_base64: bool | None = None,
        config: TrackerConfig | None = None,
    ) -> None:
        """Initialize a tracker.

        @type emitters: Optional[Union[Emitter, list, dict]]
        @param emitters: A single emitter or a list of emitters, all
            receiving payloads meant for the default collector, or a
            mapping of collector tags to emitters. If C{None}, the
            emitter named in the config is used.
        @type subject: Optional[L{Subject}]
        @param subject: Subject the events are about. A subject on the
            configured platform is created if not given.
        @type namespace: Optional[str]
        @param namespace: Tracker namespace. Overrides the config.
        @type app_id: Optional[str]
        @param app_id: Application id. Overrides the config.
        @type encode_base64: Optional[bool]
        @param encode_base64: Whether JSON fields are base64-encoded.
            Overrides the config.
        @type config: Optional[L{TrackerConfig}]
        @param config: TrackerConfig to use. If C{None}, values are
            read from environment variables.
        """
        self._config = config or TrackerConfig.from_environ()
        if not self._config.enabled and not Tracker._logged_disabled_notice:
            logger.warning(
                "Tracking is disabled. Set "
                "SNOWPLOW_TRACKER_ENABLED=true to enable."
            )
            Tracker._logged_disabled_notice = True
        self._namespace = (
            namespace if namespace is not None else self._config.namespace
        )
        self._app_id = app_id if app_id is not None else self._config.app_id
        self._encode_base64 = (
            encode_base64
            if encode_base64 is not None
            else self._config.encode_base64
        )
        self.subject = subject or Subject(self._config.platform)
        self._emitters = self._init_emitters(emitters)

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def is_enabled(self) -> bool:
        return self._config.enabled

    @property
    def emitters(self) -> dict[CollectorTag, list[Emitter]]:
        return {tag: list(group) for tag, group in self._emitters.items()}

    @classmethod
    def register_emitter(cls, name: str, factory: EmitterFactory) -> None:
        """Register a custom emitter factory.

        @type name: str
        @param name: Emitter name used in C{TrackerConfig.emitter}.
        @type factory: Callable
        @param factory: Callable that builds an emitter from a
            L{TrackerConfig}.
        """
        cls._emitter_factories[name] = factory

    def track(
        self,
        event: Event,
        context: list[SelfDescribingJson] | None = None,
        *,
        true_timestamp: float | None = None,
        collectors: Sequence[CollectorTag] = (),
    ) -> Payload | None:
        """Track any event.

        @type event: L{Event}
        @param event: Structured or unstructured event.
        @type context: Optional[list[L{SelfDescribingJson}]]
        @param context: Custom contexts attached to the event.
        @type true_timestamp: Optional[float]
        @param true_timestamp: When the event really happened, in
            milliseconds since the epoch.
        @type collectors: Sequence[str]
        @param collectors: Tags of the collectors that should receive
            the event. Empty means the default collector.
        @rtype: Optional[L{Payload}]
        @return: The payload handed to the emitters, or C{None} when
            tracking is disabled or suppressed.
        @raise ContractFailure: If the event, contexts or collector tags
            are malformed.
        """
        if not self.is_enabled or is_suppressed():
            return None
        payload = performs(
            event,
            self._build_context(context),
            base=[self._standard_fields(true_timestamp), self.subject.as_hash()],
            collectors=collectors,
            encode_base64=self._encode_base64,
        )
        if not payload.is_complete:
            raise ContractFailure(
                f"Payload is missing required fields {payload.missing_fields}."
            )
        self._send(self._routes(payload), payload)
        return payload

    def track_struct_event(
        self,
        category: str,
        action: str,
        label: str | None = None,
        property_: str | None = None,
        value: float | int | None = None,
        context: list[SelfDescribingJson] | None = None,
        *,
        true_timestamp: float | None = None,
        collectors: Sequence[CollectorTag] = (),
    ) -> Payload | None:
        """Track a structured event.

        @type category: str
        @param category: Category of the event.
        @type action: str
        @param action: The event itself.
        @type label: Optional[str]
        @param label: Refers to the object the action was performed on.
        @type property_: Optional[str]
        @param property_: Property associated with the object or action.
        @type value: Optional[float]
        @param value: A value associated with the action.
        """
        return self.track(
            StructuredEvent(category, action, label, property_, value),
            context,
            true_timestamp=true_timestamp,
            collectors=collectors,
        )

    def track_unstruct_event(
        self,
        event_json: SelfDescribingJson,
        context: list[SelfDescribingJson] | None = None,
        *,
        true_timestamp: float | None = None,
        collectors: Sequence[CollectorTag] = (),
    ) -> Payload | None:
        """Track an unstructured (self-describing) event.

        @type event_json: L{SelfDescribingJson}
        @param event_json: Event data and the schema it conforms to.
        """
        return self.track(
            UnstructuredEvent(event_json),
            context,
            true_timestamp=true_timestamp,
            collectors=collectors,
        )

    track_self_describing_event = track_unstruct_event

    def track_screen_view(
        self,
        name: str | None = None,
        id_: str | None = None,
        context: list[SelfDescribingJson] | None = None,
        *,
        true_timestamp: float | None = None,
        collectors: Sequence[CollectorTag] = (),
    ) -> Payload | None:
        """Track a screen view as an unstructured event.

        @type name: Optional[str]
        @param name: Name of the screen.
        @type id_: Optional[str]
        @param id_: Unique id of the screen.
        @raise ContractFailure: If neither C{name} nor C{id_} is set.
        """
        if name is None and id_ is None:
            raise ContractFailure("Screen view needs a name or an id.")
        data: dict[str, Any] = {}
        if name is not None:
            data["name"] = name
        if id_ is not None:
            data["id"] = id_
        return self.track_unstruct_event(
            SelfDescribingJson(SCREEN_VIEW_SCHEMA, data),
            context,
            true_timestamp=true_timestamp,
            collectors=collectors,
        )

    def flush(self) -> None:
        """Flush every emitter. Does nothing while tracking is
        suppressed."""
        if is_suppressed():
            return
        for group in self._emitters.values():
            for emitter in group:
                try:
                    emitter.flush()
                except Exception:
                    logger.opt(exception=True).warning(
                        f"Emitter {type(emitter).__name__} failed to flush."
                    )

    def _standard_fields(self, true_timestamp: float | None) -> FieldMapping:
        """Fields every payload of this tracker carries."""
        return to_field_mapping(
            [
                ("tv", VERSION),
                ("tna", self._namespace),
                ("aid", self._app_id),
                ("dtm", str(int(time.time() * 1000))),
                ("eid", str(uuid4())),
                (
                    "ttm",
                    str(int(true_timestamp))
                    if true_timestamp is not None
                    else None,
                ),
            ]
        )

    def _build_context(
        self, contexts: list[SelfDescribingJson] | None
    ) -> Context | None:
        if not contexts:
            return None
        if not check_type(contexts, list[SelfDescribingJson]):
            raise ContractFailure(
                "Context must be a list of SelfDescribingJson."
            )
        context = Context()
        context.add_json(contexts_json(contexts), self._encode_base64)
        return context

    def _routes(self, payload: Payload) -> list[list[Emitter]]:
        """Emitter groups of every collector the payload is meant for.

        @raise ContractFailure: If any collector tag has no emitters.
            Nothing has been sent at that point.
        """
        tags = payload.collectors or (DEFAULT_COLLECTOR,)
        unknown = [tag for tag in tags if tag not in self._emitters]
        if unknown:
            raise ContractFailure(
                f"No emitter registered for collectors {unknown}. "
                f"Known collectors: {sorted(self._emitters)}."
            )
        return [self._emitters[tag] for tag in tags]

    def _send(self, routes: list[list[Emitter]], payload: Payload) -> None:
        """Hand the payload to each emitter group."""
        for group in routes:
            for emitter in group:
                try:
                    emitter.input(payload)
                except Exception:
                    logger.opt(exception=True).warning(
                        f"Emitter {type(emitter).__name__} failed; "
                        f"dropping event {payload.get('eid')}."
                    )

    def _init_emitters(
        self,
        emitters: Emitter
        | Sequence[Emitter]
        | Mapping[CollectorTag, Emitter]
        | None,
    ) -> dict[CollectorTag, list[Emitter]]:
        if emitters is None:
            return {DEFAULT_COLLECTOR: [self._default_emitter()]}
        if isinstance(emitters, Mapping):
            if not all(
                isinstance(tag, str) and isinstance(emitter, Emitter)
                for tag, emitter in emitters.items()
            ):
                raise ContractFailure(
                    "Emitters must map collector tags to emitters."
                )
            return {tag: [emitter] for tag, emitter in emitters.items()}
        if isinstance(emitters, Emitter):
            return {DEFAULT_COLLECTOR: [emitters]}
        group = list(emitters)
        if not group or not all(isinstance(e, Emitter) for e in group):
            raise ContractFailure(f"Invalid emitters: {emitters!r}")
        return {DEFAULT_COLLECTOR: group}

    def _default_emitter(self) -> Emitter:
        """Build the configured emitter or fall back to
        NoopEmitter."""
        name = self._config.emitter.lower()
        self._ensure_default_emitters()
        factory = self._emitter_factories.get(name)
        if factory is None:
            logger.warning(f"Unknown emitter '{name}', using 'noop'.")
            return NoopEmitter()
        try:
            return factory(self._config)
        except Exception:
            logger.opt(exception=True).warning(
                f"Emitter '{name}' failed to initialize, using 'noop'."
            )
            return NoopEmitter()

    @classmethod
    def _ensure_default_emitters(cls) -> None:
        """Register built-in emitter factories not registered yet."""
        cls._emitter_factories.setdefault("noop", lambda _: NoopEmitter())
        cls._emitter_factories.setdefault("stdout", lambda _: StdoutEmitter())
