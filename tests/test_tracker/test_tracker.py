import base64
import json
import time
from collections.abc import Generator
from typing import Any

import pytest

from snowplow_tracker import (
    ContractFailure,
    NoopEmitter,
    SelfDescribingJson,
    StructuredEvent,
    Subject,
    Tracker,
    suppress_tracking,
)
from snowplow_tracker.config import TrackerConfig
from snowplow_tracker.events import CONTEXTS_SCHEMA, SCREEN_VIEW_SCHEMA
from snowplow_tracker.emitters import StdoutEmitter
from snowplow_tracker.tracker import VERSION


class DummyEmitter:
    def __init__(self) -> None:
        self.payloads: list[Any] = []
        self.flush_count = 0

    def input(self, payload: Any) -> None:
        self.payloads.append(payload)

    def flush(self) -> None:
        self.flush_count += 1


class FailingEmitter(DummyEmitter):
    def input(self, payload: Any) -> None:
        raise ConnectionError("collector unreachable")

    def flush(self) -> None:
        raise ConnectionError("collector unreachable")


@pytest.fixture
def reset_emitter_registry() -> Generator[None, None, None]:
    original = dict(Tracker._emitter_factories)
    Tracker._emitter_factories = {}
    yield
    Tracker._emitter_factories = original


@pytest.fixture
def config() -> TrackerConfig:
    return TrackerConfig(namespace="cf", app_id="cd767ae")


@pytest.fixture
def emitter() -> DummyEmitter:
    return DummyEmitter()


@pytest.fixture
def tracker(emitter: DummyEmitter, config: TrackerConfig) -> Tracker:
    return Tracker(emitter, config=config)


def test_track_struct_event(tracker: Tracker, emitter: DummyEmitter):
    before = int(time.time() * 1000)
    payload = tracker.track_struct_event(
        "shop", "add-to-basket", "pbz0026", "red", 2
    )
    assert payload is not None
    assert emitter.payloads == [payload]
    assert payload["e"] == "se"
    assert payload["se_ca"] == "shop"
    assert payload["se_ac"] == "add-to-basket"
    assert payload["se_la"] == "pbz0026"
    assert payload["se_pr"] == "red"
    assert payload["se_va"] == "2"
    assert payload["tv"] == VERSION
    assert payload["tna"] == "cf"
    assert payload["aid"] == "cd767ae"
    assert payload["p"] == "srv"
    assert int(payload["dtm"]) >= before
    assert len(payload["eid"]) == 36
    assert "ttm" not in payload
    assert "cx" not in payload
    assert payload.is_complete


def test_event_ids_are_unique(tracker: Tracker):
    first = tracker.track_struct_event("c", "a")
    second = tracker.track_struct_event("c", "a")
    assert first is not None and second is not None
    assert first["eid"] != second["eid"]


def test_true_timestamp(tracker: Tracker):
    payload = tracker.track_struct_event("c", "a", true_timestamp=1400000000000)
    assert payload is not None
    assert payload["ttm"] == "1400000000000"


def test_track_unstruct_event_with_context(emitter: DummyEmitter):
    tracker = Tracker(
        emitter, config=TrackerConfig(), encode_base64=False
    )
    payload = tracker.track_unstruct_event(
        SelfDescribingJson("iglu:com.acme/test/jsonschema/1-0-0", {"a": 1}),
        [SelfDescribingJson("iglu:com.acme/user/jsonschema/1-0-0", {"b": 2})],
    )
    assert payload is not None
    assert payload["e"] == "ue"
    assert json.loads(payload["ue_pr"])["data"] == {
        "schema": "iglu:com.acme/test/jsonschema/1-0-0",
        "data": {"a": 1},
    }
    assert json.loads(payload["co"]) == {
        "schema": CONTEXTS_SCHEMA,
        "data": [
            {"schema": "iglu:com.acme/user/jsonschema/1-0-0", "data": {"b": 2}}
        ],
    }
    assert "tna" not in payload
    assert "aid" not in payload


def test_context_base64(tracker: Tracker):
    payload = tracker.track_struct_event(
        "c",
        "a",
        context=[SelfDescribingJson("iglu:com.acme/user/jsonschema/1-0-0")],
    )
    assert payload is not None
    assert "co" not in payload
    assert json.loads(base64.urlsafe_b64decode(payload["cx"]))["data"] == [
        {"schema": "iglu:com.acme/user/jsonschema/1-0-0", "data": {}}
    ]


def test_track_screen_view(tracker: Tracker):
    payload = tracker.track_screen_view("HUD", "screen-1")
    assert payload is not None
    envelope = json.loads(base64.urlsafe_b64decode(payload["ue_px"]))
    assert envelope["data"] == {
        "schema": SCREEN_VIEW_SCHEMA,
        "data": {"name": "HUD", "id": "screen-1"},
    }
    with pytest.raises(ContractFailure):
        tracker.track_screen_view()


def test_subject_fields(emitter: DummyEmitter, config: TrackerConfig):
    subject = Subject("mob").set_user_id("jdoe").set_lang("en")
    tracker = Tracker(emitter, subject, config=config)
    payload = tracker.track(StructuredEvent("c", "a"))
    assert payload is not None
    assert payload["p"] == "mob"
    assert payload["uid"] == "jdoe"
    assert payload["lang"] == "en"


def test_collectors_route_payloads(config: TrackerConfig):
    eu, us = DummyEmitter(), DummyEmitter()
    tracker = Tracker({"default": eu, "eu": eu, "us": us}, config=config)

    tracker.track_struct_event("c", "a")
    assert len(eu.payloads) == 1
    assert not us.payloads

    payload = tracker.track_struct_event("c", "a", collectors=["eu", "us"])
    assert payload is not None
    assert payload.collectors == ("eu", "us")
    assert eu.payloads[-1] is payload
    assert us.payloads == [payload]

    with pytest.raises(ContractFailure, match="No emitter"):
        tracker.track_struct_event("c", "a", collectors=["asia"])


def test_multiple_default_emitters(config: TrackerConfig):
    first, second = DummyEmitter(), DummyEmitter()
    tracker = Tracker([first, second], config=config)
    tracker.track_struct_event("c", "a")
    assert len(first.payloads) == len(second.payloads) == 1


def test_emitter_failures_do_not_propagate(config: TrackerConfig):
    emitter = FailingEmitter()
    tracker = Tracker(emitter, config=config)
    assert tracker.track_struct_event("c", "a") is not None
    tracker.flush()


def test_flush(tracker: Tracker, emitter: DummyEmitter):
    tracker.flush()
    assert emitter.flush_count == 1


def test_disabled_tracker(emitter: DummyEmitter):
    tracker = Tracker(emitter, config=TrackerConfig(enabled=False))
    assert tracker.track_struct_event("c", "a") is None
    assert not emitter.payloads


def test_suppression_skips_tracking(tracker: Tracker, emitter: DummyEmitter):
    tracker.track_struct_event("c", "one")
    with suppress_tracking():
        assert tracker.track_struct_event("c", "suppressed") is None
    assert len(emitter.payloads) == 1


def test_contract(tracker: Tracker):
    with pytest.raises(ContractFailure):
        tracker.track_struct_event("", "a")
    with pytest.raises(ContractFailure):
        tracker.track_struct_event("c", "a", context=[{"schema": "x"}])  # type: ignore
    with pytest.raises(ContractFailure):
        tracker.track_struct_event("c", "a", collectors="default")  # type: ignore
    with pytest.raises(ContractFailure):
        Tracker(["not an emitter"], config=TrackerConfig())  # type: ignore


def test_default_emitter_from_config(
    reset_emitter_registry: Generator[None, None, None],
):
    tracker = Tracker(config=TrackerConfig(emitter="noop"))
    assert isinstance(tracker.emitters["default"][0], NoopEmitter)


def test_register_emitter(
    reset_emitter_registry: Generator[None, None, None],
    emitter: DummyEmitter,
):
    Tracker.register_emitter("dummy", lambda cfg: emitter)
    tracker = Tracker(config=TrackerConfig(emitter="dummy"))
    tracker.track_struct_event("c", "a")
    assert len(emitter.payloads) == 1


def test_unknown_emitter_falls_back_to_noop(
    reset_emitter_registry: Generator[None, None, None],
):
    tracker = Tracker(config=TrackerConfig(emitter="carrier-pigeon"))
    assert isinstance(tracker.emitters["default"][0], NoopEmitter)


def test_builtin_emitters_survive_custom_registration(
    reset_emitter_registry: Generator[None, None, None],
    emitter: DummyEmitter,
):
    Tracker.register_emitter("custom", lambda cfg: emitter)
    tracker = Tracker(config=TrackerConfig(emitter="stdout"))
    assert isinstance(tracker.emitters["default"][0], StdoutEmitter)
    assert Tracker._emitter_factories["custom"]


def test_failing_emitter_factory_falls_back_to_noop(
    reset_emitter_registry: Generator[None, None, None],
):
    def broken(cfg: TrackerConfig) -> DummyEmitter:
        raise RuntimeError("no credentials")

    Tracker.register_emitter("broken", broken)
    tracker = Tracker(config=TrackerConfig(emitter="broken"))
    assert isinstance(tracker.emitters["default"][0], NoopEmitter)


def test_unknown_collector_fails_before_delivery(config: TrackerConfig):
    default, eu = DummyEmitter(), DummyEmitter()
    tracker = Tracker({"default": default, "eu": eu}, config=config)
    with pytest.raises(ContractFailure, match="asia"):
        tracker.track_struct_event(
            "c", "a", collectors=["default", "eu", "asia"]
        )
    assert not default.payloads
    assert not eu.payloads


def test_suppression_skips_flush(tracker: Tracker, emitter: DummyEmitter):
    with suppress_tracking():
        tracker.flush()
    assert emitter.flush_count == 0
    tracker.flush()
    assert emitter.flush_count == 1


def test_subject_contract_fails_at_setter(tracker: Tracker):
    with pytest.raises(ContractFailure, match="user_id"):
        tracker.subject.set_user_id(42)  # type: ignore
    assert tracker.track_struct_event("c", "a") is not None
