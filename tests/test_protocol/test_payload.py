import json

import pytest

from snowplow_tracker.exceptions import ContractFailure
from snowplow_tracker.protocol import Context, Payload


@pytest.fixture
def context() -> Context:
    return Context()


def test_initializes_empty(context: Context):
    assert context.hash() == {}
    assert context.context == {}


def test_add(context: Context):
    context.add("key1", "value1")
    context.add("key2", "value2")
    assert context.hash() == {"key1": "value1", "key2": "value2"}


def test_add_overwrites_and_skips_none(context: Context):
    context.add("key1", "value1")
    context.add("key1", "value2")
    context.add("key2", None)
    assert context.hash() == {"key1": "value2"}


def test_add_keeps_value_verbatim(context: Context):
    context.add("url", "http://a.b/c?d=e f")
    assert context.hash() == {"url": "http://a.b/c?d=e f"}


def test_add_dict(context: Context):
    context.add_dict({"p": "mob", "tna": "cf", "aid": "cd767ae"})
    assert context.hash() == {"p": "mob", "tna": "cf", "aid": "cd767ae"}


def test_add_json_raw(context: Context):
    context.add_json({"a": {"b": [23, 54]}}, False, "cx", "co")
    assert context.hash() == {"co": '{"a":{"b":[23,54]}}'}


def test_add_json_base64(context: Context):
    context.add_json({"a": {"b": [23, 54]}}, True, "cx", "co")
    assert context.hash() == {"cx": "eyJhIjp7ImIiOlsyMyw1NF19fQ=="}


def test_add_json_keeps_insertion_order(context: Context):
    context.add_json({"z": 1, "a": 2}, False)
    assert context.hash() == {"co": '{"z":1,"a":2}'}


def test_add_json_default_keys(context: Context):
    context.add_json([1, 2], True)
    context.add_json([1, 2], False)
    assert set(context.hash()) == {"cx", "co"}


def test_hash_returns_copy(context: Context):
    context.add("key", "value")
    context.hash()["key"] = "changed"
    assert context.hash() == {"key": "value"}


def test_contract(context: Context):
    with pytest.raises(ContractFailure):
        context.add("key", 1)  # type: ignore
    with pytest.raises(ContractFailure):
        context.add(1, "value")  # type: ignore
    with pytest.raises(ContractFailure):
        context.add_dict([("key", "value")])  # type: ignore
    with pytest.raises(ContractFailure):
        context.add_json({"a": object()}, False)


def test_payload_is_read_only():
    fields = {"p": "srv", "e": "se"}
    payload = Payload(fields, ["eu"])
    fields["e"] = "ue"
    assert payload["e"] == "se"
    assert payload.collectors == ("eu",)
    with pytest.raises(TypeError):
        payload.fields["e"] = "ue"  # type: ignore
    with pytest.raises(AttributeError):
        payload.collectors = ()  # type: ignore


def test_payload_mapping_access():
    payload = Payload({"p": "srv", "e": "se", "dtm": "1"})
    assert len(payload) == 3
    assert "p" in payload
    assert "x" not in payload
    assert payload.get("x") is None
    assert sorted(payload) == ["dtm", "e", "p"]
    assert json.loads(json.dumps(payload.to_dict())) == {
        "p": "srv",
        "e": "se",
        "dtm": "1",
    }


def test_payload_required_fields():
    assert Payload({"p": "srv", "e": "se", "dtm": "1"}).is_complete
    payload = Payload({"e": "se"})
    assert not payload.is_complete
    assert payload.missing_fields == ["p", "dtm"]


@pytest.mark.parametrize(
    "number", [float("nan"), float("inf"), -float("inf")]
)
def test_add_json_rejects_non_finite_floats(
    context: Context, number: float
):
    with pytest.raises(ContractFailure):
        context.add_json({"a": number}, False)
    with pytest.raises(ContractFailure):
        context.add_json([number], True)
    assert context.hash() == {}
