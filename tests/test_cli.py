import pytest
from typer.testing import CliRunner

from snowplow_tracker import __version__
from snowplow_tracker.__main__ import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_environ(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SNOWPLOW_TRACKER_PLATFORM", raising=False)
    monkeypatch.setenv("SNOWPLOW_TRACKER_ENABLED", "0")


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_struct():
    result = runner.invoke(
        app,
        [
            "struct",
            "shop",
            "add-to-basket",
            "--label",
            "pbz0026",
            "--value",
            "2",
            "--namespace",
            "cf",
        ],
    )
    assert result.exit_code == 0, result.stdout
    for field in ("se_ca", "se_ac", "se_la", "se_va", "tna", "dtm", "eid"):
        assert field in result.stdout
    assert "add-to-basket" in result.stdout
    assert "pbz0026" in result.stdout


def test_struct_with_raw_context():
    result = runner.invoke(
        app,
        [
            "struct",
            "shop",
            "buy",
            "--no-base64",
            "--context",
            '[{"schema": "iglu:com.acme/user/jsonschema/1-0-0", "data": {}}]',
        ],
    )
    assert result.exit_code == 0, result.stdout
    assert "co" in result.stdout
    assert "cx" not in result.stdout


def test_unstruct():
    result = runner.invoke(
        app,
        [
            "unstruct",
            "iglu:com.acme/viewed_product/jsonschema/1-0-0",
            '{"product_id": "ASO01043"}',
        ],
    )
    assert result.exit_code == 0, result.stdout
    assert "ue_px" in result.stdout


def test_invalid_json():
    result = runner.invoke(
        app, ["unstruct", "iglu:com.acme/x/jsonschema/1-0-0", "{not json"]
    )
    assert result.exit_code == 1
    assert "Invalid JSON" in result.stdout


def test_invalid_context():
    result = runner.invoke(
        app, ["struct", "shop", "buy", "--context", '{"schema": "x"}']
    )
    assert result.exit_code == 1
    assert "JSON list" in result.stdout
