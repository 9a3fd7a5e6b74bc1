from collections.abc import Generator
from pathlib import Path

import pytest

from snowplow_tracker.utils.environ import Environ


@pytest.fixture
def dotenv_file(tmp_path: Path) -> Generator[Path, None, None]:
    path = tmp_path / "dotenv"
    path.write_text(
        "SNOWPLOW_TRACKER_NAMESPACE=cf\nSNOWPLOW_TRACKER_ENCODE_BASE64=false\n"
    )
    yield path
    path.unlink(missing_ok=True)


def test_environ(dotenv_file: Path):
    environ = Environ(
        SNOWPLOW_TRACKER_APP_ID="cd767ae",
        _env_file=dotenv_file,  # type: ignore
    )
    assert environ.SNOWPLOW_TRACKER_APP_ID == "cd767ae"
    assert environ.SNOWPLOW_TRACKER_NAMESPACE == "cf"
    assert environ.SNOWPLOW_TRACKER_ENCODE_BASE64 is False
    assert environ.SNOWPLOW_TRACKER_PLATFORM == "srv"

    assert environ.model_dump() == {}


def test_environ_ignores_unknown(dotenv_file: Path):
    dotenv_file.write_text("SOMETHING_ELSE=1\n")
    environ = Environ(_env_file=dotenv_file)  # type: ignore
    assert not hasattr(environ, "SOMETHING_ELSE")
