import os
from collections.abc import Generator
from pathlib import Path

import pytest

from snowplow_tracker.tracker import Tracker


@pytest.fixture(autouse=True)
def isolated_settings(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    # Settings are read from `.env` in the working directory and from
    # the process environment.
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("SNOWPLOW_TRACKER_"):
            monkeypatch.delenv(name)
    yield
    Tracker._logged_disabled_notice = False
