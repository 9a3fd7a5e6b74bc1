import pytest
from loguru import logger

from snowplow_tracker.utils.logging import setup_logging


def test_setup_logging_rejects_unknown_level():
    with pytest.raises(ValueError, match="Invalid logging level"):
        setup_logging(level="VERBOSE")  # type: ignore


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "tracker.log"
    setup_logging(level="DEBUG", file=log_file)
    logger.debug("payload assembled")
    logger.complete()
    assert "payload assembled" in log_file.read_text()
    setup_logging()
