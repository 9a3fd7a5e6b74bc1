from __future__ import annotations

import json

from loguru import logger

from snowplow_tracker.emitters.base import Emitter
from snowplow_tracker.protocol.payload import Payload


class StdoutEmitter(Emitter):
    """Emitter that logs payloads instead of sending them."""

    def input(self, payload: Payload) -> None:
        """Log a payload as JSON."""
        record = {
            "fields": payload.to_dict(),
            "collectors": list(payload.collectors),
        }
        logger.info(f"payload {json.dumps(record, sort_keys=True)}")

    def flush(self) -> None:
        return
