from __future__ import annotations

from snowplow_tracker.emitters.base import Emitter
from snowplow_tracker.protocol.payload import Payload


class NoopEmitter(Emitter):
    """Emitter that discards all payloads."""

    def input(self, payload: Payload) -> None:
        """Discard the payload."""
        return

    def flush(self) -> None:
        """No-op flush."""
        return
