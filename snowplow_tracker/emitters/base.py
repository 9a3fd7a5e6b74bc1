from __future__ import annotations

from typing import Protocol, runtime_checkable

from snowplow_tracker.protocol.payload import Payload


@runtime_checkable
class Emitter(Protocol):
    """Protocol for the senders that consume finished payloads.

    Serializing and transmitting the payload to a collector is entirely
    up to the emitter.
    """

    def input(self, payload: Payload) -> None:
        """Accept a payload for sending."""
        ...

    def flush(self) -> None:
        """Send any buffered payloads."""
        ...
