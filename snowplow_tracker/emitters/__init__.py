from __future__ import annotations

from snowplow_tracker.emitters.base import Emitter
from snowplow_tracker.emitters.noop import NoopEmitter
from snowplow_tracker.emitters.stdout import StdoutEmitter

__all__ = ["Emitter", "NoopEmitter", "StdoutEmitter"]
