from typing import Final

__version__: Final[str] = "0.3.0"

from .utils.environ import environ
from .utils.logging import setup_logging

if not environ.SNOWPLOW_DISABLE_SETUP_LOGGING:
    setup_logging()

from .emitters import Emitter, NoopEmitter, StdoutEmitter
from .events import (
    Event,
    SelfDescribingJson,
    StructuredEvent,
    UnstructuredEvent,
)
from .exceptions import ContractFailure
from .protocol import Context, Payload
from .subject import Subject
from .suppression import suppress_tracking
from .tracker import Tracker

__all__ = [
    "Context",
    "ContractFailure",
    "Emitter",
    "Event",
    "NoopEmitter",
    "Payload",
    "SelfDescribingJson",
    "StdoutEmitter",
    "StructuredEvent",
    "Subject",
    "Tracker",
    "UnstructuredEvent",
    "__version__",
    "suppress_tracking",
]
