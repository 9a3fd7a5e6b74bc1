from enum import Enum


class Encoding(str, Enum):
    """Encoding applied to a single protocol field."""

    RAW = "raw"
    ESCAPE = "escape"
    BASE64 = "base64"


class EventSymbol(str, Enum):
    """Event types understood by L{snowplow_tracker.verbs.as_event_hash}.

    The values are the short codes sent under the C{e} field.
    """

    STRUCTURED = "se"
    UNSTRUCTURED = "ue"


class Platform(str, Enum):
    PC = "pc"
    TV = "tv"
    MOBILE = "mob"
    CONSOLE = "cnsl"
    IOT = "iot"
    WEB = "web"
    SERVER = "srv"
    APP = "app"
