from .encoding import base64, escape, raw
from .grammar import (
    add_base64,
    add_escaped,
    add_field,
    add_raw,
    is_valid_tuple,
    merge_fragments,
    to_field_mapping,
    to_payload,
)
from .payload import Context, Payload

__all__ = [
    "Context",
    "Payload",
    "add_base64",
    "add_escaped",
    "add_field",
    "add_raw",
    "base64",
    "escape",
    "is_valid_tuple",
    "merge_fragments",
    "raw",
    "to_field_mapping",
    "to_payload",
]
