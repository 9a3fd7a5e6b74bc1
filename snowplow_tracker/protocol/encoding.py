"""Field encoders of the tracker protocol.

Every encoder is a total function over strings. Byte-level behavior is
fixed by the collectors and must not change.
"""

from __future__ import annotations

import base64 as _base64
from urllib.parse import quote

ERRORS = "surrogatepass"
"""UTF-8 error policy. Keeps every Python string encodable."""


def raw(value: str) -> str:
    """Return the value unchanged."""
    return value


def escape(value: str) -> str:
    """Percent-encode every byte outside the unreserved URI set.

    Non-ASCII characters are encoded as their UTF-8 bytes. Lone
    surrogates are passed through as their 3-byte UTF-8 form.

    @type value: str
    @param value: The string to URL-escape.
    @rtype: str
    @return: The escaped string. Only contains C{[A-Za-z0-9-_.~%]}.
    """
    return quote(value, safe="-_.~", encoding="utf-8", errors=ERRORS)


def base64(value: str) -> str:
    """URL-safe base64 of the UTF-8 bytes of C{value}.

    Uses C{-} and C{_} in place of C{+} and C{/}. Padding is kept.

    @type value: str
    @param value: The string to encode.
    @rtype: str
    @return: The encoded string.
    """
    return _base64.urlsafe_b64encode(value.encode("utf-8", ERRORS)).decode(
        "ascii"
    )
