from __future__ import annotations

from snowplow_tracker.enums import Platform
from snowplow_tracker.exceptions import ContractFailure
from snowplow_tracker.protocol.grammar import to_field_mapping
from snowplow_tracker.typing import FieldMapping, all_not_none

DEFAULT_PLATFORM = Platform.SERVER


class Subject:
    """Information about the user and device an event is about.

    Every attribute is optional. Unset attributes are left out of the
    payload. Setters return the subject so calls can be chained:

        >>> subject = Subject().set_user_id("jdoe").set_lang("en")
    """

    def __init__(self, platform: Platform | str = DEFAULT_PLATFORM) -> None:
        self._platform: str = DEFAULT_PLATFORM.value
        self._user_id: str | None = None
        self._resolution: str | None = None
        self._viewport: str | None = None
        self._color_depth: str | None = None
        self._timezone: str | None = None
        self._lang: str | None = None
        self._ip_address: str | None = None
        self._useragent: str | None = None
        self._domain_user_id: str | None = None
        self._network_user_id: str | None = None
        self.set_platform(platform)

    @property
    def platform(self) -> str:
        return self._platform

    def set_platform(self, platform: Platform | str) -> Subject:
        """
        @type platform: L{Platform}
        @param platform: One of C{pc}, C{tv}, C{mob}, C{cnsl}, C{iot},
            C{web}, C{srv} or C{app}.
        @raise ContractFailure: If the platform is not supported.
        """
        if not isinstance(platform, str) or platform not in {
            p.value for p in Platform
        }:
            raise ContractFailure(f"Unsupported platform: {platform!r}")
        self._platform = Platform(platform).value
        return self

    def set_user_id(self, user_id: str | None) -> Subject:
        self._user_id = _optional_str("user_id", user_id)
        return self

    def set_screen_resolution(self, width: int, height: int) -> Subject:
        self._resolution = _dimensions(width, height)
        return self

    def set_viewport(self, width: int, height: int) -> Subject:
        self._viewport = _dimensions(width, height)
        return self

    def set_color_depth(self, depth: int) -> Subject:
        if isinstance(depth, bool) or not isinstance(depth, int):
            raise ContractFailure(f"Color depth must be an int, got {depth!r}.")
        self._color_depth = str(depth)
        return self

    def set_timezone(self, timezone: str | None) -> Subject:
        self._timezone = _optional_str("timezone", timezone)
        return self

    def set_lang(self, lang: str | None) -> Subject:
        self._lang = _optional_str("lang", lang)
        return self

    def set_ip_address(self, ip_address: str | None) -> Subject:
        self._ip_address = _optional_str("ip_address", ip_address)
        return self

    def set_useragent(self, useragent: str | None) -> Subject:
        self._useragent = _optional_str("useragent", useragent)
        return self

    def set_domain_user_id(self, domain_user_id: str | None) -> Subject:
        self._domain_user_id = _optional_str(
            "domain_user_id", domain_user_id
        )
        return self

    def set_network_user_id(self, network_user_id: str | None) -> Subject:
        self._network_user_id = _optional_str(
            "network_user_id", network_user_id
        )
        return self

    def as_hash(self) -> FieldMapping:
        """Field mapping of every attribute that is set."""
        return to_field_mapping(
            [
                ("p", self._platform),
                ("uid", self._user_id),
                ("res", self._resolution),
                ("vp", self._viewport),
                ("cd", self._color_depth),
                ("tz", self._timezone),
                ("lang", self._lang),
                ("ip", self._ip_address),
                ("ua", self._useragent),
                ("duid", self._domain_user_id),
                ("tnuid", self._network_user_id),
            ]
        )


def _dimensions(width: int, height: int) -> str:
    values = (width, height)
    if not all_not_none(values) or not all(
        isinstance(v, int) and not isinstance(v, bool) and v > 0
        for v in values
    ):
        raise ContractFailure(
            f"Dimensions must be positive integers, got {width!r}x{height!r}."
        )
    return f"{width}x{height}"


def _optional_str(name: str, value: str | None) -> str | None:
    if value is not None and not isinstance(value, str):
        raise ContractFailure(
            f"Subject {name} must be a string or None, got {value!r}."
        )
    return value
