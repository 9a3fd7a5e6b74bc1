from collections.abc import Iterable
from typing import Any, TypeAlias, TypeGuard, TypeVar

import typeguard

from snowplow_tracker.enums import Encoding

EncodingTag: TypeAlias = Encoding | str
"""An L{Encoding} member or its string value."""

ProtocolTuple: TypeAlias = (
    tuple[str, str | None] | tuple[str, str | None, EncodingTag]
)
"""A C{(key, value)} or C{(key, value, encoding)} field descriptor.

Lists of the same shape are accepted as well.
"""

FieldMapping: TypeAlias = dict[str, str]
"""A flat mapping of protocol keys to encoded values."""

CollectorTag: TypeAlias = str
"""Name of a collector a payload should be sent to."""


T = TypeVar("T")


def check_type(value: Any, type_: type[T]) -> TypeGuard[T]:
    """Checks if the value has the correct type.

    @type value: Any
    @param value: The value to check.
    @type type_: Type[K]
    @param type_: The type to check against.
    @rtype: bool
    @return: C{True} if the value has the correct type, C{False}
        otherwise.
    """
    try:
        typeguard.check_type(
            value,
            type_,
            collection_check_strategy=typeguard.CollectionCheckStrategy.ALL_ITEMS,
        )
    except (typeguard.TypeCheckError, TypeError):
        return False
    return True


def all_not_none(values: Iterable[Any]) -> bool:
    """Checks if none of the values in the iterable is C{None}

    @type values: Iterable[Any]
    @param values: An iterable of values
    @rtype: bool
    @return: C{True} if all values are not C{None}, C{False} otherwise
    """
    return all(v is not None for v in values)
