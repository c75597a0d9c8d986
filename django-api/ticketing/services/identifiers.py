"""Parsing of raw identifiers received from callers."""

from typing import TypeVar

from ticketing.domain.errors import InvalidIdError
from ticketing.domain.value_objects import Identifier

IdT = TypeVar("IdT", bound=Identifier)


def parse_id(id_type: type[IdT], value: object, kind: str) -> IdT:
    """Return ``value`` as ``id_type``.

    Raises:
        InvalidIdError: If the value is not a valid UUID string.
    """
    if isinstance(value, id_type):
        return value
    try:
        return id_type.from_string(str(value))
    except ValueError:
        raise InvalidIdError(kind) from None
