from uuid import UUID, uuid4

from tradedocs.processor.exceptions import InvalidInputError


def new_identifier() -> str:
    return str(uuid4())


def parse_identifier(value: str, label: str = "id") -> UUID:
    """Parse an opaque identifier.

    Raises:
        InvalidInputError: if the value is not a UUID.
    """
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise InvalidInputError(f"Invalid {label}: {value!r}") from exc
