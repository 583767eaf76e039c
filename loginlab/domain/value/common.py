"""Base class for value objects."""

from pydantic import BaseModel, ConfigDict


class ValueObject(BaseModel):
    """Immutable value compared field by field.

    Token values inside value objects are ``SecretStr`` so they never show
    up in ``repr`` or default serialization.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
