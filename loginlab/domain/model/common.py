"""Base model for stored domain entities."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Frozen pydantic model; changes produce a new instance via ``model_copy``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
