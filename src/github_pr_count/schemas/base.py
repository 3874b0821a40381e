"""Base schema class shared by all pydantic models."""

from pydantic import BaseModel, ConfigDict


class SchemaBase(BaseModel):
    """Base class for immutable pydantic schemas.

    Instances are frozen: values derived from an upstream response are
    never mutated after construction.
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
    )
