"""
Shared base for API schemas: snake_case in Python, camelCase on the wire.
Uses Pydantic's alias_generators so request parsing and response dumps agree.
"""
from pydantic import BaseModel, ConfigDict, ValidationError as SchemaValidationError
from pydantic.alias_generators import to_camel

from services.errors import ValidationError


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def first_error(exc: SchemaValidationError) -> ValidationError:
    """Collapse a Pydantic error into the core ValidationError (first problem wins)."""
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ())) or None
    message = err.get("msg", "invalid input")
    if field:
        message = f"{field}: {message}"
    return ValidationError(message, field=field)
