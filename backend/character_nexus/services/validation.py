"""
Schema validation for incoming payloads.

Payloads are validated against named pydantic schemas. Validation is
exhaustive: every violated field is reported, and unknown fields are
dropped from the normalized value.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError

from character_nexus.core.exceptions import ValidationError
from character_nexus.models.character import CharacterCreate
from character_nexus.models.imports import ImportUrlRequest
from character_nexus.models.universe import GroupCreate, UniverseCreate

SCHEMAS: dict[str, type[BaseModel]] = {
    "character": CharacterCreate,
    "group": GroupCreate,
    "universe": UniverseCreate,
    "import-url": ImportUrlRequest,
}

# Location prefixes FastAPI adds to request validation errors
REQUEST_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})


@dataclass(frozen=True)
class FieldError:
    """A single violated field, addressed by a dotted camelCase path."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass
class ValidationResult:
    """Either a normalized value or the list of field errors."""

    value: Optional[BaseModel] = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> BaseModel:
        """Return the value or raise ValidationError with every field error."""
        if self.errors:
            raise ValidationError(fields=[e.to_dict() for e in self.errors])
        return self.value


def _error_message(error: dict[str, Any]) -> str:
    if error.get("type") == "value_error":
        cause = (error.get("ctx") or {}).get("error")
        if cause is not None:
            return str(cause)
    return error.get("msg", "Invalid value")


def field_errors_from_pydantic(
    errors: Iterable[dict[str, Any]],
    strip_locations: frozenset = frozenset(),
) -> list[FieldError]:
    """Convert pydantic error dicts into FieldErrors."""
    result = []
    for error in errors:
        loc = list(error.get("loc", ()))
        if loc and loc[0] in strip_locations:
            loc = loc[1:]
        path = ".".join(str(part) for part in loc) or "body"
        result.append(FieldError(field=path, message=_error_message(error)))
    return result


def validate(schema_name: str, payload: Any) -> ValidationResult:
    """
    Validate ``payload`` against the named schema.

    Shape mismatches never raise; they come back as field errors.

    Raises:
        KeyError: If ``schema_name`` is not a registered schema
    """
    model = SCHEMAS[schema_name]
    try:
        value = model.model_validate(payload)
    except PydanticValidationError as e:
        return ValidationResult(errors=field_errors_from_pydantic(e.errors()))
    return ValidationResult(value=value)
