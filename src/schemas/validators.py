"""Shared validation functions for request schemas and partial updates."""

from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.services.exceptions import ValidationError

PASSWORD_MIN_LENGTH = 7
# bcrypt only hashes the first 72 bytes
PASSWORD_MAX_BYTES = 72


def validate_password_strength(password: str) -> str:
    """Reject passwords that are too short, too long for bcrypt or contain "password"."""
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    if "password" in password.lower():
        raise ValueError('Password cannot contain "password"')
    return password


def normalize_email(email: str) -> str:
    """Lower-case and trim an email address."""
    return email.strip().lower()


def describe_pydantic_error(exc: PydanticValidationError) -> tuple[str, str | None]:
    """Return a readable message and the offending field for the first error."""
    error = exc.errors()[0]
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
    field = loc[-1] if loc else None
    message = error.get("msg", "Invalid value")
    if field:
        return f"{field}: {message}", field
    return message, None


def validate_partial_update(schema: type[BaseModel], fields: dict[str, Any]) -> dict[str, Any]:
    """Validate a partial update against a closed schema.

    Every key must be one of the schema's fields; a single unknown key rejects
    the whole update. Returns only the keys that were supplied, validated and
    normalized by the schema.

    Raises:
        ValidationError: On an unknown key, a null value or a constraint violation.
    """
    if not isinstance(fields, dict):
        raise ValidationError("Update body must be a JSON object")

    allowed = set(schema.model_fields)
    unknown = sorted(set(fields) - allowed)
    if unknown:
        raise ValidationError(f"Invalid updates: {', '.join(unknown)}", field=unknown[0])

    for key, value in fields.items():
        if value is None:
            raise ValidationError(f"{key}: must not be null", field=key)

    try:
        validated = schema.model_validate(fields)
    except PydanticValidationError as e:
        message, field = describe_pydantic_error(e)
        raise ValidationError(message, field=field) from e

    return validated.model_dump(exclude_unset=True)
