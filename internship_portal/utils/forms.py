"""Helpers that turn pydantic validation failures into form errors."""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from internship_portal.utils.errors import FormValidationError

M = TypeVar("M", bound=BaseModel)


def to_form_error(error: ValidationError) -> FormValidationError:
    """Convert the first pydantic error into a FormValidationError.

    The first element of the error location becomes the offending field.
    """
    first = error.errors()[0]
    loc = first.get("loc") or ()
    field = str(loc[0]) if loc else None
    message = first.get("msg", "Invalid value")
    if field:
        message = f"{field}: {message}"
    return FormValidationError(message, field=field)


def build_model(model_cls: type[M], data: dict[str, Any]) -> M:
    """Validate ``data`` into ``model_cls``, raising FormValidationError on failure."""
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        raise to_form_error(e) from e


def require_text(value: str | None, field: str, message: str) -> str:
    """Return the stripped value, or raise if it is blank."""
    if value is None or not value.strip():
        raise FormValidationError(message, field=field)
    return value.strip()
