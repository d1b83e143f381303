import json
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.platform.exceptions import ValidationError, format_validation_errors

ModelT = TypeVar("ModelT", bound=BaseModel)


def load_json_field(raw: Optional[str], field: str) -> Any:
    """Decode a JSON-encoded multipart form field; None and "" pass through as None."""
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError.for_field(field, f"{field} must be valid JSON")


def validate_form(model: Type[ModelT], data: Dict[str, Any]) -> ModelT:
    """
    Validate multipart form data against a pydantic model.

    Fields left as None are dropped first, so partial updates only see what
    the client actually sent.

    Raises:
        ValidationError: with the same field-level errors a JSON body would produce
    """
    payload = {key: value for key, value in data.items() if value is not None}
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            "Validation failed", errors=format_validation_errors(e.errors())
        ) from e
