from typing import Any

import bleach


def sanitize_text(value: str) -> str:
    """Strip every HTML tag from user text and trim it."""
    return bleach.clean(value, tags=[], attributes={}, strip=True).strip()


def sanitize_value(value: Any) -> Any:
    """Recursively sanitize strings inside lists and dicts; other values pass through."""
    if isinstance(value, str):
        return sanitize_text(value)
    if isinstance(value, list):
        return [sanitize_value(item) for item in value]
    if isinstance(value, dict):
        return {key: sanitize_value(item) for key, item in value.items()}
    return value
