from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def clean_optional_text(value: Optional[str], field_name: str, *, default: Optional[str] = None) -> Optional[str]:
    """Strip free text; blank input falls back to ``default``."""
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    value = value.strip()
    return value or default
