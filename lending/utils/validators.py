from typing import Iterable, List, Optional
from lending.exceptions import ValidationError

# Largest value a 64-bit INTEGER column holds
MAX_ID = 2**63 - 1


def require_id(value, name: str = 'id') -> int:
    """Return value as a positive int id or raise ValidationError."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    if value > MAX_ID:
        raise ValidationError(f"{name} out of range: {value}")
    return value


def require_id_list(values: Optional[Iterable], name: str, allow_empty: bool = True) -> List[int]:
    """Validate a list of ids, dropping duplicates while keeping order."""
    if values is None or isinstance(values, (str, bytes)):
        raise ValidationError(f"{name} must be a list of integer ids")
    ids: List[int] = []
    for value in values:
        value = require_id(value, name)
        if value not in ids:
            ids.append(value)
    if not ids and not allow_empty:
        raise ValidationError(f"{name} must contain at least one id")
    return ids


def require_text(value, name: str, max_length: Optional[int] = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must be a non-empty string")
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{name} must be at most {max_length} characters")
    return value


def optional_text(value, name: str, max_length: Optional[int] = None) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string")
    value = value.strip()
    if not value:
        return None
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{name} must be at most {max_length} characters")
    return value


def optional_year(value, name: str = 'publication_year') -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer year")
    if value < 0 or value > 9999:
        raise ValidationError(f"{name} out of range: {value}")
    return value
