import math
from typing import Optional


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def normalize_place(name: Optional[str]) -> Optional[str]:
    """Lowercase and collapse a province/district/city name; blank becomes None."""
    if name is None:
        return None
    cleaned = normalize_text(str(name))
    return cleaned or None


def to_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None
