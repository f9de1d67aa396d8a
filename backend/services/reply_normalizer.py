"""Coercion helpers for untrusted JSON produced by the LLM."""


def string_list(value, limit: int) -> list[str]:
    """Keep the non-empty strings of ``value`` (a list or a lone string), up to ``limit``."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    items = [v.strip() for v in value if isinstance(v, str) and v.strip()]
    return items[:limit]


def clamp_int(value, low: int, high: int) -> int | None:
    """Round a numeric value into [low, high]; None when it is not a number."""
    # bool is an int subclass but never a meaningful score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value != value:  # NaN
        return None
    return max(low, min(high, int(round(value))))


def text(value, default: str = "") -> str:
    return value.strip() if isinstance(value, str) else default
