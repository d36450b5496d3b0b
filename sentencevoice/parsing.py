"""Shared parsing helpers for runtime and table value normalization."""

from __future__ import annotations


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


MAX_REPETITIONS = 100


def coerce_repetitions(value: object) -> int:
    """Coerce a repetition count to a non-negative integer.

    Blank values and negative counts collapse to `0`; floats are truncated the
    way an integer parse of their text would be.

    Raises:
        ValueError: If the value is not a finite number or exceeds
            `MAX_REPETITIONS`.
    """

    if isinstance(value, bool):
        raise ValueError("Repetition count must be an integer, not a boolean.")
    if isinstance(value, int):
        return _bounded_repetitions(value, str(value))
    if isinstance(value, float):
        return _bounded_repetitions(_truncate(value, str(value)), str(value))

    normalized = normalize_optional_string(value)
    if normalized is None:
        return 0
    try:
        parsed = int(normalized)
    except ValueError:
        try:
            number = float(normalized)
        except ValueError as exc:
            raise ValueError(f"Repetition count `{normalized}` is not a number.") from exc
        parsed = _truncate(number, normalized)
    return _bounded_repetitions(parsed, normalized)


def _truncate(number: float, text: str) -> int:
    try:
        return int(number)
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"Repetition count `{text}` is not a finite number.") from exc


def _bounded_repetitions(count: int, text: str) -> int:
    if count > MAX_REPETITIONS:
        raise ValueError(f"Repetition count `{text}` exceeds the maximum of {MAX_REPETITIONS}.")
    return max(0, count)
