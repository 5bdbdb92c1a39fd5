"""Conversion between top's scaled magnitudes and plain KiB values."""

import math

from top2csv.errors import NumericParseError

# top scales memory fields in binary steps above KiB
SUFFIX_MULTIPLIERS: dict[str, int] = {
    "k": 1,
    "m": 1024,
    "g": 1024**2,
    "t": 1024**3,
    "p": 1024**4,
    "e": 1024**5,
}


def normalize_magnitude(token: str) -> float:
    """
    Convert a top magnitude token into a float in the base unit.

    A trailing unit letter scales the numeric prefix by its entry in
    SUFFIX_MULTIPLIERS; a token without a suffix is taken as already
    being in the base unit.

    Raises:
        NumericParseError: if the token is not a number or carries an
            unknown suffix.
    """
    if not token:
        raise NumericParseError(token)

    number, multiplier = token, 1
    suffix = token[-1]
    if suffix.isalpha():
        try:
            multiplier = SUFFIX_MULTIPLIERS[suffix.lower()]
        except KeyError:
            raise NumericParseError(token) from None
        number = token[:-1]

    try:
        value = float(number)
    except ValueError:
        raise NumericParseError(token) from None
    if not math.isfinite(value):
        raise NumericParseError(token)
    return value * multiplier


def format_magnitude(kib: int) -> str:
    """Format a KiB amount the way top prints VIRT/RES/SHR fields."""
    if kib < 1_000_000:
        return str(kib)
    value = float(kib)
    for unit in ["m", "g", "t", "p"]:
        value = value / 1024
        if value < 1000:
            return f"{value:.1f}{unit}"
    return f"{value / 1024:.1f}e"
