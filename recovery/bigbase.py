"""
BigBase Decoding
Turn share values written in any base from 2 to 36 into exact integers.

Share custodians do not agree on a notation: one writes hex, another
binary, another plain decimal. Values can be far longer than 64 bits,
so everything is accumulated as a Python int, one digit at a time.
"""

import string

from recovery.errors import InvalidBase, InvalidDigit

# Digit alphabet: '0'-'9' then 'a'-'z'
DIGITS = string.digits + string.ascii_lowercase
DIGIT_VALUES = {ch: i for i, ch in enumerate(DIGITS)}

MIN_BASE = 2
MAX_BASE = len(DIGITS)

# CPython refuses int <-> str conversions past this many digits
MAX_ABSCISSA_DIGITS = 4300


def check_base(base) -> int:
    """Validate a base and return it as an int."""
    if isinstance(base, bool) or not isinstance(base, int):
        raise InvalidBase(f"Base must be an integer, got {base!r}")
    if base < MIN_BASE:
        raise InvalidBase(f"Base must be at least {MIN_BASE}, got {base}")
    if base > MAX_BASE:
        raise InvalidBase(f"Base must be at most {MAX_BASE}, got {base}")
    return base


def decode(value: str, base: int) -> int:
    """
    Decode a value string in the given base, most significant digit first.

    Args:
        value: Case-insensitive digits valid in ``base``.
        base: The radix, 2 through 36.

    Returns:
        The exact (arbitrary-precision) integer.

    Raises:
        InvalidBase: If the base is not an integer in 2..36.
        InvalidDigit: If the string is empty or holds a character
            that is not a digit of ``base``.
    """
    check_base(base)
    if not value:
        raise InvalidDigit("Value string is empty")

    acc = 0
    for position, ch in enumerate(value.lower()):
        digit = DIGIT_VALUES.get(ch)
        if digit is None or digit >= base:
            raise InvalidDigit(
                f"Character {ch!r} at position {position} is not a valid base-{base} digit"
            )
        acc = acc * base + digit
    return acc


def parse_abscissa(identifier: str) -> int:
    """Parse a share identifier as a signed decimal x-coordinate."""
    text = identifier.strip()
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if len(text) > MAX_ABSCISSA_DIGITS:
        raise InvalidDigit(
            f"Share identifier has {len(text)} digits, more than {MAX_ABSCISSA_DIGITS}"
        )
    try:
        return sign * decode(text, 10)
    except InvalidDigit as e:
        raise InvalidDigit(f"Share identifier {identifier!r} is not a decimal integer: {e}") from e
