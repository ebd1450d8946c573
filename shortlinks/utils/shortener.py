"""Base62 shortcode primitives

This module provides the alphabet and the encoding helpers shared by the
shortcode generators.

Functions:
    encode_base62(number) -> str:
        Encode a non-negative integer, most significant symbol first.
    decode_base62(code) -> int:
        Inverse of encode_base62().
    random_shortcode(length, rng=None) -> str:
        Draw a uniformly random fixed-length Base62 string.

Example:
    >>> from shortlinks.utils.shortener import encode_base62, decode_base62
    >>> encode_base62(1)
    '1'
    >>> encode_base62(62)
    '10'
    >>> decode_base62('10')
    62
"""

import random
import secrets
import string


# NOTE: digits first, so that encode_base62() preserves numeric order for
#       codes of equal length ('0' < '9' < 'a' < 'z' < 'A' < 'Z' by position).
ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
BASE = len(ALPHABET)

_INDEX = {symbol: position for position, symbol in enumerate(ALPHABET)}
_SYSTEM_RANDOM = secrets.SystemRandom()


def encode_base62(number: int) -> str:
    """Encode a non-negative integer into a Base62 string.

    Leading zero-value symbols are omitted, so the output is as short as
    possible; only 0 itself encodes to a single '0'.

    Args:
        number (int):
            Non-negative integer to encode.

    Returns:
        str: Base62 representation, most significant symbol first.

    Raises:
        TypeError: If number is not an integer.
        ValueError: If number is negative.

    Example:
        >>> encode_base62(125)
        '21'
    """
    if not isinstance(number, int) or isinstance(number, bool):
        raise TypeError(f'Number must be of type integer (given type: {type(number)}).')
    if number < 0:
        raise ValueError(f'Number must be a non-negative integer (given value: {number}).')

    if number == 0:
        return ALPHABET[0]

    symbols = []
    while number:
        number, remainder = divmod(number, BASE)
        symbols.append(ALPHABET[remainder])
    return ''.join(reversed(symbols))


def decode_base62(code: str) -> int:
    """Decode a Base62 string back into an integer.

    Raises:
        ValueError: If the string is empty or contains a non-Base62 symbol.
    """
    if not code:
        raise ValueError('Cannot decode an empty shortcode.')

    number = 0
    for symbol in code:
        try:
            number = number * BASE + _INDEX[symbol]
        except KeyError:
            raise ValueError(f'Invalid Base62 symbol {symbol!r} in {code!r}.') from None
    return number


def random_shortcode(length: int, rng: random.Random | None = None) -> str:
    """Draw a uniformly random Base62 string of the given length.

    Args:
        length (int):
            Number of symbols to draw.
        rng (random.Random | None):
            Random source. Defaults to a cryptographically secure SystemRandom.
    """
    if length <= 0:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')
    rng = rng or _SYSTEM_RANDOM
    return ''.join(rng.choice(ALPHABET) for _ in range(length))

