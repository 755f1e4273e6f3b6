"""Shortcode generation utility

This module derives short keys from original URLs. The mapping is pure and
deterministic, so shortening the same URL twice always yields the same key,
which lets the data store detect already-shortened URLs.

Functions:
    generate_shortcode(original_url: str) -> str
        Derive the Base58 short key of an original URL.

    base58_encode(number: int) -> str
        Encode a non-negative integer with the Bitcoin Base58 alphabet.

    is_shortcode(value: str) -> bool
        Check that a value only consists of Base58 characters.

Example:
    >>> from shortener.utils import generate_shortcode
    >>> generate_shortcode('https://go.dev/')
    'YBbxJEcQ9vq'
"""

import re
import hashlib

import validators


# Bitcoin alphabet: no 0 (zero), O (capital o), I (capital i) or l (lower L)
ALPHABET = '123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz'
BASE = len(ALPHABET)

SHORTCODE_PATTERN = re.compile(r'[A-HJ-NP-Za-km-z1-9]+')


def base58_encode(number: int) -> str:
    """Encode a non-negative integer in Base58

    Args:
        number (int):
            Value to encode.

    Returns:
        str: Base58 digits, most significant first. Zero encodes as '1'.

    Raises:
        ValueError: If the number is negative.

    Example:
        >>> base58_encode(57)
        'z'
        >>> base58_encode(58)
        '21'
    """
    if number < 0:
        raise ValueError(f'Number must be non-negative (given value: {number}).')

    digits = []
    while True:
        number, remainder = divmod(number, BASE)
        digits.append(ALPHABET[remainder])
        if number == 0:
            break
    return ''.join(reversed(digits))


def generate_shortcode(original_url: str) -> str:
    """Derive the short key of an original URL

    Algorithm:
        1- SHA-256 over the UTF-8 bytes of the URL
        2- First 8 bytes of the digest as a big-endian unsigned 64-bit integer
        3- Base58 encoding of that integer

    The output length varies with the integer (at most 11 characters).

    Args:
        original_url (str):
            The long URL to shorten.

    Returns:
        str: Base58 short key.

    Example:
        >>> generate_shortcode('https://go.dev/')
        'YBbxJEcQ9vq'

    NOTE:
        - Truncating to 64 bits leaves a negligible but non-zero collision
          probability. Data stores report a colliding key mapped to a different
          original URL as ShortURLCollisionError instead of overwriting it.
    """
    digest = hashlib.sha256(original_url.encode('utf-8')).digest()
    return base58_encode(int.from_bytes(digest[:8], byteorder='big', signed=False))


def is_shortcode(value: str) -> bool:
    """Return True if the value is a non-empty string of Base58 characters."""
    return SHORTCODE_PATTERN.fullmatch(value) is not None


def is_valid_url(value: str) -> bool:
    """Permissive URL check: simple hosts are allowed and the scheme is optional ('go.dev/path' passes)."""
    if '://' not in value:
        value = f'http://{value}'
    return bool(validators.url(value, simple_host=True))
