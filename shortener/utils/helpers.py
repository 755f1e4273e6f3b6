"""Helper utilities for parsing configuration values and building short URLs.

Functions:
    get_short_url(shortcode: str, return_address: str) -> str
        Get string representation of short URL for a given shortcode
    parse_address(value: str) -> str
        Normalize a 'host:port' network address
    parse_bool(value: str | bool) -> bool
        Parse a boolean configuration value
    parse_duration(value: str | int | float) -> float
        Parse a Go-style duration ('1h30m', '10s') into seconds
    parse_subnet(value: str | None) -> IPv4Network | IPv6Network | None
        Parse a CIDR into an IP network

Example:
    >>> from shortener.utils.helpers import get_short_url
    >>> get_short_url('YBbxJEcQ9vq', 'localhost:8080')
    'http://localhost:8080/YBbxJEcQ9vq'
"""

import re
import ipaddress

from shortener.constants import Defaults
from shortener.exceptions import BadConfigurationError


TRUE_VALUES = frozenset({'true', '1', 't', 'T', 'TRUE', 'True'})
FALSE_VALUES = frozenset({'false', '0', 'f', 'F', 'FALSE', 'False'})

_DURATION_PART = re.compile(r'(\d+(?:\.\d+)?)(ms|h|m|s)')
_DURATION_UNITS = {'h': 3600.0, 'm': 60.0, 's': 1.0, 'ms': 0.001}


def get_short_url(shortcode: str, return_address: str) -> str:
    """Get string representation of shortened URL

    Args:
        shortcode (str): shortcode
        return_address (str): 'host:port' the service is reachable at

    Returns:
        str: short url string representation
    """
    return f'http://{return_address}/{shortcode}'


def parse_address(value: str) -> str:
    """Normalize a network address of the form 'host:port'

    An 'http://' or 'https://' prefix is stripped and an empty host defaults
    to 0.0.0.0.

    Raises:
        BadConfigurationError: If the address is not 'host:port' or the port is not an integer.

    Example:
        >>> parse_address('http://localhost:8080')
        'localhost:8080'
        >>> parse_address(':9090')
        '0.0.0.0:9090'
    """
    value = str(value).strip().removeprefix('http://').removeprefix('https://').rstrip('/')

    parts = value.split(':')
    if len(parts) != 2:
        raise BadConfigurationError(f"Need address in a form host:port (given value: '{value}').")

    host, port = parts
    if not port.isdigit():
        raise BadConfigurationError(f"Invalid port (given value: '{port}').")

    return f'{host or Defaults.HOST}:{port}'


def parse_bool(value: str | bool) -> bool:
    if isinstance(value, bool):
        return value
    value = str(value).strip()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise BadConfigurationError(
        f"Invalid boolean value '{value}'. Expected one of {sorted(TRUE_VALUES)} or {sorted(FALSE_VALUES)}."
    )


def parse_duration(value: str | int | float) -> float:
    """Parse a duration into seconds

    Accepts bare numbers (seconds) and Go-style strings built from the units
    h, m, s and ms.

    Raises:
        BadConfigurationError: If the value is not a valid non-negative duration.

    Example:
        >>> parse_duration('1h30m')
        5400.0
        >>> parse_duration('250ms')
        0.25
        >>> parse_duration(30)
        30.0
    """
    if isinstance(value, bool):
        raise BadConfigurationError(f'Invalid duration (given value: {value}).')
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip()
        try:
            seconds = float(text)
        except ValueError:
            parts = _DURATION_PART.findall(text)
            if not parts or ''.join(n + u for n, u in parts) != text:
                raise BadConfigurationError(f"Invalid duration (given value: '{value}').") from None
            seconds = sum(float(number) * _DURATION_UNITS[unit] for number, unit in parts)

    if seconds < 0:
        raise BadConfigurationError(f'Duration must be non-negative (given value: {value}).')
    return seconds


def parse_subnet(value: str | None) -> ipaddress.IPv4Network | ipaddress.IPv6Network | None:
    """Parse a CIDR, returning None for an empty value

    Raises:
        BadConfigurationError: If the value is not a valid CIDR.

    Example:
        >>> parse_subnet('192.168.1.0/24')
        IPv4Network('192.168.1.0/24')
    """
    if not value or not str(value).strip():
        return None
    try:
        return ipaddress.ip_network(str(value).strip(), strict=False)
    except ValueError as e:
        raise BadConfigurationError(f"Invalid trusted subnet CIDR (given value: '{value}').") from e
