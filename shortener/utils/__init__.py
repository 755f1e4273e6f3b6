from shortener.utils.config import Config, load_config
from shortener.utils.helpers import get_short_url, parse_address, parse_bool, parse_duration, parse_subnet
from shortener.utils.shortener import generate_shortcode, is_shortcode, is_valid_url
from shortener.utils.logging import initialize_logging
from shortener.utils.tls import ensure_certificate


__all__ = [
    'Config',
    'load_config',
    'get_short_url',
    'parse_address',
    'parse_bool',
    'parse_duration',
    'parse_subnet',
    'generate_shortcode',
    'is_shortcode',
    'is_valid_url',
    'initialize_logging',
    'ensure_certificate',
]
