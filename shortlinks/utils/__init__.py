from shortlinks.utils.config import app_env, app_name, app_prefix, load_config, ShortenerConfig
from shortlinks.utils.helpers import utc_now, to_epoch, from_epoch, require_environment
from shortlinks.utils.shortener import ALPHABET, BASE, encode_base62, decode_base62, random_shortcode
from shortlinks.utils.validators import validate_url, validate_alias
from shortlinks.utils.logging import initialize_logging


__all__ = [
    'ALPHABET',
    'BASE',
    'encode_base62',
    'decode_base62',
    'random_shortcode',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'ShortenerConfig',
    'utc_now',
    'to_epoch',
    'from_epoch',
    'require_environment',
    'validate_url',
    'validate_alias',
    'initialize_logging',
]
