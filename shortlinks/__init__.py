"""Short-code generation and resolution core of a URL-shortening service."""

from shortlinks.resolver import URLResolver
from shortlinks.service import build_resolver, build_reaper


__version__ = '0.1.0'

__all__ = [
    'URLResolver',
    'build_resolver',
    'build_reaper',
]
