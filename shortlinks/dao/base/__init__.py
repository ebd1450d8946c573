from shortlinks.dao.base.short_url_base_dao import ShortURLBaseDAO
from shortlinks.dao.base.url_cache_base_dao import URLCacheBaseDAO


__all__ = [
    'ShortURLBaseDAO',
    'URLCacheBaseDAO',
]
