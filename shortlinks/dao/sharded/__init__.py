from shortlinks.dao.sharded.short_url_sharded_dao import ShortURLShardedDAO


__all__ = ['ShortURLShardedDAO']
