from .cached import cache_heavy_query
from .performance import monitor_query_performance

__all__ = ['cache_heavy_query', 'monitor_query_performance']
