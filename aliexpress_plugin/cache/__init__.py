"""
Cache module for the AliExpress search plugin.

Stores search results, affiliate links and rate-limit counters in Redis.
"""

from .result_cache import ResultCache

__all__ = ['ResultCache']
