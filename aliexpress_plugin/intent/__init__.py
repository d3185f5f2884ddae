"""
Intent module for the AliExpress search plugin.

Detects product search intent in chat messages.
"""

from .intent_parser import CATEGORY_IDS, CATEGORY_KEYWORDS, ProductIntentParser, get_category_id

__all__ = ['CATEGORY_IDS', 'CATEGORY_KEYWORDS', 'ProductIntentParser', 'get_category_id']
