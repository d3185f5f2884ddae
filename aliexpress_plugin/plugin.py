"""
Chat plugin facade over the AliExpress search service.

Lets a chat backend check each message for product search intent and turn
the outcome into reply text or product cards.
"""

from typing import Any, Dict, List, Optional

from .models import ProductCard, SearchOutcome
from .service import AliExpressService


class AliExpressPlugin:
    """Product search plugin for a chat message pipeline"""

    def __init__(self, service: AliExpressService, enabled: bool = True):
        self.service = service
        self.enabled = enabled

    async def process_message(self, message: str, user_id: Optional[str] = None) -> SearchOutcome:
        """Run product search for a message; a disabled plugin never matches"""
        if not self.enabled:
            return SearchOutcome(is_product_search=False)

        return await self.service.process_message(message, user_id)

    def format_for_chat(self, outcome: SearchOutcome, original_message: str) -> str:
        """
        Reply text for an outcome.

        Returns:
            The error or the formatted products; an empty string when the
            message was not a product search
        """
        if not outcome.is_product_search:
            return ""

        if outcome.error:
            return outcome.error

        if outcome.response is not None:
            return self.service.format_products_for_chat(outcome.response, original_message)

        return ""

    def get_product_cards(self, outcome: SearchOutcome) -> List[ProductCard]:
        if outcome.response is None:
            return []
        return outcome.response.products

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled

    async def get_stats(self) -> Dict[str, Any]:
        return await self.service.get_stats()
