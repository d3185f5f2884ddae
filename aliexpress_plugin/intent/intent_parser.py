"""
Product search intent parser.

Single-pass keyword and regex heuristics that turn a chat message into a
SearchIntent: keywords, an optional price range, an optional category and a
confidence score.
"""

import re
from typing import List, Optional, Sequence, Tuple

from ..models import PriceRange, SearchIntent


# Ordered: the first category with a matching keyword wins
CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("electronics", ("phone", "laptop", "computer", "tablet", "headphones", "earbuds", "speaker", "camera", "tv", "monitor")),
    ("clothing", ("shirt", "dress", "pants", "shoes", "jacket", "hoodie", "jeans", "sneakers", "boots")),
    ("home", ("furniture", "decor", "kitchen", "bedroom", "living room", "bathroom", "garden", "tools")),
    ("beauty", ("makeup", "skincare", "perfume", "cosmetics", "hair", "nail", "beauty")),
    ("sports", ("fitness", "gym", "running", "yoga", "sports", "outdoor", "camping", "hiking")),
    ("toys", ("toy", "game", "puzzle", "doll", "action figure", "board game", "kids", "children")),
    ("automotive", ("car", "auto", "vehicle", "motorcycle", "bike", "parts", "accessories")),
)

# Category ids of the affiliate product query API
CATEGORY_IDS = {
    "electronics": "44",
    "clothing": "3",
    "home": "13",
    "beauty": "66",
    "sports": "18",
    "toys": "26",
    "automotive": "34",
}

STOP_WORDS = frozenset({
    # search verbs and price context words
    "find", "search", "looking", "for", "want", "need", "buy", "get", "show", "me",
    "under", "below", "above", "around", "about", "over", "less", "more", "than",
    # filler
    "the", "and", "with", "what", "what's", "how", "can", "you", "please", "some", "any",
})

SEARCH_INDICATORS = ("find", "search", "looking for", "want", "need", "buy", "show me")

MAX_PRICE_CONTEXT = ("under", "below", "less than")
MIN_PRICE_CONTEXT = ("above", "over", "more than")

# An amount must stand alone: "$20", "20", "19.99" but not "2+2" or "ps5"
_AMOUNT = r"\$?(\d+(?:\.\d{1,2})?)(?![\w+*/^%]|\.\d)"
PRICE_PATTERN = re.compile(
    r"(?<![\w.+\-*/^])" + _AMOUNT + r"(?:\s*(?:to|-)?\s*" + _AMOUNT + r")?"
)

NUMERIC_TOKEN = re.compile(r"^\$?\d")

BASE_CONFIDENCE = 0.5
INTENT_THRESHOLD = 0.6


def get_category_id(category: Optional[str]) -> Optional[str]:
    """Map a category name to its API id, None when there is no filter"""
    if not category:
        return None
    return CATEGORY_IDS.get(category)


class ProductIntentParser:
    """Heuristic product search intent parser"""

    def parse_intent(self, message: str) -> SearchIntent:
        """
        Parse a chat message into a search intent.

        Args:
            message: Raw user message

        Returns:
            SearchIntent with keywords, price range, category and confidence
        """
        normalized = message.lower().strip()

        keywords = tuple(self.extract_keywords(normalized))
        price_range = self.extract_price_range(normalized)
        category = self.detect_category(normalized)
        confidence = self.calculate_confidence(normalized, keywords, price_range, category)

        return SearchIntent(
            keywords=keywords,
            category=category,
            price_range=price_range,
            confidence=confidence,
        )

    def extract_keywords(self, normalized: str) -> List[str]:
        """Words longer than two characters that are neither stop-words nor prices"""
        return [
            word for word in normalized.split()
            if len(word) > 2
            and word not in STOP_WORDS
            and not NUMERIC_TOKEN.match(word)
        ]

    def extract_price_range(self, normalized: str) -> Optional[PriceRange]:
        """
        Extract a price range from the message.

        Two amounts give a min/max range. A single amount is a maximum unless
        the message says "above", "over" or "more than".
        """
        match = PRICE_PATTERN.search(normalized)
        if not match:
            return None

        first = float(match.group(1))
        second = float(match.group(2)) if match.group(2) is not None else None

        if second is not None:
            return PriceRange(min=min(first, second), max=max(first, second))

        if any(word in normalized for word in MAX_PRICE_CONTEXT):
            return PriceRange(max=first)

        if any(word in normalized for word in MIN_PRICE_CONTEXT):
            return PriceRange(min=first)

        return PriceRange(max=first)

    def detect_category(self, normalized: str) -> Optional[str]:
        """First category, in table order, with a keyword contained in the message"""
        for category, keywords in CATEGORY_KEYWORDS:
            if any(keyword in normalized for keyword in keywords):
                return category
        return None

    def calculate_confidence(
        self,
        normalized: str,
        keywords: Sequence[str],
        price_range: Optional[PriceRange],
        category: Optional[str],
    ) -> float:
        """Additive confidence score clamped to [0, 1]"""
        confidence = BASE_CONFIDENCE

        if any(indicator in normalized for indicator in SEARCH_INDICATORS):
            confidence += 0.2

        if len(keywords) >= 2:
            confidence += 0.1

        if price_range is not None:
            confidence += 0.1

        if category is not None:
            confidence += 0.1

        # Very short or vague messages
        if len(normalized) < 10 or not keywords:
            confidence -= 0.2

        # Round off float drift from the 0.1 steps
        return max(0.0, min(1.0, round(confidence, 4)))

    def is_product_search_intent(self, message: str) -> bool:
        """True when the message's confidence is strictly above the threshold"""
        return self.parse_intent(message).confidence > INTENT_THRESHOLD

    def generate_suggestions(self, message: str) -> List[str]:
        """
        Clarifying prompts for an ambiguous message.

        Each missing piece adds its own prompt, so several may be returned.
        """
        intent = self.parse_intent(message)
        suggestions = []

        if not intent.keywords:
            suggestions.append("Could you be more specific about what product you're looking for?")

        if intent.price_range is None:
            suggestions.append("What's your budget range for this item?")

        if intent.category is None:
            suggestions.append("What category of product are you interested in?")

        if len(intent.keywords) == 1:
            suggestions.append(f"Are you looking for {intent.keywords[0]} in any specific style or brand?")

        return suggestions
