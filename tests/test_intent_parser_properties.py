"""
Property-based tests for the product intent parser.

These tests verify keyword extraction, price range extraction, category
detection and the confidence threshold across generated messages.
"""

import pytest
from hypothesis import given, settings, strategies as st

from aliexpress_plugin.intent import CATEGORY_KEYWORDS, ProductIntentParser, get_category_id
from aliexpress_plugin.intent.intent_parser import NUMERIC_TOKEN, STOP_WORDS
from aliexpress_plugin.models import PriceRange


parser = ProductIntentParser()

indicators = st.sampled_from(["find", "search for", "looking for", "i want", "i need", "buy", "show me"])
adjectives = st.sampled_from(["red", "wireless", "cheap", "small", "vintage", "leather"])
products = st.sampled_from(["earbuds", "laptop", "sneakers", "perfume", "yoga mat", "puzzle"])
prices = st.integers(min_value=1, max_value=5000)


def test_wireless_earbuds_example():
    intent = parser.parse_intent("find me wireless earbuds under $20")

    assert "wireless" in intent.keywords
    assert "earbuds" in intent.keywords
    for dropped in ("find", "me", "under", "$20"):
        assert dropped not in intent.keywords
    assert intent.price_range == PriceRange(max=20.0)
    assert intent.category == "electronics"
    assert intent.confidence == 1.0
    assert parser.is_product_search_intent("find me wireless earbuds under $20")


def test_ambiguous_price_context_defaults_to_max():
    intent = parser.parse_intent("bluetooth speakers around $50")

    assert intent.keywords == ("bluetooth", "speakers")
    assert intent.price_range == PriceRange(max=50.0)


def test_arithmetic_is_not_a_product_search():
    intent = parser.parse_intent("what's 2+2?")

    assert intent.keywords == ()
    assert intent.price_range is None
    assert intent.confidence <= 0.3
    assert not parser.is_product_search_intent("what's 2+2?")


@pytest.mark.parametrize("message, expected", [
    ("laptop stand $10 to $30", PriceRange(min=10.0, max=30.0)),
    ("laptop stand 50-20", PriceRange(min=20.0, max=50.0)),
    ("desk lamp over $100", PriceRange(min=100.0)),
    ("desk lamp more than 40", PriceRange(min=40.0)),
    ("desk lamp below 19.99", PriceRange(max=19.99)),
    ("desk lamp less than $15", PriceRange(max=15.0)),
    ("desk lamp", None),
])
def test_price_range_extraction(message, expected):
    assert parser.parse_intent(message).price_range == expected


def test_numbers_glued_to_words_are_not_prices():
    assert parser.parse_intent("ps5 controller skins").price_range is None


def test_category_tie_break_is_declaration_order():
    """'car' appears first in the message, but electronics is declared first."""
    assert parser.parse_intent("car phone holder").category == "electronics"
    assert parser.parse_intent("car seat covers").category == "automotive"


def test_duplicates_and_order_are_preserved():
    intent = parser.parse_intent("blue shirt blue jeans")

    assert intent.keywords == ("blue", "shirt", "blue", "jeans")


def test_threshold_is_strict():
    """0.5 base + 0.1 price with a single keyword is exactly 0.6: not a search."""
    intent = parser.parse_intent("widgetbox $5")

    assert intent.confidence == pytest.approx(0.6)
    assert not parser.is_product_search_intent("widgetbox $5")


def test_category_ids():
    assert get_category_id("electronics") == "44"
    assert get_category_id("automotive") == "34"
    assert get_category_id(None) is None
    assert [name for name, _ in CATEGORY_KEYWORDS] == [
        "electronics", "clothing", "home", "beauty", "sports", "toys", "automotive"
    ]


def test_suggestions_are_independent():
    suggestions = parser.generate_suggestions("hi")

    assert any("more specific" in s for s in suggestions)
    assert any("budget" in s for s in suggestions)
    assert any("category" in s for s in suggestions)


def test_single_keyword_asks_for_style():
    suggestions = parser.generate_suggestions("umbrellas")

    assert any("umbrellas in any specific style or brand" in s for s in suggestions)
    assert not any("more specific" in s for s in suggestions)


def test_complete_message_needs_no_suggestions():
    assert parser.generate_suggestions("find me wireless earbuds under $20") == []


@given(message=st.text(max_size=200))
@settings(max_examples=200)
def test_confidence_is_bounded(message):
    """For any text, confidence stays within [0, 1]."""
    intent = parser.parse_intent(message)

    assert 0.0 <= intent.confidence <= 1.0


@given(message=st.text(max_size=200))
@settings(max_examples=200)
def test_keywords_are_filtered_tokens_in_order(message):
    """
    Keywords are a subsequence of the message tokens with no stop-words,
    no short tokens and no price tokens.
    """
    intent = parser.parse_intent(message)
    tokens = message.lower().strip().split()

    position = 0
    for keyword in intent.keywords:
        assert len(keyword) > 2
        assert keyword not in STOP_WORDS
        assert not NUMERIC_TOKEN.match(keyword)
        position = tokens.index(keyword, position) + 1


@given(
    indicator=indicators,
    adjective=adjectives,
    product=products,
    price=prices,
)
@settings(max_examples=100)
def test_full_signal_messages_are_searches(indicator, adjective, product, price):
    """
    A message with an indicator, two keywords, a price and a category
    reaches full confidence and is classified as a product search.
    """
    message = f"{indicator} {adjective} {product} under ${price}"

    intent = parser.parse_intent(message)

    assert intent.confidence >= 0.6
    assert intent.price_range == PriceRange(max=float(price))
    assert intent.category is not None
    assert parser.is_product_search_intent(message)
