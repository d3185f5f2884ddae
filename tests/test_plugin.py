"""Tests for the chat plugin facade."""

import pytest

from aliexpress_plugin import AliExpressPlugin, AliExpressService
from aliexpress_plugin.models import SearchOutcome, SearchResponse


@pytest.fixture
def plugin(demo_config, cache):
    return AliExpressPlugin(AliExpressService(demo_config, cache))


@pytest.mark.asyncio
async def test_product_search_is_formatted(plugin):
    message = "find me wireless earbuds under $20"

    outcome = await plugin.process_message(message, "user-1")
    text = plugin.format_for_chat(outcome, message)

    assert text.startswith(f"Found {len(outcome.response.products)} products for \"{message}\":")
    assert plugin.get_product_cards(outcome) == outcome.response.products


@pytest.mark.asyncio
async def test_disabled_plugin_never_matches(plugin):
    plugin.set_enabled(False)

    outcome = await plugin.process_message("find me wireless earbuds under $20")

    assert outcome == SearchOutcome(is_product_search=False)
    assert plugin.format_for_chat(outcome, "find me wireless earbuds under $20") == ""
    assert plugin.get_product_cards(outcome) == []


@pytest.mark.asyncio
async def test_non_search_formats_to_empty_string(plugin):
    outcome = await plugin.process_message("what's 2+2?")

    assert plugin.format_for_chat(outcome, "what's 2+2?") == ""


def test_error_is_shown_as_is(plugin):
    outcome = SearchOutcome(is_product_search=True, error="Rate limit exceeded. Please try again in 1 seconds.")

    assert plugin.format_for_chat(outcome, "earbuds") == "Rate limit exceeded. Please try again in 1 seconds."


def test_suggestions_stay_on_the_outcome(plugin):
    outcome = SearchOutcome(is_product_search=False, suggestions=["What's your budget range for this item?"])

    assert plugin.format_for_chat(outcome, "stuff") == ""
    assert outcome.suggestions == ["What's your budget range for this item?"]


def test_empty_response_formats_to_no_results(plugin):
    outcome = SearchOutcome(
        is_product_search=True,
        response=SearchResponse(products=[], total_results=0),
    )

    assert plugin.format_for_chat(outcome, "flux capacitor").startswith("I couldn't find any products")


@pytest.mark.asyncio
async def test_stats_pass_through(plugin):
    stats = await plugin.get_stats()

    assert stats["cache_stats"].search_cache_size == 0
    assert stats["popular_searches"] == []
