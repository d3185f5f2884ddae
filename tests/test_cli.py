"""Tests for the command-line interface."""

import json

import pytest

from aliexpress_plugin import main
from aliexpress_plugin.cache import ResultCache
from aliexpress_plugin.config import AliExpressConfig
from aliexpress_plugin.main import create_argument_parser


def test_message_and_flags():
    args = create_argument_parser().parse_args(["find me earbuds under $20", "--user-id", "u1", "--json", "-v"])

    assert args.message == "find me earbuds under $20"
    assert args.user_id == "u1"
    assert args.json is True
    assert args.verbose is True
    assert args.stats is False


def test_stats_without_message():
    args = create_argument_parser().parse_args(["--stats"])

    assert args.message is None
    assert args.stats is True
    assert args.clear_cache is False


@pytest.fixture
def cli_redis(fake_redis, monkeypatch):
    """Route the CLI's Redis connection to the in-memory fake, in demo mode"""
    monkeypatch.setattr(main.redis, "from_url", lambda url, **kwargs: fake_redis)
    monkeypatch.setattr(main, "get_aliexpress_config", lambda: AliExpressConfig())
    return fake_redis


@pytest.mark.asyncio
async def test_json_output(cli_redis, capsys):
    exit_code = await main.run_command("find me wireless earbuds under $20", output_json=True)

    outcome = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert outcome["is_product_search"] is True
    assert outcome["response"]["products"]
    assert cli_redis.closed is True


@pytest.mark.asyncio
async def test_chat_output(cli_redis, capsys):
    exit_code = await main.run_command("find me wireless earbuds under $20")

    assert exit_code == 0
    assert capsys.readouterr().out.startswith("Found ")


@pytest.mark.asyncio
async def test_non_search_prints_suggestions(cli_redis, capsys):
    exit_code = await main.run_command("what's 2+2?")

    out = capsys.readouterr().out
    assert exit_code == 0
    assert out.startswith("Not a product search.")
    assert "  - What's your budget range for this item?" in out


@pytest.mark.asyncio
async def test_empty_message_fails(cli_redis, capsys):
    assert await main.run_command("   ") == 1
    assert "a message is required" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_stats(cli_redis, capsys):
    await ResultCache(cli_redis).track_search_term("wireless earbuds")

    exit_code = await main.run_command(None, show_stats=True)

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Search results: 0" in out
    assert "Tracked search terms: 1" in out
    assert "wireless earbuds" in out


@pytest.mark.asyncio
async def test_clear_cache(cli_redis, capsys):
    cache = ResultCache(cli_redis)
    await cache.track_search_term("wireless earbuds")
    await cache.check_rate_limit("search", "anonymous", 10, 60)

    exit_code = await main.run_command(None, clear_cache=True)

    assert exit_code == 0
    assert "Cleared 2 cached entries" in capsys.readouterr().out
    assert await cache.get_popular_search_terms() == []
