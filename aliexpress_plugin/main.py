"""
Command-line interface for the AliExpress search plugin.

Runs a chat message through the search pipeline and prints the reply the
chat backend would send, or shows / clears the plugin's cache.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

import redis.asyncio as redis

from .cache import ResultCache
from .config import get_aliexpress_config, validate_aliexpress_config
from .plugin import AliExpressPlugin
from .service import AliExpressService


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def run_command(
    message: Optional[str],
    user_id: Optional[str] = None,
    show_stats: bool = False,
    clear_cache: bool = False,
    output_json: bool = False,
    verbose: bool = False
) -> int:
    """
    Execute one CLI command.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")

    config = get_aliexpress_config()
    validate_aliexpress_config()

    redis_client = redis.from_url(config.redis_url, decode_responses=True)
    service = AliExpressService(config, ResultCache(redis_client))
    plugin = AliExpressPlugin(service)

    try:
        if clear_cache:
            removed = await service.cache.clear_all_cache()
            print(f"Cleared {removed} cached entries")
            return 0

        if show_stats:
            stats = await plugin.get_stats()
            cache_stats = stats["cache_stats"]
            print("📊 Cache")
            print(f"   Search results: {cache_stats.search_cache_size}")
            print(f"   Affiliate links: {cache_stats.affiliate_cache_size}")
            print(f"   Tracked search terms: {cache_stats.popular_searches}")
            print(f"   Rate limit windows: {cache_stats.rate_limit_entries}")
            print("🔥 Popular searches")
            for entry in stats["popular_searches"]:
                print(f"   {entry.count:>5}  {entry.term}")
            return 0

        if not message or not message.strip():
            logger.error("Message cannot be empty")
            print("Error: a message is required", file=sys.stderr)
            return 1

        outcome = await plugin.process_message(message, user_id)

        if output_json:
            print(outcome.model_dump_json(indent=2))
        elif not outcome.is_product_search:
            print("Not a product search.")
            if outcome.suggestions:
                print("\n".join(f"  - {suggestion}" for suggestion in outcome.suggestions))
        else:
            print(plugin.format_for_chat(outcome, message))

        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    except Exception as e:
        logger.exception(f"Command failed with error: {str(e)}")
        print(f"\n❌ Error: {str(e)}", file=sys.stderr)
        return 1

    finally:
        await service.close()
        await redis_client.aclose()


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="aliexpress-search",
        description="Detect product search intent in a chat message and search AliExpress",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search from a chat message
  aliexpress-search "find me wireless earbuds under $20"

  # Raw JSON outcome
  aliexpress-search "bluetooth speakers around $50" --json

  # Cache statistics and popular searches
  aliexpress-search --stats
        """
    )

    parser.add_argument(
        "message",
        nargs="?",
        help="Chat message to process"
    )

    parser.add_argument(
        "--user-id",
        default=None,
        help="Caller identifier used for rate limiting"
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Show cache statistics and popular searches"
    )

    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Delete every cached search, link and rate limit window"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the raw search outcome as JSON"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging output"
    )

    return parser


def main() -> int:
    parser = create_argument_parser()
    args = parser.parse_args()

    return asyncio.run(
        run_command(
            message=args.message,
            user_id=args.user_id,
            show_stats=args.stats,
            clear_cache=args.clear_cache,
            output_json=args.json,
            verbose=args.verbose
        )
    )


if __name__ == "__main__":
    sys.exit(main())
