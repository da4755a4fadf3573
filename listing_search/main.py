"""Main entry point for the listing search MCP server."""
import asyncio

from listing_search.server import main


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
