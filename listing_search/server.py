"""MCP server for fuzzy listing search."""
import json
import sys
from pathlib import Path
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from listing_search.config import get_config
from listing_search.listings_reader import read_listings
from listing_search.patterns import FuzzyLevel
from listing_search.search import FuzzySearchEngine, generate_suggestions


# Global state
_listings_cache: Optional[list] = None


def load_listings(listings_path: Optional[Path] = None) -> list:
    """Load listings, using cache if available.

    Args:
        listings_path: Optional path to the listings file

    Returns:
        List of listings (empty if the file could not be read)
    """
    global _listings_cache

    if _listings_cache is None:
        path = listings_path or get_config().listings_path
        try:
            _listings_cache = read_listings(path)
        except FileNotFoundError as e:
            print(f"Warning: Could not find listings file: {e}", file=sys.stderr)
            _listings_cache = []
        except (ValueError, OSError) as e:
            print(f"Error loading listings: {e}", file=sys.stderr)
            _listings_cache = []

    return _listings_cache


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def _parse_limit(value: Any, default: int) -> Optional[int]:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return None
    return value


async def health_check_tool() -> list[TextContent]:
    """Report how many listings are loaded and the active search defaults."""
    config = get_config()
    listings = load_listings()
    return _text(json.dumps({
        "status": "ok",
        "listings": len(listings),
        "listings_path": str(config.listings_path),
        "fuzzy_level": config.search.fuzzy_level.value,
    }, indent=2))


async def search_listings_tool(
    query: str,
    fuzzy_level: Optional[str] = None,
    limit: Optional[int] = None,
    filters: Optional[dict] = None,
) -> list[TextContent]:
    """Tool handler for search_listings.

    Args:
        query: Free-text search phrase
        fuzzy_level: strict, medium or loose (defaults to config)
        limit: Maximum number of results (defaults to config)
        filters: Exact-value constraints, e.g. {"city": "Austin"}

    Returns:
        List of TextContent with ranked listing results
    """
    config = get_config().search

    if fuzzy_level is not None and fuzzy_level not in {level.value for level in FuzzyLevel}:
        return _text(f"Error: 'fuzzy_level' must be one of strict, medium, loose (got {fuzzy_level!r})")

    max_results = _parse_limit(limit, config.result_limit)
    if max_results is None:
        return _text("Error: 'limit' must be a positive integer")

    if filters is not None and not isinstance(filters, dict):
        return _text("Error: 'filters' must be an object")

    listings = load_listings()
    if not listings:
        return _text("No listings available. Please check the listings file.")

    engine = FuzzySearchEngine(config.fuzzy_level, config.weights)
    results = engine.search(query, listings, limit=max_results, fuzzy_level=fuzzy_level, filters=filters)

    if not results:
        return _text(f"No listings found matching query: {query}")

    return _text(json.dumps(results, indent=2, default=str))


async def get_suggestions_tool(query: str, limit: Optional[int] = None) -> list[TextContent]:
    """Tool handler for get_suggestions.

    Args:
        query: Partial text typed by the user
        limit: Maximum number of suggestions (defaults to config)

    Returns:
        List of TextContent with a JSON list of {text, field} suggestions
    """
    max_suggestions = _parse_limit(limit, get_config().search.suggestion_limit)
    if max_suggestions is None:
        return _text("Error: 'limit' must be a positive integer")

    suggestions = generate_suggestions(query, load_listings(), limit=max_suggestions)
    return _text(json.dumps([s.to_dict() for s in suggestions], indent=2))


def create_server() -> Server:
    """Create and configure the MCP server.

    Returns:
        Configured Server instance
    """
    server = Server("listing-search-mcp")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return [
            Tool(
                name="health_check",
                description="Report server status and the number of loaded listings.",
                inputSchema={"type": "object", "properties": {}},
            ),
            Tool(
                name="search_listings",
                description="Typo-tolerant search over property listings. Returns listings ranked by relevance with matched fields and a highlighted name.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Search phrase, e.g. 'sunset villa austin'"
                        },
                        "fuzzy_level": {
                            "type": "string",
                            "enum": [level.value for level in FuzzyLevel],
                            "description": "How forgiving matching is"
                        },
                        "limit": {
                            "type": "integer",
                            "minimum": 1,
                            "description": "Maximum number of results"
                        },
                        "filters": {
                            "type": "object",
                            "description": "Exact field values every result must have"
                        }
                    },
                    "required": ["query"]
                }
            ),
            Tool(
                name="get_suggestions",
                description="Autocomplete suggestions drawn from listing names, cities, localities and addresses.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Partial text typed by the user"
                        },
                        "limit": {
                            "type": "integer",
                            "minimum": 1,
                            "description": "Maximum number of suggestions"
                        }
                    },
                    "required": ["query"]
                }
            ),
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: Any) -> list[TextContent]:
        """Handle tool calls."""
        arguments = arguments or {}

        if name == "health_check":
            return await health_check_tool()

        if name in ("search_listings", "get_suggestions"):
            query = arguments.get("query", "")
            if not query or not isinstance(query, str):
                return _text("Error: 'query' parameter is required")
            if name == "search_listings":
                return await search_listings_tool(
                    query,
                    fuzzy_level=arguments.get("fuzzy_level"),
                    limit=arguments.get("limit"),
                    filters=arguments.get("filters"),
                )
            return await get_suggestions_tool(query, limit=arguments.get("limit"))

        raise ValueError(f"Unknown tool: {name}")

    return server


async def main():
    """Main entry point for the MCP server."""
    server = create_server()

    async with stdio_server() as (read_stream, write_stream):
        initialization_options = server.create_initialization_options()
        await server.run(read_stream, write_stream, initialization_options)
