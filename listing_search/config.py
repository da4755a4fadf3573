"""Configuration for the listing search MCP server."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from listing_search.patterns import FuzzyLevel


def parse_weights(spec: str) -> Dict[str, float]:
    """Parse field weight overrides such as ``"name=12,city=8"``.

    Args:
        spec: Comma separated field=weight pairs

    Returns:
        Mapping of field name to weight

    Raises:
        ValueError: If a pair is malformed or a weight is not a positive number
    """
    weights: Dict[str, float] = {}
    for pair in spec.split(","):
        pair = pair.strip()
        if not pair:
            continue
        name, sep, raw_weight = pair.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid weight override: {pair!r}")
        weight = float(raw_weight)
        if weight <= 0:
            raise ValueError(f"Weight for {name.strip()!r} must be positive")
        weights[name.strip()] = weight
    return weights


@dataclass
class SearchConfig:
    """Defaults applied by the server when calling the search engine."""
    fuzzy_level: FuzzyLevel = FuzzyLevel.MEDIUM
    result_limit: int = 10
    suggestion_limit: int = 5
    weights: Dict[str, float] = field(default_factory=dict)  # Overrides merged over DEFAULT_WEIGHTS

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """Create config from environment variables."""
        return cls(
            fuzzy_level=FuzzyLevel.parse(os.environ.get("LISTINGS_FUZZY_LEVEL", "medium")),
            result_limit=int(os.environ.get("LISTINGS_RESULT_LIMIT", "10")),
            suggestion_limit=int(os.environ.get("LISTINGS_SUGGESTION_LIMIT", "5")),
            weights=parse_weights(os.environ.get("LISTINGS_WEIGHTS", "")),
        )


@dataclass
class Config:
    """Main configuration for the listing search MCP server."""
    search: SearchConfig = field(default_factory=SearchConfig.from_env)
    listings_path: Path = field(default_factory=lambda: Path("listings.json"))

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        return cls(
            search=SearchConfig.from_env(),
            listings_path=Path(os.environ.get("LISTINGS_FILE", "listings.json")),
        )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global config instance.

    Returns:
        Config loaded from environment
    """
    global _config

    if _config is None:
        _config = Config.from_env()

    return _config
