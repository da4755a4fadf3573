"""Listings file reader module."""
import json
from pathlib import Path
from typing import Any, Dict, List


def load_listings_file(listings_path: Path) -> Any:
    """Load a listings JSON file.

    Args:
        listings_path: Path to the listings file

    Returns:
        Parsed JSON data

    Raises:
        FileNotFoundError: If the listings file doesn't exist
        json.JSONDecodeError: If the listings file is malformed
    """
    if not listings_path.exists():
        raise FileNotFoundError(f"Listings file not found at {listings_path}")

    with open(listings_path, "r", encoding="utf-8") as f:
        return json.load(f)


def read_listings(listings_path: Path) -> List[Dict[str, Any]]:
    """Read all listings from a JSON file.

    The file holds either a list of listing objects or an object with a
    ``listings`` list, as exported by the listings API.

    Args:
        listings_path: Path to the listings file

    Returns:
        List of listing documents

    Raises:
        FileNotFoundError: If the listings file doesn't exist
        json.JSONDecodeError: If the listings file is malformed
        ValueError: If the file holds neither shape
    """
    data = load_listings_file(listings_path)

    if isinstance(data, dict):
        data = data.get("listings")

    if not isinstance(data, list):
        raise ValueError(f"Expected a list of listings in {listings_path}")

    # Skip anything that isn't a listing object
    return [listing for listing in data if isinstance(listing, dict)]
