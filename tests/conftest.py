"""Shared fixtures for tests."""
import json
import pytest


SAMPLE_LISTINGS = [
    {
        "id": "1",
        "name": "Sunset Villa",
        "address": "12 Ocean Drive",
        "city": "Austin",
        "locality": "Greenwood Park",
        "description": "Spacious villa with a pool",
        "propertyType": "Villa",
        "category": "Sale",
    },
    {
        "id": "2",
        "name": "Sunset Apartments",
        "address": "48 Elm Street",
        "city": "Dallas",
        "locality": "Greenwood Park",
        "description": "Modern 2-BR flat near downtown",
        "propertyType": "Apartment",
        "category": "Rent",
    },
    {
        "id": "3",
        "name": "Lakeside Cottage",
        "address": "7 Shore Road",
        "city": "Houston",
        "locality": "Clear Lake",
        "description": "Quiet cottage by the lake",
        "propertyType": "Cottage",
        "category": "Sale",
    },
]


@pytest.fixture
def sample_listings():
    """Return sample listings as read_listings returns them."""
    return [dict(listing) for listing in SAMPLE_LISTINGS]


@pytest.fixture
def sample_listings_path(tmp_path):
    """Create a temporary listings file with sample data."""
    listings_file = tmp_path / "listings.json"
    listings_file.write_text(json.dumps(SAMPLE_LISTINGS, indent=2))
    return listings_file
