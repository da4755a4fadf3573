"""Fuzzy pattern and store-agnostic filter construction.

The filter returned by ``build_search_filter`` is a plain value: a mapping of
field constraints plus a list of ``{field: pattern}`` clauses stored under an
"any of" key. It is meant to be handed to a document store; passing
``any_of_key="$or"`` gives a filter MongoDB accepts as-is. ``matches_filter``
evaluates the same shape against an in-memory document.
"""
import re
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from listing_search.tokens import generate_search_variations, tokenize


MATCH_ANY_OF = "matchAnyOf"

# Fields searched with the primary fuzzy pattern of every token
SEARCH_FIELDS = ["name", "address", "city", "locality", "description", "areaName"]

# Typo variations are lower confidence, so only the highest-signal fields
VARIATION_FIELDS = ["name", "city", "locality"]

# Variations used per token, skipping the normalized term at index 0
MAX_VARIATIONS = 3


class FuzzyLevel(str, Enum):
    """How much character-level slack a pattern tolerates."""

    STRICT = "strict"
    MEDIUM = "medium"
    LOOSE = "loose"

    @classmethod
    def parse(cls, value: Union["FuzzyLevel", str, None]) -> "FuzzyLevel":
        """Coerce a level name, falling back to medium for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MEDIUM


def _escape_chars(text: str) -> List[str]:
    # Escape per character so a join never splits an escape sequence
    return [re.escape(char) for char in text]


def build_fuzzy_pattern(
    term: Optional[str],
    fuzzy_level: Union[FuzzyLevel, str] = FuzzyLevel.MEDIUM,
    word_boundary: bool = False,
) -> Optional[re.Pattern]:
    """Build a case-insensitive pattern for a search term.

    Args:
        term: Search term
        fuzzy_level: strict (literal), medium (tolerates single dropped or
            inserted characters) or loose (characters in order, anything
            in between)
        word_boundary: Anchor a strict pattern on word boundaries

    Returns:
        Compiled pattern, or None for an empty term
    """
    if not term:
        return None

    level = FuzzyLevel.parse(fuzzy_level)

    if level is FuzzyLevel.STRICT:
        pattern = "".join(_escape_chars(term))
        if word_boundary:
            pattern = rf"\b{pattern}\b"
    elif level is FuzzyLevel.LOOSE:
        pattern = ".*?".join(_escape_chars(term))
    else:
        pattern = ".*".join(".?".join(_escape_chars(word)) for word in term.split())

    return re.compile(pattern, re.IGNORECASE)


def build_search_filter(
    search_term: Optional[str],
    fuzzy_level: Union[FuzzyLevel, str] = FuzzyLevel.MEDIUM,
    additional_filters: Optional[Dict[str, Any]] = None,
    any_of_key: str = MATCH_ANY_OF,
) -> Dict[str, Any]:
    """Build a filter matching listings for a free-text search phrase.

    Args:
        search_term: Raw search phrase
        fuzzy_level: Fuzziness of the primary per-token patterns
        additional_filters: Caller constraints the search is combined with
        any_of_key: Key holding the disjunction of search clauses

    Returns:
        additional_filters unchanged when there is nothing to search for,
        otherwise a copy of it with the search clauses under any_of_key
    """
    if additional_filters is None:
        additional_filters = {}

    if not search_term or not search_term.strip():
        return additional_filters

    terms = tokenize(search_term)
    if not terms:
        return additional_filters

    query = dict(additional_filters)
    conditions: List[Dict[str, re.Pattern]] = []

    for term in terms:
        fuzzy_pattern = build_fuzzy_pattern(term, fuzzy_level)
        conditions.extend({field: fuzzy_pattern} for field in SEARCH_FIELDS)

        for variation in generate_search_variations(term)[1:MAX_VARIATIONS + 1]:
            variation_pattern = build_fuzzy_pattern(variation, FuzzyLevel.STRICT)
            conditions.extend({field: variation_pattern} for field in VARIATION_FIELDS)

    query[any_of_key] = conditions
    return query


def _field_values(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _matches_condition(value: Any, expected: Any) -> bool:
    if isinstance(expected, re.Pattern):
        return any(
            item is not None and expected.search(str(item)) is not None
            for item in _field_values(value)
        )
    if isinstance(value, (list, tuple, set)) and not isinstance(expected, (list, tuple, set)):
        return expected in value
    return value == expected


def matches_filter(
    doc: Mapping[str, Any],
    query: Mapping[str, Any],
    any_of_key: str = MATCH_ANY_OF,
) -> bool:
    """Evaluate a search filter against a single in-memory document.

    Every top-level constraint must hold. The clauses under any_of_key are
    alternatives, at least one of which must match.

    Args:
        doc: Listing document
        query: Filter as produced by build_search_filter
        any_of_key: Key holding the disjunction of clauses

    Returns:
        True if the document satisfies the filter
    """
    for key, expected in query.items():
        if key == any_of_key:
            if not any(matches_filter(doc, clause, any_of_key) for clause in expected):
                return False
        elif not _matches_condition(doc.get(key), expected):
            return False

    return True
