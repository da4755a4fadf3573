"""Relevance scoring, suggestions and highlighting for listing search."""
import re
from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from listing_search.patterns import FuzzyLevel, build_search_filter, matches_filter
from listing_search.similarity import similarity_score
from listing_search.tokens import tokenize


DEFAULT_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "name": 10,
    "address": 7,
    "city": 6,
    "locality": 5,
    "description": 3,
    "propertyType": 4,
    "category": 4,
    "areaName": 5,
})

# Roughly the best a single term can score on one field (name weight x exact)
MAX_TERM_SCORE = 30

SUGGESTION_FIELDS = ("name", "city", "locality", "address")


@dataclass(frozen=True)
class MatchRecord:
    """How one search term matched one field."""
    field: str
    type: str  # exact, prefix, contains or fuzzy
    score: Optional[float] = None


@dataclass
class ScoreResult:
    score: float = 0.0
    matched_fields: List[MatchRecord] = field(default_factory=list)
    normalized_score: float = 0.0


@dataclass(frozen=True)
class Suggestion:
    text: str
    field: str

    def to_dict(self) -> Dict[str, str]:
        return {"text": self.text, "field": self.field}


def _field_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


def score_document(
    doc: Mapping[str, Any],
    search_terms: Sequence[str],
    weights: Optional[Mapping[str, float]] = None,
) -> ScoreResult:
    """Score a listing against search terms.

    Each term is checked against every weighted field. Exact, prefix and
    substring matches earn 3x, 2x and 1x the field weight. Otherwise the
    whole value may earn a fuzzy score, and individual words of the value
    that are close to the term add half-weight on top. All contributions
    accumulate, so documents matching more terms and fields rank higher.

    Args:
        doc: Listing document
        search_terms: Tokens from the search phrase
        weights: Per-field weight overrides merged over DEFAULT_WEIGHTS

    Returns:
        ScoreResult with the raw score, the matches that produced it and
        the score scaled to [0, 1]
    """
    field_weights = {**DEFAULT_WEIGHTS, **(weights or {})}
    result = ScoreResult()

    for term in search_terms:
        term_lower = term.lower()

        for field_name, weight in field_weights.items():
            value = doc.get(field_name)
            if not value:
                continue

            value_lower = _field_text(value).lower()

            if value_lower == term_lower:
                result.score += weight * 3
                result.matched_fields.append(MatchRecord(field_name, "exact"))
            elif value_lower.startswith(term_lower):
                result.score += weight * 2
                result.matched_fields.append(MatchRecord(field_name, "prefix"))
            elif term_lower in value_lower:
                result.score += weight
                result.matched_fields.append(MatchRecord(field_name, "contains"))
            else:
                similarity = similarity_score(term_lower, value_lower)
                if similarity > 0.7:
                    result.score += weight * similarity
                    result.matched_fields.append(MatchRecord(field_name, "fuzzy", similarity))

                # Near-miss words count too, on top of the whole-value match
                for word in tokenize(value_lower):
                    word_similarity = similarity_score(term_lower, word)
                    if word_similarity > 0.8:
                        result.score += weight * 0.5 * word_similarity

    if search_terms:
        result.normalized_score = min(result.score / (len(search_terms) * MAX_TERM_SCORE), 1)

    return result


def generate_suggestions(
    search_term: Optional[str],
    documents: Sequence[Mapping[str, Any]],
    limit: int = 5,
    fields: Sequence[str] = SUGGESTION_FIELDS,
) -> List[Suggestion]:
    """Build autocomplete suggestions from listing field values.

    Prefix matches rank above substring matches, which rank above fuzzy
    matches. The same text coming from several listings or fields appears
    once, at its best priority. Ties keep the order values were first seen.

    Args:
        search_term: Partial text typed by the user
        documents: Listings to draw suggestions from
        limit: Maximum number of suggestions
        fields: Fields whose values may be suggested

    Returns:
        Suggestions, best first
    """
    if not search_term or not documents:
        return []

    term_lower = search_term.lower().strip()
    candidates: Dict[str, Dict[str, Any]] = {}

    for doc in documents:
        for field_name in fields:
            value = doc.get(field_name)
            if not value:
                continue

            text = _field_text(value).strip()
            value_lower = _field_text(value).lower()
            similarity = None

            if value_lower.startswith(term_lower):
                priority = 3
            elif term_lower in value_lower:
                priority = 2
            else:
                similarity = similarity_score(term_lower, value_lower)
                if similarity <= 0.6:
                    continue
                priority = 1

            existing = candidates.get(text)
            if existing is None or existing["priority"] < priority:
                candidates[text] = {
                    "text": text,
                    "field": field_name,
                    "priority": priority,
                    "similarity": similarity,
                }

    ranked = sorted(
        candidates.values(),
        key=lambda c: (c["priority"], c["similarity"] or 0),
        reverse=True,
    )
    return [Suggestion(c["text"], c["field"]) for c in ranked[:limit]]


def highlight_matches(text: Optional[str], search_terms: Sequence[str], tag: str = "mark") -> Optional[str]:
    """Wrap every case-insensitive occurrence of the search terms in a tag.

    Terms are applied one after another, so overlapping terms can nest
    tags.

    Args:
        text: Text to highlight
        search_terms: Terms to wrap
        tag: Markup tag name

    Returns:
        Highlighted text, or the input unchanged if there is nothing to do
    """
    if not text or not search_terms:
        return text

    result = text
    for term in search_terms:
        if not term:
            continue
        pattern = re.compile(re.escape(term), re.IGNORECASE)
        result = pattern.sub(lambda m: f"<{tag}>{m.group(0)}</{tag}>", result)

    return result


class SearchEngine(Protocol):
    """Protocol for search engines to allow extensibility."""

    def search(self, query: str, listings: List[Dict[str, Any]], limit: int = 10) -> List[Dict[str, Any]]:
        """Search listings based on query.

        Args:
            query: Search query string
            listings: List of listings to search
            limit: Maximum number of results to return

        Returns:
            List of matching listings, sorted by relevance
        """
        ...


class FuzzySearchEngine:
    """Typo-tolerant listing search.

    Candidates are narrowed with the same filter a document store would
    receive, then ranked in-process with score_document.
    """

    def __init__(
        self,
        fuzzy_level: Union[FuzzyLevel, str] = FuzzyLevel.MEDIUM,
        weights: Optional[Mapping[str, float]] = None,
    ):
        self.fuzzy_level = FuzzyLevel.parse(fuzzy_level)
        self.weights = dict(weights or {})

    def search(
        self,
        query: str,
        listings: List[Dict[str, Any]],
        limit: int = 10,
        fuzzy_level: Union[FuzzyLevel, str, None] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """Search listings with fuzzy matching.

        Args:
            query: Search query string
            listings: List of listings to search
            limit: Maximum number of results to return
            fuzzy_level: Overrides the engine's fuzziness for this call
            filters: Exact-value constraints every result must satisfy

        Returns:
            Matching listings (highest score first), each extended with
            score, normalizedScore, matchedFields and highlightedName
        """
        terms = tokenize(query)
        if not terms or not listings:
            return []

        level = self.fuzzy_level if fuzzy_level is None else FuzzyLevel.parse(fuzzy_level)
        search_filter = build_search_filter(query, level, additional_filters=filters)

        scored = []
        for listing in listings:
            if not matches_filter(listing, search_filter):
                continue
            result = score_document(listing, terms, self.weights)
            scored.append((result, listing))

        # Stable sort keeps input order among equal scores
        scored.sort(key=lambda item: item[0].score, reverse=True)

        results = []
        for result, listing in scored[:limit]:
            entry = dict(listing)
            entry["score"] = round(result.score, 4)
            entry["normalizedScore"] = round(result.normalized_score, 4)
            entry["matchedFields"] = [
                {k: v for k, v in asdict(match).items() if v is not None}
                for match in result.matched_fields
            ]
            name = listing.get("name")
            entry["highlightedName"] = highlight_matches(_field_text(name), terms) if name else None
            results.append(entry)

        return results
