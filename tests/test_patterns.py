"""Tests for patterns module."""
import re

import pytest

from listing_search.patterns import (
    MATCH_ANY_OF,
    SEARCH_FIELDS,
    VARIATION_FIELDS,
    FuzzyLevel,
    build_fuzzy_pattern,
    build_search_filter,
    matches_filter,
)


class TestFuzzyLevel:
    def test_parse_names(self):
        assert FuzzyLevel.parse("strict") is FuzzyLevel.STRICT
        assert FuzzyLevel.parse("LOOSE") is FuzzyLevel.LOOSE
        assert FuzzyLevel.parse(FuzzyLevel.MEDIUM) is FuzzyLevel.MEDIUM

    def test_unknown_falls_back_to_medium(self):
        assert FuzzyLevel.parse("bogus") is FuzzyLevel.MEDIUM
        assert FuzzyLevel.parse(None) is FuzzyLevel.MEDIUM


class TestBuildFuzzyPattern:
    def test_empty_term_returns_none(self):
        assert build_fuzzy_pattern("") is None
        assert build_fuzzy_pattern(None) is None

    def test_always_case_insensitive(self):
        for level in FuzzyLevel:
            assert build_fuzzy_pattern("flat", level).flags & re.IGNORECASE

    def test_strict_matches_case_insensitively(self):
        pattern = build_fuzzy_pattern("flat", "strict", word_boundary=True)
        assert pattern.search("Flat")
        assert pattern.search("A flat in town")

    def test_strict_word_boundary_rejects_longer_word(self):
        pattern = build_fuzzy_pattern("flat", "strict", word_boundary=True)
        assert not pattern.search("flats")

    def test_strict_without_boundary_matches_substring(self):
        assert build_fuzzy_pattern("flat", "strict").search("flats")

    def test_strict_escapes_metacharacters(self):
        pattern = build_fuzzy_pattern("a.b", "strict")
        assert pattern.search("a.b")
        assert not pattern.search("axb")

    def test_medium_tolerates_inserted_characters(self):
        pattern = build_fuzzy_pattern("flat")
        assert pattern.search("fl-at")
        assert pattern.search("FLAAT")
        assert not pattern.search("flt")

    def test_medium_allows_noise_between_words(self):
        pattern = build_fuzzy_pattern("sunset villa", "medium")
        assert pattern.search("Sunset Hills Villa")

    def test_loose_requires_characters_in_order(self):
        pattern = build_fuzzy_pattern("svl", "loose")
        assert pattern.search("Sunset Villa")
        assert not pattern.search("Villa Sunset")
        assert not build_fuzzy_pattern("svl", "strict").search("Sunset Villa")

    def test_loose_escapes_each_character(self):
        pattern = build_fuzzy_pattern("a.b", "loose")
        assert pattern.search("a - . - b")
        assert not pattern.search("axb")

    def test_unknown_level_behaves_like_medium(self):
        assert build_fuzzy_pattern("flat", "bogus").pattern == build_fuzzy_pattern("flat", "medium").pattern


class TestBuildSearchFilter:
    def test_empty_term_returns_filters_unchanged(self):
        filters = {"x": 1}
        result = build_search_filter("", additional_filters=filters)
        assert result == {"x": 1}
        assert result is filters

    def test_blank_term_returns_filters_unchanged(self):
        assert build_search_filter("   ", additional_filters={"x": 1}) == {"x": 1}
        assert build_search_filter(None) == {}

    def test_no_tokens_returns_filters_unchanged(self):
        assert build_search_filter("a !", additional_filters={"x": 1}) == {"x": 1}

    def test_single_token_clauses(self):
        query = build_search_filter("flat")
        clauses = query[MATCH_ANY_OF]
        # 6 primary clauses plus 3 variations x 3 fields
        assert len(clauses) == 15
        assert [next(iter(c)) for c in clauses[:6]] == SEARCH_FIELDS
        assert [next(iter(c)) for c in clauses[6:9]] == VARIATION_FIELDS

    def test_variation_clauses_are_literal(self):
        clauses = build_search_filter("flat")[MATCH_ANY_OF]
        variation_patterns = [c["name"].pattern for c in clauses[6:] if "name" in c]
        assert variation_patterns == ["phlat", "flet", "flot"]

    def test_token_without_variations(self):
        assert len(build_search_filter("ny")[MATCH_ANY_OF]) == 6

    def test_multiple_tokens(self):
        assert len(build_search_filter("sunset austin")[MATCH_ANY_OF]) == 30

    def test_preserves_additional_filters(self):
        filters = {"city": "Austin"}
        query = build_search_filter("villa", additional_filters=filters)
        assert query["city"] == "Austin"
        assert MATCH_ANY_OF in query
        assert MATCH_ANY_OF not in filters

    def test_custom_any_of_key(self):
        query = build_search_filter("villa", any_of_key="$or")
        assert "$or" in query
        assert MATCH_ANY_OF not in query

    def test_fuzzy_level_applies_to_primary_patterns(self):
        strict = build_search_filter("villa", fuzzy_level="strict")[MATCH_ANY_OF]
        assert strict[0]["name"].pattern == "villa"


class TestMatchesFilter:
    def test_matches_search_term(self, sample_listings):
        query = build_search_filter("sunset")
        matched = [l["id"] for l in sample_listings if matches_filter(l, query)]
        assert matched == ["1", "2"]

    def test_typo_matches_via_fuzzy_pattern(self, sample_listings):
        query = build_search_filter("sunet")
        matched = [l["id"] for l in sample_listings if matches_filter(l, query)]
        assert matched == ["1", "2"]

    def test_typo_matches_via_variation(self):
        query = build_search_filter("dellas")
        assert matches_filter({"city": "Dallas"}, query)
        assert not matches_filter({"city": "Houston"}, query)

    def test_additional_filters_are_conjunctive(self, sample_listings):
        query = build_search_filter("sunset", additional_filters={"city": "Dallas"})
        matched = [l["id"] for l in sample_listings if matches_filter(l, query)]
        assert matched == ["2"]

    def test_empty_disjunction_matches_nothing(self):
        assert not matches_filter({"name": "Villa"}, {MATCH_ANY_OF: []})

    def test_empty_filter_matches_everything(self):
        assert matches_filter({"name": "Villa"}, {})

    def test_list_fields(self):
        doc = {"tags": ["pool", "garden"]}
        assert matches_filter(doc, {"tags": "pool"})
        assert not matches_filter(doc, {"tags": "garage"})
        assert matches_filter(doc, {"tags": re.compile("gard", re.IGNORECASE)})

    def test_missing_field_does_not_match_pattern(self):
        assert not matches_filter({}, {"name": re.compile("villa")})

    @pytest.mark.parametrize("key", ["$or", MATCH_ANY_OF])
    def test_any_of_key(self, key):
        query = build_search_filter("villa", any_of_key=key)
        assert matches_filter({"name": "Sunset Villa"}, query, any_of_key=key)
