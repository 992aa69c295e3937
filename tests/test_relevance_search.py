"""Tests for keyword relevance search."""

import copy

import pytest

from profile_assistant.core.relevance_search import flatten, search, tokenize
from tests.fixtures_profile import sample_profile

QUERIES = [
    "What React experience?",
    "hiking",
    "tell me about PYTHON projects",
    "acme",
    "lisbon engineer",
    "nothing-matches-this",
    "computer science degree",
    "github",
    "",
]


class TestTokenize:
    """Query tokenization."""

    def test_lowercases_and_splits_on_whitespace(self):
        assert tokenize("What  React\texperience?") == ["what", "react", "experience?"]

    def test_empty_and_blank_queries_have_no_terms(self):
        assert tokenize("") == []
        assert tokenize("   ") == []
        assert tokenize(None) == []

    def test_punctuation_only_terms_are_dropped(self):
        assert tokenize("? !! -- ...") == []


class TestSearch:
    """Search results."""

    def test_react_query_returns_only_react_skill(self):
        profile = sample_profile()
        result = search("What React experience?", profile)

        assert result["skills"] == [profile["skills"][0]]
        assert result["preferences"] == profile["preferences"]
        assert "projects" not in result
        assert "experience" not in result
        assert "biography" not in result

    def test_matching_is_case_insensitive_substring(self):
        result = search("POSTGRES", sample_profile())
        assert [s["name"] for s in result["skills"]] == ["PostgreSQL"]

    def test_any_term_is_enough(self):
        result = search("kotlin payments", sample_profile())
        assert [p["name"] for p in result["projects"]] == ["Trail Mapper"]
        assert [e["company"] for e in result["experience"]] == ["Acme Corp"]

    def test_biography_is_matched_as_a_whole(self):
        result = search("lisbon", sample_profile())
        assert result["biography"]["name"] == "Jane Doe"

    def test_matching_entries_keep_original_order(self):
        profile = sample_profile()
        result = search("mentoring react", profile)
        assert [s["name"] for s in result["skills"]] == ["React", "Mentoring"]

    def test_empty_query_returns_only_preferences(self):
        profile = sample_profile()
        assert search("", profile) == {"preferences": profile["preferences"]}

    def test_punctuation_only_query_returns_only_preferences(self):
        profile = sample_profile()
        assert search(" ?! ", profile) == {"preferences": profile["preferences"]}

    def test_no_preferences_and_no_match_is_empty(self):
        profile = sample_profile()
        del profile["preferences"]
        assert search("zzz", profile) == {}

    def test_sections_without_matches_are_absent(self):
        result = search("hiking", sample_profile())
        assert "skills" not in result
        assert result["projects"][0]["name"] == "Trail Mapper"

    def test_education_and_social_links_are_never_searched(self):
        result = search("porto github computer science", sample_profile())
        assert "education" not in result
        assert "socialLinks" not in result

    def test_does_not_mutate_profile(self):
        profile = sample_profile()
        before = copy.deepcopy(profile)

        result = search("react hiking acme", profile)
        result["skills"][0]["name"] = "changed"

        assert profile == before

    def test_empty_profile(self):
        assert search("react", {}) == {}
        assert search("react", None) == {}


class TestSearchLaws:
    """Properties that hold for every query."""

    @pytest.mark.parametrize("query", QUERIES)
    def test_every_returned_entry_contains_a_query_token(self, query):
        profile = sample_profile()
        terms = [t.lower() for t in query.split()]
        result = search(query, profile)

        for section, value in result.items():
            if section == "preferences":
                continue
            entries = value if isinstance(value, list) else [value]
            for entry in entries:
                assert any(term in flatten(entry) for term in terms)

    @pytest.mark.parametrize("query", QUERIES)
    def test_never_returns_education_or_social_links(self, query):
        result = search(query, sample_profile())
        assert "education" not in result
        assert "socialLinks" not in result

    @pytest.mark.parametrize("query", QUERIES)
    def test_preferences_always_included(self, query):
        profile = sample_profile()
        assert search(query, profile)["preferences"] == profile["preferences"]
