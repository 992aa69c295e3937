"""Keyword relevance search over the profile document.

Selects the parts of the profile that textually relate to a free-text query
so they can be injected into a chat prompt. This is a linear containment
scan, not a ranking: a unit matches when any query term occurs anywhere in
its serialized text, case-insensitively. Matching list entries keep their
original order.

Searched units: the biography as a whole, and each skill, project and
experience entry. Preferences are always included. Education and social
links are never returned.
"""

import copy
import json
from typing import Any

# List sections searched entry by entry, in result order
SEARCHED_LIST_SECTIONS = ("skills", "projects", "experience")

# Never surfaced to the model
EXCLUDED_SECTIONS = ("education", "socialLinks")


def tokenize(query: str | None) -> list[str]:
    """
    Split a query into lowercase whitespace-separated terms.

    Terms without a single letter or digit (e.g. "?", "--") are dropped, so a
    query made only of punctuation and whitespace yields no terms.
    """
    if not query:
        return []
    return [term for term in query.lower().split() if any(ch.isalnum() for ch in term)]


def flatten(unit: Any) -> str:
    """Serialize a profile unit to the lowercase text that terms are matched against."""
    return json.dumps(unit, ensure_ascii=False, separators=(",", ":"), default=str).lower()


def matches(unit: Any, terms: list[str]) -> bool:
    if not terms:
        return False
    text = flatten(unit)
    return any(term in text for term in terms)


def search(query: str | None, profile: dict[str, Any] | None) -> dict[str, Any]:
    """
    Return the subset of the profile relevant to ``query``.

    Args:
        query: Free-text question or keywords
        profile: Full profile document (wire spelling)

    Returns:
        Partial profile containing only matching sections and entries.
        Sections with no matches are absent, never empty lists. The input
        document is not modified.
    """
    if not profile:
        return {}

    terms = tokenize(query)
    result: dict[str, Any] = {}

    biography = profile.get("biography")
    if biography and matches(biography, terms):
        result["biography"] = biography

    for section in SEARCHED_LIST_SECTIONS:
        entries = profile.get(section)
        if not isinstance(entries, list):
            continue
        relevant = [entry for entry in entries if matches(entry, terms)]
        if relevant:
            result[section] = relevant

    # Always include preferences for baseline context
    if profile.get("preferences") is not None:
        result["preferences"] = profile["preferences"]

    return copy.deepcopy(result)
