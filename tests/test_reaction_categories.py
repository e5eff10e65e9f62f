import pytest

from app.modules.posts.reactions.services.categories import (
    ALIASES, CATEGORIES, breakdown, empty_breakdown, normalize_reaction
)


@pytest.mark.parametrize("token,category", sorted(ALIASES.items()))
def test_every_alias_normalizes_to_a_category(token, category):
    assert category in CATEGORIES
    assert normalize_reaction(token) == category


@pytest.mark.parametrize("category", CATEGORIES)
def test_categories_normalize_to_themselves(category):
    assert normalize_reaction(category) == category


def test_case_and_whitespace_are_ignored():
    assert normalize_reaction("  LIKE ") == "like"
    assert normalize_reaction("Heart") == "love"


@pytest.mark.parametrize("token", ["sparkles", "🦄", "likes-a-lot", "", None])
def test_unknown_or_empty_tokens_normalize_to_none(token):
    assert normalize_reaction(token) is None


def test_breakdown_is_zero_filled():
    assert empty_breakdown() == {category: 0 for category in CATEGORIES}
    assert breakdown([]) == empty_breakdown()


def test_breakdown_counts_categories_and_skips_unknown():
    counts = breakdown(["like", "👍", "love", "sparkles", "😂"])
    assert counts["like"] == 2
    assert counts["love"] == 1
    assert counts["haha"] == 1
    assert sum(counts.values()) == 4
