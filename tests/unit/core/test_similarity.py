"""Unit tests for edit distance and similarity ranking."""

import pytest

from pgassist.core.similarity import edit_distance, rank_candidates, rank_similar


class TestEditDistance:
    """Levenshtein distance properties."""

    @pytest.mark.parametrize("value", ["", "a", "users", "Customer_Orders"])
    def test_identity_is_zero(self, value):
        assert edit_distance(value, value) == 0

    @pytest.mark.parametrize(
        "a,b",
        [("kitten", "sitting"), ("users", "usres"), ("", "abc"), ("flaw", "lawn")],
    )
    def test_symmetry(self, a, b):
        assert edit_distance(a, b) == edit_distance(b, a)

    def test_distance_from_empty_string(self):
        assert edit_distance("", "abc") == 3
        assert edit_distance("abc", "") == 3

    def test_classic_examples(self):
        assert edit_distance("kitten", "sitting") == 3
        assert edit_distance("flaw", "lawn") == 2
        assert edit_distance("naem", "name") == 2

    def test_case_insensitive(self):
        assert edit_distance("USERS", "users") == 0
        assert edit_distance("Name", "naME") == 0


class TestRankSimilar:
    """Candidate ranking."""

    def test_transposition_typo(self):
        assert rank_similar("usres", ["users", "orders", "user_roles"], 3, 5) == ["users"]

    def test_exact_match_is_not_a_suggestion(self):
        assert rank_similar("users", ["users", "user"]) == ["user"]
        assert rank_similar("USERS", ["users"]) == []

    def test_returns_original_casing(self):
        assert rank_similar("usrname", ["UserName", "email"]) == ["UserName"]

    def test_sorted_by_distance_with_stable_ties(self):
        candidates = ["cart", "card", "cat", "care"]
        # cat: 1, cart/card/care: 1 each -> input order kept among ties
        assert rank_similar("car", candidates) == ["cart", "card", "cat", "care"]

        ranked = rank_candidates("name", ["names_list", "nme", "game"])
        assert [candidate.name for candidate in ranked] == ["nme", "game"]
        assert [candidate.distance for candidate in ranked] == [1, 1]

    def test_respects_max_distance_and_limit(self):
        candidates = ["ab", "abc", "abcd", "abcde", "abcdef"]
        assert rank_similar("a", candidates, max_distance=2) == ["ab", "abc"]
        assert rank_similar("a", candidates, max_distance=5, limit=3) == ["ab", "abc", "abcd"]

    def test_no_candidates(self):
        assert rank_similar("anything", []) == []
