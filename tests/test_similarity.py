"""
Vector ranking and text pre-filtering used by image matching.
"""

import pytest

from app.modules.matching.similarity import (
    cosine_similarity,
    parse_embedding,
    text_similarity,
    prefilter_by_text,
    rank_matches,
)


def candidate(badge_id, embedding, name="", description=""):
    return {"badge": {"id": badge_id, "name": name, "description": description}, "embedding": embedding}


class TestCosineSimilarity:

    def test_identical_vectors(self):
        assert cosine_similarity([0.3, 0.4, 0.5], [0.3, 0.4, 0.5]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_mismatched_lengths_score_zero(self):
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0]) == 0.0

    def test_empty_and_zero_vectors_score_zero(self):
        assert cosine_similarity([], []) == 0.0
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_scale_invariant(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [2.0, 4.0, 6.0]) == pytest.approx(1.0)


class TestParseEmbedding:

    def test_list_is_converted_to_floats(self):
        assert parse_embedding([1, 2, 3]) == [1.0, 2.0, 3.0]

    def test_pgvector_string(self):
        assert parse_embedding("[0.5, 0.25]") == [0.5, 0.25]

    def test_garbage_is_none(self):
        assert parse_embedding("not a vector") is None
        assert parse_embedding(None) is None
        assert parse_embedding({"a": 1}) is None


class TestTextSimilarity:

    def test_short_words_and_punctuation_are_ignored(self):
        # "a" and "of" are dropped, "defcon!" normalises to "defcon"
        assert text_similarity("a DEFCON! badge", "badge of defcon") == pytest.approx(1.0)

    def test_disjoint_texts(self):
        assert text_similarity("blinky skull", "mechanical keyboard") == 0.0

    def test_missing_text(self):
        assert text_similarity(None, "badge") == 0.0
        assert text_similarity("", "badge") == 0.0


class TestPrefilterByText:

    def test_narrows_when_few_candidates_match(self):
        candidates = [
            candidate("1", [1.0], name="Ghost skull badge"),
            candidate("2", [1.0], name="Pirate ship"),
            candidate("3", [1.0], name="Robot arm"),
            candidate("4", [1.0], name="Cat ears"),
            candidate("5", [1.0], name="Rainbow unicorn"),
        ]
        filtered = prefilter_by_text(candidates, "ghost skull")
        assert [c["badge"]["id"] for c in filtered] == ["1"]

    def test_keeps_everything_when_most_candidates_match(self):
        candidates = [
            candidate("1", [1.0], name="Skull badge one"),
            candidate("2", [1.0], name="Skull badge two"),
        ]
        assert prefilter_by_text(candidates, "skull badge") == candidates

    def test_keeps_everything_when_nothing_matches(self):
        candidates = [candidate("1", [1.0], name="Skull"), candidate("2", [1.0], name="Robot")]
        assert prefilter_by_text(candidates, "unicorn rainbow") == candidates

    def test_short_user_text_is_ignored(self):
        candidates = [candidate("1", [1.0], name="Skull")]
        assert prefilter_by_text(candidates, "ab") == candidates


class TestRankMatches:

    def test_threshold_and_ordering(self):
        query = [1.0, 0.0]
        candidates = [
            candidate("low", [0.0, 1.0]),
            candidate("best", [1.0, 0.0]),
            candidate("good", [0.95, 0.2]),
        ]
        matches = rank_matches(query, candidates)
        assert [m["badge"]["id"] for m in matches] == ["best", "good"]
        assert matches[0]["confidence"] == 100
        assert all(m["similarity"] >= 0.85 for m in matches)

    def test_never_more_than_top_n(self):
        query = [1.0, 0.0]
        candidates = [candidate(str(i), [1.0, 0.01 * i]) for i in range(10)]
        matches = rank_matches(query, candidates)
        assert len(matches) == 3
        similarities = [m["similarity"] for m in matches]
        assert similarities == sorted(similarities, reverse=True)

    def test_one_match_per_badge(self):
        query = [1.0, 0.0]
        candidates = [candidate("same", [1.0, 0.1]), candidate("same", [1.0, 0.0])]
        matches = rank_matches(query, candidates)
        assert len(matches) == 1
        assert matches[0]["similarity"] == pytest.approx(1.0)

    def test_custom_threshold(self):
        matches = rank_matches([1.0, 0.0], [candidate("x", [1.0, 1.0])], threshold=0.5)
        assert matches[0]["confidence"] == 71

    def test_score_exactly_at_default_threshold_is_kept(self, monkeypatch):
        from app.modules.matching import similarity

        scores = {"at": 0.85, "below": 0.8499}
        monkeypatch.setattr(similarity, "cosine_similarity", lambda query, embedding: scores[embedding[0]])
        matches = rank_matches([1.0], [candidate("at", ["at"]), candidate("below", ["below"])])
        assert similarity.DEFAULT_THRESHOLD == 0.85
        assert [m["badge"]["id"] for m in matches] == ["at"]
        assert matches[0]["confidence"] == 85
