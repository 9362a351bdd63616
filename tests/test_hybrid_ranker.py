"""Tests for HybridRanker."""

from unittest.mock import MagicMock

import pytest

from conftest import DOCUMENT_ID, FailingEmbedder, FakeVectorStore, HashingEmbedder, make_chunk
from docsearch.core.exceptions import DependencyUnavailable
from docsearch.core.services.hybrid_ranker import HybridRanker
from docsearch.core.strategies.scoring import LexicalScorer


def make_ranker(store, embedder=None, **kwargs) -> HybridRanker:
    return HybridRanker(embedder=embedder or HashingEmbedder(), vector_store=store, **kwargs)


class TestRank:

    def test_scenario_scores(self, france_chunks):
        ranker = make_ranker(FakeVectorStore(france_chunks))

        outcome = ranker.rank("capital of France", filter={"document_id": DOCUMENT_ID})

        assert outcome.ok
        top = outcome.hits[0]
        assert top.chunk_id == f"{DOCUMENT_ID}_0"
        assert top.semantic_score == 0.95
        assert top.lexical_score == LexicalScorer().score("capital france", top.text)
        assert top.score == pytest.approx(0.7 * 0.95 + 0.3 * top.lexical_score)
        assert top.document_id == DOCUMENT_ID
        assert top.ordinal == 0
        assert "<mark>capital</mark>" in top.highlighted_content
        assert top.relevance_explanation.startswith("Semantic: 0.95")

    def test_sorted_descending_without_duplicates(self):
        chunk_a = make_chunk(0, "alpha beta")
        chunk_b = make_chunk(1, "gamma")
        chunk_c = make_chunk(2, "beta gamma delta")
        store = FakeVectorStore([(chunk_a, 0.5), (chunk_b, 0.6), (chunk_c, 0.4), (chunk_a, 0.5)])

        outcome = make_ranker(store).rank("beta delta", top_k=10)

        scores = [h.score for h in outcome.hits]
        ids = [h.chunk_id for h in outcome.hits]
        assert scores == sorted(scores, reverse=True)
        assert len(ids) == len(set(ids)) == 3

    def test_lexical_score_can_reorder_semantic_results(self):
        store = FakeVectorStore([
            (make_chunk(0, "unrelated text"), 0.6),
            (make_chunk(1, "quarterly revenue report"), 0.5),
        ])

        outcome = make_ranker(store).rank("quarterly revenue", keyword_weight=0.5, semantic_weight=0.5)

        assert [h.ordinal for h in outcome.hits] == [1, 0]

    def test_ties_keep_semantic_order(self):
        store = FakeVectorStore([
            (make_chunk(0, "first"), 0.8),
            (make_chunk(1, "second"), 0.8),
            (make_chunk(2, "third"), 0.8),
        ])

        outcome = make_ranker(store).rank("nothing matches", top_k=3)

        assert [h.ordinal for h in outcome.hits] == [0, 1, 2]

    def test_overfetches_and_truncates(self, ranked_chunks):
        store = FakeVectorStore(ranked_chunks)

        outcome = make_ranker(store, overfetch_factor=3).rank("zzz", top_k=2)

        assert store.queries[-1]["n_results"] == 6
        assert len(outcome.hits) == 2

    def test_candidate_cap(self, ranked_chunks):
        store = FakeVectorStore(ranked_chunks)

        make_ranker(store, overfetch_factor=3, max_candidates=4).rank("zzz", top_k=2)

        assert store.queries[-1]["n_results"] == 4

    def test_passes_filter_and_prefix(self, france_chunks):
        store = FakeVectorStore(france_chunks)
        embedder = HashingEmbedder()

        make_ranker(store, embedder=embedder, query_prefix="query: ").rank(
            "capital of France", filter={"document_id": DOCUMENT_ID}
        )

        assert store.queries[-1]["where"] == {"document_id": DOCUMENT_ID}
        assert embedder.calls == ["query: capital france"]

    def test_no_optimization(self, france_chunks):
        embedder = HashingEmbedder()

        make_ranker(FakeVectorStore(france_chunks), embedder=embedder, optimize_queries=False).rank(
            "capital of France"
        )

        assert embedder.calls == ["capital of France"]

    def test_empty_index_is_not_an_error(self):
        outcome = make_ranker(FakeVectorStore([])).rank("anything")

        assert outcome.ok
        assert outcome.hits == []

    def test_embedder_failure_returns_failed_outcome(self, france_chunks):
        outcome = make_ranker(FakeVectorStore(france_chunks), embedder=FailingEmbedder()).rank("x")

        assert not outcome.ok
        assert isinstance(outcome.error, DependencyUnavailable)
        assert outcome.hits == []

    def test_vector_store_failure_returns_failed_outcome(self, france_chunks):
        store = FakeVectorStore(france_chunks)

        def broken_query(*args, **kwargs):
            raise DependencyUnavailable("chroma", "timeout")

        store.query = broken_query

        outcome = make_ranker(store).rank("capital")

        assert not outcome.ok
        assert outcome.error.service == "chroma"

    @pytest.mark.parametrize("error", [TimeoutError("embedding call timed out"), ValueError("bad input")])
    def test_unexpected_embedder_error_returns_failed_outcome(self, france_chunks, error):
        embedder = MagicMock()
        embedder.encode.side_effect = error

        outcome = make_ranker(FakeVectorStore(france_chunks), embedder=embedder).rank("capital")

        assert not outcome.ok
        assert outcome.error.service == "ranker"
        assert outcome.error.details == {"type": type(error).__name__}
