"""Hybrid ranker - semantic + lexical scoring."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from ..exceptions import DependencyUnavailable
from ..models.document import ScoredHit, VectorMatch
from ..protocols.embedder import EmbedderProtocol
from ..protocols.vector_store import VectorStoreProtocol
from ..strategies.query import highlight_matches, optimize_query
from ..strategies.scoring import LexicalScorer, combine_scores

logger = logging.getLogger(__name__)


@dataclass
class RankOutcome:
    """Result of a ranking pass: hits, or the dependency error that stopped it."""
    hits: list[ScoredHit] = field(default_factory=list)
    error: Optional[DependencyUnavailable] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, error: DependencyUnavailable) -> "RankOutcome":
        return cls(hits=[], error=error)


class HybridRanker:
    """Blend vector similarity with keyword overlap."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        vector_store: VectorStoreProtocol,
        scorer: Optional[LexicalScorer] = None,
        overfetch_factor: int = 3,
        max_candidates: int = 300,
        optimize_queries: bool = True,
        query_prefix: str = "",
    ):
        """Initialize ranker.

        Args:
            embedder: Embedding service.
            vector_store: Vector store.
            scorer: Lexical scorer.
            overfetch_factor: Candidates fetched per requested hit.
            max_candidates: Upper bound on candidates fetched.
            optimize_queries: Rewrite queries before embedding and scoring.
            query_prefix: Prefix the embedding model expects on queries.
        """
        self._embedder = embedder
        self._vector_store = vector_store
        self._scorer = scorer or LexicalScorer()
        self._overfetch_factor = max(1, overfetch_factor)
        self._max_candidates = max_candidates
        self._optimize_queries = optimize_queries
        self._query_prefix = query_prefix

    def rank(
        self,
        query: str,
        filter: Optional[dict[str, Any]] = None,
        top_k: int = 10,
        keyword_weight: float = 0.3,
        semantic_weight: float = 0.7,
    ) -> RankOutcome:
        """Rank chunks for a query.

        Args:
            query: Search query.
            filter: Metadata constraints passed to the vector store.
            top_k: Number of hits to keep.
            keyword_weight: Weight of the lexical score.
            semantic_weight: Weight of the semantic score.

        Returns:
            Outcome with hits sorted by combined score (descending, ties in
            semantic order), or the dependency error that prevented ranking.
        """
        search_query = optimize_query(query) if self._optimize_queries else query
        fetch_k = min(top_k * self._overfetch_factor, self._max_candidates)
        fetch_k = max(fetch_k, top_k)

        try:
            query_embedding = self._embedder.encode(f"{self._query_prefix}{search_query}")
            matches = self._vector_store.query(
                query_embedding=np.asarray(query_embedding, dtype=float).tolist(),
                n_results=fetch_k,
                where=filter or None,
            )
        except DependencyUnavailable as e:
            logger.warning(f"Hybrid ranking unavailable: {e}")
            return RankOutcome.failed(e)
        except Exception as e:
            logger.warning(f"Hybrid ranking failed: {type(e).__name__}: {e}")
            error = DependencyUnavailable(
                "ranker", str(e) or type(e).__name__, {"type": type(e).__name__}
            )
            return RankOutcome.failed(error)

        if not matches:
            logger.info(f"No candidates for '{search_query[:50]}'")
            return RankOutcome(hits=[])

        hits = []
        seen = set()
        for match in matches:
            if match.chunk_id in seen:
                continue
            seen.add(match.chunk_id)
            hits.append(
                self._score(search_query, match, keyword_weight, semantic_weight)
            )

        hits.sort(key=lambda h: h.score, reverse=True)
        hits = hits[:top_k]

        logger.debug(
            f"Ranked {len(matches)} candidates for '{search_query[:50]}', "
            f"top={hits[0].score:.2f}"
        )
        return RankOutcome(hits=hits)

    def _score(
        self,
        query: str,
        match: VectorMatch,
        keyword_weight: float,
        semantic_weight: float,
    ) -> ScoredHit:
        lexical = self._scorer.score(query, match.text)
        combined = combine_scores(match.score, lexical, semantic_weight, keyword_weight)

        ordinal = match.metadata.get("ordinal")
        return ScoredHit(
            chunk_id=match.chunk_id,
            text=match.text,
            score=combined,
            metadata=dict(match.metadata),
            document_id=match.metadata.get("document_id"),
            ordinal=int(ordinal) if ordinal is not None else None,
            semantic_score=match.score,
            lexical_score=lexical,
            highlighted_content=highlight_matches(match.text, query),
            relevance_explanation=(
                f"Semantic: {match.score:.2f}, Keyword: {lexical:.2f}, "
                f"Combined: {combined:.2f}"
            ),
        )
