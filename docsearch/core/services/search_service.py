"""Search service - hybrid document search orchestration."""

import logging
from typing import Optional

from ..models.document import ScoredHit, SearchMode, SearchResult
from ..models.options import SearchOptions
from ..protocols.reranker import RerankerProtocol
from ..protocols.vector_store import VectorStoreProtocol
from ..strategies.query import highlight_matches
from .context_enhancer import ContextEnhancer
from .hybrid_ranker import HybridRanker

logger = logging.getLogger(__name__)


class SearchService:
    """Search service with thresholding, pagination, reranking and context."""

    def __init__(
        self,
        ranker: HybridRanker,
        vector_store: VectorStoreProtocol,
        reranker: RerankerProtocol,
        enhancer: Optional[ContextEnhancer] = None,
    ):
        """Initialize search service.

        Args:
            ranker: Hybrid ranker.
            vector_store: Vector store, probed for availability and used for
                neighbour lookups.
            reranker: Reranking strategy applied to the returned window.
            enhancer: Context enhancer.
        """
        self._ranker = ranker
        self._vector_store = vector_store
        self._reranker = reranker
        self._enhancer = enhancer or ContextEnhancer()

    def search(self, query: str, options: Optional[SearchOptions] = None) -> SearchResult:
        """Search a document.

        Args:
            query: Search query.
            options: Search options; defaults apply when omitted.

        Returns:
            Ranked results. ``mode`` is ``MOCK`` when the vector backend could
            not answer and synthetic results were returned instead.

        Raises:
            ValidationError: If the query or options are invalid.
        """
        options = options or SearchOptions()
        query = options.validate(query)

        if not self._probe():
            return self._degraded(query, options)

        outcome = self._ranker.rank(
            query,
            filter=options.filter,
            top_k=options.offset + options.limit,
            keyword_weight=options.keyword_weight,
            semantic_weight=options.semantic_weight,
        )
        if not outcome.ok:
            logger.error(f"Vector search failed, using mock results: {outcome.error}")
            return self._degraded(query, options)

        hits = [h for h in outcome.hits if h.score >= options.min_score]
        total = len(hits)
        window = hits[options.offset : options.offset + options.limit]

        if options.rerank and window:
            window = self._rerank(query, window)

        if options.enhance_context and window:
            window = self._enhancer.enhance_all(window, self._vector_store.get_chunk)

        logger.info(
            f"Search: returned {len(window)}/{total} hits for '{query[:50]}'"
        )

        return SearchResult(
            query=query,
            results=window,
            total_results=total,
            mode=SearchMode.VECTOR,
        )

    def _probe(self) -> bool:
        try:
            available = self._vector_store.is_available()
        except Exception as e:
            logger.warning(f"Vector store probe failed: {e}")
            return False

        if not available:
            logger.warning("Vector store not available, using mock search")
        return available

    def _rerank(self, query: str, window: list[ScoredHit]) -> list[ScoredHit]:
        """Rerank the window, keeping the original order on any failure."""
        try:
            reranked = self._reranker.rerank(query, list(window))
        except Exception as e:
            logger.error(f"Reranking failed, keeping hybrid order: {e}")
            return window

        before = [h.chunk_id for h in window]
        after = [h.chunk_id for h in reranked]
        if len(after) != len(before) or set(after) != set(before):
            logger.error(
                f"Reranker returned {len(after)} hits for {len(before)} candidates "
                "with a different id set, keeping hybrid order"
            )
            return window

        return reranked

    def _degraded(self, query: str, options: SearchOptions) -> SearchResult:
        """Build synthetic results when the vector backend is unavailable."""
        document_id = options.filter.get("document_id", "document")

        first_text = (
            f'This is a sample search result with the query "{query}" highlighted. '
            "This would be a real search result from the vector database."
        )
        second_text = (
            f'Another example result containing the search terms for "{query}". '
            "In the actual implementation, this would come from the document chunks."
        )

        hits = [
            ScoredHit(
                chunk_id=f"{document_id}_chunk_1",
                text=first_text,
                score=0.95,
                metadata={"document_id": document_id, "page": 1, "section": "Introduction"},
                document_id=document_id,
                ordinal=0,
                highlighted_content=highlight_matches(first_text, query),
                preceding_context=(
                    "Text that comes before this chunk for context."
                    if options.enhance_context else None
                ),
                following_context=(
                    "Text that follows this chunk for context."
                    if options.enhance_context else None
                ),
            ),
            ScoredHit(
                chunk_id=f"{document_id}_chunk_2",
                text=second_text,
                score=0.85,
                metadata={"document_id": document_id, "page": 2, "section": "Background"},
                document_id=document_id,
                ordinal=1,
                highlighted_content=highlight_matches(second_text, query),
            ),
        ]

        return SearchResult(
            query=query,
            results=hits[options.offset : options.offset + options.limit],
            total_results=len(hits),
            mode=SearchMode.MOCK,
        )
