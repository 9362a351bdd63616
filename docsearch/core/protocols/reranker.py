"""Reranker protocol for dependency injection."""
from typing import Protocol, runtime_checkable

from ..models.document import ScoredHit


@runtime_checkable
class RerankerProtocol(Protocol):
    """Protocol for reranking strategies.

    Implementations return a permutation of the candidates: same length,
    same chunk ids, possibly in a different order. Nothing is dropped or added.
    """

    def rerank(
        self,
        query: str,
        candidates: list[ScoredHit]
    ) -> list[ScoredHit]:
        """Reorder candidates by relevance.

        Args:
            query: User query.
            candidates: Hits to reorder.

        Returns:
            Reordered hits.

        Raises:
            RerankFailure: If the strategy cannot produce an ordering.
        """
        ...
