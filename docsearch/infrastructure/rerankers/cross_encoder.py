import logging
from dataclasses import replace
from functools import cached_property

from sentence_transformers import CrossEncoder

from docsearch.core.exceptions import RerankFailure
from docsearch.core.models.document import ScoredHit

logger = logging.getLogger(__name__)


class CrossEncoderReranker:
    """Reranker using CrossEncoder models."""

    def __init__(self, model_name: str = "BAAI/bge-reranker-v2-m3", max_length: int = 512):
        """Initialize reranker.

        Args:
            model_name: HuggingFace model name.
            max_length: Maximum tokens per (query, passage) pair.
        """
        self._model_name = model_name
        self._max_length = max_length

    @cached_property
    def model(self) -> CrossEncoder:
        logger.info(f"Loading reranker: {self._model_name}")
        model = CrossEncoder(self._model_name, max_length=self._max_length)
        logger.info("Reranker loaded")
        return model

    def rerank(self, query: str, candidates: list[ScoredHit]) -> list[ScoredHit]:
        """Rerank hits by cross-encoder relevance.

        Args:
            query: User query.
            candidates: Hits to reorder.

        Returns:
            Copies of the hits with ``rerank_score`` set, sorted by it
            (descending). The combined ``score`` is left untouched.
        """
        if not candidates:
            return []

        pairs = [[query, h.text] for h in candidates]
        try:
            scores = self.model.predict(pairs)
        except (OSError, RuntimeError, ValueError) as e:
            raise RerankFailure(f"Cross-encoder failed: {e}") from e

        reranked = [
            replace(h, rerank_score=float(s)) for h, s in zip(candidates, scores)
        ]
        reranked.sort(key=lambda h: h.rerank_score, reverse=True)

        if logger.isEnabledFor(logging.DEBUG):
            top_scores = ", ".join(f"{h.rerank_score:.2f}" for h in reranked[:3])
            logger.debug(f"Reranker top-3 scores: [{top_scores}]")

        return reranked
