"""Context enhancer - attach neighbouring chunk text to hits."""

import logging
from dataclasses import replace
from typing import Callable, Optional

from ..exceptions import DependencyUnavailable
from ..models.document import Chunk, ScoredHit

logger = logging.getLogger(__name__)

ChunkLookup = Callable[[str, int], Optional[Chunk]]


class ContextEnhancer:
    """Stitch preceding and following chunk text onto search hits."""

    def enhance(self, hit: ScoredHit, chunk_lookup: ChunkLookup) -> ScoredHit:
        """Return a copy of the hit with neighbouring context attached.

        Neighbours that do not exist, belong to another document, or cannot
        be fetched are left out.
        """
        if hit.document_id is None or hit.ordinal is None:
            return hit

        preceding = None
        if hit.ordinal > 0:
            preceding = self._neighbour_text(hit, hit.ordinal - 1, chunk_lookup)
        following = self._neighbour_text(hit, hit.ordinal + 1, chunk_lookup)

        return replace(hit, preceding_context=preceding, following_context=following)

    def enhance_all(
        self, hits: list[ScoredHit], chunk_lookup: ChunkLookup
    ) -> list[ScoredHit]:
        return [self.enhance(hit, chunk_lookup) for hit in hits]

    def _neighbour_text(
        self, hit: ScoredHit, ordinal: int, chunk_lookup: ChunkLookup
    ) -> Optional[str]:
        try:
            chunk = chunk_lookup(hit.document_id, ordinal)
        except DependencyUnavailable as e:
            logger.warning(f"Context lookup failed for {hit.chunk_id} @ {ordinal}: {e}")
            return None

        if chunk is None or chunk.document_id != hit.document_id:
            return None
        return chunk.text
