from docsearch.core.models.document import ScoredHit


class IdentityReranker:
    """Default reranker: keeps the hybrid order."""

    def rerank(self, query: str, candidates: list[ScoredHit]) -> list[ScoredHit]:
        return list(candidates)
