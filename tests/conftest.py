"""Pytest configuration and fixtures."""

import zlib
from typing import Any, Optional

import numpy as np
import pytest

from docsearch.core.exceptions import DependencyUnavailable
from docsearch.core.models.document import Chunk, VectorMatch
from docsearch.core.services.hybrid_ranker import HybridRanker
from docsearch.core.services.search_service import SearchService
from docsearch.core.strategies.scoring import tokenize
from docsearch.infrastructure.rerankers.identity import IdentityReranker

DOCUMENT_ID = "doc-1"


class HashingEmbedder:
    """Deterministic bag-of-words embedder for tests."""

    def __init__(self, dim: int = 64):
        self.dim = dim
        self.calls: list = []

    def _vector(self, text: str) -> np.ndarray:
        vec = np.zeros(self.dim, dtype=np.float32)
        for token in tokenize(text):
            vec[zlib.crc32(token.encode()) % self.dim] += 1.0
        return vec

    def encode(self, texts):
        self.calls.append(texts)
        if isinstance(texts, str):
            return self._vector(texts)
        return np.stack([self._vector(t) for t in texts])

    def warmup(self) -> None:
        pass


class FailingEmbedder(HashingEmbedder):
    def encode(self, texts):
        raise DependencyUnavailable("embedder", "model server down")


class FakeVectorStore:
    """Vector store returning preset semantic scores."""

    def __init__(self, scored_chunks: Optional[list[tuple[Chunk, float]]] = None, available: bool = True):
        self.scored_chunks = scored_chunks or []
        self.available = available
        self.queries: list[dict] = []

    def is_available(self) -> bool:
        return self.available

    def add(self, ids, embeddings, documents, metadatas) -> None:
        raise NotImplementedError

    def query(self, query_embedding, n_results=5, where: Optional[dict[str, Any]] = None):
        self.queries.append({"n_results": n_results, "where": where})
        matches = [
            VectorMatch(
                chunk_id=chunk.id,
                text=chunk.text,
                score=score,
                metadata=dict(chunk.metadata),
            )
            for chunk, score in self.scored_chunks
            if not where or all(chunk.metadata.get(k) == v for k, v in where.items())
        ]
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:n_results]

    def get_chunk(self, document_id: str, ordinal: int) -> Optional[Chunk]:
        for chunk, _ in self.scored_chunks:
            if chunk.document_id == document_id and chunk.ordinal == ordinal:
                return chunk
        return None

    def delete(self, where) -> None:
        self.scored_chunks = [
            (c, s) for c, s in self.scored_chunks
            if not all(c.metadata.get(k) == v for k, v in where.items())
        ]

    def count(self) -> int:
        return len(self.scored_chunks)


def make_chunk(ordinal: int, text: str, document_id: str = DOCUMENT_ID, page: int = 1) -> Chunk:
    return Chunk(
        id=f"{document_id}_{ordinal}",
        document_id=document_id,
        text=text,
        ordinal=ordinal,
        metadata={"document_id": document_id, "ordinal": ordinal, "page": page},
    )


@pytest.fixture
def france_chunks() -> list[tuple[Chunk, float]]:
    return [
        (make_chunk(0, "Paris is the capital of France."), 0.95),
        (make_chunk(1, "The weather today is sunny."), 0.1),
    ]


@pytest.fixture
def ranked_chunks() -> list[tuple[Chunk, float]]:
    """Five chunks with descending semantic scores and no keyword overlap with 'zzz'."""
    return [
        (make_chunk(i, f"passage number {i}"), score)
        for i, score in enumerate([0.9, 0.7, 0.6, 0.4, 0.3])
    ]


@pytest.fixture
def embedder() -> HashingEmbedder:
    return HashingEmbedder()


def build_service(
    store: FakeVectorStore,
    embedder=None,
    reranker=None,
    optimize_queries: bool = True,
) -> SearchService:
    ranker = HybridRanker(
        embedder=embedder or HashingEmbedder(),
        vector_store=store,
        optimize_queries=optimize_queries,
    )
    return SearchService(
        ranker=ranker,
        vector_store=store,
        reranker=reranker or IdentityReranker(),
    )
