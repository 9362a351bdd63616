import logging
import threading
from typing import Any, Optional

import numpy as np

from docsearch.core.models.document import Chunk, VectorMatch

logger = logging.getLogger(__name__)


def _matches(metadata: dict, where: Optional[dict[str, Any]]) -> bool:
    if not where:
        return True
    for key, value in where.items():
        actual = metadata.get(key)
        if isinstance(value, list):
            if actual not in value:
                return False
        elif actual != value:
            return False
    return True


class InMemoryVectorStore:
    """Exact cosine-similarity index held in process memory."""

    def __init__(self):
        self._lock = threading.Lock()
        self._ids: list[str] = []
        self._vectors: list[np.ndarray] = []
        self._documents: list[str] = []
        self._metadatas: list[dict] = []

    def is_available(self) -> bool:
        return True

    def add(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict],
    ) -> None:
        """Add or replace chunks."""
        with self._lock:
            positions = {chunk_id: i for i, chunk_id in enumerate(self._ids)}
            for chunk_id, vector, text, meta in zip(ids, embeddings, documents, metadatas):
                vector = np.asarray(vector, dtype=np.float32)
                norm = np.linalg.norm(vector)
                if norm:
                    vector = vector / norm

                if chunk_id in positions:
                    i = positions[chunk_id]
                    self._vectors[i] = vector
                    self._documents[i] = text
                    self._metadatas[i] = dict(meta)
                else:
                    positions[chunk_id] = len(self._ids)
                    self._ids.append(chunk_id)
                    self._vectors.append(vector)
                    self._documents.append(text)
                    self._metadatas.append(dict(meta))

    def query(
        self,
        query_embedding: list[float],
        n_results: int = 5,
        where: Optional[dict[str, Any]] = None,
    ) -> list[VectorMatch]:
        """Search by embedding."""
        with self._lock:
            candidates = [i for i, m in enumerate(self._metadatas) if _matches(m, where)]
            if not candidates or n_results <= 0:
                return []

            query = np.asarray(query_embedding, dtype=np.float32)
            norm = np.linalg.norm(query)
            if norm:
                query = query / norm

            matrix = np.stack([self._vectors[i] for i in candidates])
            similarities = np.clip(matrix @ query, 0.0, 1.0)
            order = np.argsort(-similarities, kind="stable")[:n_results]

            return [
                VectorMatch(
                    chunk_id=self._ids[candidates[j]],
                    text=self._documents[candidates[j]],
                    score=float(similarities[j]),
                    metadata=dict(self._metadatas[candidates[j]]),
                )
                for j in order
            ]

    def get_chunk(self, document_id: str, ordinal: int) -> Optional[Chunk]:
        with self._lock:
            for i, meta in enumerate(self._metadatas):
                if meta.get("document_id") == document_id and meta.get("ordinal") == ordinal:
                    return Chunk(
                        id=self._ids[i],
                        document_id=document_id,
                        text=self._documents[i],
                        ordinal=ordinal,
                        metadata=dict(meta),
                    )
        return None

    def delete(self, where: dict[str, Any]) -> None:
        with self._lock:
            keep = [i for i, m in enumerate(self._metadatas) if not _matches(m, where)]
            removed = len(self._ids) - len(keep)
            self._ids = [self._ids[i] for i in keep]
            self._vectors = [self._vectors[i] for i in keep]
            self._documents = [self._documents[i] for i in keep]
            self._metadatas = [self._metadatas[i] for i in keep]
        logger.debug(f"Deleted {removed} chunks matching {where}")

    def count(self) -> int:
        return len(self._ids)
