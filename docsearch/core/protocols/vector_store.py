"""Vector store protocol for dependency injection."""
from typing import Any, Optional, Protocol, runtime_checkable

from ..models.document import Chunk, VectorMatch


@runtime_checkable
class VectorStoreProtocol(Protocol):
    """Protocol for vector storage.

    Chunks are stored with metadata carrying at least ``document_id`` and
    ``ordinal``. Transport failures raise ``DependencyUnavailable``.
    """

    def add(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict]
    ) -> None:
        """Add chunks to the store.

        Args:
            ids: Chunk IDs.
            embeddings: Chunk embeddings.
            documents: Chunk texts.
            metadatas: Chunk metadata.
        """
        ...

    def query(
        self,
        query_embedding: list[float],
        n_results: int = 5,
        where: Optional[dict[str, Any]] = None,
    ) -> list[VectorMatch]:
        """Search by embedding.

        Args:
            query_embedding: Query vector.
            n_results: Number of results to return.
            where: Metadata equality constraints.

        Returns:
            Matches ordered by similarity, highest first.
        """
        ...

    def get_chunk(self, document_id: str, ordinal: int) -> Optional[Chunk]:
        """Fetch the chunk at a position within a document, if any."""
        ...

    def delete(self, where: dict[str, Any]) -> None:
        """Delete chunks matching metadata constraints."""
        ...

    def is_available(self) -> bool:
        """Check whether the store can serve queries."""
        ...

    def count(self) -> int:
        """Get chunk count."""
        ...
