import logging
from typing import Any, Optional

import requests

from docsearch.core.exceptions import DependencyUnavailable
from docsearch.core.models.document import Chunk, VectorMatch

logger = logging.getLogger(__name__)


def build_where(filter: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """Translate equality constraints into a Chroma ``where`` clause."""
    if not filter:
        return None

    clauses = [
        {key: {"$in": value}} if isinstance(value, list) else {key: {"$eq": value}}
        for key, value in filter.items()
    ]
    return clauses[0] if len(clauses) == 1 else {"$and": clauses}


class ChromaVectorStore:
    """Vector store using ChromaDB HTTP API."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8001,
        collection_name: str = "documents",
        tenant: str = "default_tenant",
        database: str = "default_database",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize ChromaDB client.

        Args:
            host: ChromaDB host.
            port: ChromaDB port.
            collection_name: Collection name.
            tenant: Tenant name.
            database: Database name.
            timeout: Per-request timeout in seconds.
            session: HTTP session to reuse.
        """
        self._base_url = f"http://{host}:{port}/api/v2"
        self._tenant = tenant
        self._database = database
        self._collection_name = collection_name
        self._timeout = timeout
        self._session = session or requests.Session()
        self._collection_id: Optional[str] = None

    @property
    def _collections_url(self) -> str:
        return f"{self._base_url}/tenants/{self._tenant}/databases/{self._database}/collections"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        """Send a request, mapping transport and server errors to DependencyUnavailable."""
        try:
            resp = self._session.request(method, url, timeout=self._timeout, **kwargs)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise DependencyUnavailable("chroma", str(e)) from e
        return resp

    def _json(self, method: str, url: str, **kwargs) -> Any:
        """Send a request and decode its JSON body."""
        resp = self._request(method, url, **kwargs)
        try:
            return resp.json()
        except ValueError as e:
            raise DependencyUnavailable("chroma", f"invalid JSON from {url}: {e}") from e

    def _ensure_collection(self) -> str:
        """Get or create collection, return ID."""
        if self._collection_id:
            return self._collection_id

        try:
            for col in self._json("GET", self._collections_url):
                if col["name"] == self._collection_name:
                    self._collection_id = col["id"]
                    return self._collection_id

            created = self._json(
                "POST",
                self._collections_url,
                json={"name": self._collection_name, "metadata": {"hnsw:space": "cosine"}},
            )
            self._collection_id = created["id"]
        except (KeyError, TypeError) as e:
            raise DependencyUnavailable("chroma", f"malformed collection response: {e!r}") from e
        logger.info(f"Created collection: {self._collection_name}")
        return self._collection_id

    def is_available(self) -> bool:
        """Check heartbeat and collection access."""
        try:
            self._request("GET", f"{self._base_url}/heartbeat")
            self._ensure_collection()
        except DependencyUnavailable as e:
            logger.warning(f"ChromaDB not available: {e}")
            return False
        return True

    def add(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict],
    ) -> None:
        """Add chunks to collection."""
        col_id = self._ensure_collection()
        self._request(
            "POST",
            f"{self._collections_url}/{col_id}/upsert",
            json={
                "ids": ids,
                "embeddings": embeddings,
                "documents": documents,
                "metadatas": metadatas,
            },
        )

    def query(
        self,
        query_embedding: list[float],
        n_results: int = 5,
        where: Optional[dict[str, Any]] = None,
    ) -> list[VectorMatch]:
        """Search by embedding."""
        col_id = self._ensure_collection()
        payload: dict[str, Any] = {
            "query_embeddings": [query_embedding],
            "n_results": n_results,
            "include": ["documents", "metadatas", "distances"],
        }
        clause = build_where(where)
        if clause:
            payload["where"] = clause

        data = self._json("POST", f"{self._collections_url}/{col_id}/query", json=payload)

        results = []
        try:
            if data.get("ids") and data["ids"][0]:
                for i, chunk_id in enumerate(data["ids"][0]):
                    # Cosine distance lies in [0, 2].
                    distance = float(data["distances"][0][i])
                    similarity = max(0.0, min(1.0, 1.0 - distance))

                    results.append(
                        VectorMatch(
                            chunk_id=chunk_id,
                            text=data["documents"][0][i] or "",
                            score=similarity,
                            metadata=data["metadatas"][0][i] or {},
                        )
                    )
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            raise DependencyUnavailable("chroma", f"malformed query response: {e!r}") from e

        return results

    def get_chunk(self, document_id: str, ordinal: int) -> Optional[Chunk]:
        """Fetch a chunk by document and position."""
        col_id = self._ensure_collection()
        data = self._json(
            "POST",
            f"{self._collections_url}/{col_id}/get",
            json={
                "where": build_where({"document_id": document_id, "ordinal": ordinal}),
                "limit": 1,
                "include": ["documents", "metadatas"],
            },
        )

        try:
            if not data.get("ids"):
                return None

            return Chunk(
                id=data["ids"][0],
                document_id=document_id,
                text=data["documents"][0] or "",
                ordinal=ordinal,
                metadata=data["metadatas"][0] or {},
            )
        except (AttributeError, KeyError, IndexError, TypeError) as e:
            raise DependencyUnavailable("chroma", f"malformed get response: {e!r}") from e

    def delete(self, where: dict[str, Any]) -> None:
        col_id = self._ensure_collection()
        self._request(
            "POST",
            f"{self._collections_url}/{col_id}/delete",
            json={"where": build_where(where)},
        )

    def count(self) -> int:
        """Get chunk count."""
        col_id = self._ensure_collection()
        return self._json("GET", f"{self._collections_url}/{col_id}/count")
