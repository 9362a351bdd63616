"""Ingest service - document chunking and indexing."""

import hashlib
import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..exceptions import IngestError
from ..models.document import Chunk, DocumentInfo, DocumentPage
from ..protocols.embedder import EmbedderProtocol
from ..protocols.vector_store import VectorStoreProtocol
from .catalog import DocumentCatalog

logger = logging.getLogger(__name__)


class IngestService:
    """Service for indexing documents into vector store."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        vector_store: VectorStoreProtocol,
        catalog: DocumentCatalog,
        chunk_size: int = 1000,
        batch_size: int = 50,
        passage_prefix: str = "",
        loader=None,
    ):
        """Initialize ingest service.

        Args:
            embedder: Embedding service.
            vector_store: Vector store.
            catalog: Document catalog updated after indexing.
            chunk_size: Maximum chunk size in characters.
            batch_size: Batch size for indexing.
            passage_prefix: Prefix the embedding model expects on passages.
            loader: Document loader; defaults to the composite file loader.
        """
        self._embedder = embedder
        self._vector_store = vector_store
        self._catalog = catalog
        self._chunk_size = chunk_size
        self._batch_size = batch_size
        self._passage_prefix = passage_prefix
        self._loader = loader

    @property
    def loader(self):
        """Lazy load document loader."""
        if self._loader is None:
            from docsearch.infrastructure.document_loaders import CompositeLoader

            self._loader = CompositeLoader()
        return self._loader

    def _compute_hash(self, pages: list[DocumentPage]) -> str:
        """Compute content hash."""
        digest = hashlib.md5()
        for page in pages:
            digest.update(page.text.encode())
        return digest.hexdigest()[:12]

    def _chunk_text(self, text: str) -> list[str]:
        """Split text into chunks preserving paragraphs, then sentences.

        Args:
            text: Text to chunk.

        Returns:
            List of chunks.
        """
        paragraphs = re.split(r"\n\s*\n", text)
        chunks = []
        current_chunk = ""

        for para in paragraphs:
            para = para.strip()
            if not para:
                continue

            if len(current_chunk) + len(para) + 2 <= self._chunk_size:
                current_chunk = f"{current_chunk}\n\n{para}" if current_chunk else para
                continue

            if current_chunk:
                chunks.append(current_chunk)
            current_chunk = ""

            if len(para) <= self._chunk_size:
                current_chunk = para
                continue

            for sent in re.split(r"(?<=[.!?])\s+", para):
                # Sentences longer than a chunk are hard-split.
                while len(sent) > self._chunk_size:
                    if current_chunk:
                        chunks.append(current_chunk)
                        current_chunk = ""
                    chunks.append(sent[: self._chunk_size])
                    sent = sent[self._chunk_size :]

                if len(current_chunk) + len(sent) + 1 <= self._chunk_size:
                    current_chunk = f"{current_chunk} {sent}".strip()
                else:
                    if current_chunk:
                        chunks.append(current_chunk)
                    current_chunk = sent

        if current_chunk:
            chunks.append(current_chunk)

        return chunks

    def build_chunks(
        self, document_id: str, source: str, pages: list[DocumentPage]
    ) -> list[Chunk]:
        """Chunk pages with document-wide ordinals."""
        chunks = []
        for page in pages:
            for text in self._chunk_text(page.text):
                ordinal = len(chunks)
                chunks.append(
                    Chunk(
                        id=f"{document_id}_{ordinal}",
                        document_id=document_id,
                        text=text,
                        ordinal=ordinal,
                        metadata={
                            "document_id": document_id,
                            "ordinal": ordinal,
                            "page": page.number,
                            "source": source,
                        },
                    )
                )
        return chunks

    def ingest_file(
        self,
        path: str | Path,
        document_id: Optional[str] = None,
        force: bool = False,
    ) -> DocumentInfo:
        """Index one document.

        Args:
            path: File to index.
            document_id: Document id; defaults to the content hash.
            force: Re-index even if identical content is already indexed.

        Returns:
            Catalog entry of the indexed document.

        Raises:
            IngestError: If the file is missing, unsupported, unreadable or empty,
                or if storing the chunks fails (the entry is marked "failed").
            DependencyUnavailable: If the embedder fails.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise IngestError(f"File not found: {file_path}", {"path": str(file_path)})

        pages = self.loader.load(file_path)
        if not pages:
            raise IngestError(f"No text extracted from {file_path.name}")

        file_hash = self._compute_hash(pages)
        document_id = document_id or file_hash

        existing = self._catalog.get(document_id)
        if existing and existing.searchable and existing.file_hash == file_hash and not force:
            logger.info(f"Skip unchanged: {file_path.name} ({document_id})")
            return existing

        # Embedding failures leave the previous version indexed and registered.
        chunks = self.build_chunks(document_id, file_path.name, pages)
        embeddings = self._embed(chunks)

        info = DocumentInfo(
            id=document_id,
            filename=file_path.name,
            status="processing",
            file_hash=file_hash,
            chunk_count=len(chunks),
        )
        self._catalog.register(info)

        try:
            if existing:
                self._vector_store.delete({"document_id": document_id})
            self._store(chunks, embeddings)
        except Exception as e:
            self._catalog.register(replace(info, status="failed"))
            logger.error(f"Indexing failed for {file_path.name} ({document_id}): {e}")
            raise IngestError(
                f"Indexing failed for {file_path.name}: {e}", {"document_id": document_id}
            ) from e

        info = replace(info, status="processed")
        self._catalog.register(info)

        logger.info(
            f"Indexing complete: {len(chunks)} chunks from {file_path.name} "
            f"({len(pages)} pages) as {document_id}"
        )
        return info

    def index_chunks(self, chunks: list[Chunk]) -> int:
        """Embed and store chunks in batches."""
        return self._store(chunks, self._embed(chunks))

    def _embed(self, chunks: list[Chunk]) -> list[list[float]]:
        embeddings: list[list[float]] = []
        for i in range(0, len(chunks), self._batch_size):
            batch = chunks[i : i + self._batch_size]
            texts_with_prefix = [f"{self._passage_prefix}{c.text}" for c in batch]
            embeddings.extend(self._embedder.encode(texts_with_prefix).tolist())
        return embeddings

    def _store(self, chunks: list[Chunk], embeddings: list[list[float]]) -> int:
        total_indexed = 0
        for i in range(0, len(chunks), self._batch_size):
            batch = chunks[i : i + self._batch_size]

            self._vector_store.add(
                ids=[c.id for c in batch],
                embeddings=embeddings[i : i + self._batch_size],
                documents=[c.text for c in batch],
                metadatas=[c.metadata for c in batch],
            )

            total_indexed += len(batch)
            logger.info(f"Indexed batch: {total_indexed}/{len(chunks)}")

        return total_indexed

    def remove(self, document_id: str) -> None:
        """Delete a document's chunks and catalog entry."""
        self._catalog.require(document_id)
        self._vector_store.delete({"document_id": document_id})
        self._catalog.remove(document_id)
        logger.info(f"Removed document {document_id}")
