"""Tests for IngestService and document loading."""

from dataclasses import replace
from unittest.mock import MagicMock

import pytest

from conftest import FailingEmbedder, HashingEmbedder
from docsearch.core.exceptions import DependencyUnavailable, IngestError
from docsearch.core.models.document import DocumentPage
from docsearch.core.models.options import SearchOptions
from docsearch.core.services.catalog import DocumentCatalog
from docsearch.core.services.hybrid_ranker import HybridRanker
from docsearch.core.services.ingest_service import IngestService
from docsearch.core.services.search_service import SearchService
from docsearch.infrastructure.rerankers.identity import IdentityReranker
from docsearch.infrastructure.vector_stores.memory_store import InMemoryVectorStore

TEXT = """Paris is the capital of France.

The Seine flows through the city.

The weather today is sunny."""


@pytest.fixture
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def catalog() -> DocumentCatalog:
    return DocumentCatalog()


@pytest.fixture
def service(store, catalog) -> IngestService:
    return IngestService(
        embedder=HashingEmbedder(),
        vector_store=store,
        catalog=catalog,
        chunk_size=40,
        batch_size=2,
        passage_prefix="passage: ",
    )


@pytest.fixture
def text_file(tmp_path):
    path = tmp_path / "geography.txt"
    path.write_text(TEXT, encoding="utf-8")
    return path


class TestChunking:

    def test_paragraphs_become_chunks(self, service):
        chunks = service._chunk_text(TEXT)

        assert chunks == [
            "Paris is the capital of France.",
            "The Seine flows through the city.",
            "The weather today is sunny.",
        ]

    def test_small_paragraphs_are_merged(self, store, catalog):
        service = IngestService(HashingEmbedder(), store, catalog, chunk_size=1000)

        assert service._chunk_text("One.\n\nTwo.") == ["One.\n\nTwo."]

    def test_long_paragraph_split_by_sentence(self, service):
        text = "First sentence here. Second sentence here. Third one."

        chunks = service._chunk_text(text)

        assert all(len(c) <= 40 for c in chunks)
        assert " ".join(chunks) == text

    def test_overlong_sentence_is_hard_split(self, service):
        text = "x" * 100

        chunks = service._chunk_text(text)

        assert all(len(c) <= 40 for c in chunks)
        assert "".join(chunks) == text

    def test_ordinals_span_pages(self, service):
        pages = [DocumentPage(1, "Alpha.\n\nBeta."), DocumentPage(2, "Gamma.")]

        chunks = service.build_chunks("doc", "file.pdf", pages)

        assert [c.ordinal for c in chunks] == [0, 1]
        assert chunks[0].metadata == {"document_id": "doc", "ordinal": 0, "page": 1, "source": "file.pdf"}
        assert chunks[1].metadata["page"] == 2
        assert chunks[1].id == "doc_1"


class TestIngestFile:

    def test_indexes_and_registers(self, service, store, catalog, text_file):
        info = service.ingest_file(text_file, document_id="geo")

        assert info.id == "geo"
        assert info.filename == "geography.txt"
        assert info.chunk_count == 3
        assert info.searchable
        assert catalog.get("geo") == info
        assert store.count() == 3
        assert store.get_chunk("geo", 1).text == "The Seine flows through the city."

    def test_default_id_is_content_hash(self, service, text_file):
        info = service.ingest_file(text_file)

        assert info.id == info.file_hash
        assert len(info.id) == 12

    def test_unchanged_document_is_skipped(self, service, store, text_file):
        service.ingest_file(text_file, document_id="geo")
        service._vector_store = MagicMock(wraps=store)

        service.ingest_file(text_file, document_id="geo")

        service._vector_store.add.assert_not_called()

    def test_force_reindexes_without_duplicates(self, service, store, text_file):
        service.ingest_file(text_file, document_id="geo")
        service.ingest_file(text_file, document_id="geo", force=True)

        assert store.count() == 3

    def test_missing_file(self, service, tmp_path):
        with pytest.raises(IngestError):
            service.ingest_file(tmp_path / "missing.txt")

    def test_unsupported_type(self, service, tmp_path):
        path = tmp_path / "image.png"
        path.write_bytes(b"\x89PNG")

        with pytest.raises(IngestError):
            service.ingest_file(path)

    def test_empty_file(self, service, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("   ", encoding="utf-8")

        with pytest.raises(IngestError):
            service.ingest_file(path)

    def test_corrupt_docx(self, service, tmp_path):
        path = tmp_path / "broken.docx"
        path.write_bytes(b"not a zip archive")

        with pytest.raises(IngestError):
            service.ingest_file(path)

    def test_remove(self, service, store, catalog, text_file):
        service.ingest_file(text_file, document_id="geo")

        service.remove("geo")

        assert store.count() == 0
        assert catalog.get("geo") is None

    def test_failed_reembedding_keeps_previous_version(self, service, store, catalog, text_file):
        service.ingest_file(text_file, document_id="geo")
        before = catalog.get("geo")
        text_file.write_text("Berlin is the capital of Germany.", encoding="utf-8")
        service._embedder = FailingEmbedder()

        with pytest.raises(DependencyUnavailable):
            service.ingest_file(text_file, document_id="geo")

        assert catalog.get("geo") == before
        assert catalog.get("geo").searchable
        assert store.count() == 3
        assert store.get_chunk("geo", 0).text == "Paris is the capital of France."

    def test_failed_store_marks_document_failed(self, service, store, catalog, text_file):
        service.ingest_file(text_file, document_id="geo")
        text_file.write_text("Berlin is the capital of Germany.", encoding="utf-8")
        service._vector_store = MagicMock(wraps=store)
        service._vector_store.add.side_effect = DependencyUnavailable("chroma", "timeout")

        with pytest.raises(IngestError, match="Indexing failed"):
            service.ingest_file(text_file, document_id="geo")

        info = catalog.get("geo")
        assert info.status == "failed"
        assert not info.searchable

    def test_failed_document_is_retried_when_unchanged(self, service, store, catalog, text_file):
        info = service.ingest_file(text_file, document_id="geo")
        catalog.register(replace(info, status="failed"))

        retried = service.ingest_file(text_file, document_id="geo")

        assert retried.status == "processed"
        assert store.count() == 3


def test_ingested_document_is_searchable(service, store, text_file):
    service.ingest_file(text_file, document_id="geo")
    search = SearchService(
        ranker=HybridRanker(HashingEmbedder(), store),
        vector_store=store,
        reranker=IdentityReranker(),
    )

    result = search.search(
        "capital of France",
        SearchOptions(min_score=0.0, limit=1, filter={"document_id": "geo"}),
    )

    assert result.mode.value == "vector"
    top = result.results[0]
    assert top.text == "Paris is the capital of France."
    assert top.preceding_context is None
    assert top.following_context == "The Seine flows through the city."
