"""Tests for DocumentCatalog."""

import json

import pytest

from docsearch.core.exceptions import DocumentNotFound
from docsearch.core.models.document import DocumentInfo
from docsearch.core.services.catalog import DocumentCatalog


def test_register_and_get():
    catalog = DocumentCatalog()
    info = DocumentInfo(id="d1", filename="a.pdf", file_hash="abc")

    catalog.register(info)

    assert catalog.get("d1") == info
    assert catalog.find_by_hash("abc") == info
    assert catalog.list_documents() == [info]


def test_require_missing():
    with pytest.raises(DocumentNotFound):
        DocumentCatalog().require("nope")


def test_remove_missing():
    with pytest.raises(DocumentNotFound):
        DocumentCatalog().remove("nope")


def test_persists_to_json(tmp_path):
    path = tmp_path / "nested" / "catalog.json"
    catalog = DocumentCatalog(str(path))
    catalog.register(DocumentInfo(id="d1", filename="a.pdf", status="pending", chunk_count=4))

    reloaded = DocumentCatalog(str(path))

    info = reloaded.get("d1")
    assert info.status == "pending"
    assert info.chunk_count == 4
    assert not info.searchable
    assert json.loads(path.read_text())["documents"][0]["id"] == "d1"


def test_remove_persists(tmp_path):
    path = tmp_path / "catalog.json"
    catalog = DocumentCatalog(str(path))
    catalog.register(DocumentInfo(id="d1", filename="a.pdf"))

    catalog.remove("d1")

    assert DocumentCatalog(str(path)).get("d1") is None
