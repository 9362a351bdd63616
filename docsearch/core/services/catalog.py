"""Document catalog - ids, filenames and processing status."""

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from ..exceptions import DocumentNotFound
from ..models.document import DocumentInfo

logger = logging.getLogger(__name__)


class DocumentCatalog:
    """In-memory document registry, optionally mirrored to a JSON file."""

    def __init__(self, path: Optional[str] = None):
        """Initialize catalog.

        Args:
            path: JSON file to load from and save to. ``None`` keeps the
                catalog in memory only.
        """
        self._path = Path(path) if path else None
        self._lock = threading.Lock()
        self._documents: dict[str, DocumentInfo] = self._load()

    def _load(self) -> dict[str, DocumentInfo]:
        if self._path is None or not self._path.exists():
            return {}

        with self._path.open(encoding="utf-8") as f:
            data = json.load(f)

        documents = {d["id"]: DocumentInfo.from_dict(d) for d in data.get("documents", [])}
        logger.info(f"Loaded {len(documents)} documents from {self._path}")
        return documents

    def _save(self) -> None:
        if self._path is None:
            return

        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"documents": [d.to_dict() for d in self._documents.values()]}
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self._path)

    def get(self, document_id: str) -> Optional[DocumentInfo]:
        return self._documents.get(document_id)

    def require(self, document_id: str) -> DocumentInfo:
        info = self.get(document_id)
        if info is None:
            raise DocumentNotFound(document_id)
        return info

    def find_by_hash(self, file_hash: str) -> Optional[DocumentInfo]:
        for info in self._documents.values():
            if info.file_hash == file_hash:
                return info
        return None

    def register(self, info: DocumentInfo) -> None:
        with self._lock:
            self._documents[info.id] = info
            self._save()

    def remove(self, document_id: str) -> None:
        with self._lock:
            if self._documents.pop(document_id, None) is None:
                raise DocumentNotFound(document_id)
            self._save()

    def list_documents(self) -> list[DocumentInfo]:
        return sorted(self._documents.values(), key=lambda d: d.id)
