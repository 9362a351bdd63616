"""Document domain models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

SEARCHABLE_STATUSES = frozenset({"processed", "active"})


class SearchMode(Enum):
    """Which backend answered a search."""
    VECTOR = "vector"
    MOCK = "mock"


@dataclass(frozen=True)
class Chunk:
    """Indexed unit of document text."""
    id: str
    document_id: str
    text: str
    ordinal: int
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DocumentPage:
    """Extracted text of one page (or the whole file for unpaged formats)."""
    number: int
    text: str


@dataclass
class VectorMatch:
    """Nearest-neighbour match returned by a vector store."""
    chunk_id: str
    text: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoredHit:
    """Search result unit with combined score."""
    chunk_id: str
    text: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)
    document_id: Optional[str] = None
    ordinal: Optional[int] = None
    semantic_score: float = 0.0
    lexical_score: float = 0.0
    rerank_score: Optional[float] = None
    highlighted_content: Optional[str] = None
    relevance_explanation: Optional[str] = None
    preceding_context: Optional[str] = None
    following_context: Optional[str] = None


@dataclass
class SearchResult:
    """Search response envelope for presentation layer."""
    query: str
    results: list[ScoredHit]
    total_results: int
    mode: SearchMode

    @property
    def degraded(self) -> bool:
        return self.mode is SearchMode.MOCK


@dataclass
class DocumentInfo:
    """Catalog entry for an ingested document."""
    id: str
    filename: str
    status: str = "processed"
    file_hash: str = ""
    chunk_count: int = 0

    @property
    def searchable(self) -> bool:
        return self.status in SEARCHABLE_STATUSES

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "status": self.status,
            "file_hash": self.file_hash,
            "chunk_count": self.chunk_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocumentInfo":
        return cls(
            id=data["id"],
            filename=data["filename"],
            status=data.get("status", "processed"),
            file_hash=data.get("file_hash", ""),
            chunk_count=data.get("chunk_count", 0),
        )
