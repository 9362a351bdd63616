"""Domain models."""
from .document import (
    Chunk,
    DocumentInfo,
    DocumentPage,
    ScoredHit,
    SearchMode,
    SearchResult,
    VectorMatch,
)
from .options import SearchOptions

__all__ = [
    "Chunk",
    "DocumentInfo",
    "DocumentPage",
    "ScoredHit",
    "SearchMode",
    "SearchResult",
    "SearchOptions",
    "VectorMatch",
]
