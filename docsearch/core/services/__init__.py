"""Core business services."""
from .catalog import DocumentCatalog
from .context_enhancer import ContextEnhancer
from .hybrid_ranker import HybridRanker, RankOutcome
from .ingest_service import IngestService
from .search_service import SearchService

__all__ = [
    "DocumentCatalog",
    "ContextEnhancer",
    "HybridRanker",
    "RankOutcome",
    "IngestService",
    "SearchService",
]
