"""Ports implemented by the infrastructure adapters."""
from .embedder import EmbedderProtocol
from .reranker import RerankerProtocol
from .vector_store import VectorStoreProtocol

__all__ = ["EmbedderProtocol", "RerankerProtocol", "VectorStoreProtocol"]
