"""Embedder port shared by ranking and ingestion."""
from typing import Protocol, runtime_checkable
import numpy as np


@runtime_checkable
class EmbedderProtocol(Protocol):
    """Turns queries and passages into dense vectors."""

    def encode(self, texts: str | list[str]) -> np.ndarray:
        """Embed a query or a batch of passages.

        Callers add any model-specific prefix ("query: ", "passage: ")
        before calling.

        Returns:
            1-D vector for a single string, one row per text for a list.

        Raises:
            DependencyUnavailable: If the model cannot be loaded or run.
        """
        ...

    def warmup(self) -> None:
        """Load the model ahead of the first request."""
        ...
