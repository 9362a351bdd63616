import logging
from functools import cached_property

import numpy as np
from sentence_transformers import SentenceTransformer

from docsearch.core.exceptions import DependencyUnavailable

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    def __init__(self, model_name: str = "intfloat/multilingual-e5-base", device: str | None = None):
        self._model_name = model_name
        self._device = device

    @cached_property
    def model(self) -> SentenceTransformer:
        logger.info(f"Loading embedding model: {self._model_name}")
        try:
            return SentenceTransformer(self._model_name, device=self._device)
        except (OSError, ValueError) as e:
            raise DependencyUnavailable("embedder", f"cannot load {self._model_name}: {e}") from e

    def warmup(self) -> None:
        _ = self.model
        logger.info("Embedding model warmed up")

    def encode(self, texts: str | list[str]) -> np.ndarray:
        model = self.model
        try:
            return model.encode(texts, convert_to_numpy=True, normalize_embeddings=True)
        except (RuntimeError, ValueError) as e:
            raise DependencyUnavailable("embedder", str(e)) from e
