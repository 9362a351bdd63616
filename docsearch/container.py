import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        self._singletons.pop(interface, None)
        if singleton:
            self._singleton_flags.add(interface)
        else:
            self._singleton_flags.discard(interface)

    def register_instance(self, interface: type[T], instance: T) -> None:
        """Register an already built instance as a singleton."""
        self.register(interface, lambda: instance, singleton=True)

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance


container = Container()


def _build_vector_store(settings: Settings):
    if settings.vector_backend == "memory":
        from .infrastructure.vector_stores.memory_store import InMemoryVectorStore

        return InMemoryVectorStore()

    if settings.vector_backend == "chroma":
        from .infrastructure.vector_stores.chroma_store import ChromaVectorStore

        return ChromaVectorStore(
            host=settings.chroma_host,
            port=settings.chroma_port,
            collection_name=settings.chroma_collection,
            timeout=settings.chroma_timeout,
        )

    raise ValueError(f"Unknown vector backend: {settings.vector_backend}")


def _catalog_path(settings: Settings) -> Optional[str]:
    # The in-memory index lives only as long as the process, so its catalog does too.
    if settings.vector_backend == "memory":
        return None
    return settings.catalog_path


def _build_reranker(settings: Settings):
    if settings.reranker_backend == "identity":
        from .infrastructure.rerankers.identity import IdentityReranker

        return IdentityReranker()

    if settings.reranker_backend == "cross_encoder":
        from .infrastructure.rerankers.cross_encoder import CrossEncoderReranker

        return CrossEncoderReranker(settings.reranker_model)

    if settings.reranker_backend == "llm":
        from .infrastructure.rerankers.llm_reranker import LLMReranker

        return LLMReranker(
            base_url=settings.llm_base_url,
            model=settings.llm_model,
            api_key=settings.llm_api_key,
            timeout=settings.llm_timeout,
        )

    raise ValueError(f"Unknown reranker backend: {settings.reranker_backend}")


def configure_container(settings: Settings, target: Optional[Container] = None) -> Container:
    """Configure container with all dependencies.

    Args:
        settings: Application settings.
        target: Container to configure; the module-level one by default.

    Returns:
        Configured container.
    """
    from .core.protocols.embedder import EmbedderProtocol
    from .core.protocols.reranker import RerankerProtocol
    from .core.protocols.vector_store import VectorStoreProtocol
    from .core.services.catalog import DocumentCatalog
    from .core.services.hybrid_ranker import HybridRanker
    from .core.services.ingest_service import IngestService
    from .core.services.search_service import SearchService
    from .core.strategies.scoring import LexicalScorer

    c = target if target is not None else container

    def build_embedder():
        from .infrastructure.embeddings.sentence_transformer import (
            SentenceTransformerEmbedder,
        )

        return SentenceTransformerEmbedder(settings.embedding_model)

    c.register(EmbedderProtocol, build_embedder, singleton=True)

    c.register(
        VectorStoreProtocol,
        lambda: _build_vector_store(settings),
        singleton=True,
    )

    c.register(
        RerankerProtocol,
        lambda: _build_reranker(settings),
        singleton=True,
    )

    c.register(
        DocumentCatalog,
        lambda: DocumentCatalog(_catalog_path(settings)),
        singleton=True,
    )

    c.register(
        HybridRanker,
        lambda: HybridRanker(
            embedder=c.resolve(EmbedderProtocol),
            vector_store=c.resolve(VectorStoreProtocol),
            scorer=LexicalScorer(use_term_frequency=settings.search_term_frequency),
            overfetch_factor=settings.search_overfetch_factor,
            max_candidates=settings.search_max_candidates,
            optimize_queries=settings.search_optimize_queries,
            query_prefix=settings.embedding_query_prefix,
        ),
        singleton=True,
    )

    c.register(
        SearchService,
        lambda: SearchService(
            ranker=c.resolve(HybridRanker),
            vector_store=c.resolve(VectorStoreProtocol),
            reranker=c.resolve(RerankerProtocol),
        ),
        singleton=True,
    )

    c.register(
        IngestService,
        lambda: IngestService(
            embedder=c.resolve(EmbedderProtocol),
            vector_store=c.resolve(VectorStoreProtocol),
            catalog=c.resolve(DocumentCatalog),
            chunk_size=settings.chunk_size,
            batch_size=settings.ingest_batch_size,
            passage_prefix=settings.embedding_passage_prefix,
        ),
        singleton=True,
    )

    logger.info(
        f"Container configured (vector={settings.vector_backend}, "
        f"reranker={settings.reranker_backend})"
    )
    return c
