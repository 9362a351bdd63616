from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    # "chroma" or "memory". The memory index and its catalog are per-process.
    vector_backend: str = "chroma"
    chroma_host: str = "localhost"
    chroma_port: int = 8001
    chroma_collection: str = "document_chunks"
    chroma_timeout: float = 10.0

    embedding_model: str = "intfloat/multilingual-e5-base"
    embedding_query_prefix: str = "query: "
    embedding_passage_prefix: str = "passage: "

    # "identity", "cross_encoder" or "llm"
    reranker_backend: str = "identity"
    reranker_model: str = "BAAI/bge-reranker-v2-m3"

    llm_base_url: str = "http://localhost:11434/v1"
    llm_model: str = "qwen2.5:7b"
    llm_api_key: str = "ollama"
    llm_timeout: float = 30.0

    search_overfetch_factor: int = 3
    search_max_candidates: int = 300
    search_optimize_queries: bool = True
    search_term_frequency: bool = False

    chunk_size: int = 1000
    ingest_batch_size: int = 50
    catalog_path: str = "./data/catalog.json"

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
