"""Exception hierarchy for document search."""

from typing import Any, Optional


class DocSearchError(Exception):
    """Base exception for all search errors."""

    code = "DOCSEARCH_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code, "details": self.details}


class ValidationError(DocSearchError):
    """Query or search options outside their documented bounds."""

    code = "VALIDATION_ERROR"


class DependencyUnavailable(DocSearchError):
    """Embedding provider or vector index unreachable, timing out or failing."""

    code = "DEPENDENCY_UNAVAILABLE"

    def __init__(self, service: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(f"{service}: {message}", details)
        self.service = service


class RerankFailure(DocSearchError):
    """Reranker strategy could not produce an ordering."""

    code = "RERANK_FAILED"


class IngestError(DocSearchError):
    """Document could not be loaded or indexed."""

    code = "INGEST_FAILED"


class DocumentNotFound(DocSearchError):
    code = "DOCUMENT_NOT_FOUND"

    def __init__(self, document_id: str):
        super().__init__(f"Document not found: {document_id}", {"document_id": document_id})
        self.document_id = document_id
