"""HTTP request and response schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from docsearch.core.models.document import DocumentInfo, ScoredHit, SearchResult
from docsearch.core.models.options import MAX_LIMIT, MAX_QUERY_LENGTH, SearchOptions


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchRequest(CamelModel):
    """Body of POST /files/{document_id}/search.

    Unknown fields and values of the wrong type are rejected, not coerced.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        strict=True,
    )

    query: str = Field(..., min_length=1, max_length=MAX_QUERY_LENGTH)
    limit: int = Field(default=10, ge=1, le=MAX_LIMIT)
    offset: int = Field(default=0, ge=0)
    min_score: float = Field(default=0.5, ge=0.0, le=1.0)
    filter: dict[str, Any] | None = None
    enhance_context: bool = True
    rerank: bool = True
    keyword_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    semantic_weight: float = Field(default=0.7, ge=0.0, le=1.0)

    def to_options(self, document_id: str) -> SearchOptions:
        return SearchOptions(
            limit=self.limit,
            offset=self.offset,
            min_score=self.min_score,
            filter={**(self.filter or {}), "document_id": document_id},
            enhance_context=self.enhance_context,
            rerank=self.rerank,
            keyword_weight=self.keyword_weight,
            semantic_weight=self.semantic_weight,
        )


class HitResponse(CamelModel):
    chunk_id: str
    text: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)
    highlighted_content: str | None = None
    relevance_explanation: str | None = None
    rerank_score: float | None = None
    preceding_context: str | None = None
    following_context: str | None = None

    @classmethod
    def from_hit(cls, hit: ScoredHit) -> "HitResponse":
        return cls(
            chunk_id=hit.chunk_id,
            text=hit.text,
            score=hit.score,
            metadata=hit.metadata,
            highlighted_content=hit.highlighted_content,
            relevance_explanation=hit.relevance_explanation,
            rerank_score=hit.rerank_score,
            preceding_context=hit.preceding_context,
            following_context=hit.following_context,
        )


class DocumentRef(CamelModel):
    id: str
    filename: str


class SearchParams(CamelModel):
    limit: int
    offset: int
    min_score: float
    enhance_context: bool
    rerank: bool
    keyword_weight: float
    semantic_weight: float


class SearchResponse(CamelModel):
    query: str
    results: list[HitResponse]
    total_results: int
    mode: str
    document: DocumentRef
    search_params: SearchParams

    @classmethod
    def build(
        cls, result: SearchResult, document: DocumentInfo, options: SearchOptions
    ) -> "SearchResponse":
        return cls(
            query=result.query,
            results=[HitResponse.from_hit(h) for h in result.results],
            total_results=result.total_results,
            mode=result.mode.value,
            document=DocumentRef(id=document.id, filename=document.filename),
            search_params=SearchParams(
                limit=options.limit,
                offset=options.offset,
                min_score=options.min_score,
                enhance_context=options.enhance_context,
                rerank=options.rerank,
                keyword_weight=options.keyword_weight,
                semantic_weight=options.semantic_weight,
            ),
        )
