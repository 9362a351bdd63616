"""FastAPI application exposing document search."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from docsearch.container import Container, container
from docsearch.core.exceptions import DocumentNotFound, ValidationError
from docsearch.core.models.document import DocumentInfo
from docsearch.core.models.options import SearchOptions
from docsearch.core.protocols.vector_store import VectorStoreProtocol
from docsearch.core.services.catalog import DocumentCatalog
from docsearch.core.services.search_service import SearchService

from .schemas import SearchRequest, SearchResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_search_service(c: Container = Depends(get_container)) -> SearchService:
    return c.resolve(SearchService)


def get_catalog(c: Container = Depends(get_container)) -> DocumentCatalog:
    return c.resolve(DocumentCatalog)


def _searchable_document(catalog: DocumentCatalog, document_id: str) -> DocumentInfo:
    document = catalog.require(document_id)
    if not document.searchable:
        raise ValidationError(
            "Document has not been processed", {"status": document.status}
        )
    return document


def _run_search(
    service: SearchService,
    catalog: DocumentCatalog,
    document_id: str,
    query: str,
    options: SearchOptions,
) -> SearchResponse:
    query = options.validate(query)
    document = _searchable_document(catalog, document_id)

    logger.info(f"Searching {document_id} for '{query[:50]}'")
    result = service.search(query, options)
    return SearchResponse.build(result, document, options)


@router.get(
    "/files/{document_id}/search",
    response_model=SearchResponse,
    response_model_exclude_none=True,
)
def search_document(
    document_id: str,
    query: Optional[str] = None,
    limit: int = 10,
    offset: int = 0,
    min_score: float = Query(0.5, alias="minScore"),
    enhance_context: bool = Query(True, alias="enhanceContext"),
    rerank: bool = True,
    keyword_weight: float = Query(0.3, alias="keywordWeight"),
    semantic_weight: float = Query(0.7, alias="semanticWeight"),
    service: SearchService = Depends(get_search_service),
    catalog: DocumentCatalog = Depends(get_catalog),
) -> SearchResponse:
    """Search within a document using query-string options."""
    options = SearchOptions(
        limit=limit,
        offset=offset,
        min_score=min_score,
        filter={"document_id": document_id},
        enhance_context=enhance_context,
        rerank=rerank,
        keyword_weight=keyword_weight,
        semantic_weight=semantic_weight,
    )
    return _run_search(service, catalog, document_id, query or "", options)


@router.post(
    "/files/{document_id}/search",
    response_model=SearchResponse,
    response_model_exclude_none=True,
)
def search_document_advanced(
    document_id: str,
    body: SearchRequest,
    service: SearchService = Depends(get_search_service),
    catalog: DocumentCatalog = Depends(get_catalog),
) -> SearchResponse:
    """Search within a document using a validated JSON body."""
    return _run_search(service, catalog, document_id, body.query, body.to_options(document_id))


@router.get("/health")
def health(c: Container = Depends(get_container)) -> dict:
    vector_store = c.resolve(VectorStoreProtocol)
    try:
        available = vector_store.is_available()
    except Exception as e:
        logger.warning(f"Health probe failed: {e}")
        available = False
    return {"status": "ok", "vectorStore": available}


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonable_encoder(exc.to_dict()),
        )

    @app.exception_handler(DocumentNotFound)
    async def not_found_handler(request: Request, exc: DocumentNotFound) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=jsonable_encoder(exc.to_dict()),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonable_encoder(
                {
                    "error": "Invalid search options",
                    "code": ValidationError.code,
                    "details": exc.errors(),
                }
            ),
        )


def create_app(c: Optional[Container] = None) -> FastAPI:
    """Create the HTTP application.

    Args:
        c: Configured container; the module-level one by default.
    """
    app = FastAPI(title="docsearch", description="Hybrid document search API")
    app.state.container = c if c is not None else container
    setup_exception_handlers(app)
    app.include_router(router)
    return app
