import argparse
import json
import logging
import sys
from dataclasses import asdict

from docsearch.config.settings import settings
from docsearch.container import configure_container, container
from docsearch.core.exceptions import DependencyUnavailable, DocSearchError
from docsearch.core.models.options import SearchOptions
from docsearch.core.protocols.embedder import EmbedderProtocol
from docsearch.core.services.ingest_service import IngestService
from docsearch.core.services.search_service import SearchService

logger = logging.getLogger(__name__)


def cmd_ingest(args: argparse.Namespace) -> int:
    """Index a document file."""
    configure_container(settings)
    ingest_service = container.resolve(IngestService)
    info = ingest_service.ingest_file(args.path, document_id=args.document_id, force=args.force)
    logger.info(f"Indexed {info.chunk_count} chunks as {info.id}")
    if settings.vector_backend == "memory":
        logger.warning("Memory vector backend: the index is discarded when this process exits")
    print(json.dumps(info.to_dict(), ensure_ascii=False))
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    """Search a document and print the result as JSON."""
    configure_container(settings)
    search_service = container.resolve(SearchService)

    options = SearchOptions(
        limit=args.limit,
        offset=args.offset,
        min_score=args.min_score,
        filter={"document_id": args.document_id},
        enhance_context=not args.no_context,
        rerank=not args.no_rerank,
        keyword_weight=args.keyword_weight,
        semantic_weight=args.semantic_weight,
    )
    result = search_service.search(args.query, options)

    payload = {
        "query": result.query,
        "mode": result.mode.value,
        "totalResults": result.total_results,
        "results": [asdict(hit) for hit in result.results],
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API."""
    import uvicorn

    from docsearch.presentation.api import create_app

    configure_container(settings)
    try:
        container.resolve(EmbedderProtocol).warmup()
    except DependencyUnavailable as e:
        logger.warning(f"Embedder warmup failed, searches will degrade until it loads: {e}")

    logger.info(f"Starting API on {args.host}:{args.port}")
    uvicorn.run(create_app(container), host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docsearch", description="Hybrid document search")
    commands = parser.add_subparsers(dest="command", required=True)

    ingest = commands.add_parser("ingest", help="index a document")
    ingest.add_argument("path")
    ingest.add_argument("--document-id", default=None)
    ingest.add_argument("--force", action="store_true")
    ingest.set_defaults(handler=cmd_ingest)

    search = commands.add_parser("search", help="search a document")
    search.add_argument("document_id")
    search.add_argument("query")
    search.add_argument("--limit", type=int, default=10)
    search.add_argument("--offset", type=int, default=0)
    search.add_argument("--min-score", type=float, default=0.5)
    search.add_argument("--keyword-weight", type=float, default=0.3)
    search.add_argument("--semantic-weight", type=float, default=0.7)
    search.add_argument("--no-rerank", action="store_true")
    search.add_argument("--no-context", action="store_true")
    search.set_defaults(handler=cmd_search)

    serve = commands.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default=settings.api_host)
    serve.add_argument("--port", type=int, default=settings.api_port)
    serve.set_defaults(handler=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)

    try:
        return args.handler(args)
    except DocSearchError as e:
        logger.error(f"{e.code}: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
