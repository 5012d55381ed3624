"""CLI entry point for musakb."""

import argparse
import logging
import sys
from pathlib import Path

from musakb.config import Settings
from musakb.exceptions import AbsoluteSourceError, EmbeddingError
from musakb.indexer import Indexer
from musakb.models import ALL, COLLECTIONS

logger = logging.getLogger(__name__)


def chunk(settings: Settings, source_root: str) -> None:
    """Generate JSONL chunks from a MusaDSL source root (no API key needed)."""
    indexer = Indexer(settings)
    print(indexer.build_chunks(Path(source_root)))


def embed(settings: Settings, source_root: str) -> None:
    """Generate chunks if needed, embed them and build knowledge.db."""
    indexer = Indexer(settings)
    print(indexer.build_database(Path(source_root)))


def status(settings: Settings) -> None:
    print(Indexer(settings).index_status())


def search(settings: Settings, query: str, kind: str) -> None:
    from musakb.search import SearchService

    print(SearchService(settings).semantic_search(query, kind))


def add_work(settings: Settings, work_path: str) -> None:
    print(Indexer(settings).add_work(Path(work_path)))


def list_works(settings: Settings) -> None:
    print(Indexer(settings).list_works())


def remove_work(settings: Settings, work_name: str) -> None:
    print(Indexer(settings).remove_work(work_name))


def serve(settings: Settings) -> None:
    """Start the MCP server on stdio."""
    # Import here to avoid loading MCP unless needed
    from musakb.server import create_mcp_server

    knowledge_db = settings.knowledge_db_path
    if not knowledge_db.exists():
        logger.warning(f"Knowledge base not found at {knowledge_db}; search tools will report setup errors")

    logger.info("Serving musadsl-kb via stdio")
    mcp = create_mcp_server(settings)
    mcp.run(transport="stdio")


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="musakb",
        description="musakb - semantic knowledge base for the MusaDSL ecosystem",
    )
    parser.add_argument("--db-path", help="Path to knowledge.db (default: $KNOWLEDGE_DB_PATH)")
    parser.add_argument("--private-db-path", help="Path to private.db (default: $PRIVATE_DB_PATH)")
    parser.add_argument("--chunks-dir", help="Directory for JSONL chunk output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    chunk_parser = subparsers.add_parser(
        "chunk",
        help="Generate JSONL chunks only (no API key needed)",
    )
    chunk_parser.add_argument("source_root", help="Path to the MusaDSL root directory")

    embed_parser = subparsers.add_parser(
        "embed",
        help="Generate chunks + embeddings + knowledge.db",
    )
    embed_parser.add_argument("source_root", help="Path to the MusaDSL root directory")

    subparsers.add_parser("status", help="Show index status")

    search_parser = subparsers.add_parser("search", help="Search the knowledge base")
    search_parser.add_argument("query", help="Natural language query")
    search_parser.add_argument(
        "--kind",
        choices=(ALL,) + COLLECTIONS,
        default=ALL,
        help="Collection to search (default: all)",
    )

    add_parser = subparsers.add_parser("add-work", help="Index a private composition work")
    add_parser.add_argument("work_path", help="Path to the work directory")

    subparsers.add_parser("list-works", help="List indexed private works")

    remove_parser = subparsers.add_parser("remove-work", help="Remove a private work from the index")
    remove_parser.add_argument("work_name", help="Work name as shown by list-works")

    subparsers.add_parser("serve", help="Start the MCP server (stdio)")

    args = parser.parse_args()

    settings = Settings.from_env().with_overrides(
        knowledge_db_path=Path(args.db_path) if args.db_path else None,
        private_db_path=Path(args.private_db_path) if args.private_db_path else None,
        chunks_dir=Path(args.chunks_dir) if args.chunks_dir else None,
    )

    # stderr keeps stdout clean for the stdio transport
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
    )

    try:
        if args.command == "chunk":
            chunk(settings, args.source_root)
        elif args.command == "embed":
            embed(settings, args.source_root)
        elif args.command == "status":
            status(settings)
        elif args.command == "search":
            search(settings, args.query, args.kind)
        elif args.command == "add-work":
            add_work(settings, args.work_path)
        elif args.command == "list-works":
            list_works(settings)
        elif args.command == "remove-work":
            remove_work(settings, args.work_name)
        elif args.command == "serve":
            serve(settings)
    except AbsoluteSourceError as e:
        logger.error(f"ERROR: {e}")
        sys.exit(1)
    except EmbeddingError as e:
        logger.error(f"Embedding failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
