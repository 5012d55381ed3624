"""FastMCP server implementation for musakb."""

import functools
import logging
from pathlib import Path
from typing import Callable

from mcp.server.fastmcp import FastMCP

from musakb.config import Settings
from musakb.exceptions import EmbeddingError, KnowledgeBaseError
from musakb.indexer import Indexer
from musakb.models import ALL
from musakb.search import SearchService

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "MusaDSL knowledge base server. Provides semantic search over "
    "documentation, API reference, demo examples, and composition works "
    "for the MusaDSL algorithmic composition framework in Ruby."
)


def _as_message(tool: Callable[..., str]) -> Callable[..., str]:
    """Report indexing failures as text; the agent cannot catch exceptions."""

    @functools.wraps(tool)
    def wrapper(*args, **kwargs) -> str:
        try:
            return tool(*args, **kwargs)
        except EmbeddingError as e:
            logger.error(f"{tool.__name__} failed: {e}")
            return f"[Embedding failed: {e}. Run check_setup to diagnose the provider.]"
        except KnowledgeBaseError as e:
            logger.error(f"{tool.__name__} failed: {e}")
            return f"[Error: {e}]"

    return wrapper


def create_mcp_server(settings: Settings) -> FastMCP:
    """Create an MCP server over the knowledge and private stores.

    Args:
        settings: Paths and provider configuration

    Returns:
        Configured FastMCP server instance
    """
    mcp = FastMCP(name="musadsl-kb", instructions=INSTRUCTIONS)

    search = SearchService(settings)
    indexer = Indexer(settings)

    @mcp.tool(name="search")
    def search_knowledge(query: str, kind: str = ALL) -> str:
        """Search the MusaDSL knowledge base semantically.

        Returns relevant passages from documentation, API, examples, private
        works, and composition analyses with source attribution.

        Args:
            query: Natural language query (e.g. "how to create a Markov melody")
            kind: Filter by content type: "all", "docs", "api", "demo_readme",
                "demo_code", "gem_readme", "private_works", "analysis",
                "best_practice"
        """
        return search.semantic_search(query, kind)

    @mcp.tool()
    def api_reference(module_name: str, method: str = "") -> str:
        """Look up API reference for a MusaDSL module or method.

        Args:
            module_name: Module name (e.g. "Series", "Markov", "Sequencer")
            method: Optional method name (e.g. "map", "play"). Empty for a module overview.
        """
        return search.api_lookup(module_name, method)

    @mcp.tool()
    def similar_works(description: str) -> str:
        """Find demos and private works similar to a described technique or style."""
        return search.similar_works(description)

    @mcp.tool()
    def dependencies(concept: str) -> str:
        """Get the setup requirements for a concept (gems, objects, configuration)."""
        return search.dependency_chain(concept)

    @mcp.tool()
    def pattern(technique: str) -> str:
        """Get a code pattern for a composition technique (e.g. "canon", "polyrhythm")."""
        return search.code_pattern(technique)

    @mcp.tool()
    def check_setup() -> str:
        """Report whether the embedding provider works and the databases are available."""
        return search.check_setup()

    @mcp.tool()
    def list_works() -> str:
        """List all indexed private works with chunk counts."""
        return indexer.list_works()

    @mcp.tool()
    @_as_message
    def add_work(work_path: str) -> str:
        """Index a private composition work (all Ruby and Markdown files, recursively).

        Args:
            work_path: Absolute path to the composition project directory
        """
        return indexer.add_work(Path(work_path))

    @mcp.tool()
    @_as_message
    def remove_work(work_name: str) -> str:
        """Remove a private work, and its analysis, from the index by name."""
        return indexer.remove_work(work_name)

    @mcp.tool()
    def index_status() -> str:
        """Show the status of the chunk files and both knowledge databases."""
        return indexer.index_status()

    @mcp.tool()
    @_as_message
    def add_analysis(work_name: str, analysis_text: str) -> str:
        """Store a composition analysis, chunked by ## sections, for semantic search.

        Args:
            work_name: Name of the analyzed work (as shown by list_works)
            analysis_text: Full analysis in markdown with ## sections
        """
        return indexer.add_analysis(work_name, analysis_text)

    @mcp.tool()
    @_as_message
    def save_best_practice(name: str, content: str) -> str:
        """Index a best practice under a slug-style name (e.g. "seed-reproducibility")."""
        return indexer.add_best_practice(name, content)

    @mcp.tool()
    @_as_message
    def remove_best_practice(name: str) -> str:
        """Remove a best practice from the index by name."""
        return indexer.remove_best_practice(name)

    return mcp
