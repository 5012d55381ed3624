"""Markdown rendering of search results."""

from typing import Sequence

from musakb.search.retrieval import SearchResult

MAX_CONTENT_CHARS = 2000


def format_results(results: Sequence[SearchResult], query: str) -> str:
    if not results:
        return f"No results found for: '{query}'"

    parts = []
    for i, result in enumerate(results, 1):
        source_info = f"**Source**: {result.source}"
        if result.section:
            source_info += f" > {result.section}"
        if result.module:
            source_info += f" ({result.module})"

        content = result.content
        if len(content) > MAX_CONTENT_CHARS:
            content = content[:MAX_CONTENT_CHARS] + "\n... (truncated)"

        parts.append(f"### Result {i}\n{source_info}\n\n{content}")

    return "\n\n---\n\n".join(parts)
