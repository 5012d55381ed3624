"""Shared helpers for chunking strategies."""

from musakb.models import Chunk
from musakb.utils.identity import content_hash, stable_id


def build_chunk(kind: str, source: str, index: int, content: str, **fields: str) -> Chunk:
    """Create a chunk with its stable id and content fingerprint.

    ``fields`` are kind-specific metadata (section, module, name, node_type)
    and are placed between ``kind`` and ``content_hash``.
    """
    metadata = {"source": source, "kind": kind}
    metadata.update(fields)
    metadata["content_hash"] = content_hash(content)
    return Chunk(id=stable_id(kind, source, index), content=content, metadata=metadata)


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping line endings, as the parser counts lines."""
    lines = [line + "\n" for line in text.split("\n")]
    lines[-1] = lines[-1][:-1]
    if not lines[-1]:
        lines.pop()
    return lines
