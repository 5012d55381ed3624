"""Protocol for text chunking strategies."""

from typing import Protocol, runtime_checkable

from musakb.models import Chunk


@runtime_checkable
class ChunkingStrategy(Protocol):
    """Protocol for text chunking strategies.

    Different strategies are used for prose, library source and demo code.
    Implementations must be deterministic: the same text, source and kind
    always produce the same chunks.
    """

    def chunk(self, text: str, source: str, kind: str) -> list[Chunk]:
        """Split text into chunks whose metadata carries ``source`` and ``kind``."""
        ...
