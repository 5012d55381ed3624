"""Comment-header chunking for example and demo code."""

import re
from typing import Protocol, Sequence

from musakb.chunkers.base import build_chunk
from musakb.models import MAX_CODE_CHUNK_CHARS, Chunk

DEFAULT_SECTION = "(code)"

_PARAGRAPH_BREAK = re.compile(r"\n\n+")


class BoundaryDetector(Protocol):
    """Decides whether a paragraph closes a structural block."""

    def closes_block(self, paragraph: str) -> bool:
        ...


class KeywordBoundary:
    """A paragraph closes a block when it starts with one of ``keywords``.

    The default fits Ruby, where blocks end with ``end``. It is a heuristic
    and does not carry over to languages without explicit end markers.
    """

    def __init__(self, keywords: Sequence[str] = ("end",)):
        self.keywords = tuple(keywords)

    def closes_block(self, paragraph: str) -> bool:
        return paragraph.strip().startswith(self.keywords)


def first_comment(text: str, max_length: int = 80) -> str:
    """First ``#`` line comment (shebangs excluded), without the marker."""
    for line in text.split("\n"):
        stripped = line.strip()
        if stripped.startswith("#") and not stripped.startswith("#!"):
            return re.sub(r"^#\s*", "", stripped).strip()[:max_length]
    return DEFAULT_SECTION


class DemoCodeChunker:
    """Merge paragraphs into sections of roughly 200+ characters.

    Paragraphs (separated by blank lines) are folded into a buffer until it
    grows past ``MERGE_THRESHOLD`` or the paragraph just added closes a
    block. A short tail is glued onto the last section instead of standing
    alone.
    """

    MERGE_THRESHOLD = 200
    MIN_CHUNK_SIZE = 20

    def __init__(self, boundary: BoundaryDetector | None = None):
        self.boundary = boundary or KeywordBoundary()

    def split_sections(self, text: str) -> list[str]:
        merged: list[str] = []
        current: list[str] = []

        for paragraph in _PARAGRAPH_BREAK.split(text):
            current.append(paragraph)
            joined = "\n\n".join(current)
            if len(joined) > self.MERGE_THRESHOLD or self.boundary.closes_block(paragraph):
                merged.append(joined)
                current = []

        if current:
            tail = "\n\n".join(current)
            if merged:
                merged[-1] = merged[-1] + "\n\n" + tail
            else:
                merged.append(tail)

        return merged

    def chunk(self, text: str, source: str, kind: str) -> list[Chunk]:
        chunks = []
        for index, section in enumerate(self.split_sections(text)):
            content = section.strip()
            if len(content) < self.MIN_CHUNK_SIZE:
                continue

            chunks.append(
                build_chunk(
                    kind,
                    source,
                    index,
                    content[:MAX_CODE_CHUNK_CHARS],
                    section=first_comment(section),
                )
            )
        return chunks
