"""Heading-based chunking strategy for Markdown prose."""

import re
from pathlib import Path

from musakb.chunkers.base import build_chunk
from musakb.models import Chunk

INTRO_SECTION = "(intro)"

_HEADING = re.compile(r"^## (.+)$", re.MULTILINE)


def split_by_headings(text: str) -> list[tuple[str, str]]:
    """Split text into ``(heading, body)`` pairs on ``## `` lines.

    The text before the first heading becomes an untitled section when it
    is not blank. A document without headings is one untitled section.
    """
    sections: list[tuple[str, str]] = []
    last_pos = 0
    last_heading = ""
    seen_heading = False

    for match in _HEADING.finditer(text):
        body = text[last_pos : match.start()]
        if not seen_heading:
            if body.strip():
                sections.append(("", body))
        else:
            sections.append((last_heading, body))
        last_heading = match.group(1).strip()
        last_pos = match.end()
        seen_heading = True

    if seen_heading:
        sections.append((last_heading, text[last_pos:]))
    elif text.strip():
        sections.append(("", text))

    return sections


class HeadingChunker:
    """One chunk per ``## `` section, in document order.

    Titled sections are rendered as ``## <heading>\\n\\n<body>``; the intro
    keeps its body only. The section position is the chunk index, so ids
    are stable while the document's heading structure is unchanged.
    """

    def chunk(self, text: str, source: str, kind: str) -> list[Chunk]:
        sections = split_by_headings(text)
        # A headingless document is not an intro; its section label is empty
        untitled_label = "" if len(sections) == 1 and not sections[0][0] else INTRO_SECTION

        chunks = []
        for index, (heading, body) in enumerate(sections):
            content = body.strip()
            if not content and not heading:
                continue
            if heading:
                content = f"## {heading}\n\n{content}".strip()

            chunks.append(
                build_chunk(
                    kind,
                    source,
                    index,
                    content,
                    section=heading or untitled_label,
                )
            )
        return chunks

    def chunk_file(self, path: Path, source: str, kind: str) -> list[Chunk]:
        return self.chunk(path.read_text(encoding="utf-8"), source, kind)
