"""Blank-line-run chunking for code without a usable parse tree."""

from pathlib import PurePosixPath

from musakb.chunkers.base import build_chunk, split_lines
from musakb.models import MAX_CODE_CHUNK_CHARS, Chunk


class BlockChunker:
    """Accumulate lines; cut at a blank line once the block exceeds 10 lines.

    Used when the structural parser rejects a file, so it must accept any
    text and never raise.
    """

    MIN_BLOCK_LINES = 10

    def chunk(self, text: str, source: str, kind: str) -> list[Chunk]:
        name = PurePosixPath(source).stem
        blocks: list[str] = []
        current: list[str] = []

        for line in split_lines(text):
            current.append(line)
            if not line.strip() and len(current) > self.MIN_BLOCK_LINES:
                content = "".join(current).strip()
                if content:
                    blocks.append(content)
                    current = []

        content = "".join(current).strip()
        if content:
            blocks.append(content)

        return [
            build_chunk(
                kind,
                source,
                index,
                block[:MAX_CODE_CHUNK_CHARS],
                module="",
                name=name,
                node_type="block",
            )
            for index, block in enumerate(blocks)
        ]
