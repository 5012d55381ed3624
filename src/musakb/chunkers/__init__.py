"""Chunking strategies: Markdown prose, Ruby definitions, free-form code."""

from musakb.chunkers.block_chunker import BlockChunker
from musakb.chunkers.demo_chunker import BoundaryDetector, DemoCodeChunker, KeywordBoundary
from musakb.chunkers.heading_chunker import HeadingChunker
from musakb.chunkers.ruby_chunker import RubyChunker

__all__ = [
    "HeadingChunker",
    "RubyChunker",
    "BlockChunker",
    "DemoCodeChunker",
    "BoundaryDetector",
    "KeywordBoundary",
]
