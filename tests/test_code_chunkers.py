"""Tests for the demo-code and block chunkers."""

from musakb.chunkers import BlockChunker, DemoCodeChunker
from musakb.chunkers.demo_chunker import KeywordBoundary, first_comment


def test_demo_sections_close_on_end_and_size():
    text = "# Setup the clock\nclock = Clock.new\n\nend\n\n" + "x" * 250 + "\n\ntail = 1"

    chunks = DemoCodeChunker().chunk(text, "musadsl-demo/demo-01/musa/score.rb", "demo_code")

    assert len(chunks) == 2
    assert chunks[0].content == "# Setup the clock\nclock = Clock.new\n\nend"
    assert chunks[0].metadata["section"] == "Setup the clock"
    # the short tail is glued onto the last section
    assert chunks[1].content == "x" * 250 + "\n\ntail = 1"
    assert chunks[1].metadata["section"] == "(code)"


def test_demo_short_file_yields_nothing():
    assert DemoCodeChunker().chunk("a = 1", "demo.rb", "demo_code") == []


def test_demo_short_sections_leave_index_gaps():
    text = "x = 1\n\nend\n\n" + "# Main loop\n" + "y" * 220

    chunks = DemoCodeChunker().chunk(text, "demo.rb", "demo_code")

    assert len(chunks) == 1
    assert chunks[0].id.endswith("/0001")
    assert chunks[0].metadata["section"] == "Main loop"


def test_demo_content_is_capped():
    text = "# Huge\n" + "z" * 5000

    chunks = DemoCodeChunker().chunk(text, "demo.rb", "demo_code")

    assert len(chunks[0].content) == 4000


def test_custom_boundary_detector():
    text = "a\n\n}\n\n" + "b" * 250

    assert DemoCodeChunker(boundary=KeywordBoundary(("}",))).split_sections(text) == ["a\n\n}", "b" * 250]
    assert DemoCodeChunker().split_sections(text) == [text]


def test_first_comment():
    assert first_comment("#!/usr/bin/env ruby\n# Canon in D\nx = 1") == "Canon in D"
    assert first_comment("x = 1") == "(code)"
    assert first_comment("# " + "c" * 100) == "c" * 80


def test_block_chunker_cuts_at_blank_after_ten_lines():
    first = [f"line_{i} = {i}" for i in range(12)]
    second = ["a = 1", "b = 2", "c = 3"]
    text = "\n".join(first) + "\n\n" + "\n".join(second) + "\n"

    chunks = BlockChunker().chunk(text, "lib/broken.rb", "api")

    assert [c.content for c in chunks] == ["\n".join(first), "\n".join(second)]
    assert chunks[0].metadata["node_type"] == "block"
    assert chunks[0].metadata["name"] == "broken"
    assert chunks[0].metadata["module"] == ""


def test_block_chunker_keeps_short_blocks_together():
    text = "a = 1\n\nb = 2\n\nc = 3\n"

    chunks = BlockChunker().chunk(text, "lib/x.rb", "api")

    assert len(chunks) == 1
    assert chunks[0].content == "a = 1\n\nb = 2\n\nc = 3"


def test_block_chunker_accepts_empty_text():
    assert BlockChunker().chunk("", "lib/x.rb", "api") == []


def test_block_chunker_splits_on_newlines_only():
    text = "\n".join(f"v{i} = {i}" for i in range(12)) + "\x0c\nw = 1\n"

    chunks = BlockChunker().chunk(text, "lib/x.rb", "api")

    assert len(chunks) == 1
    assert chunks[0].content == text.strip()
