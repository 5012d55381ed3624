"""Tests for the JSONL chunk handoff files."""

import json

from musakb.storage import read_chunks_jsonl, read_manifest, write_chunks_jsonl

from conftest import make_chunk


def test_write_groups_by_kind_and_writes_manifest(tmp_path):
    chunks = [
        make_chunk("Doc one", kind="docs", source="musa-dsl/docs/a.md"),
        make_chunk("Api one", kind="api", source="musa-dsl/lib/musa-dsl/a.rb"),
        make_chunk("Doc two", kind="docs", source="musa-dsl/docs/b.md"),
    ]

    manifest = write_chunks_jsonl(chunks, tmp_path / "chunks")

    assert manifest == {"total_chunks": 3, "by_kind": {"api": 1, "docs": 2}}
    assert read_manifest(tmp_path / "chunks") == manifest
    docs_lines = (tmp_path / "chunks" / "docs.jsonl").read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["content"] for line in docs_lines] == ["Doc one", "Doc two"]


def test_read_back_preserves_chunks(tmp_path):
    chunks = [
        make_chunk("Composición en Ruby", kind="docs", source="musa-dsl/docs/é.md", section="Intro"),
        make_chunk("Api one", kind="api", source="musa-dsl/lib/musa-dsl/a.rb", module="Musa"),
    ]
    write_chunks_jsonl(chunks, tmp_path)

    restored = read_chunks_jsonl(tmp_path)

    # files are read in sorted order: api.jsonl before docs.jsonl
    assert [c.to_dict() for c in restored] == [chunks[1].to_dict(), chunks[0].to_dict()]
    assert "Composición" in (tmp_path / "docs.jsonl").read_text(encoding="utf-8")


def test_missing_manifest(tmp_path):
    assert read_manifest(tmp_path) is None
    assert read_chunks_jsonl(tmp_path) == []
