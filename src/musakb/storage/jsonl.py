"""JSONL handoff format between chunking and embedding."""

import json
from collections import defaultdict
from pathlib import Path
from typing import Iterable

from musakb.models import Chunk

MANIFEST = "manifest.json"


def write_chunks_jsonl(chunks: Iterable[Chunk], output_dir: Path) -> dict:
    """Write one ``<kind>.jsonl`` per collection plus ``manifest.json``.

    Returns:
        The manifest: ``{"total_chunks": n, "by_kind": {kind: n, ...}}``
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    by_kind: dict[str, list[Chunk]] = defaultdict(list)
    for chunk in chunks:
        by_kind[chunk.kind or "unknown"].append(chunk)

    for kind, kind_chunks in by_kind.items():
        with open(output_dir / f"{kind}.jsonl", "w", encoding="utf-8") as f:
            for chunk in kind_chunks:
                f.write(chunk.to_json() + "\n")

    manifest = {
        "total_chunks": sum(len(c) for c in by_kind.values()),
        "by_kind": {kind: len(by_kind[kind]) for kind in sorted(by_kind)},
    }
    (output_dir / MANIFEST).write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    return manifest


def read_chunks_jsonl(chunks_dir: Path) -> list[Chunk]:
    """Read every ``*.jsonl`` file in sorted order back into chunks."""
    chunks = []
    for jsonl_file in sorted(chunks_dir.glob("*.jsonl")):
        with open(jsonl_file, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                chunks.append(Chunk.from_dict(json.loads(line)))
    return chunks


def read_manifest(chunks_dir: Path) -> dict | None:
    path = chunks_dir / MANIFEST
    if not path.exists():
        return None
    return json.loads(path.read_text(encoding="utf-8"))
