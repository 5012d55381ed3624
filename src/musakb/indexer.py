"""Indexing orchestration: chunk sources, embed them, store them.

The public knowledge base is built in two steps, ``build_chunks`` (no API
key needed, writes JSONL) and ``build_database`` (embeds the JSONL into
``knowledge.db``). Private works, analyses and user best practices go
straight into ``private.db``.
"""

import logging
import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from musakb.chunkers import DemoCodeChunker, HeadingChunker, RubyChunker
from musakb.config import Settings
from musakb.embedders import create_embedder
from musakb.ingesters import MusaDSLIngester, WorkIngester
from musakb.models import (
    ANALYSIS_COLLECTION,
    DEMO_CODE,
    MARKDOWN,
    PRIVATE_COLLECTION,
    RUBY,
    Chunk,
    SourceFile,
)
from musakb.protocols import ChunkingStrategy, EmbeddingProvider
from musakb.protocols.embedder import DOCUMENT
from musakb.storage import KnowledgeStore, read_chunks_jsonl, read_manifest, write_chunks_jsonl
from musakb.utils.identity import validate_relative_sources

logger = logging.getLogger(__name__)

BEST_PRACTICE_COLLECTION = "best_practice"

# Version files used to pin GitHub links to the indexed release
VERSION_FILES = {
    "musa-dsl": "lib/musa-dsl/version.rb",
    "midi-events": "lib/midi-events/version.rb",
    "midi-parser": "lib/midi-parser/version.rb",
    "midi-communications": "lib/midi-communications/version.rb",
    "midi-communications-macos": "lib/midi-communications-macos/version.rb",
    "musalce-server": "lib/version.rb",
}

_VERSION = re.compile(r"""VERSION\s*=\s*['"]([^'"]+)['"]""")


class Indexer:
    """Builds and maintains the knowledge stores described by ``settings``."""

    def __init__(self, settings: Settings, embedder: Optional[EmbeddingProvider] = None):
        self.settings = settings
        self._embedder = embedder
        self.chunkers: dict[str, ChunkingStrategy] = {
            MARKDOWN: HeadingChunker(),
            RUBY: RubyChunker(),
            DEMO_CODE: DemoCodeChunker(),
        }

    @property
    def embedder(self) -> EmbeddingProvider:
        if self._embedder is None:
            self._embedder = create_embedder(self.settings, input_type=DOCUMENT)
        return self._embedder

    @property
    def knowledge_store(self) -> KnowledgeStore:
        return KnowledgeStore(self.settings.knowledge_db_path, self.settings.embedding_dimension)

    @property
    def private_store(self) -> KnowledgeStore:
        return KnowledgeStore(self.settings.private_db_path, self.settings.embedding_dimension)

    # Chunking

    def chunk_files(self, files: Iterable[SourceFile]) -> list[Chunk]:
        """Chunk every file; unreadable or unchunkable files are skipped with a warning."""
        chunks = []
        for source_file in files:
            try:
                text = source_file.path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping {source_file.source}: {e}")
                continue
            chunker = self.chunkers[source_file.strategy]
            try:
                chunks.extend(chunker.chunk(text, source_file.source, source_file.kind))
            except Exception as e:
                logger.warning(f"Skipping {source_file.source}: could not chunk ({e!r})")
        return chunks

    def chunk_all_sources(self, source_root: Path) -> list[Chunk]:
        """Chunk the whole MusaDSL source root.

        Raises:
            AbsoluteSourceError: if any chunk would carry an absolute path
        """
        chunks = self.chunk_files(MusaDSLIngester().ingest(source_root))
        validate_relative_sources(chunks)
        return chunks

    def build_chunks(self, source_root: Path, chunks_dir: Optional[Path] = None) -> str:
        chunks_dir = chunks_dir or self.settings.chunks_dir
        lines = [f"Chunking sources from: {source_root}"]
        manifest = write_chunks_jsonl(self.chunk_all_sources(source_root), chunks_dir)
        lines.append(f"Generated {manifest['total_chunks']} chunks:")
        lines.extend(f"  {kind}: {count}" for kind, count in manifest["by_kind"].items())
        lines.append(f"Written to: {chunks_dir}")
        return "\n".join(lines)

    # Public knowledge base

    def build_database(self, source_root: Path, chunks_dir: Optional[Path] = None) -> str:
        """Embed the JSONL chunks into the knowledge store, generating them if missing."""
        chunks_dir = chunks_dir or self.settings.chunks_dir
        lines = []

        if read_manifest(chunks_dir) is None:
            lines.append("No existing chunks found, generating...")
            lines.append(self.build_chunks(source_root, chunks_dir))

        chunks = read_chunks_jsonl(chunks_dir)
        validate_relative_sources(chunks)
        lines.append(f"Read {len(chunks)} chunks")

        embedder = self.embedder
        store = self.knowledge_store
        lines.append(f"Embedding and storing in knowledge base at: {store.path}")
        store.initialize()
        store.upsert_chunks(chunks, embedder, batch_size=self.settings.embed_batch_size)

        lines.append("Storing source metadata...")
        self.store_source_metadata(store, source_root)

        version_file = Path(f"{store.path}.version")
        version_file.write_text(datetime.now(timezone.utc).isoformat(timespec="seconds"), encoding="utf-8")
        lines.append("Done!")
        return "\n".join(lines)

    def store_source_metadata(self, store: KnowledgeStore, source_root: Path) -> None:
        """Record ``repo:<name>`` version tags used to build GitHub links."""
        store.set_metadata("github_owner", self.settings.github_owner)

        for repo_dir in sorted(p for p in source_root.iterdir() if p.is_dir()):
            store.set_metadata(f"repo:{repo_dir.name}", self._repo_tag(repo_dir))

    @staticmethod
    def _repo_tag(repo_dir: Path) -> str:
        version_rel = VERSION_FILES.get(repo_dir.name)
        if version_rel:
            version_file = repo_dir / version_rel
            if version_file.is_file():
                match = _VERSION.search(version_file.read_text(encoding="utf-8"))
                if match:
                    return f"v{match.group(1)}"
        # Repos without a VERSION constant (e.g. musadsl-demo)
        return "main"

    # Private works

    def _store_private(self, chunks: list[Chunk], collection_override: Optional[str] = None) -> None:
        validate_relative_sources(chunks)
        store = self.private_store
        store.initialize()
        store.upsert_chunks(
            chunks,
            self.embedder,
            collection_override=collection_override,
            batch_size=self.settings.embed_batch_size,
        )

    def add_work(self, work_path: Path) -> str:
        # resolved so that "." still names the work
        work_path = Path(work_path).expanduser().resolve()
        ingester = WorkIngester()
        if not ingester.can_handle(work_path):
            return f"Not a directory: {work_path}"

        chunks = self.chunk_files(ingester.ingest(work_path))
        if not chunks:
            return f"No content found in: {work_path}"

        lines = [f"Indexing {len(chunks)} chunks from: {work_path.name}"]
        self._store_private(chunks, collection_override=PRIVATE_COLLECTION)
        lines.append("Done!")
        return "\n".join(lines)

    def list_works(self) -> str:
        store = self.private_store
        works = store.list_works() if store.exists() else []
        if not works:
            return "No private works indexed yet."

        lines = ["Indexed private works:", ""]
        lines.append(f"  {'Work':<40} Chunks")
        lines.append(f"  {'-' * 40} {'-' * 6}")
        for row in works:
            lines.append(f"  {row['work_name']:<40} {row['chunk_count']}")
        lines.append("")
        total = sum(row["chunk_count"] for row in works)
        lines.append(f"Total: {len(works)} works, {total} chunks")
        return "\n".join(lines)

    def remove_work(self, work_name: str) -> str:
        count = self.private_store.remove_work_chunks(work_name)
        if count == 0:
            return f"Work '{work_name}' not found in index."
        return f"Removed {count} chunks for '{work_name}'."

    # Analyses and best practices

    def _named_markdown_chunks(self, text: str, source: str, kind: str, name: str) -> list[Chunk]:
        chunks = self.chunkers[MARKDOWN].chunk(text, source, kind)
        for chunk in chunks:
            chunk.metadata["name"] = name
        return chunks

    def _replace_named(self, chunks: list[Chunk], kind: str, name: str) -> bool:
        """Store ``chunks`` as the new content of ``name``; True if it replaced older content.

        Old rows are removed only after the new ones are stored.
        """
        store = self.private_store
        previous = store.chunk_ids(kind, name) if store.exists() else set()
        self._store_private(chunks)
        store.remove_ids(previous - {chunk.id for chunk in chunks})
        return bool(previous)

    def add_analysis(self, work_name: str, analysis_text: str) -> str:
        """Index a composition analysis, replacing any earlier one for the work."""
        chunks = self._named_markdown_chunks(
            analysis_text, f"analysis/{work_name}", ANALYSIS_COLLECTION, work_name
        )
        if not chunks:
            return "Analysis text is empty; nothing indexed."

        replaced = self._replace_named(chunks, ANALYSIS_COLLECTION, work_name)
        verb = "Replaced" if replaced else "Stored"
        return f"{verb} analysis for '{work_name}' ({len(chunks)} sections indexed)."

    def add_best_practice(self, name: str, content: str) -> str:
        chunks = self._named_markdown_chunks(
            content, f"best-practices/{name}.md", BEST_PRACTICE_COLLECTION, name
        )
        if not chunks:
            return "Best practice content is empty; nothing indexed."

        self._replace_named(chunks, BEST_PRACTICE_COLLECTION, name)
        return f"Saved best practice '{name}' ({len(chunks)} sections indexed)."

    def remove_best_practice(self, name: str) -> str:
        count = self.private_store.remove_by_name(BEST_PRACTICE_COLLECTION, name)
        if count == 0:
            return f"Best practice '{name}' not found in index."
        return f"Removed {count} chunks for best practice '{name}'."

    # Status

    def index_status(self, chunks_dir: Optional[Path] = None) -> str:
        chunks_dir = chunks_dir or self.settings.chunks_dir
        lines = []

        manifest = read_manifest(chunks_dir)
        if manifest:
            lines.append(f"Chunks: {manifest['total_chunks']} total")
            lines.extend(f"  {kind}: {count}" for kind, count in manifest["by_kind"].items())
        else:
            lines.append("Chunks: not generated (run `musakb chunk`)")

        store = self.knowledge_store
        version_file = Path(f"{store.path}.version")
        if store.exists():
            built = version_file.read_text(encoding="utf-8").strip() if version_file.exists() else "unknown"
            lines.append(f"\nKnowledge DB: present (built {built})")
            lines.extend(self._stats_lines(store))
        else:
            lines.append("\nKnowledge DB: not built (run `musakb embed`)")

        store = self.private_store
        if store.exists():
            lines.append("\nPrivate DB: present")
            lines.extend(self._stats_lines(store))
        else:
            lines.append("\nPrivate DB: not present (use add_work to index private works)")

        return "\n".join(lines)

    @staticmethod
    def _stats_lines(store: KnowledgeStore) -> list[str]:
        try:
            return [f"  {name}: {count} documents" for name, count in store.collection_stats().items()]
        except sqlite3.Error as e:
            return [f"  (could not read stats: {e})"]
