"""SQLite-backed storage for knowledge base files."""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from musakb.exceptions import EmbeddingError
from musakb.models import ANALYSIS_COLLECTION, COLLECTIONS, PRIVATE_COLLECTION, Chunk
from musakb.protocols.embedder import EmbeddingProvider
from musakb.storage.schema import SCHEMA
from musakb.storage.vector_index import VectorIndex

logger = logging.getLogger(__name__)

BATCH_SIZE = 100

_CHUNK_FIELDS = ("source", "section", "module", "name", "node_type", "content_hash")


def rewrite_source(source: Optional[str], provenance: dict[str, str]) -> Optional[str]:
    """Turn ``<repo>/<path>`` into a versioned GitHub URL when the repo is known.

    Sources without a ``repo:<name>`` entry (private works, analyses) are
    returned unchanged.
    """
    if not source:
        return source

    parts = source.split("/", 1)
    if len(parts) != 2:
        return source

    repo_name, rest_of_path = parts
    tag = provenance.get(f"repo:{repo_name}")
    if not tag:
        return source

    owner = provenance.get("github_owner") or "javier-sy"
    return f"https://github.com/{owner}/{repo_name}/blob/{tag}/{rest_of_path}"


class KnowledgeStore:
    """SQLite-backed storage for chunks, their embeddings and provenance."""

    def __init__(self, path: Path | str, dimension: int = 1024):
        self.path = Path(path)
        self.vector_index = VectorIndex(dimension=dimension)

    def exists(self) -> bool:
        return self.path.exists()

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create schema if not exists."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.connection() as conn:
            conn.executescript(SCHEMA)
            self.vector_index.create(conn)

    def upsert_chunks(
        self,
        chunks: Sequence[Chunk],
        embedder: EmbeddingProvider,
        collection_override: Optional[str] = None,
        batch_size: int = BATCH_SIZE,
    ) -> int:
        """Embed and store chunks, one transaction per batch.

        Chunk rows are replaced by id. Vector rows cannot be replaced, so
        each is deleted and re-inserted in the same transaction. A failing
        batch rolls back alone; earlier batches stay committed.

        Returns:
            Number of chunks stored

        Raises:
            EmbeddingError: provider failure, or a result of the wrong length
        """
        stored = 0
        for start in range(0, len(chunks), batch_size):
            batch = chunks[start : start + batch_size]
            logger.info(f"  Embedding batch {start // batch_size + 1} ({len(batch)} chunks)...")

            embeddings = embedder.embed([chunk.content for chunk in batch])
            if len(embeddings) != len(batch):
                raise EmbeddingError(
                    f"Embedding provider returned {len(embeddings)} vectors for {len(batch)} texts"
                )

            with self.connection() as conn:
                for chunk, embedding in zip(batch, embeddings):
                    kind = collection_override or chunk.kind or "docs"
                    conn.execute(
                        """INSERT OR REPLACE INTO chunks
                           (id, content, kind, source, section, module, name, node_type, content_hash)
                           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                        (
                            chunk.id,
                            chunk.content,
                            kind,
                            *(chunk.metadata.get(key) for key in _CHUNK_FIELDS),
                        ),
                    )
                    self.vector_index.delete(conn, chunk.id)
                    self.vector_index.insert(conn, chunk.id, embedding)
            stored += len(batch)

        return stored

    def set_metadata(self, key: str, value: str) -> None:
        """Store a metadata key-value pair."""
        with self.connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
                (key, value),
            )

    def get_metadata(self, key: str) -> Optional[str]:
        """Retrieve a metadata value by key."""
        with self.connection() as conn:
            row = conn.execute(
                "SELECT value FROM metadata WHERE key = ?", (key,)
            ).fetchone()
            return row["value"] if row else None

    def provenance(self) -> dict[str, str]:
        """All metadata entries, for rewriting sources of a result set."""
        with self.connection() as conn:
            return {row["key"]: row["value"] for row in conn.execute("SELECT key, value FROM metadata")}

    def source_to_url(self, source: Optional[str]) -> Optional[str]:
        return rewrite_source(source, self.provenance())

    # Removal

    def remove_work_chunks(self, work_name: str) -> int:
        """Remove a private work's chunks and its analysis. Returns rows removed."""
        prefix = f"{work_name}/"
        return self._delete_where(
            """(kind = ? AND substr(source, 1, ?) = ?)
               OR (kind = ? AND name = ?)""",
            (PRIVATE_COLLECTION, len(prefix), prefix, ANALYSIS_COLLECTION, work_name),
        )

    def remove_by_name(self, kind: str, name: str) -> int:
        """Remove chunks of one collection labelled ``name`` (analyses, best practices)."""
        return self._delete_where("kind = ? AND name = ?", (kind, name))

    def remove_ids(self, chunk_ids: Iterable[str]) -> int:
        ids = list(chunk_ids)
        if not ids or not self.exists():
            return 0
        with self.connection() as conn:
            self._delete_ids(conn, ids)
        return len(ids)

    def chunk_ids(self, kind: str, name: str) -> set[str]:
        with self.connection() as conn:
            cursor = conn.execute("SELECT id FROM chunks WHERE kind = ? AND name = ?", (kind, name))
            return {row["id"] for row in cursor}

    def _delete_where(self, where: str, params: tuple) -> int:
        if not self.exists():
            return 0
        with self.connection() as conn:
            ids = [row["id"] for row in conn.execute(f"SELECT id FROM chunks WHERE {where}", params)]
            self._delete_ids(conn, ids)
        return len(ids)

    def _delete_ids(self, conn: sqlite3.Connection, chunk_ids: list[str]) -> None:
        for chunk_id in chunk_ids:
            self.vector_index.delete(conn, chunk_id)
            conn.execute("DELETE FROM chunks WHERE id = ?", (chunk_id,))

    # Query methods for status tools

    def collection_stats(self) -> dict[str, int]:
        """Chunk count per collection, omitting empty ones."""
        with self.connection() as conn:
            counts = {
                row["kind"]: row["cnt"]
                for row in conn.execute("SELECT kind, COUNT(*) AS cnt FROM chunks GROUP BY kind")
            }
        return {kind: counts[kind] for kind in COLLECTIONS if counts.get(kind)}

    def list_works(self) -> list[dict]:
        """Private works (first source path component) with chunk counts."""
        with self.connection() as conn:
            cursor = conn.execute(
                """SELECT substr(source, 1, instr(source, '/') - 1) AS work_name,
                          COUNT(*) AS chunk_count
                   FROM chunks
                   WHERE kind = ? AND instr(source, '/') > 0
                   GROUP BY work_name
                   ORDER BY work_name""",
                (PRIVATE_COLLECTION,),
            )
            return [dict(row) for row in cursor]

    def get_chunk(self, conn: sqlite3.Connection, chunk_id: str) -> Optional[sqlite3.Row]:
        return conn.execute("SELECT * FROM chunks WHERE id = ?", (chunk_id,)).fetchone()
