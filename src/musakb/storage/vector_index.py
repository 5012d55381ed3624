"""Exact cosine KNN over embeddings stored as SQLite BLOBs."""

import sqlite3

import numpy as np


class VectorIndex:
    """Vector rows keyed by chunk id in a plain SQLite table.

    Supports insert, delete and K-nearest-neighbour queries only. There is
    no replace: inserting an id that already exists fails, so callers must
    delete first. All methods work on a connection owned by the caller, so
    vector writes share the caller's transaction.
    """

    def __init__(self, table: str = "chunks_vec", dimension: int = 1024):
        self.table = table
        self.dimension = dimension

    def create(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            f"""CREATE TABLE IF NOT EXISTS {self.table} (
                   chunk_id TEXT PRIMARY KEY,
                   embedding BLOB NOT NULL
               )"""
        )

    def insert(self, conn: sqlite3.Connection, chunk_id: str, embedding: np.ndarray) -> None:
        vector = np.asarray(embedding, dtype=np.float32).reshape(-1)
        if vector.shape[0] != self.dimension:
            raise ValueError(
                f"Embedding for {chunk_id} has {vector.shape[0]} dimensions, expected {self.dimension}"
            )
        conn.execute(
            f"INSERT INTO {self.table} (chunk_id, embedding) VALUES (?, ?)",
            (chunk_id, vector.tobytes()),
        )

    def delete(self, conn: sqlite3.Connection, chunk_id: str) -> None:
        conn.execute(f"DELETE FROM {self.table} WHERE chunk_id = ?", (chunk_id,))

    def count(self, conn: sqlite3.Connection) -> int:
        return conn.execute(f"SELECT COUNT(*) FROM {self.table}").fetchone()[0]

    def knn(self, conn: sqlite3.Connection, query: np.ndarray, k: int) -> list[tuple[str, float]]:
        """Return up to ``k`` ``(chunk_id, cosine distance)`` pairs, closest first."""
        if k <= 0:
            return []

        rows = conn.execute(f"SELECT chunk_id, embedding FROM {self.table}").fetchall()
        if not rows:
            return []

        ids = [row[0] for row in rows]
        matrix = np.vstack([np.frombuffer(row[1], dtype=np.float32) for row in rows])
        distances = self._cosine_distances(np.asarray(query, dtype=np.float32).reshape(-1), matrix)

        # stable sort keeps insertion order for ties
        order = np.argsort(distances, kind="stable")[:k]
        return [(ids[i], float(distances[i])) for i in order]

    @staticmethod
    def _cosine_distances(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
        """1 - cosine similarity; zero vectors are at distance 1."""
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        dots = matrix @ query
        similarity = np.divide(dots, norms, out=np.zeros_like(dots), where=norms != 0)
        return 1.0 - similarity
