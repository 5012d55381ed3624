"""Database schema for knowledge base files."""

SCHEMA = """
-- Chunks table: content plus the metadata fields search results show
CREATE TABLE IF NOT EXISTS chunks (
    id TEXT PRIMARY KEY,
    content TEXT NOT NULL,
    kind TEXT NOT NULL,
    source TEXT,
    section TEXT,
    module TEXT,
    name TEXT,
    node_type TEXT,
    content_hash TEXT
);

-- Metadata table: provenance (repo versions, GitHub owner)
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

-- Indexes for removal and stats queries
CREATE INDEX IF NOT EXISTS idx_chunks_kind ON chunks(kind);
CREATE INDEX IF NOT EXISTS idx_chunks_source ON chunks(source);
"""
