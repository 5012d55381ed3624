"""Core data model: the chunk and the collections it belongs to."""

import json
from dataclasses import dataclass, field
from typing import Any

# Collections (chunk "kind" values)
PUBLIC_COLLECTIONS = ("docs", "api", "demo_readme", "demo_code", "gem_readme", "best_practice")
PRIVATE_COLLECTION = "private_works"
ANALYSIS_COLLECTION = "analysis"
COLLECTIONS = PUBLIC_COLLECTIONS + (PRIVATE_COLLECTION, ANALYSIS_COLLECTION)
ALL = "all"

# Content caps
MAX_CODE_CHUNK_CHARS = 4000


@dataclass
class Chunk:
    """The atomic retrievable unit: stable id, literal content, metadata."""

    id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> str:
        return self.metadata.get("kind", "")

    @property
    def source(self) -> str:
        return self.metadata.get("source", "")

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "content": self.content, "metadata": self.metadata}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Chunk":
        return cls(
            id=data["id"],
            content=data["content"],
            metadata=dict(data.get("metadata") or {}),
        )
