"""Runtime configuration for musakb."""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_HOME = Path.home() / ".musakb"


@dataclass(frozen=True)
class Settings:
    """Paths and provider settings, built once at process start.

    Every component receives the settings it needs explicitly; only
    ``from_env`` looks at the environment.
    """

    knowledge_db_path: Path = DEFAULT_HOME / "knowledge.db"
    private_db_path: Path = DEFAULT_HOME / "private.db"
    chunks_dir: Path = DEFAULT_HOME / "chunks"
    embedder: str = "voyage"  # "voyage" or "local"
    voyage_api_key: Optional[str] = None
    voyage_model: str = "voyage-code-3"
    local_model: str = "mixedbread-ai/mxbai-embed-large-v1"
    embedding_dimension: int = 1024
    embed_batch_size: int = 100
    github_owner: str = "javier-sy"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            knowledge_db_path=Path(env.get("KNOWLEDGE_DB_PATH", defaults.knowledge_db_path)),
            private_db_path=Path(env.get("PRIVATE_DB_PATH", defaults.private_db_path)),
            chunks_dir=Path(env.get("MUSAKB_CHUNKS_DIR", defaults.chunks_dir)),
            embedder=env.get("MUSAKB_EMBEDDER", defaults.embedder),
            voyage_api_key=env.get("VOYAGE_API_KEY") or None,
            voyage_model=env.get("VOYAGE_MODEL", defaults.voyage_model),
            local_model=env.get("MUSAKB_LOCAL_MODEL", defaults.local_model),
            github_owner=env.get("MUSAKB_GITHUB_OWNER", defaults.github_owner),
            log_level=env.get("MUSAKB_LOG_LEVEL", defaults.log_level),
        )

    @property
    def api_key_configured(self) -> bool:
        """True if a usable Voyage key is present.

        Plugin hosts sometimes pass ``${VOYAGE_API_KEY}`` through unexpanded.
        """
        key = self.voyage_api_key or ""
        return bool(key) and "${" not in key

    @property
    def embedder_configured(self) -> bool:
        if self.embedder == "local":
            return True
        return self.api_key_configured

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with some fields replaced (used by CLI flags)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
