"""Tests for Settings."""

from pathlib import Path

from musakb.config import Settings


def test_defaults():
    settings = Settings.from_env({})

    assert settings.embedder == "voyage"
    assert settings.voyage_model == "voyage-code-3"
    assert settings.embedding_dimension == 1024
    assert settings.knowledge_db_path.name == "knowledge.db"
    assert settings.private_db_path.name == "private.db"
    assert not settings.api_key_configured
    assert not settings.embedder_configured


def test_from_env():
    settings = Settings.from_env(
        {
            "KNOWLEDGE_DB_PATH": "/data/kb.db",
            "PRIVATE_DB_PATH": "/data/private.db",
            "VOYAGE_API_KEY": "pa-123",
            "MUSAKB_GITHUB_OWNER": "someone",
            "MUSAKB_LOG_LEVEL": "DEBUG",
        }
    )

    assert settings.knowledge_db_path == Path("/data/kb.db")
    assert settings.private_db_path == Path("/data/private.db")
    assert settings.github_owner == "someone"
    assert settings.log_level == "DEBUG"
    assert settings.api_key_configured


def test_unexpanded_placeholder_is_not_a_key():
    settings = Settings.from_env({"VOYAGE_API_KEY": "${VOYAGE_API_KEY}"})

    assert not settings.api_key_configured


def test_local_embedder_needs_no_key():
    assert Settings(embedder="local").embedder_configured


def test_with_overrides_ignores_none():
    settings = Settings().with_overrides(knowledge_db_path=Path("/tmp/kb.db"), chunks_dir=None)

    assert settings.knowledge_db_path == Path("/tmp/kb.db")
    assert settings.chunks_dir == Settings().chunks_dir
