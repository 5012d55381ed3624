"""Deterministic chunk identity, fingerprints and source path hygiene."""

import hashlib
import os
import unicodedata
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Iterable

from musakb.exceptions import AbsoluteSourceError
from musakb.models import Chunk


def stable_id(kind: str, source_path: str, index: int) -> str:
    """Build the chunk id ``<kind>/<12 hex>/<4-digit index>``.

    Depends only on its arguments, so re-chunking unchanged input
    reproduces the same ids.
    """
    path_hash = hashlib.sha256(source_path.encode("utf-8")).hexdigest()[:12]
    return f"{kind}/{path_hash}/{index:04d}"


def content_hash(text: str) -> str:
    """16 hex digit fingerprint of chunk content, for change detection."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


def is_absolute_source(source: str) -> bool:
    return PurePosixPath(source).is_absolute() or PureWindowsPath(source).is_absolute()


def relative_source(path: str | Path, root: str | Path) -> str:
    """Source label for ``path`` relative to ``root``.

    Both sides are NFC-normalized first: on macOS the root may come back
    decomposed (NFD) while globbed paths are composed, which would make the
    prefix fail to match and leave the path absolute.
    """
    path_str = unicodedata.normalize("NFC", os.fspath(path))
    root_str = unicodedata.normalize("NFC", os.fspath(root)).rstrip("/")
    prefix = root_str + "/"
    if path_str.startswith(prefix):
        return path_str[len(prefix):]
    return path_str


def validate_relative_sources(chunks: Iterable[Chunk]) -> None:
    """Reject the whole batch if any chunk carries an absolute ``source``.

    Raises:
        AbsoluteSourceError: listing every offending source
    """
    bad = [c.source for c in chunks if c.source and is_absolute_source(c.source)]
    if bad:
        raise AbsoluteSourceError(bad)
