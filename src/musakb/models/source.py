"""A source file scheduled for chunking."""

from dataclasses import dataclass
from pathlib import Path

MARKDOWN = "markdown"
RUBY = "ruby"
DEMO_CODE = "demo_code"


@dataclass(frozen=True)
class SourceFile:
    """A file on disk plus how it should be labelled and chunked."""

    path: Path
    source: str  # relative label stored in chunk metadata
    kind: str
    strategy: str  # MARKDOWN, RUBY or DEMO_CODE
