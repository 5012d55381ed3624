"""Ingester for private composition works."""

from pathlib import Path
from typing import Iterator

from musakb.models import DEMO_CODE, MARKDOWN, PRIVATE_COLLECTION, SourceFile


class WorkIngester:
    """Ingester for a private composition project folder.

    Every Ruby and Markdown file below the folder is indexed, labelled
    ``<work name>/<relative path>`` where the work name is the folder name.
    """

    source_type = "work"

    SKIP_DIRS = {"vendor", ".bundle"}

    def can_handle(self, source: Path) -> bool:
        """Check if this is an existing directory."""
        return source.is_dir()

    def ingest(self, source: Path) -> Iterator[SourceFile]:
        work_name = source.name
        for pattern, strategy in (("*.rb", DEMO_CODE), ("*.md", MARKDOWN)):
            for path in sorted(source.rglob(pattern)):
                rel_path = path.relative_to(source)
                if self._should_skip(rel_path) or not path.is_file():
                    continue
                yield SourceFile(
                    path,
                    f"{work_name}/{rel_path.as_posix()}",
                    PRIVATE_COLLECTION,
                    strategy,
                )

    def _should_skip(self, path: Path) -> bool:
        """Skip bundled dependencies."""
        return any(part in self.SKIP_DIRS for part in path.parts[:-1])
