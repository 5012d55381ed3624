"""Ruby parse trees via tree-sitter."""

from typing import Optional

import tree_sitter_ruby
from tree_sitter import Language, Node, Parser


class RubySyntax:
    """Parses Ruby source into a tree-sitter tree.

    A tree that contains syntax errors is reported as unparseable (``None``)
    rather than handed out partially.
    """

    def __init__(self) -> None:
        self._parser: Parser | None = None

    @property
    def parser(self) -> Parser:
        """Lazy-load the grammar on first access."""
        if self._parser is None:
            self._parser = Parser(Language(tree_sitter_ruby.language()))
        return self._parser

    def parse(self, text: str) -> Optional[Node]:
        """Return the root node, or None if the source does not parse cleanly."""
        tree = self.parser.parse(text.encode("utf-8"))
        root = tree.root_node
        if root.has_error:
            return None
        return root
