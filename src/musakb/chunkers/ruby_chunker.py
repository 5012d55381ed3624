"""Definition-level chunking of Ruby source files."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import Iterator, Optional

from tree_sitter import Node

from musakb.chunkers.base import build_chunk, split_lines
from musakb.chunkers.block_chunker import BlockChunker
from musakb.chunkers.ruby_syntax import RubySyntax
from musakb.models import MAX_CODE_CHUNK_CHARS, Chunk

logger = logging.getLogger(__name__)

NAMESPACE_SEPARATOR = "::"


class NodeKind(Enum):
    """Tree nodes that matter for definition extraction."""

    NAMESPACE = "module"
    TYPE = "class"
    METHOD = "method"
    SINGLETON_METHOD = "singleton_method"
    OTHER = "other"

    @classmethod
    def of(cls, node: Node) -> "NodeKind":
        return _NODE_KINDS.get(node.type, cls.OTHER)


_NODE_KINDS = {
    "module": NodeKind.NAMESPACE,
    "class": NodeKind.TYPE,
    "method": NodeKind.METHOD,
    "singleton_method": NodeKind.SINGLETON_METHOD,
}


@dataclass(frozen=True)
class Definition:
    """A module, class or method found in the tree, with its line range."""

    kind: NodeKind
    name: str
    module_path: str
    start_line: int
    end_line: int


def _text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def constant_name(node: Optional[Node]) -> str:
    """Flatten ``Foo``, ``Foo::Bar`` and ``::Foo`` into one name."""
    if node is None:
        return ""
    if node.type == "constant":
        return _text(node)
    if node.type == "scope_resolution":
        scope = node.child_by_field_name("scope")
        name = constant_name(node.child_by_field_name("name"))
        if scope is None:
            # root-relative ::Foo
            return name
        return f"{constant_name(scope)}{NAMESPACE_SEPARATOR}{name}"
    return ""


def _leaves(node: Node) -> Iterator[Node]:
    """Leaf tokens of the subtree in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.child_count == 0:
            yield current
        else:
            stack.extend(reversed(current.children))


def start_line(node: Node) -> int:
    """1-based line of the first leaf token in depth-first order."""
    first = next(_leaves(node), node)
    return first.start_point[0] + 1


def end_line(node: Node) -> int:
    """1-based maximum line reached by any leaf token of the subtree."""
    return max((leaf.end_point[0] for leaf in _leaves(node)), default=node.end_point[0]) + 1


def extract_definitions(node: Node, module_path: tuple[str, ...] = ()) -> list[Definition]:
    """Collect definitions in document order, building namespace paths on the way down.

    The walk keeps its own stack: deeply nested expressions must not hit
    the interpreter's recursion limit.
    """
    definitions = []
    stack = [(node, module_path)]

    while stack:
        current, path = stack.pop()
        kind = NodeKind.of(current)

        if kind in (NodeKind.NAMESPACE, NodeKind.TYPE):
            name = constant_name(current.child_by_field_name("name"))
            current_path = path + (name,)
            definitions.append(
                Definition(
                    kind=kind,
                    name=name,
                    module_path=NAMESPACE_SEPARATOR.join(current_path),
                    start_line=start_line(current),
                    end_line=end_line(current),
                )
            )
            body = current.child_by_field_name("body")
            if body is not None:
                stack.append((body, current_path))
        elif kind in (NodeKind.METHOD, NodeKind.SINGLETON_METHOD):
            definitions.append(
                Definition(
                    kind=kind,
                    name=_text(current.child_by_field_name("name")),
                    module_path=NAMESPACE_SEPARATOR.join(path),
                    start_line=start_line(current),
                    end_line=end_line(current),
                )
            )
        else:
            stack.extend((child, path) for child in reversed(current.children) if child.child_count > 0)

    return definitions


def preceding_comments(lines: list[str], line_number: int) -> str:
    """The contiguous ``#`` comment lines directly above ``line_number``."""
    comments: list[str] = []
    i = line_number - 2
    while i >= 0 and lines[i].strip().startswith("#"):
        comments.insert(0, lines[i].rstrip("\r\n"))
        i -= 1
    return "\n".join(comments)


class RubyChunker:
    """One chunk per module, class and method, with its leading comments.

    Files that do not parse are split with ``BlockChunker`` instead.
    """

    MIN_CHUNK_SIZE = 30

    def __init__(self, syntax: RubySyntax | None = None, fallback: BlockChunker | None = None):
        self.syntax = syntax or RubySyntax()
        self.fallback = fallback or BlockChunker()

    def chunk(self, text: str, source: str, kind: str) -> list[Chunk]:
        root = self.syntax.parse(text)
        if root is None:
            logger.warning(f"Could not parse {source}, using block chunking")
            return self.fallback.chunk(text, source, kind)

        lines = split_lines(text)
        chunks = []

        for index, defn in enumerate(extract_definitions(root)):
            comments = preceding_comments(lines, defn.start_line)
            last = min(defn.end_line, len(lines))
            node_text = "".join(lines[defn.start_line - 1 : last])
            content = f"{comments}\n{node_text}" if comments else node_text

            if len(content.strip()) < self.MIN_CHUNK_SIZE:
                continue
            content = content[:MAX_CODE_CHUNK_CHARS]

            chunks.append(
                build_chunk(
                    kind,
                    source,
                    index,
                    content,
                    module=defn.module_path,
                    name=defn.name,
                    node_type=defn.kind.value,
                )
            )

        if not chunks and text.strip():
            truncated = text[:MAX_CODE_CHUNK_CHARS]
            chunks.append(
                build_chunk(
                    kind,
                    source,
                    0,
                    truncated,
                    module="",
                    name=PurePosixPath(source).stem,
                    node_type="file",
                )
            )

        return chunks
