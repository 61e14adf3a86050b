"""Tree building from ``<``-delimited chunks.

The builder classifies each chunk by its prefix and grows the document in two
phases. Before the root element, comments, CDATA sections and ``<?...>`` /
``<!...>`` pseudo-elements are collected into the prolog. The first other
opening tag becomes the root, after which nesting is tracked purely
structurally with a depth counter and a path stack of open ancestors indexed
by depth. Closing tag names are not compared with their openers unless strict
mode is enabled.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from xmlfiles.shared import (
    MismatchedTagError,
    NoRootElementError,
    ParseError,
    XMLFilesConfig,
    get_logger,
    resolve_config,
)

from .nodes import PROLOG_PREFIXES, CData, Comment, Document, Element, PrologNode

COMMENT_PREFIX = "!--"
COMMENT_TERMINATOR = "-->"
CDATA_PREFIX = "![CDATA"
CDATA_OPENER = "CDATA["
CDATA_TERMINATOR = "]]"
CLOSING_PREFIX = "/"

MS_PER_SECOND = 1000

_TAG_PATTERN = re.compile(r"[^\s/>]+")
_ATTRIBUTE_PATTERN = re.compile(
    r"""([^\s=/>"']+)\s*=\s*(?:"([^"]*)"|'([^']*)')"""
)


@dataclass
class TagParts:
    """Pieces of an opening-tag chunk."""

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    content: Optional[str] = None
    self_closing: bool = False


def parse_attributes(text: str) -> Dict[str, str]:
    """Extract ``key="value"`` pairs in order; malformed tokens are skipped."""
    attributes: Dict[str, str] = {}
    for match in _ATTRIBUTE_PATTERN.finditer(text):
        key, double_quoted, single_quoted = match.groups()
        attributes[key] = double_quoted if double_quoted is not None else single_quoted
    return attributes


def parse_tag(chunk: str) -> Optional[TagParts]:
    """Split an opening-tag chunk into tag name, attributes and inline text.

    The tag head runs up to the first ``>``. Text following it becomes the
    inline content only when the chunk does not end with ``>``.

    Returns:
        TagParts, or None when the chunk holds no tag name
    """
    end = chunk.find(">")
    head = chunk if end < 0 else chunk[:end]
    match = _TAG_PATTERN.search(head)
    if match is None:
        return None

    content = None
    if end >= 0 and not chunk.endswith(">"):
        content = chunk[end + 1:].strip() or None

    return TagParts(
        tag=match.group(),
        attributes=parse_attributes(head[match.end():]),
        content=content,
        self_closing=head.rstrip().endswith("/"),
    )


def _strip_single_space(text: str) -> str:
    if text.startswith(" "):
        text = text[1:]
    if text.endswith(" "):
        text = text[:-1]
    return text


def extract_comment(chunk: str) -> Tuple[Comment, str]:
    """Return the comment in a ``!--`` chunk and the trimmed text after it."""
    body = chunk[len(COMMENT_PREFIX):]
    end = body.find(COMMENT_TERMINATOR)
    if end < 0:
        return Comment(_strip_single_space(body)), ""
    tail = body[end + len(COMMENT_TERMINATOR):].strip()
    return Comment(_strip_single_space(body[:end])), tail


def extract_cdata(chunk: str) -> Tuple[CData, str]:
    """Return the CDATA section in a ``![CDATA`` chunk and the text after it."""
    start = chunk.find(CDATA_OPENER)
    start = len(CDATA_PREFIX) if start < 0 else start + len(CDATA_OPENER)
    end = chunk.find(CDATA_TERMINATOR, start)
    if end < 0:
        return CData(chunk[start:]), ""
    rest = chunk[end + len(CDATA_TERMINATOR):]
    if rest.startswith(">"):
        rest = rest[1:]
    return CData(chunk[start:end]), rest.strip()


def _terminator_for(chunk: str) -> Optional[Tuple[str, int]]:
    if chunk.startswith(COMMENT_PREFIX):
        return COMMENT_TERMINATOR, len(COMMENT_PREFIX)
    if chunk.startswith(CDATA_PREFIX):
        return CDATA_TERMINATOR, len(CDATA_PREFIX)
    return None


class TreeBuilder:
    """Builds a :class:`Document` from a chunk sequence.

    Examples:
        >>> from xmlfiles.tokenization import iter_chunks
        >>> doc = TreeBuilder().build(iter_chunks("<a><b/><c><d/></c></a>"))
        >>> [child.tag for child in doc.root.children]
        ['b', 'c']
    """

    def __init__(
        self,
        config: Optional[XMLFilesConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Configuration, defaults to the process-wide default
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = resolve_config(config)
        self.strict_mode = self.config.builder.strict_mode
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_builder")
        self._reset_state()

    def _reset_state(self) -> None:
        self._prolog: List[PrologNode] = []
        self._path: List[Element] = []
        self._depth = 0
        self._in_prolog = True
        self._root_closed = False
        self._chunk_index = 0
        self._elements_created = 0
        self._ignored_chunks = 0

    def build(self, chunks: Iterable[str]) -> Document:
        """Build a document from chunks.

        Args:
            chunks: Chunk sequence as produced by the tokenization layer

        Returns:
            Document with the collected prolog and the root element

        Raises:
            NoRootElementError: If no root opening tag was found
            ParseError: On structural problems, in strict mode only
        """
        start_time = time.time()
        self._reset_state()
        chunk_count = 0

        for index, chunk in self._complete_chunks(iter(chunks)):
            self._chunk_index = index
            chunk_count += 1
            if not chunk:
                continue
            if self._in_prolog:
                self._process_prolog_chunk(chunk)
            elif self._root_closed:
                self._process_trailing_chunk(chunk)
            else:
                self._process_tree_chunk(chunk)

        if not self._path:
            raise NoRootElementError("No root element found in input")

        if self._depth > 0:
            unclosed = self._path[self._depth - 1].tag
            if self.strict_mode:
                raise ParseError(f"Unclosed element <{unclosed}> at end of input")
            self.logger.debug(
                "Input ended with open elements",
                extra={"open_depth": self._depth, "innermost": unclosed}
            )

        if self._ignored_chunks:
            self.logger.warning(
                "Ignored content after the root element",
                extra={"ignored_chunks": self._ignored_chunks}
            )

        document = Document(self._prolog, self._path[0])
        self.logger.info(
            "Tree building completed",
            extra={
                "chunk_count": chunk_count,
                "element_count": self._elements_created,
                "prolog_count": len(self._prolog),
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            }
        )
        return document

    def _complete_chunks(self, chunks: Iterator[str]) -> Iterator[Tuple[int, str]]:
        """Yield right-stripped chunks with their index, skipping the first.

        Comments and CDATA sections containing ``<`` arrive split over several
        chunks; they are joined back until their terminator shows up.
        """
        index = -1
        for chunk in chunks:
            index += 1
            # Text before the first tag is never part of the document,
            # blank or not.
            if index == 0:
                if chunk.strip():
                    self.logger.debug(
                        "Ignoring text before the first tag",
                        extra={"length": len(chunk)}
                    )
                continue

            terminator = _terminator_for(chunk)
            if terminator is not None:
                marker, offset = terminator
                while marker not in chunk[offset:]:
                    following = next(chunks, None)
                    if following is None:
                        break
                    index += 1
                    chunk = f"{chunk}<{following}"

            yield index, chunk.rstrip()

    def _process_prolog_chunk(self, chunk: str) -> None:
        if chunk.startswith(COMMENT_PREFIX):
            comment, _ = extract_comment(chunk)
            self._prolog.append(comment)
        elif chunk.startswith(CDATA_PREFIX):
            cdata, _ = extract_cdata(chunk)
            self._prolog.append(cdata)
        elif chunk.startswith(CLOSING_PREFIX):
            self._reject("Closing tag before the root element", chunk)
        elif chunk.startswith(PROLOG_PREFIXES):
            parts = parse_tag(chunk)
            if parts is None:
                self._reject("Prolog tag without a name", chunk)
                return
            self._prolog.append(Element(parts.tag, parts.attributes, closed=False))
            self._trace("prolog element", parts.tag)
        else:
            self._open_root(chunk)

    def _open_root(self, chunk: str) -> None:
        parts = parse_tag(chunk)
        if parts is None:
            self._reject("Opening tag without a name", chunk)
            return

        children = [parts.content] if parts.content and not parts.self_closing else []
        root = Element(parts.tag, parts.attributes, children)
        self._elements_created += 1
        self._in_prolog = False
        self._path = [root]
        self._depth = 1
        self._trace("root element", parts.tag)
        if parts.self_closing:
            self._depth = 0
            self._root_closed = True
            if parts.content:
                self._process_trailing_chunk(parts.content)

    def _process_tree_chunk(self, chunk: str) -> None:
        if chunk.startswith(COMMENT_PREFIX):
            self._append_with_tail(*extract_comment(chunk))
        elif chunk.startswith(CDATA_PREFIX):
            self._append_with_tail(*extract_cdata(chunk))
        elif chunk.startswith(CLOSING_PREFIX):
            self._close_element(chunk)
        else:
            self._open_element(chunk)

    def _append_with_tail(self, node: PrologNode, tail: str) -> None:
        current = self._path[self._depth - 1]
        current.children.append(node)
        if tail:
            current.children.append(tail)

    def _open_element(self, chunk: str) -> None:
        parts = parse_tag(chunk)
        if parts is None:
            self._reject("Opening tag without a name", chunk)
            return

        leaf = parts.self_closing or parts.tag.startswith(PROLOG_PREFIXES)
        children = [parts.content] if parts.content and not leaf else []
        element = Element(parts.tag, parts.attributes, children)
        self._elements_created += 1

        self._depth += 1
        self._place(element)
        self._trace("element", parts.tag)

        if leaf:
            self._depth -= 1
            if parts.content:
                self._path[self._depth - 1].children.append(parts.content)

    def _place(self, element: Element) -> None:
        """Attach ``element`` at the current depth and record it on the path."""
        depth = self._depth
        if len(self._path) < depth:
            self._path[-1].children.append(element)
            self._path.append(element)
            return
        if len(self._path) > depth:
            del self._path[depth:]
        self._path[depth - 1] = element
        self._path[depth - 2].children.append(element)

    def _close_element(self, chunk: str) -> None:
        name, _, tail = chunk[len(CLOSING_PREFIX):].partition(">")
        name = name.strip()
        current = self._path[self._depth - 1]
        if name != current.tag:
            if self.strict_mode:
                raise MismatchedTagError(current.tag, name, self._chunk_index)
            self.logger.debug(
                "Closing tag does not match opener",
                extra={"expected": current.tag, "found": name,
                       "chunk_index": self._chunk_index}
            )

        self._depth -= 1
        tail = tail.strip()
        if self._depth == 0:
            self._root_closed = True
            if tail:
                self._process_trailing_chunk(tail)
        elif tail:
            self._path[self._depth - 1].children.append(tail)

    def _process_trailing_chunk(self, chunk: str) -> None:
        if self.strict_mode:
            raise ParseError("Content after the root element", self._chunk_index)
        self._ignored_chunks += 1

    def _reject(self, message: str, chunk: str) -> None:
        if self.strict_mode:
            raise ParseError(message, self._chunk_index)
        self.logger.warning(
            message,
            extra={"chunk_index": self._chunk_index, "chunk": chunk[:40]}
        )

    def _trace(self, kind: str, tag: str) -> None:
        if self.logger.is_enabled_for(logging.DEBUG):
            self.logger.debug(
                f"Opened {kind}",
                extra={"tag": tag, "depth": self._depth,
                       "chunk_index": self._chunk_index}
            )


def build_document(
    chunks: Iterable[str],
    config: Optional[XMLFilesConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Build a document from chunks with a fresh :class:`TreeBuilder`."""
    return TreeBuilder(config, correlation_id).build(chunks)
