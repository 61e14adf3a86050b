"""Pretty printer rendering documents and nodes back to text.

Output is re-indented with one indentation unit per nesting level. Elements
with a single one-line text child stay on one line, empty elements are
self-closed, and everything else is written as an indented block. Payloads
and attribute values are written verbatim, without escaping.
"""

import io
from typing import Any, Optional, TextIO

from xmlfiles.shared import XMLFilesConfig, get_logger, resolve_config
from xmlfiles.tree.nodes import CData, Comment, Document, Element


def _format_attribute(key: str, value: str) -> str:
    # Single quotes for values that hold a double quote.
    if '"' in value:
        return f" {key}='{value}'"
    return f' {key}="{value}"'


class PrettyPrinter:
    """Serializer for :class:`Document` and individual nodes."""

    def __init__(
        self,
        config: Optional[XMLFilesConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize pretty printer.

        Args:
            config: Configuration, defaults to the process-wide default
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = resolve_config(config)
        self.indent = self.config.serializer.indent
        self.logger = get_logger(__name__, correlation_id, "pretty_printer")

    def format(self, node: Any) -> str:
        """Render ``node`` to a string."""
        buffer = io.StringIO()
        self.write(node, buffer)
        return buffer.getvalue()

    def write(self, node: Any, sink: TextIO, depth: int = 1) -> None:
        """Write ``node`` to ``sink`` as if nested at ``depth`` (root = 1).

        Raises:
            TypeError: If ``node`` is not part of the document model
        """
        if isinstance(node, Document):
            self._write_document(node, sink)
        elif isinstance(node, Element):
            self._write_element(node, sink, depth)
        elif isinstance(node, Comment):
            sink.write(f"{self._pad(depth)}<!-- {node.data} -->\n")
        elif isinstance(node, CData):
            sink.write(f"{self._pad(depth)}<![CDATA[{node.data}]]>\n")
        elif isinstance(node, str):
            sink.write(f"{self._pad(depth)}{node}\n")
        else:
            raise TypeError(f"Cannot serialize {type(node).__name__}")

    def _pad(self, depth: int) -> str:
        return self.indent * (depth - 1)

    def _write_line(self, node: Any, sink: TextIO, depth: int) -> None:
        """Write a node that must end its own line."""
        self.write(node, sink, depth)
        if isinstance(node, Element) and not node.closed:
            sink.write("\n")

    def _write_document(self, document: Document, sink: TextIO) -> None:
        for node in document.prolog:
            self._write_line(node, sink, 1)
        self._write_element(document.root, sink, 1)
        self.logger.debug(
            "Document serialized",
            extra={"prolog_count": len(document.prolog), "root": document.root.tag}
        )

    def _write_element(self, element: Element, sink: TextIO, depth: int) -> None:
        pad = self._pad(depth)
        attributes = "".join(
            _format_attribute(key, value) for key, value in element.attributes.items()
        )
        sink.write(f"{pad}<{element.tag}{attributes}")

        if not element.closed:
            sink.write(">")
            return

        children = element.children
        if not children:
            sink.write(" ?>\n" if element.tag.startswith("?") else " />\n")
            return

        if len(children) == 1 and isinstance(children[0], str):
            text = children[0]
            if "\n" in text:
                sink.write(f">\n{self._pad(depth + 1)}{text}\n{pad}</{element.tag}>\n")
            else:
                sink.write(f">{text}</{element.tag}>\n")
            return

        sink.write(">\n")
        for child in children:
            self._write_line(child, sink, depth + 1)
        sink.write(f"{pad}</{element.tag}>\n")


def serialize(node: Any, config: Optional[XMLFilesConfig] = None) -> str:
    """Render a document or node to text.

    Examples:
        >>> print(serialize(Element.create("item", "value", id="1")), end="")
        <item id="1">value</item>
    """
    return PrettyPrinter(config).format(node)


def write(node: Any, sink: TextIO, config: Optional[XMLFilesConfig] = None) -> None:
    """Write the rendered form of a document or node to a text sink."""
    PrettyPrinter(config).write(node, sink)
