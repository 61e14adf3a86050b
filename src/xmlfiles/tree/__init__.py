"""Document model and tree building for xmlfiles.

Key Components:
    Element: XML element with ordered attributes and heterogeneous children
    Comment, CData: leaf nodes with a single string payload
    Document: prolog entries plus exactly one root element
    TreeBuilder: builds a Document from the tokenizer's chunk sequence
"""

from .builder import (
    TagParts,
    TreeBuilder,
    build_document,
    parse_attributes,
    parse_tag,
)
from .nodes import (
    CData,
    Comment,
    Document,
    Element,
    Node,
    PrologNode,
)

__all__ = [
    "CData",
    "Comment",
    "Document",
    "Element",
    "Node",
    "PrologNode",
    "TagParts",
    "TreeBuilder",
    "build_document",
    "parse_attributes",
    "parse_tag",
]
