"""xmlfiles: a minimal XML document model with a pretty printer.

Documents are loaded from text, files or streams into a mutable tree of
Element, Comment, CData and plain text nodes, and rendered back to
re-indented text. The reader is permissive and performs no validation,
entity decoding or namespace processing.

Typical use:
- parse(), parse_string(), parse_file() to load a Document
- Element.create() and element templates to build or extend trees
- serialize() / Document.write() to render them
- set_indentation() or an explicit XMLFilesConfig to control output
"""

__version__ = "0.1.0"
__author__ = "xmlfiles developers"

from .api import parse, parse_file, parse_string
from .serialization import PrettyPrinter, serialize, write
from .shared import (
    BuilderConfig,
    NoRootElementError,
    ParseError,
    SerializerConfig,
    TokenizerConfig,
    XMLFilesConfig,
    XMLFilesError,
    get_default_config,
    set_default_config,
    set_indentation,
)
from .tokenization import ChunkReader, iter_chunks, open_chunks
from .tree import CData, Comment, Document, Element, TreeBuilder

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Parsing
    "parse",
    "parse_string",
    "parse_file",

    # Document model
    "CData",
    "Comment",
    "Document",
    "Element",

    # Processing layers
    "ChunkReader",
    "iter_chunks",
    "open_chunks",
    "TreeBuilder",
    "PrettyPrinter",
    "serialize",
    "write",

    # Configuration
    "BuilderConfig",
    "SerializerConfig",
    "TokenizerConfig",
    "XMLFilesConfig",
    "get_default_config",
    "set_default_config",
    "set_indentation",

    # Errors
    "XMLFilesError",
    "ParseError",
    "NoRootElementError",
]
