"""Public parsing API.

``parse`` routes any supported input to the right reader. ``parse_string`` and
``parse_file`` are the dedicated entry points for text and for files or open
streams. All of them return a :class:`~xmlfiles.tree.Document` and let errors
propagate: I/O failures surface unchanged, and input without a root element
raises :class:`~xmlfiles.shared.NoRootElementError`.
"""

import time
from pathlib import Path
from typing import Optional, TextIO, Union

from xmlfiles.shared import XMLFilesConfig, get_logger, resolve_config
from xmlfiles.tokenization import ChunkReader, iter_chunks, open_chunks
from xmlfiles.tree import Document, TreeBuilder

# Type definitions for input data
InputType = Union[str, bytes, Path, TextIO]
FileType = Union[str, Path, TextIO]

# Constants for API operations
PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000  # Milliseconds per second conversion


def parse(
    source: InputType,
    config: Optional[XMLFilesConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse XML from a string, bytes, a Path or an open text stream.

    A ``str`` is always treated as XML text; wrap file names in
    :class:`pathlib.Path` or call :func:`parse_file` instead.

    Examples:
        >>> doc = parse('<?xml version="1.0"?><root>hi</root>')
        >>> doc.prolog[0].attributes
        {'version': '1.0'}
        >>> doc.root.children
        ['hi']
    """
    config = resolve_config(config)
    if isinstance(source, Path):
        return parse_file(source, config=config, correlation_id=correlation_id)
    if isinstance(source, (bytes, bytearray)):
        text = bytes(source).decode(config.tokenizer.encoding)
        return parse_string(text, config=config, correlation_id=correlation_id)
    if isinstance(source, str):
        return parse_string(source, config=config, correlation_id=correlation_id)
    if hasattr(source, "read"):
        return parse_file(source, config=config, correlation_id=correlation_id)
    raise TypeError(f"Unsupported input type: {type(source).__name__}")


def parse_string(
    xml_string: str,
    config: Optional[XMLFilesConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse XML held in a string."""
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "parse_string")
    logger.debug(
        "Starting string parse operation",
        extra={
            "content_length": len(xml_string),
            "preview": (
                xml_string[:PREVIEW_LENGTH] + "..."
                if len(xml_string) > PREVIEW_LENGTH else xml_string
            ),
        }
    )

    document = TreeBuilder(config, correlation_id).build(iter_chunks(xml_string))

    logger.info(
        "String parse completed",
        extra={
            "root": document.root.tag,
            "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
        }
    )
    return document


def parse_file(
    file: FileType,
    encoding: Optional[str] = None,
    config: Optional[XMLFilesConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse XML from a file path or an open text stream.

    A path is opened and always closed again before returning, including
    when parsing fails. A stream is read to the end but left open, as it
    belongs to the caller.

    Args:
        file: Path to the XML file, or a readable text stream
        encoding: Encoding used to open a path; defaults to the configured one
        config: Configuration, defaults to the process-wide default
        correlation_id: Optional correlation ID for request tracking
    """
    start_time = time.time()
    config = resolve_config(config)
    logger = get_logger(__name__, correlation_id, "parse_file")
    buffer_size = config.tokenizer.buffer_size

    if hasattr(file, "read"):
        source = getattr(file, "name", type(file).__name__)
        reader = ChunkReader(file, buffer_size=buffer_size,
                             correlation_id=correlation_id)
    else:
        source = str(file)
        try:
            reader = open_chunks(
                file,
                encoding=encoding or config.tokenizer.encoding,
                buffer_size=buffer_size,
                correlation_id=correlation_id,
            )
        except OSError:
            logger.error("Unable to open file", extra={"source": source})
            raise

    logger.debug("Starting file parse operation", extra={"source": str(source)})
    with reader:
        document = TreeBuilder(config, correlation_id).build(reader)

    logger.info(
        "File parse completed",
        extra={
            "source": str(source),
            "chunks_read": reader.chunks_read,
            "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
        }
    )
    return document
