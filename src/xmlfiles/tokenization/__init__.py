"""Tokenization layer: splits input text into ``<``-delimited chunks."""

from .chunks import (
    DELIMITER,
    ChunkReader,
    iter_chunks,
    open_chunks,
)

__all__ = [
    "DELIMITER",
    "ChunkReader",
    "iter_chunks",
    "open_chunks",
]
