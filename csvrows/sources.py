"""
Chunk sources: feed a CsvParser from files, streams, iterables or memory.

Each function owns exactly one parser instance. I/O errors from the source
propagate unchanged and abort the parse.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncIterable, AsyncIterator, BinaryIO, Iterable, Iterator, List, Optional, Union

from .parser import Chunk, CsvParser, ParseResult, ParserOptions, Row
from .rules import DEFAULT_CHUNK_SIZE


def parse_readable(
    readable: BinaryIO,
    options: Optional[ParserOptions] = None,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    logger: Optional[logging.Logger] = None,
) -> ParseResult:
    """Parse everything readable.read() returns until it returns an empty chunk."""
    parser = CsvParser(options, logger=logger)
    while True:
        chunk = readable.read(chunk_size)
        if not chunk:
            break
        parser.feed_chunk(chunk)
    return parser.finalize()


def parse_path(
    path: Union[str, Path],
    options: Optional[ParserOptions] = None,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    logger: Optional[logging.Logger] = None,
) -> ParseResult:
    with open(path, "rb") as f:
        return parse_readable(f, options, chunk_size=chunk_size, logger=logger)


def parse_chunks(
    chunks: Iterable[Chunk],
    options: Optional[ParserOptions] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> ParseResult:
    parser = CsvParser(options, logger=logger)
    for chunk in chunks:
        parser.feed_chunk(chunk)
    return parser.finalize()


async def parse_async_chunks(
    chunks: AsyncIterable[Chunk],
    options: Optional[ParserOptions] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> ParseResult:
    """Same as parse_chunks, for request bodies and other async streams."""
    parser = CsvParser(options, logger=logger)
    async for chunk in chunks:
        parser.feed_chunk(chunk)
    return parser.finalize()


def parse_text(
    data: Chunk,
    options: Optional[ParserOptions] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> ParseResult:
    """Parse a document that is already fully in memory, as one chunk."""
    return parse_chunks([data], options, logger=logger)


def iter_rows(
    chunks: Iterable[Chunk],
    options: Optional[ParserOptions] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> Iterator[Row]:
    """
    Yield rows as soon as the chunk that completes them has been fed.

    Memory stays bounded by the largest chunk and record rather than the whole
    output. Parse errors are raised from the generator at the point they are
    detected, so rows yielded before a malformed row have already been seen.
    """
    ready: List[Row] = []
    parser = CsvParser(options, on_row=ready.append, logger=logger)
    for chunk in chunks:
        parser.feed_chunk(chunk)
        yield from ready
        ready.clear()
    parser.finalize()
    yield from ready


async def aiter_rows(
    chunks: AsyncIterable[Chunk],
    options: Optional[ParserOptions] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> AsyncIterator[Row]:
    ready: List[Row] = []
    parser = CsvParser(options, on_row=ready.append, logger=logger)
    async for chunk in chunks:
        parser.feed_chunk(chunk)
        for row in ready:
            yield row
        ready.clear()
    parser.finalize()
    for row in ready:
        yield row
