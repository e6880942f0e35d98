"""
Incremental CSV parser.

Responsibilities:
- streaming UTF-8 decode of arbitrary byte chunks
- two-state tokenizer (unquoted / quoted) over delimiter, quote, CR, LF
- header row handling and row width enforcement
- numeric classification of field values

Chunk boundaries never change the result: lookahead that would run past the
text available so far is held back until the next chunk or finalize().
"""

from __future__ import annotations

import codecs
import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from charset_normalizer import from_bytes

from .errors import (
    ConfigurationError,
    CsvError,
    EmptyInputError,
    InvalidEncodingError,
    MalformedRowError,
    ParserClosedError,
    UnclosedQuoteError,
)
from .rules import (
    DEFAULT_DELIMITER,
    DEFAULT_QUOTE,
    DETECTION_SAMPLE_MAX,
    DETECTION_SAMPLE_MIN,
    ENCODING_ERROR_MODES,
    INPUT_ENCODING,
    LINE_TERMINATORS,
)
from .values import Value, classify_value

Row = Dict[str, Value]
Chunk = Union[bytes, bytearray, memoryview, str]


class FieldState(str, Enum):
    UNQUOTED = "unquoted"
    QUOTED = "quoted"


@dataclass(frozen=True)
class ParserOptions:
    delimiter: str = DEFAULT_DELIMITER
    quote: str = DEFAULT_QUOTE
    parse_numbers: bool = True
    encoding_errors: str = "strict"

    def __post_init__(self) -> None:
        for name in ("delimiter", "quote"):
            value = getattr(self, name)
            if not isinstance(value, str) or len(value) != 1:
                raise ConfigurationError(f"{name} must be a single character, got {value!r}")
            if value in LINE_TERMINATORS:
                raise ConfigurationError(f"{name} cannot be a line terminator")
        if self.delimiter == self.quote:
            raise ConfigurationError("delimiter and quote must differ")
        if self.encoding_errors not in ENCODING_ERROR_MODES:
            raise ConfigurationError(
                f"encoding_errors must be one of {ENCODING_ERROR_MODES}, got {self.encoding_errors!r}"
            )


@dataclass(frozen=True)
class ParseResult:
    rows: Tuple[Row, ...]
    headers: Tuple[str, ...]
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"rows": list(self.rows), "headers": list(self.headers), "count": self.count}


@dataclass
class _Pending:
    """Text of the record being assembled."""

    chars: List[str] = field(default_factory=list)
    record: List[str] = field(default_factory=list)
    touched: bool = False  # any character consumed since the last terminator

    def close_field(self) -> None:
        self.record.append("".join(self.chars))
        self.chars.clear()

    def take_record(self) -> List[str]:
        self.close_field()
        record = self.record
        self.record = []
        self.touched = False
        return record


class CsvParser:
    """
    Push chunks with feed_chunk(), then call finalize() once.

    Without on_row, completed rows are collected and returned in the
    ParseResult. With on_row, each row is handed to the callback as soon as it
    is complete and ParseResult.rows stays empty.
    """

    def __init__(
        self,
        options: Optional[ParserOptions] = None,
        *,
        on_row: Optional[Callable[[Row], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.options = options or ParserOptions()
        self._on_row = on_row
        self._logger = logger

        self._decoder = codecs.getincrementaldecoder(INPUT_ENCODING)(
            errors=self.options.encoding_errors
        )
        self._bytes_fed = 0
        self._sample = bytearray()
        special = re.escape(self.options.delimiter) + re.escape(self.options.quote)
        self._special = re.compile(f"[{special}\\r\\n]")

        self._state = FieldState.UNQUOTED
        self._pending = _Pending()
        self._carry = ""
        self._headers: Optional[List[str]] = None
        self._rows: List[Row] = []
        self._count = 0
        self._closed = False

    @property
    def state(self) -> FieldState:
        return self._state

    @property
    def headers(self) -> Optional[Tuple[str, ...]]:
        return tuple(self._headers) if self._headers is not None else None

    @property
    def count(self) -> int:
        return self._count

    def feed_chunk(self, data: Chunk) -> None:
        self._check_open()
        if isinstance(data, str):
            data = data.encode("utf-8")
        elif isinstance(data, (bytes, bytearray, memoryview)):
            data = bytes(data)
        else:
            raise TypeError(f"chunks must be bytes or str, got {type(data).__name__}")
        try:
            text = self._decode(data, final=False)
            self._consume(text, final=False)
        except CsvError:
            self._closed = True
            raise

    def finalize(self) -> ParseResult:
        self._check_open()
        self._closed = True

        tail = self._decode(b"", final=True)
        self._consume(tail, final=True)

        if self._state is FieldState.QUOTED:
            raise UnclosedQuoteError()
        if self._pending.touched:
            self._end_record()
        if self._headers is None:
            raise EmptyInputError()

        return ParseResult(rows=tuple(self._rows), headers=tuple(self._headers), count=self._count)

    def _check_open(self) -> None:
        if self._closed:
            raise ParserClosedError("parser already finalized or aborted; create a new one")

    def _decode(self, data: bytes, final: bool) -> str:
        buffered, first = self._decoder.getstate()
        try:
            text = self._decoder.decode(data, final)
        except UnicodeDecodeError as exc:
            # exc.start is relative to the decoder's buffered bytes plus data
            offset = self._bytes_fed - len(buffered) + exc.start
            if first and (buffered + data).startswith(codecs.BOM_UTF8):
                offset += len(codecs.BOM_UTF8)
            raise InvalidEncodingError(offset, exc.reason, self._detect_encoding(data)) from exc
        self._bytes_fed += len(data)
        if len(self._sample) < DETECTION_SAMPLE_MAX:
            self._sample += data[: DETECTION_SAMPLE_MAX - len(self._sample)]
        return text

    def _detect_encoding(self, data: bytes) -> Optional[str]:
        sample = bytes(self._sample) + data[: DETECTION_SAMPLE_MAX - len(self._sample)]
        if len(sample) < DETECTION_SAMPLE_MIN:
            return None
        match = from_bytes(sample).best()
        if match is None or match.encoding in ("utf_8", "ascii"):
            return None
        return match.encoding

    def _consume(self, text: str, final: bool) -> None:
        if self._carry:
            text = self._carry + text
            self._carry = ""

        quote = self.options.quote
        delimiter = self.options.delimiter
        pending = self._pending
        end = len(text)
        pos = 0

        while pos < end:
            if self._state is FieldState.QUOTED:
                idx = text.find(quote, pos)
                if idx == -1:
                    pending.chars.append(text[pos:])
                    break
                pending.chars.append(text[pos:idx])
                if idx + 1 < end:
                    if text[idx + 1] == quote:
                        pending.chars.append(quote)
                        pos = idx + 2
                    else:
                        self._state = FieldState.UNQUOTED
                        pos = idx + 1
                elif final:
                    self._state = FieldState.UNQUOTED
                    pos = end
                else:
                    # might be the first half of an escaped quote
                    self._carry = quote
                    break
                continue

            match = self._special.search(text, pos)
            if match is None:
                pending.chars.append(text[pos:])
                pending.touched = True
                break
            idx = match.start()
            if idx > pos:
                pending.chars.append(text[pos:idx])
                pending.touched = True
            ch = text[idx]

            if ch == quote:
                self._state = FieldState.QUOTED
                pending.touched = True
                pos = idx + 1
            elif ch == delimiter:
                pending.close_field()
                pending.touched = True
                pos = idx + 1
            elif ch == "\n":
                pos = idx + 1
                self._end_record()
            elif idx + 1 < end:
                pos = idx + 2 if text[idx + 1] == "\n" else idx + 1
                self._end_record()
            elif final:
                pos = end
                self._end_record()
            else:
                # CR at the end of the chunk; the LF may arrive next
                self._carry = ch
                break

    def _end_record(self) -> None:
        record = self._pending.take_record()

        if self._headers is None:
            self._headers = record
            if self._logger is not None:
                self._logger.info("headers: %s", json.dumps(record, ensure_ascii=False))
            return

        if len(record) != len(self._headers):
            raise MalformedRowError(row=self._count + 1, expected=len(self._headers), actual=len(record))

        parse_numbers = self.options.parse_numbers
        row: Row = {}
        for name, raw in zip(self._headers, record):
            row[name] = classify_value(raw, parse_numbers)

        self._count += 1
        if self._on_row is not None:
            self._on_row(row)
        else:
            self._rows.append(row)
