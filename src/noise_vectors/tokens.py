"""
Token stream over a JSON vector file.

The reader never builds JSON values; it hands out one token at a time with
its line number, and keeps the per-file error channel that every parse stage
reports into.
"""

from __future__ import annotations

import json
import re
import sys
from enum import Enum
from pathlib import Path
from typing import TextIO

from typing_extensions import Self

from noise_vectors._logging import get_logger

__all__ = [
    "Token",
    "TokenReader",
]

_logger = get_logger(__name__)


class Token(Enum):
    """Token kinds produced by TokenReader."""

    STRING = "string"
    COLON = ":"
    COMMA = ","
    LBRACE = "{"
    RBRACE = "}"
    LSQUARE = "["
    RSQUARE = "]"
    END = "EOF"


_PUNCTUATION = {
    ":": Token.COLON,
    ",": Token.COMMA,
    "{": Token.LBRACE,
    "}": Token.RBRACE,
    "[": Token.LSQUARE,
    "]": Token.RSQUARE,
}

_OPENERS = frozenset({Token.LBRACE, Token.LSQUARE})
_CLOSERS = frozenset({Token.RBRACE, Token.RSQUARE})

_WHITESPACE = re.compile(r"[ \t\r\n]*")
# JSON string literal; control characters (including newlines) are not allowed inside
_STRING = re.compile(r'"(?:[^"\\\x00-\x1f]|\\.)*"')


class TokenReader:
    """
    Tokenizer with a shared error counter.

    Example:
        reader = TokenReader('{"vectors": []}', "inline.txt")
        reader.next_token()
        while reader.token is not Token.END:
            reader.next_token()
    """

    def __init__(self, text: str, filename: str = "<input>", *, err: TextIO | None = None) -> None:
        """
        Initialize the reader. No token is read until next_token().

        Args:
            text: Complete file contents
            filename: Name used in error reports
            err: Stream for error reports (default: sys.stderr at report time)
        """
        self.filename = filename
        self.token = Token.END
        self.str_value: str | None = None
        self.line_number = 1
        self.errors = 0
        self.error_messages: list[str] = []
        self.depth = 0
        self._text = text
        self._pos = 0
        self._err = err

    @classmethod
    def from_path(cls, path: str | Path, *, err: TextIO | None = None) -> Self:
        """
        Read a vector file for tokenizing.

        Raises:
            OSError: If the file cannot be opened or read
        """
        with Path(path).open(encoding="utf-8") as f:
            text = f.read()
        return cls(text, str(path), err=err)

    def is_name(self, name: str) -> bool:
        """Whether the current token is the string ``name``."""
        return self.token is Token.STRING and self.str_value == name

    def error(self, fmt: str, *args: object) -> None:
        """Report an error at the current line and bump the error counter."""
        message = f"{self.filename}:{self.line_number}: {fmt % args if args else fmt}"
        self.errors += 1
        self.error_messages.append(message)
        _logger.debug("Parse error: %s", message)
        print(message, file=self._err if self._err is not None else sys.stderr)

    def next_token(self) -> None:
        """Advance to the next token."""
        # Depth tracks containers whose opening token has been consumed
        if self.token in _OPENERS:
            self.depth += 1
        elif self.token in _CLOSERS:
            self.depth -= 1
        self.str_value = None
        while True:
            self._skip_whitespace()
            if self._pos >= len(self._text):
                self.token = Token.END
                return
            ch = self._text[self._pos]
            punctuation = _PUNCTUATION.get(ch)
            if punctuation is not None:
                self._pos += 1
                self.token = punctuation
                return
            if ch == '"':
                if self._read_string():
                    return
                continue
            self.error("Invalid character %r", ch)
            self._pos += 1

    def _skip_whitespace(self) -> None:
        match = _WHITESPACE.match(self._text, self._pos)
        if match is not None:
            self.line_number += match.group().count("\n")
            self._pos = match.end()

    def _read_string(self) -> bool:
        """Read a string literal at the current position; False if it was malformed."""
        match = _STRING.match(self._text, self._pos)
        if match is None:
            self.error("Unterminated string")
            # Resume after the end of the offending line
            newline = self._text.find("\n", self._pos)
            self._pos = len(self._text) if newline < 0 else newline
            return False
        self._pos = match.end()
        try:
            self.str_value = json.loads(match.group())
        except json.JSONDecodeError:
            self.error("Invalid escape sequence in string")
            return False
        self.token = Token.STRING
        return True
