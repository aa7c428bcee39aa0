"""
Vector file parser.

Consumes the TokenReader token stream and builds TestVector instances.

File layout:
    { "vectors": [ { "name": ..., "messages": [ {payload, ciphertext}, ... ] }, ... ] }

Field-level problems (bad hex, unknown or missing fields, limits) are
reported and parsing carries on so one pass lists every problem. Structural
problems raise ParseError internally; the parser reports them and skips to
the end of the current vector. A vector with any reported error is never
returned for execution.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from functools import partial
from typing import Any

from noise_vectors._logging import get_logger
from noise_vectors.config import RunConfig
from noise_vectors.exceptions import HexDecodeError, ParseError
from noise_vectors.hexcodec import decode_hex
from noise_vectors.tokens import Token, TokenReader
from noise_vectors.vector import Message, TestVector

__all__ = ["VectorParser"]

_logger = get_logger(__name__)

_REQUIRED_FIELDS = ("name", "pattern", "dh", "cipher", "hash")
_MESSAGE_FIELDS = ("payload", "ciphertext")

_OPENERS = (Token.LBRACE, Token.LSQUARE)
_CLOSERS = (Token.RBRACE, Token.RSQUARE)

FieldHandler = Callable[[dict[str, Any]], None]


class VectorParser:
    """
    Parse test vectors from a token stream.

    Example:
        reader = TokenReader.from_path("noise-c-basic.txt")
        for vector in VectorParser(reader).parse_file():
            if vector is not None:
                run(vector)
    """

    def __init__(self, reader: TokenReader, config: RunConfig | None = None) -> None:
        self._reader = reader
        self._config = config or RunConfig()
        binary = self._parse_binary
        self._handlers: dict[str, FieldHandler] = {
            "name": self._parse_name,
            "pattern": partial(self._parse_string, "pattern"),
            "dh": partial(self._parse_string, "dh"),
            "cipher": partial(self._parse_string, "cipher"),
            "hash": partial(self._parse_string, "hash"),
            "init_static": partial(binary, "init_static"),
            "resp_static": partial(binary, "resp_static"),
            # The initiator's advance knowledge of the responder's key is the
            # responder's public static, and vice versa.
            "init_remote_static": partial(binary, "resp_public_static"),
            "resp_remote_static": partial(binary, "init_public_static"),
            "init_ephemeral": partial(binary, "init_ephemeral"),
            "resp_ephemeral": partial(binary, "resp_ephemeral"),
            "init_prologue": partial(binary, "init_prologue"),
            "resp_prologue": partial(binary, "resp_prologue"),
            "init_psk": partial(binary, "init_psk"),
            "resp_psk": partial(binary, "resp_psk"),
            "messages": self._parse_messages,
        }

    # =========================================================================
    # File and vector level
    # =========================================================================

    def parse_file(self) -> Iterator[TestVector | None]:
        """
        Walk the top-level object and yield one entry per vector.

        Yields:
            A TestVector, or None for a vector that failed to parse
        """
        reader = self._reader
        try:
            reader.next_token()
            self._expect(Token.LBRACE)
            self._expect_name("vectors")
            self._expect(Token.LSQUARE)
        except ParseError as e:
            reader.error("%s", e)
            return

        while reader.token is Token.LBRACE:
            reader.next_token()
            yield self.parse_vector()
            try:
                self._expect(Token.RBRACE)
            except ParseError as e:
                reader.error("%s", e)
                return
            self._skip_comma()

        try:
            self._expect(Token.RSQUARE)
            self._expect(Token.RBRACE)
            self._expect(Token.END)
        except ParseError as e:
            reader.error("%s", e)

    def parse_vector(self) -> TestVector | None:
        """
        Parse the fields of one vector object.

        Must be called with the vector's opening brace already consumed. On
        return the current token is the vector's closing brace (or END).

        Returns:
            The vector, or None if any error was reported while parsing it
        """
        reader = self._reader
        errors_before = reader.errors
        depth = reader.depth
        fields: dict[str, Any] = {"line_number": reader.line_number}

        try:
            while reader.token is Token.STRING:
                handler = self._handlers.get(reader.str_value or "")
                if handler is None:
                    reader.error("Unknown field '%s'", reader.str_value)
                    self._begin_value()
                    self._skip_value()
                else:
                    handler(fields)
                self._skip_comma()
            if reader.token is not Token.RBRACE:
                raise ParseError("Expecting '}'")
        except ParseError as e:
            reader.error("%s", e)
            self._resync(depth)

        for required in _REQUIRED_FIELDS:
            if required not in fields:
                reader.error("Missing '%s' for test vector", required)

        if reader.errors != errors_before:
            _logger.debug(
                "Vector discarded: line=%d errors=%d",
                fields["line_number"],
                reader.errors - errors_before,
            )
            return None
        return TestVector(**fields)

    # =========================================================================
    # Field handlers
    # =========================================================================

    def _parse_name(self, fields: dict[str, Any]) -> None:
        line_number = self._reader.line_number
        self._parse_string("name", fields)
        fields["line_number"] = line_number

    def _parse_string(self, attr: str, fields: dict[str, Any]) -> None:
        self._begin_value()
        fields[attr] = self._string_value()
        self._reader.next_token()

    def _parse_binary(self, attr: str, fields: dict[str, Any], *, limit: int | None = None) -> None:
        reader = self._reader
        self._begin_value()
        text = self._string_value()
        try:
            value = decode_hex(text)
        except HexDecodeError as e:
            reader.error("%s", e)
        else:
            if limit is not None and len(value) > limit:
                reader.error("Message too large (%d bytes, maximum %d)", len(value), limit)
            else:
                fields[attr] = value
        reader.next_token()

    def _parse_messages(self, fields: dict[str, Any]) -> None:
        reader = self._reader
        self._begin_value()
        self._expect(Token.LSQUARE)
        messages: list[Message] = []
        count = 0
        while reader.token is Token.LBRACE:
            if count == self._config.max_messages:
                reader.error("Too many messages for test vector")
            count += 1
            if count > self._config.max_messages:
                self._skip_value()
            else:
                message = self._parse_message()
                if message is not None:
                    messages.append(message)
            self._skip_comma()
        self._expect(Token.RSQUARE)
        fields["messages"] = tuple(messages)

    def _parse_message(self) -> Message | None:
        reader = self._reader
        self._expect(Token.LBRACE)
        seen: set[str] = set()
        parts: dict[str, Any] = {}
        while reader.token is Token.STRING:
            key = reader.str_value or ""
            if key in _MESSAGE_FIELDS:
                seen.add(key)
                self._parse_binary(key, parts, limit=self._config.max_message_size)
            else:
                reader.error("Unknown message field '%s'", key)
                self._begin_value()
                self._skip_value()
            self._skip_comma()
        for key in _MESSAGE_FIELDS:
            if key not in seen:
                reader.error("Missing %s for message", key)
        self._expect(Token.RBRACE)
        if len(parts) != len(_MESSAGE_FIELDS):
            return None
        return Message(**parts)

    # =========================================================================
    # Token helpers
    # =========================================================================

    def _expect(self, token: Token) -> None:
        if self._reader.token is not token:
            raise ParseError(f"Expecting '{token.value}'")
        self._reader.next_token()

    def _expect_name(self, name: str) -> None:
        if not self._reader.is_name(name):
            raise ParseError(f'Expecting "{name}"')
        self._reader.next_token()
        self._expect(Token.COLON)

    def _begin_value(self) -> None:
        """Step over a field name and its colon."""
        self._reader.next_token()
        self._expect(Token.COLON)

    def _string_value(self) -> str:
        reader = self._reader
        if reader.token is not Token.STRING or reader.str_value is None:
            raise ParseError("Expecting string value")
        return reader.str_value

    def _skip_comma(self) -> None:
        if self._reader.token is Token.COMMA:
            self._reader.next_token()

    def _skip_value(self) -> None:
        """Step over one string, object or array value."""
        reader = self._reader
        if reader.token is Token.STRING:
            reader.next_token()
            return
        if reader.token not in _OPENERS:
            raise ParseError("Expecting value")
        nesting = 0
        while True:
            if reader.token in _OPENERS:
                nesting += 1
            elif reader.token in _CLOSERS:
                nesting -= 1
            elif reader.token is Token.END:
                raise ParseError("Unexpected end of file")
            reader.next_token()
            if nesting == 0:
                return

    def _resync(self, depth: int) -> None:
        """Skip to the closing brace of the vector opened at ``depth``."""
        reader = self._reader
        while reader.token is not Token.END and not (reader.token is Token.RBRACE and reader.depth == depth):
            reader.next_token()
