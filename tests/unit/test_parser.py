"""Unit tests for the vector parser.

Uses fixtures from conftest.py:
- nn_entry / kk_entry: recorded vector entries
"""

import io
from typing import Any

import pytest

from noise_vectors.config import RunConfig
from noise_vectors.parser import VectorParser
from noise_vectors.tokens import TokenReader
from noise_vectors.vector import Message, TestVector
from tests.conftest import INIT_STATIC, RESP_STATIC, parse_vectors, vectors_text, x25519_public


def minimal_entry(**overrides: Any) -> dict[str, Any]:
    """A syntactically complete vector entry; bytes are not a real transcript."""
    entry: dict[str, Any] = {
        "name": "Noise_NN_25519_AESGCM_SHA256",
        "pattern": "NN",
        "dh": "25519",
        "cipher": "AESGCM",
        "hash": "SHA256",
        "messages": [{"payload": "", "ciphertext": "00" * 48}],
    }
    entry.update(overrides)
    return entry


def parse_text(text: str, config: RunConfig | None = None) -> tuple[list[TestVector | None], TokenReader]:
    reader = TokenReader(text, "test.txt", err=io.StringIO())
    return list(VectorParser(reader, config).parse_file()), reader


class TestFieldDecoding:
    """Test decoding of individual fields."""

    def test_recorded_vector(self, nn_entry: dict[str, Any]) -> None:
        vectors, reader = parse_vectors(vectors_text([nn_entry]))

        assert reader.errors == 0
        assert len(vectors) == 1
        vector = vectors[0]
        assert vector is not None
        assert vector.name == "Noise_NN_25519_ChaChaPoly_SHA256"
        assert (vector.pattern, vector.dh, vector.cipher, vector.hash) == ("NN", "25519", "ChaChaPoly", "SHA256")
        assert vector.init_ephemeral is not None
        assert len(vector.init_ephemeral) == 32
        assert vector.init_static is None
        assert vector.init_psk is None
        assert len(vector.messages) == 1
        assert vector.messages[0].payload == b""

    def test_remote_static_fields_map_to_opposite_party(self, kk_entry: dict[str, Any]) -> None:
        """init_remote_static is the responder's public key; resp_remote_static the initiator's."""
        vectors, reader = parse_vectors(vectors_text([kk_entry]))

        assert reader.errors == 0
        vector = vectors[0]
        assert vector is not None
        assert vector.resp_public_static == x25519_public(RESP_STATIC)
        assert vector.init_public_static == x25519_public(INIT_STATIC)

    def test_empty_value_is_present(self) -> None:
        """An empty hex string is an empty buffer, distinct from an absent field."""
        vectors, _ = parse_text(vectors_text([minimal_entry(init_prologue="")]))

        vector = vectors[0]
        assert vector is not None
        assert vector.init_prologue == b""
        assert vector.resp_prologue is None

    def test_duplicate_field_overwrites(self) -> None:
        text = vectors_text([minimal_entry()]).replace('"pattern": "NN"', '"pattern": "XX", "pattern": "NN"')
        vectors, reader = parse_text(text)

        assert reader.errors == 0
        vector = vectors[0]
        assert vector is not None
        assert vector.pattern == "NN"

    def test_line_number_is_name_line(self) -> None:
        text = '{"vectors": [\n{\n"pattern": "NN",\n"name": "x",\n"dh": "25519", "cipher": "AESGCM", "hash": "SHA256"}\n]}'
        vectors, reader = parse_text(text)

        assert reader.errors == 0
        vector = vectors[0]
        assert vector is not None
        assert vector.line_number == 4
        assert vector.messages == ()

    def test_messages_preserve_order(self) -> None:
        messages = [{"payload": f"{i:02x}", "ciphertext": f"{i:02x}ff"} for i in range(5)]
        vectors, _ = parse_text(vectors_text([minimal_entry(messages=messages)]))

        vector = vectors[0]
        assert vector is not None
        assert vector.messages == tuple(Message(bytes([i]), bytes([i, 0xFF])) for i in range(5))

    def test_commas_optional(self) -> None:
        text = '{"vectors": [{"name": "n" "pattern": "NN" "dh": "25519" "cipher": "AESGCM" "hash": "SHA256"}]}'
        vectors, reader = parse_text(text)

        assert reader.errors == 0
        assert vectors[0] is not None


class TestFieldErrors:
    """Field-level errors are reported and the vector is discarded."""

    def test_unknown_field(self) -> None:
        entries = [minimal_entry(bogus={"nested": ["x"]}), minimal_entry(name="second")]
        vectors, reader = parse_text(vectors_text(entries))

        assert reader.errors == 1
        assert "Unknown field 'bogus'" in reader.error_messages[0]
        assert vectors[0] is None
        second = vectors[1]
        assert second is not None
        assert second.name == "second"

    def test_missing_ciphertext(self) -> None:
        vectors, reader = parse_text(vectors_text([minimal_entry(messages=[{"payload": "00"}])]))

        assert vectors == [None]
        assert reader.errors == 1
        assert "Missing ciphertext for message" in reader.error_messages[0]

    def test_missing_payload(self) -> None:
        vectors, reader = parse_text(vectors_text([minimal_entry(messages=[{"ciphertext": "00"}])]))

        assert vectors == [None]
        assert "Missing payload for message" in reader.error_messages[0]

    def test_unknown_message_field(self) -> None:
        messages = [{"payload": "", "ciphertext": "", "handshake_hash": "00"}]
        vectors, reader = parse_text(vectors_text([minimal_entry(messages=messages)]))

        assert vectors == [None]
        assert reader.errors == 1
        assert "Unknown message field 'handshake_hash'" in reader.error_messages[0]

    def test_invalid_hex(self) -> None:
        vectors, reader = parse_text(vectors_text([minimal_entry(init_static="abc")]))

        assert vectors == [None]
        assert "Odd-length hexadecimal data" in reader.error_messages[0]

    def test_missing_required_field(self) -> None:
        entry = minimal_entry()
        del entry["cipher"]
        vectors, reader = parse_text(vectors_text([entry]))

        assert vectors == [None]
        assert "Missing 'cipher' for test vector" in reader.error_messages[0]

    def test_too_many_messages(self) -> None:
        """Exceeding the message limit is an error, not a silent stop."""
        messages = [{"payload": "", "ciphertext": ""}] * 3
        entries = [minimal_entry(messages=messages), minimal_entry(name="next")]
        vectors, reader = parse_text(vectors_text(entries), RunConfig(max_messages=2))

        assert vectors[0] is None
        assert reader.errors == 1
        assert "Too many messages for test vector" in reader.error_messages[0]
        assert vectors[1] is not None

    def test_message_at_limit_accepted(self) -> None:
        messages = [{"payload": "", "ciphertext": ""}] * 2
        vectors, reader = parse_text(vectors_text([minimal_entry(messages=messages)]), RunConfig(max_messages=2))

        assert reader.errors == 0
        assert vectors[0] is not None

    def test_message_too_large(self) -> None:
        messages = [{"payload": "0011223344", "ciphertext": ""}]
        vectors, reader = parse_text(vectors_text([minimal_entry(messages=messages)]), RunConfig(max_message_size=4))

        assert vectors == [None]
        assert "Message too large" in reader.error_messages[0]


class TestStructuralErrors:
    """Structural errors resynchronise at the end of the vector."""

    def test_wrong_value_kind_skips_vector(self) -> None:
        entries = [minimal_entry(pattern=["NN"]), minimal_entry(name="after")]
        vectors, reader = parse_text(vectors_text(entries))

        assert vectors[0] is None
        assert "Expecting string value" in reader.error_messages[0]
        after = vectors[1]
        assert after is not None
        assert after.name == "after"

    def test_missing_vectors_key(self) -> None:
        vectors, reader = parse_text('{"tests": []}')

        assert vectors == []
        assert reader.error_messages == ['test.txt:1: Expecting "vectors"']

    def test_trailing_content(self) -> None:
        vectors, reader = parse_text('{"vectors": []} ]')

        assert vectors == []
        assert reader.errors == 1
        assert "Expecting 'EOF'" in reader.error_messages[0]

    @pytest.mark.parametrize("text", ['{"vectors": [', '{"vectors": [{"name": "x"'])
    def test_truncated_file(self, text: str) -> None:
        vectors, reader = parse_text(text)

        assert all(v is None for v in vectors)
        assert reader.errors > 0
