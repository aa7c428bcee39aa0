"""Shared test fixtures for noise_vectors tests."""

import json
import logging
import warnings
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from cryptography.hazmat.primitives.asymmetric import x25519
from noise.connection import Keypair, NoiseConnection

from noise_vectors.parser import VectorParser
from noise_vectors.tokens import TokenReader
from noise_vectors.vector import TestVector

# Enable noise_vectors debug logging during tests
logging.getLogger("noise_vectors").setLevel(logging.DEBUG)
logging.getLogger("noise_vectors").addHandler(logging.StreamHandler())


# === Fixed Key Material ===

INIT_STATIC = bytes.fromhex("e61ef9919cde45dd5f82166404bd08e38bceb5dfdfded0a34c8df7ed542214d1")
RESP_STATIC = bytes.fromhex("4a3acbfdb163dec651dfa3194dece676d437029c62a408b4c5ea9114246e4893")
INIT_EPHEMERAL = bytes.fromhex("893e28b9dc6ca8d611ab664754b8ceb7bac5117349a4439a6b0569da977c464a")
RESP_EPHEMERAL = bytes.fromhex("bbdb4cdbd309f1a1f2e1456967fe288cadd6f712d65dc7b7793d5e63da6b375b")
PROLOGUE = bytes.fromhex("4a6f686e2047616c74")  # "John Galt"

NN_NAME = "Noise_NN_25519_ChaChaPoly_SHA256"
XX_NAME = "Noise_XX_25519_AESGCM_SHA256"
KK_NAME = "Noise_KK_25519_ChaChaPoly_BLAKE2s"
N_NAME = "Noise_N_25519_ChaChaPoly_SHA256"


def x25519_public(private_key: bytes) -> bytes:
    """Derive the X25519 public key for a raw private key."""
    return x25519.X25519PrivateKey.from_private_bytes(private_key).public_key().public_bytes_raw()


# === Transcript Recording ===


def record_transcript(name: str, payloads: list[bytes], keys: dict[str, bytes]) -> list[tuple[bytes, bytes]]:
    """Drive noiseprotocol directly and record (payload, ciphertext) pairs.

    Args:
        name: Full protocol name
        payloads: One payload per handshake message
        keys: Key material using vector field names (init_static,
            init_remote_static, init_ephemeral, init_prologue, resp_...)

    Returns:
        Transcript for the handshake messages, stopping once both sides finish
    """
    initiator = NoiseConnection.from_name(name.encode("ascii"))
    initiator.set_as_initiator()
    responder = NoiseConnection.from_name(name.encode("ascii"))
    responder.set_as_responder()

    for side, prefix in ((initiator, "init"), (responder, "resp")):
        if f"{prefix}_static" in keys:
            side.set_keypair_from_private_bytes(Keypair.STATIC, keys[f"{prefix}_static"])
        if f"{prefix}_remote_static" in keys:
            side.set_keypair_from_public_bytes(Keypair.REMOTE_STATIC, keys[f"{prefix}_remote_static"])
        if f"{prefix}_ephemeral" in keys:
            side.set_keypair_from_private_bytes(Keypair.EPHEMERAL, keys[f"{prefix}_ephemeral"])
        if f"{prefix}_prologue" in keys:
            side.set_prologue(keys[f"{prefix}_prologue"])

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        initiator.start_handshake()
        responder.start_handshake()

    transcript: list[tuple[bytes, bytes]] = []
    sender, receiver = initiator, responder
    for payload in payloads:
        if initiator.handshake_finished and responder.handshake_finished:
            break
        ciphertext = bytes(sender.write_message(payload))
        receiver.read_message(ciphertext)
        transcript.append((payload, ciphertext))
        sender, receiver = receiver, sender
    return transcript


def vector_entry(
    name: str,
    transcript: list[tuple[bytes, bytes]],
    **binary: bytes,
) -> dict[str, Any]:
    """Build the JSON object for one vector from a protocol name and transcript.

    The pattern/dh/cipher/hash fields are taken from the name.
    """
    _, pattern, dh, cipher, hash_name = name.split("_")
    entry: dict[str, Any] = {
        "name": name,
        "pattern": pattern,
        "dh": dh,
        "cipher": cipher,
        "hash": hash_name,
    }
    entry.update({field: value.hex() for field, value in binary.items()})
    entry["messages"] = [{"payload": p.hex(), "ciphertext": c.hex()} for p, c in transcript]
    return entry


def vectors_text(entries: list[dict[str, Any]]) -> str:
    """Serialize vector entries as a vector file."""
    return json.dumps({"vectors": entries}, indent=2) + "\n"


def parse_vectors(text: str, **kwargs: Any) -> tuple[list[TestVector | None], TokenReader]:
    """Parse a vector file held in memory."""
    reader = TokenReader(text, "test.txt", **kwargs)
    return list(VectorParser(reader).parse_file()), reader


# === Vector Fixtures ===


@pytest.fixture(scope="session")
def nn_entry() -> dict[str, Any]:
    """Two-message NN handshake, no statics, one scripted message with an empty payload."""
    keys = {"init_ephemeral": INIT_EPHEMERAL, "resp_ephemeral": RESP_EPHEMERAL}
    transcript = record_transcript(NN_NAME, [b""], keys)
    return vector_entry(NN_NAME, transcript, **keys)


@pytest.fixture(scope="session")
def xx_entry() -> dict[str, Any]:
    """Full XX handshake with statics and prologue, plus one trailing transport message."""
    keys = {
        "init_static": INIT_STATIC,
        "resp_static": RESP_STATIC,
        "init_ephemeral": INIT_EPHEMERAL,
        "resp_ephemeral": RESP_EPHEMERAL,
        "init_prologue": PROLOGUE,
        "resp_prologue": PROLOGUE,
    }
    payloads = [b"", b"", b"Ludwig von Mises"]
    transcript = record_transcript(XX_NAME, payloads, keys)
    # Post-handshake data is scripted but not replayed; its ciphertext is arbitrary
    transcript.append((b"transport", b"\x00" * 25))
    return vector_entry(XX_NAME, transcript, **keys)


@pytest.fixture(scope="session")
def kk_entry() -> dict[str, Any]:
    """KK handshake, where each side knows the other's static key in advance."""
    keys = {
        "init_static": INIT_STATIC,
        "resp_static": RESP_STATIC,
        "init_remote_static": x25519_public(RESP_STATIC),
        "resp_remote_static": x25519_public(INIT_STATIC),
        "init_ephemeral": INIT_EPHEMERAL,
        "resp_ephemeral": RESP_EPHEMERAL,
    }
    transcript = record_transcript(KK_NAME, [b"hello", b"world"], keys)
    return vector_entry(KK_NAME, transcript, **keys)


@pytest.fixture(scope="session")
def n_entry() -> dict[str, Any]:
    """One-way N handshake whose vector also carries a responder ephemeral."""
    keys = {
        "resp_static": RESP_STATIC,
        "init_remote_static": x25519_public(RESP_STATIC),
        "init_ephemeral": INIT_EPHEMERAL,
    }
    transcript = record_transcript(N_NAME, [b"one-way"], keys)
    return vector_entry(N_NAME, transcript, resp_ephemeral=RESP_EPHEMERAL, **keys)


@pytest.fixture
def vector_file(tmp_path: Path) -> Callable[[list[dict[str, Any]], str], Path]:
    """Factory writing vector entries to a file under tmp_path.

    Usage:
        def test_something(vector_file, nn_entry):
            path = vector_file([nn_entry], "basic.txt")
    """

    def _write(entries: list[dict[str, Any]], filename: str = "vectors.txt") -> Path:
        path = tmp_path / filename
        path.write_text(vectors_text(entries), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def nn_vector(nn_entry: dict[str, Any]) -> TestVector:
    """Parsed NN vector."""
    vectors, reader = parse_vectors(vectors_text([nn_entry]))
    assert reader.errors == 0
    vector = vectors[0]
    assert vector is not None
    return vector


@pytest.fixture
def xx_vector(xx_entry: dict[str, Any]) -> TestVector:
    """Parsed XX vector."""
    vectors, reader = parse_vectors(vectors_text([xx_entry]))
    assert reader.errors == 0
    vector = vectors[0]
    assert vector is not None
    return vector
