"""
Constants for Noise test-vector replay.

Limits follow the noise-c vector runner where they describe the vector format,
and the Noise framework where they describe the wire.
"""

from typing import Final

# =============================================================================
# Vector limits
# =============================================================================

MAX_MESSAGES: Final[int] = 32
"""Maximum number of scripted messages in one test vector."""

MAX_MESSAGE_SIZE: Final[int] = 65535
"""Maximum decoded length of a payload or ciphertext (Noise message limit)."""

# =============================================================================
# Identifier registry
# =============================================================================


def _noise_id(category: str, index: int) -> int:
    """Build an identifier as (ord(category) << 8) | index."""
    return (ord(category) << 8) | index


PREFIX_CATEGORY: Final[int] = _noise_id("f", 0)
PATTERN_CATEGORY: Final[int] = _noise_id("P", 0)
DH_CATEGORY: Final[int] = _noise_id("D", 0)
CIPHER_CATEGORY: Final[int] = _noise_id("C", 0)
HASH_CATEGORY: Final[int] = _noise_id("H", 0)

PREFIX_STANDARD: Final[int] = _noise_id("f", 1)
PREFIX_PSK: Final[int] = _noise_id("f", 2)

# Patterns, in noise-c identifier order.
PATTERNS: Final[tuple[str, ...]] = (
    "N",
    "X",
    "K",
    "NN",
    "NK",
    "NX",
    "XN",
    "XK",
    "XX",
    "XR",
    "KN",
    "KK",
    "KX",
    "IN",
    "IK",
    "IX",
)

ONE_WAY_PATTERNS: Final[frozenset[str]] = frozenset({"N", "X", "K"})
"""Patterns with a single initiator-to-responder message and no responder ephemeral."""

DH_FUNCTIONS: Final[tuple[str, ...]] = ("25519", "448", "NewHope")
CIPHERS: Final[tuple[str, ...]] = ("ChaChaPoly", "AESGCM")
HASHES: Final[tuple[str, ...]] = ("BLAKE2s", "BLAKE2b", "SHA256", "SHA512")

PREFIXES: Final[tuple[str, ...]] = ("Noise", "NoisePSK")

# =============================================================================
# Report formatting
# =============================================================================

SEPARATOR: Final[str] = "-" * 62
BLOCK_LINE_BYTES: Final[int] = 16
