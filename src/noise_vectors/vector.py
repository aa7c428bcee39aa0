"""
In-memory model of a Noise test vector.

A vector is assembled field by field by the parser and frozen once the
closing brace is reached. Optional key material is ``None`` when absent;
``b""`` is a present but empty value.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "Message",
    "TestVector",
]


@dataclass(frozen=True)
class Message:
    """One step of the scripted transcript."""

    payload: bytes
    """Plaintext handed to the sender's write operation."""

    ciphertext: bytes
    """Exact bytes the sender must produce."""


@dataclass(frozen=True)
class TestVector:
    """One scripted protocol session."""

    __test__ = False  # not a pytest test class

    line_number: int
    """Source line of the "name" field, for diagnostics."""

    name: str
    pattern: str
    dh: str
    cipher: str
    hash: str

    init_static: bytes | None = None
    """Initiator's static private key."""

    init_public_static: bytes | None = None
    """Initiator's public key, known in advance to the responder."""

    resp_static: bytes | None = None
    """Responder's static private key."""

    resp_public_static: bytes | None = None
    """Responder's public key, known in advance to the initiator."""

    init_ephemeral: bytes | None = None
    resp_ephemeral: bytes | None = None
    init_prologue: bytes | None = None
    resp_prologue: bytes | None = None
    init_psk: bytes | None = None
    resp_psk: bytes | None = None

    messages: tuple[Message, ...] = ()

    @property
    def has_psk(self) -> bool:
        """Whether either side declares a pre-shared key."""
        return self.init_psk is not None or self.resp_psk is not None
