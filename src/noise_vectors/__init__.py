"""
Conformance test runner for Noise protocol handshakes.

Reads files of Noise test vectors (a protocol name, fixed keys and a scripted
transcript), checks each protocol name against the declared algorithms, and
replays the handshake between a simulated initiator and responder, comparing
every message byte for byte.

Usage (CLI):
    noise-vectors noise-c-basic.txt

Usage (library):
    from noise_vectors.runner import RunContext, run_files

    context = RunContext()
    ok = run_files(context, ["noise-c-basic.txt"])
"""

from noise_vectors.constants import MAX_MESSAGE_SIZE, MAX_MESSAGES
from noise_vectors.exceptions import (
    ActionMismatchError,
    EngineError,
    HexDecodeError,
    NameMismatchError,
    ParseError,
    ProtocolNameError,
    UnsupportedProtocolError,
    VectorError,
    VectorFailure,
    VectorSkipped,
    WireMismatchError,
)

__all__ = [
    # Constants
    "MAX_MESSAGES",
    "MAX_MESSAGE_SIZE",
    # Exceptions
    "ActionMismatchError",
    "EngineError",
    "HexDecodeError",
    "NameMismatchError",
    "ParseError",
    "ProtocolNameError",
    "UnsupportedProtocolError",
    "VectorError",
    "VectorFailure",
    "VectorSkipped",
    "WireMismatchError",
]

__version__ = "0.1.0"
