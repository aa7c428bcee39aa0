"""
Exception hierarchy for noise_vectors.

All errors inherit from VectorError. Parse-stage errors (HexDecodeError,
ParseError) are turned into entries on the token reader's error channel;
run-stage errors (VectorFailure, EngineError) abort only the current vector.
"""


class VectorError(Exception):
    """Base exception for all test-vector errors."""


class HexDecodeError(VectorError):
    """Hexadecimal field could not be decoded.

    Possible causes:
    - Odd number of digits
    - Non-hexadecimal character (including whitespace)
    """


class ParseError(VectorError):
    """Token stream does not have the expected structure."""


class ProtocolNameError(VectorError):
    """Protocol name does not decompose into known components."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid protocol name {name!r}: {reason}")


class EngineError(VectorError):
    """Handshake engine rejected an operation."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        message = f"{operation} failed"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UnsupportedProtocolError(EngineError):
    """Handshake engine has no implementation for this protocol name."""


class VectorFailure(VectorError):
    """Replay of a test vector did not match the script."""


class NameMismatchError(VectorFailure):
    """Decomposed protocol name disagrees with the declared fields."""

    def __init__(self, component: str, actual: object, expected: object) -> None:
        self.component = component
        self.actual = actual
        self.expected = expected
        super().__init__(f"{component} mismatch: actual {actual!r}, expected {expected!r}")


class ActionMismatchError(VectorFailure):
    """A peer is not in the state the message sequence requires."""

    def __init__(self, peer: str, actual: object, expected: object) -> None:
        self.peer = peer
        self.actual = actual
        self.expected = expected
        super().__init__(f"{peer} action is {actual}, expected {expected}")


class WireMismatchError(VectorFailure):
    """Produced bytes differ from the scripted bytes."""

    def __init__(self, what: str, index: int, actual: bytes, expected: bytes) -> None:
        self.what = what
        self.index = index
        self.actual = actual
        self.expected = expected
        super().__init__(f"{what} wrong at message {index}")


class VectorSkipped(VectorError):
    """Engine under test intentionally has no behaviour for this vector."""
