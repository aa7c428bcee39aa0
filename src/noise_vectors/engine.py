"""
Handshake engine under test.

Adapts ``noise.connection.NoiseConnection`` (the ``noiseprotocol`` package)
to an explicit state machine:

    UNINITIALIZED -> CONFIGURED -> HANDSHAKING -> SPLIT | FAILED

Callers ask for the required Action before each step, as the replay engine
does, instead of relying on the library to reject out-of-order calls. Every
library error is re-raised as EngineError naming the failing operation.

Fixed ephemeral keys are only reachable through the module-level
``_set_fixed_ephemeral_keypair`` test hook; production code lets the library
generate them.
"""

from __future__ import annotations

import warnings
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from types import TracebackType

from cryptography.exceptions import InvalidTag
from noise.connection import Keypair, NoiseConnection
from noise.exceptions import (
    NoiseHandshakeError,
    NoiseInvalidMessage,
    NoiseMaxNonceError,
    NoiseProtocolNameError,
    NoisePSKError,
    NoiseValidationError,
    NoiseValueError,
)
from typing_extensions import Self

from noise_vectors._logging import get_logger
from noise_vectors.exceptions import EngineError, UnsupportedProtocolError

__all__ = [
    "Action",
    "HandshakeState",
    "Role",
    "State",
    "TransportPair",
]

_logger = get_logger(__name__)

_ENGINE_ERRORS = (
    NoiseHandshakeError,
    NoiseInvalidMessage,
    NoiseMaxNonceError,
    NoiseProtocolNameError,
    NoisePSKError,
    NoiseValidationError,
    NoiseValueError,
    InvalidTag,
    ValueError,
)


class Role(Enum):
    """Side of the handshake."""

    INITIATOR = "initiator"
    RESPONDER = "responder"


class Action(Enum):
    """What the application must do next."""

    NONE = "none"
    WRITE_MESSAGE = "write_message"
    READ_MESSAGE = "read_message"
    SPLIT = "split"
    FAILED = "failed"


class State(Enum):
    """Lifecycle of a HandshakeState."""

    UNINITIALIZED = "uninitialized"
    CONFIGURED = "configured"
    HANDSHAKING = "handshaking"
    SPLIT = "split"
    FAILED = "failed"


class TransportPair:
    """Directional transport ciphers available after the handshake splits."""

    def __init__(self, connection: NoiseConnection) -> None:
        self._connection = connection

    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypt with the sending cipher."""
        try:
            return bytes(self._connection.encrypt(plaintext))
        except _ENGINE_ERRORS as e:
            raise EngineError("encrypt", str(e) or type(e).__name__) from e

    def decrypt(self, ciphertext: bytes) -> bytes:
        """Decrypt with the receiving cipher."""
        try:
            return bytes(self._connection.decrypt(ciphertext))
        except _ENGINE_ERRORS as e:
            raise EngineError("decrypt", str(e) or type(e).__name__) from e


class HandshakeState:
    """
    One side of a Noise handshake.

    Example:
        with HandshakeState.new_by_name("Noise_NN_25519_AESGCM_SHA256", Role.INITIATOR) as hs:
            hs.start()
            if hs.action is Action.WRITE_MESSAGE:
                message = hs.write_message(b"")
    """

    def __init__(self, connection: NoiseConnection, name: str, role: Role) -> None:
        self._connection: NoiseConnection | None = connection
        self._name = name
        self._role = role
        self._state = State.UNINITIALIZED
        self._action = Action.NONE
        self._fixed_ephemeral = False
        self._split = False

    @classmethod
    def new_by_name(cls, name: str, role: Role) -> Self:
        """
        Create a handshake for a full protocol name.

        Args:
            name: Full protocol name, e.g. Noise_XX_25519_ChaChaPoly_SHA256
            role: Which side this instance plays

        Raises:
            UnsupportedProtocolError: If the engine does not implement the protocol
        """
        try:
            connection = NoiseConnection.from_name(name.encode("ascii"))
        except (NoiseProtocolNameError, UnicodeEncodeError) as e:
            raise UnsupportedProtocolError("new_by_name", str(e) or name) from e
        if role is Role.INITIATOR:
            connection.set_as_initiator()
        else:
            connection.set_as_responder()
        _logger.debug("Handshake created: name=%s role=%s", name, role.value)
        return cls(connection, name, role)

    @property
    def name(self) -> str:
        return self._name

    @property
    def role(self) -> Role:
        return self._role

    @property
    def state(self) -> State:
        return self._state

    @property
    def action(self) -> Action:
        """The operation required next."""
        return self._action

    # =========================================================================
    # Configuration
    # =========================================================================

    def set_local_keypair_private(self, private_key: bytes) -> None:
        """Set the local static keypair from its private key."""
        self._set_keypair(Keypair.STATIC, private_key, "set_local_keypair_private")

    def set_remote_public_key(self, public_key: bytes) -> None:
        """Set the remote party's static public key, known in advance."""
        connection = self._configurable("set_remote_public_key")
        with self._operation("set_remote_public_key"):
            connection.set_keypair_from_public_bytes(Keypair.REMOTE_STATIC, public_key)
        self._state = State.CONFIGURED

    def set_prologue(self, prologue: bytes) -> None:
        """Set the prologue mixed into the handshake hash."""
        connection = self._configurable("set_prologue")
        with self._operation("set_prologue"):
            connection.set_prologue(prologue)
        self._state = State.CONFIGURED

    def set_pre_shared_key(self, psk: bytes) -> None:
        """Set the pre-shared key."""
        connection = self._configurable("set_pre_shared_key")
        with self._operation("set_pre_shared_key"):
            connection.set_psks(psk=psk)
        self._state = State.CONFIGURED

    def _set_keypair(self, keypair: Keypair, private_key: bytes, operation: str) -> None:
        connection = self._configurable(operation)
        with self._operation(operation):
            connection.set_keypair_from_private_bytes(keypair, private_key)
        if keypair is Keypair.EPHEMERAL:
            self._fixed_ephemeral = True
        self._state = State.CONFIGURED

    # =========================================================================
    # Handshake
    # =========================================================================

    def start(self) -> None:
        """Validate the configuration and begin the handshake."""
        connection = self._configurable("start")
        with self._operation("start"), warnings.catch_warnings():
            if self._fixed_ephemeral:
                # The library warns whenever an ephemeral key is preset
                warnings.simplefilter("ignore")
            connection.start_handshake()
        self._state = State.HANDSHAKING
        self._action = Action.WRITE_MESSAGE if self._role is Role.INITIATOR else Action.READ_MESSAGE

    def write_message(self, payload: bytes) -> bytes:
        """
        Produce the next handshake message.

        Args:
            payload: Application payload carried in the message

        Returns:
            Handshake message bytes

        Raises:
            EngineError: If the action is not WRITE_MESSAGE or the engine fails
        """
        connection = self._require(Action.WRITE_MESSAGE, "write_message")
        with self._operation("write_message"):
            message = bytes(connection.write_message(payload))
        self._advance(connection, Action.READ_MESSAGE)
        return message

    def read_message(self, message: bytes) -> bytes:
        """
        Consume the peer's handshake message.

        Returns:
            The payload carried in the message

        Raises:
            EngineError: If the action is not READ_MESSAGE or the message is rejected
        """
        connection = self._require(Action.READ_MESSAGE, "read_message")
        with self._operation("read_message"):
            payload = bytes(connection.read_message(message))
        self._advance(connection, Action.WRITE_MESSAGE)
        return payload

    def split(self) -> TransportPair:
        """
        Hand over to transport encryption once the handshake is complete.

        Raises:
            EngineError: If the action is not SPLIT or split was already called
        """
        connection = self._require(Action.SPLIT, "split")
        if self._split:
            raise EngineError("split", "already split")
        self._split = True
        return TransportPair(connection)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Release the underlying connection. Safe to call more than once."""
        if self._connection is not None:
            _logger.debug("Handshake closed: name=%s role=%s state=%s", self._name, self._role.value, self._state.value)
        self._connection = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    # =========================================================================
    # Internals
    # =========================================================================

    def _live(self, operation: str) -> NoiseConnection:
        if self._connection is None:
            raise EngineError(operation, "handshake state is closed")
        return self._connection

    def _configurable(self, operation: str) -> NoiseConnection:
        connection = self._live(operation)
        if self._state not in (State.UNINITIALIZED, State.CONFIGURED):
            raise EngineError(operation, f"not allowed in state {self._state.value}")
        return connection

    def _require(self, action: Action, operation: str) -> NoiseConnection:
        connection = self._live(operation)
        if self._action is not action:
            raise EngineError(operation, f"required action is {self._action.value}")
        return connection

    def _advance(self, connection: NoiseConnection, next_action: Action) -> None:
        if connection.handshake_finished:
            self._state = State.SPLIT
            self._action = Action.SPLIT
        else:
            self._action = next_action

    @contextmanager
    def _operation(self, operation: str) -> Iterator[None]:
        try:
            yield
        except _ENGINE_ERRORS as e:
            self._state = State.FAILED
            self._action = Action.FAILED
            _logger.debug("Engine error: name=%s role=%s operation=%s", self._name, self._role.value, operation)
            raise EngineError(operation, str(e) or type(e).__name__) from e


def _set_fixed_ephemeral_keypair(state: HandshakeState, private_key: bytes) -> None:
    """Use a fixed ephemeral private key so handshake output is reproducible.

    Test-only: a fixed ephemeral key destroys forward secrecy.
    """
    state._set_keypair(Keypair.EPHEMERAL, private_key, "set_fixed_ephemeral")  # noqa: SLF001
