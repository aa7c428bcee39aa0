"""
Two-party session replay.

Runs an initiator and a responder through a vector's scripted messages in
one thread of control, injecting the vector's fixed keys so every handshake
message is reproducible, and compares each produced message with the script.

Messages after both sides reach SPLIT are transport data and are not
replayed here.
"""

from __future__ import annotations

from collections.abc import Callable

from noise_vectors._logging import get_logger
from noise_vectors.engine import (
    Action,
    HandshakeState,
    Role,
    _set_fixed_ephemeral_keypair,  # pyright: ignore[reportPrivateUsage]
)
from noise_vectors.exceptions import (
    ActionMismatchError,
    EngineError,
    UnsupportedProtocolError,
    VectorFailure,
    VectorSkipped,
    WireMismatchError,
)
from noise_vectors.names import is_one_way_pattern
from noise_vectors.vector import TestVector

__all__ = [
    "EngineFactory",
    "replay_vector",
]

_logger = get_logger(__name__)

EngineFactory = Callable[[str, Role], HandshakeState]


def replay_vector(
    vector: TestVector,
    *,
    engine_factory: EngineFactory = HandshakeState.new_by_name,
) -> list[bytes]:
    """
    Replay a vector's handshake and verify it byte for byte.

    Args:
        vector: Parsed test vector
        engine_factory: Creates one handshake side for a protocol name and role

    Returns:
        Handshake messages produced, in order

    Raises:
        VectorSkipped: If the engine does not implement the vector's protocol
        VectorFailure: If any engine step fails or any byte differs from the script
    """
    try:
        with engine_factory(vector.name, Role.INITIATOR) as initiator:
            with engine_factory(vector.name, Role.RESPONDER) as responder:
                _configure(vector, initiator, responder)
                return _exchange(vector, initiator, responder)
    except UnsupportedProtocolError as e:
        raise VectorSkipped(str(e)) from e
    except EngineError as e:
        raise VectorFailure(str(e)) from e


def _configure(vector: TestVector, initiator: HandshakeState, responder: HandshakeState) -> None:
    """Inject keys, prologues and PSKs, then start both sides."""
    if vector.init_static is not None:
        initiator.set_local_keypair_private(vector.init_static)
    if vector.init_public_static is not None:
        responder.set_remote_public_key(vector.init_public_static)
    if vector.resp_static is not None:
        responder.set_local_keypair_private(vector.resp_static)
    if vector.resp_public_static is not None:
        initiator.set_remote_public_key(vector.resp_public_static)
    if vector.init_ephemeral is not None:
        _set_fixed_ephemeral_keypair(initiator, vector.init_ephemeral)
    # Vector corpora carry responder ephemerals for one-way patterns, which
    # have no responder ephemeral at all.
    if vector.resp_ephemeral is not None and not is_one_way_pattern(vector.pattern):
        _set_fixed_ephemeral_keypair(responder, vector.resp_ephemeral)

    if vector.init_prologue is not None:
        initiator.set_prologue(vector.init_prologue)
    if vector.resp_prologue is not None:
        responder.set_prologue(vector.resp_prologue)
    if vector.init_psk is not None:
        initiator.set_pre_shared_key(vector.init_psk)
    if vector.resp_psk is not None:
        responder.set_pre_shared_key(vector.resp_psk)

    initiator.start()
    responder.start()


def _exchange(vector: TestVector, initiator: HandshakeState, responder: HandshakeState) -> list[bytes]:
    """Alternate sender and receiver, initiator first, until both sides split."""
    produced: list[bytes] = []
    sender, receiver = initiator, responder
    for index, message in enumerate(vector.messages):
        if initiator.action is Action.SPLIT and responder.action is Action.SPLIT:
            _logger.debug("Both sides split: name=%s after=%d messages", vector.name, index)
            break
        _require_action(sender, Action.WRITE_MESSAGE)
        _require_action(receiver, Action.READ_MESSAGE)

        ciphertext = sender.write_message(message.payload)
        produced.append(ciphertext)
        if ciphertext != message.ciphertext:
            raise WireMismatchError("ciphertext", index, ciphertext, message.ciphertext)

        payload = receiver.read_message(ciphertext)
        if payload != message.payload:
            raise WireMismatchError("plaintext", index, payload, message.payload)

        sender, receiver = receiver, sender
    return produced


def _require_action(state: HandshakeState, expected: Action) -> None:
    if state.action is not expected:
        raise ActionMismatchError(state.role.value, state.action.value, expected.value)
