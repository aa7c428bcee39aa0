"""
Run configuration.

Defaults come from noise_vectors.constants; the CLI overrides them.
"""

from dataclasses import dataclass

from noise_vectors.constants import MAX_MESSAGE_SIZE, MAX_MESSAGES

__all__ = ["RunConfig"]


@dataclass(frozen=True)
class RunConfig:
    """Limits applied while parsing vectors."""

    max_messages: int = MAX_MESSAGES
    """Messages per vector; one more is a parse error."""

    max_message_size: int = MAX_MESSAGE_SIZE
    """Decoded bytes per payload or ciphertext; one more is a parse error."""

    def __post_init__(self) -> None:
        if self.max_messages < 1:
            raise ValueError(f"max_messages must be positive, got {self.max_messages}")
        if self.max_message_size < 1:
            raise ValueError(f"max_message_size must be positive, got {self.max_message_size}")
