"""Logging helpers for noise_vectors.

The library only emits debug records; user-facing diagnostics are printed
by the run controller.
"""

import logging

_ROOT = "noise_vectors"

logging.getLogger(_ROOT).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the noise_vectors namespace."""
    return logging.getLogger(name)


def configure_debug_logging() -> None:
    """Send noise_vectors debug records to stderr."""
    logger = logging.getLogger(_ROOT)
    logger.setLevel(logging.DEBUG)
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        logger.addHandler(logging.StreamHandler())
