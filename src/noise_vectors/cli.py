"""
Command-line entry point.

Usage:
    noise-vectors noise-c-basic.txt cacophony.txt
    python -m noise_vectors -v vectors.txt

Exit status is 0 only if every file was read and every vector in it parsed
and replayed without failure; argparse exits with 2 on usage errors.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from noise_vectors import __version__
from noise_vectors._logging import configure_debug_logging
from noise_vectors.config import RunConfig
from noise_vectors.constants import MAX_MESSAGE_SIZE, MAX_MESSAGES
from noise_vectors.runner import RunContext, run_files

__all__ = ["build_parser", "main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="noise-vectors",
        description="Replay Noise protocol test vectors against the handshake engine.",
    )
    parser.add_argument("files", nargs="+", metavar="FILE", help="test vector file (JSON)")
    parser.add_argument(
        "--max-messages",
        type=int,
        default=MAX_MESSAGES,
        help=f"maximum messages per vector (default: {MAX_MESSAGES})",
    )
    parser.add_argument(
        "--max-message-size",
        type=int,
        default=MAX_MESSAGE_SIZE,
        help=f"maximum decoded payload or ciphertext size (default: {MAX_MESSAGE_SIZE})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        configure_debug_logging()
    try:
        config = RunConfig(max_messages=args.max_messages, max_message_size=args.max_message_size)
    except ValueError as e:
        parser.error(str(e))
    context = RunContext(config=config)
    return 0 if run_files(context, args.files) else 1
