"""
Hexadecimal field decoding for test vectors.

Every binary field in a vector file is a JSON string of hex digits. Decoding
is strict: whitespace, separators and odd lengths are all rejected, so a
decoded buffer is always exactly half the length of its source string.
"""

import binascii
import re

from noise_vectors.constants import BLOCK_LINE_BYTES
from noise_vectors.exceptions import HexDecodeError

__all__ = [
    "decode_hex",
    "format_block",
]

_HEX_DIGITS = re.compile(r"[0-9A-Fa-f]*")


def decode_hex(text: str) -> bytes:
    """
    Decode a hexadecimal string to bytes.

    Args:
        text: Even-length string of hex digits (either case)

    Returns:
        Decoded bytes, len(text) // 2 long

    Raises:
        HexDecodeError: If the length is odd or a character is not a hex digit
    """
    if len(text) % 2:
        raise HexDecodeError(f"Odd-length hexadecimal data ({len(text)} digits)")
    if not _HEX_DIGITS.fullmatch(text):
        raise HexDecodeError("Invalid hexadecimal data")
    try:
        return binascii.unhexlify(text)
    except ValueError as e:
        raise HexDecodeError("Invalid hexadecimal data") from e


def format_block(data: bytes) -> str:
    """
    Render bytes for a mismatch report.

    Short blocks stay on one line; longer blocks start on a fresh line and
    wrap every 16 bytes.

    Args:
        data: Bytes to render

    Returns:
        Text beginning with a space-separated byte list
    """
    if len(data) <= BLOCK_LINE_BYTES:
        return "".join(f" {b:02x}" for b in data)
    lines = [
        "".join(f" {b:02x}" for b in data[offset : offset + BLOCK_LINE_BYTES])
        for offset in range(0, len(data), BLOCK_LINE_BYTES)
    ]
    return "\n       " + "\n       ".join(lines)
