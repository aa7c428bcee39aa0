"""
Noise algorithm identifier registry.

Maps between canonical algorithm names and numeric identifiers, and
decomposes full protocol names such as ``Noise_XX_25519_AESGCM_SHA256`` or
``NoisePSK_IK_448_ChaChaPoly_BLAKE2b`` into a ProtocolId.

Identifiers follow the noise-c numbering: ``(ord(category) << 8) | index``
with indices starting at 1, so 0 always means "none" or "unknown".
"""

from __future__ import annotations

from dataclasses import dataclass

from noise_vectors.constants import (
    CIPHER_CATEGORY,
    CIPHERS,
    DH_CATEGORY,
    DH_FUNCTIONS,
    HASH_CATEGORY,
    HASHES,
    ONE_WAY_PATTERNS,
    PATTERN_CATEGORY,
    PATTERNS,
    PREFIX_CATEGORY,
    PREFIXES,
)
from noise_vectors.exceptions import ProtocolNameError

__all__ = [
    "ProtocolId",
    "format_protocol_name",
    "id_to_name",
    "is_one_way_pattern",
    "name_to_id",
    "parse_protocol_name",
]


def _table(category: int, names: tuple[str, ...]) -> dict[int, str]:
    return {category | index: name for index, name in enumerate(names, start=1)}


_ID_TO_NAME: dict[int, dict[int, str]] = {
    PREFIX_CATEGORY: _table(PREFIX_CATEGORY, PREFIXES),
    PATTERN_CATEGORY: _table(PATTERN_CATEGORY, PATTERNS),
    DH_CATEGORY: _table(DH_CATEGORY, DH_FUNCTIONS),
    CIPHER_CATEGORY: _table(CIPHER_CATEGORY, CIPHERS),
    HASH_CATEGORY: _table(HASH_CATEGORY, HASHES),
}

_NAME_TO_ID: dict[int, dict[str, int]] = {
    category: {name: ident for ident, name in table.items()} for category, table in _ID_TO_NAME.items()
}

_EXTENSION_SEPARATOR = "+"


def id_to_name(category: int, ident: int) -> str | None:
    """
    Look up the canonical name of an identifier.

    Args:
        category: One of the *_CATEGORY constants
        ident: Identifier within that category

    Returns:
        The name, or None if the category or identifier is unknown
    """
    return _ID_TO_NAME.get(category, {}).get(ident)


def name_to_id(category: int, name: str) -> int:
    """
    Look up the identifier of a canonical name.

    Returns:
        The identifier, or 0 if the name is unknown in that category
    """
    return _NAME_TO_ID.get(category, {}).get(name, 0)


def is_one_way_pattern(pattern: str) -> bool:
    """Whether ``pattern`` names a one-way (single message) handshake pattern."""
    return name_to_id(PATTERN_CATEGORY, pattern) != 0 and pattern in ONE_WAY_PATTERNS


@dataclass(frozen=True)
class ProtocolId:
    """Decomposed protocol name."""

    prefix_id: int
    pattern_id: int
    dh_id: int
    cipher_id: int
    hash_id: int
    reserved_id: int = 0
    """Extension DH identifier from a ``<dh>+<extension>`` component; 0 if none."""


def parse_protocol_name(name: str) -> ProtocolId:
    """
    Decompose a full protocol name.

    Grammar: ``<prefix>_<pattern>_<dh>[+<extension>]_<cipher>_<hash>``

    Args:
        name: Full protocol name

    Returns:
        ProtocolId with every component resolved

    Raises:
        ProtocolNameError: If the shape is wrong or a component is unknown
    """
    parts = name.split("_")
    if len(parts) != 5:
        raise ProtocolNameError(name, f"expected 5 components, found {len(parts)}")
    prefix, pattern, dh, cipher, hash_name = parts

    extension = ""
    if _EXTENSION_SEPARATOR in dh:
        dh, extension = dh.split(_EXTENSION_SEPARATOR, 1)
        if not extension:
            raise ProtocolNameError(name, "empty DH extension")

    return ProtocolId(
        prefix_id=_resolve(name, PREFIX_CATEGORY, prefix, "prefix"),
        pattern_id=_resolve(name, PATTERN_CATEGORY, pattern, "pattern"),
        dh_id=_resolve(name, DH_CATEGORY, dh, "DH"),
        cipher_id=_resolve(name, CIPHER_CATEGORY, cipher, "cipher"),
        hash_id=_resolve(name, HASH_CATEGORY, hash_name, "hash"),
        reserved_id=_resolve(name, DH_CATEGORY, extension, "DH extension") if extension else 0,
    )


def format_protocol_name(ident: ProtocolId) -> str:
    """
    Build the full protocol name for a ProtocolId.

    Raises:
        ProtocolNameError: If an identifier is unknown
    """
    components = [
        (PREFIX_CATEGORY, ident.prefix_id),
        (PATTERN_CATEGORY, ident.pattern_id),
        (DH_CATEGORY, ident.dh_id),
        (CIPHER_CATEGORY, ident.cipher_id),
        (HASH_CATEGORY, ident.hash_id),
    ]
    names: list[str] = []
    for category, value in components:
        component = id_to_name(category, value)
        if component is None:
            raise ProtocolNameError(repr(ident), f"unknown identifier 0x{value:04x}")
        names.append(component)
    if ident.reserved_id:
        extension = id_to_name(DH_CATEGORY, ident.reserved_id)
        if extension is None:
            raise ProtocolNameError(repr(ident), f"unknown identifier 0x{ident.reserved_id:04x}")
        names[2] += _EXTENSION_SEPARATOR + extension
    return "_".join(names)


def _resolve(name: str, category: int, component: str, label: str) -> int:
    ident = name_to_id(category, component)
    if not ident:
        raise ProtocolNameError(name, f"unknown {label} {component!r}")
    return ident
