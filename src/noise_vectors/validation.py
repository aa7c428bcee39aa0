"""Cross-check a vector's protocol name against its declared fields."""

from noise_vectors.constants import (
    CIPHER_CATEGORY,
    DH_CATEGORY,
    HASH_CATEGORY,
    PATTERN_CATEGORY,
    PREFIX_CATEGORY,
    PREFIX_PSK,
    PREFIX_STANDARD,
)
from noise_vectors.exceptions import NameMismatchError, ProtocolNameError, VectorFailure
from noise_vectors.names import id_to_name, parse_protocol_name
from noise_vectors.vector import TestVector

__all__ = ["check_protocol_name"]


def check_protocol_name(vector: TestVector) -> None:
    """
    Verify that the vector's name decomposes into its declared components.

    Args:
        vector: Parsed test vector

    Raises:
        VectorFailure: If the name does not decompose
        NameMismatchError: If the PSK prefix does not match the presence of PSK
            fields, a component's canonical name differs from the declared
            field, or the reserved identifier is set
    """
    try:
        ident = parse_protocol_name(vector.name)
    except ProtocolNameError as e:
        raise VectorFailure(str(e)) from e

    expected_prefix = PREFIX_PSK if vector.has_psk else PREFIX_STANDARD
    if ident.prefix_id != expected_prefix:
        raise NameMismatchError(
            "prefix",
            id_to_name(PREFIX_CATEGORY, ident.prefix_id),
            id_to_name(PREFIX_CATEGORY, expected_prefix),
        )

    for component, category, value, declared in (
        ("pattern", PATTERN_CATEGORY, ident.pattern_id, vector.pattern),
        ("dh", DH_CATEGORY, ident.dh_id, vector.dh),
        ("cipher", CIPHER_CATEGORY, ident.cipher_id, vector.cipher),
        ("hash", HASH_CATEGORY, ident.hash_id, vector.hash),
    ):
        actual = id_to_name(category, value)
        if actual is None or actual != declared:
            raise NameMismatchError(component, actual, declared)

    if ident.reserved_id != 0:
        raise NameMismatchError("reserved_id", ident.reserved_id, 0)
