"""
Hexadecimal string conversions used by the command line and tests.
"""

from ethereum_types.bytes import Bytes, Bytes20, Bytes32
from ethereum_types.numeric import U256, Uint

from ..fork_types import Address


def has_hex_prefix(hex_string: str) -> bool:
    """
    Check if a hex string starts with hex prefix (0x).
    """
    return hex_string.startswith("0x")


def remove_hex_prefix(hex_string: str) -> str:
    """
    Remove 0x prefix from a hex string if present.
    """
    if has_hex_prefix(hex_string):
        return hex_string[len("0x") :]
    return hex_string


def hex_to_bytes(hex_string: str) -> Bytes:
    """
    Convert hex string to bytes. Odd length strings get a leading zero.
    """
    digits = remove_hex_prefix(hex_string)
    if len(digits) % 2:
        digits = "0" + digits
    return Bytes(bytes.fromhex(digits))


def hex_to_bytes32(hex_string: str) -> Bytes32:
    """
    Convert hex string to a left padded 32 byte value.
    """
    return Bytes32(bytes.fromhex(remove_hex_prefix(hex_string).rjust(64, "0")))


def hex_to_address(hex_string: str) -> Address:
    """
    Convert hex string to an address, left padding short values.
    """
    return Bytes20(bytes.fromhex(remove_hex_prefix(hex_string).rjust(40, "0")))


def hex_to_uint(hex_string: str) -> Uint:
    """
    Convert hex string to Uint.
    """
    return Uint(int(remove_hex_prefix(hex_string) or "0", 16))


def hex_to_u256(hex_string: str) -> U256:
    """
    Convert hex string to U256.
    """
    return U256(int(remove_hex_prefix(hex_string) or "0", 16))
