"""
Byte padding helpers.
"""

from typing import Union

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import FixedUnsigned, Uint


def left_pad_zero_bytes(
    value: Bytes, size: Union[int, FixedUnsigned, Uint]
) -> Bytes:
    """
    Left pad zeroes to `value` if its length is less than the given `size`.
    """
    return value.rjust(int(size), b"\x00")


def right_pad_zero_bytes(
    value: Bytes, size: Union[int, FixedUnsigned, Uint]
) -> Bytes:
    """
    Right pad zeroes to `value` if its length is less than the given `size`.
    """
    return value.ljust(int(size), b"\x00")
