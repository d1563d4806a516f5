"""
Numeric helpers for word sized arithmetic.
"""

from ethereum_types.numeric import Uint

WORD_SIZE = Uint(32)


def get_sign(value: int) -> int:
    """
    Determines the sign of a number.

    Parameters
    ----------
    value :
        The value whose sign is to be determined.

    Returns
    -------
    sign : `int`
        The sign of the number (-1 or 0 or 1).
    """
    if value < 0:
        return -1
    elif value == 0:
        return 0
    else:
        return 1


def ceil32(value: Uint) -> Uint:
    """
    Round `value` up to the next multiple of 32.
    """
    remainder = value % WORD_SIZE
    if remainder == 0:
        return value
    return value + WORD_SIZE - remainder


def words(size: Uint) -> Uint:
    """
    Number of 32 byte words needed to hold `size` bytes.
    """
    return ceil32(size) // WORD_SIZE
