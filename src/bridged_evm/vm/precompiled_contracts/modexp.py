"""
Ethereum Virtual Machine (EVM) MODEXP PRECOMPILED CONTRACT
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Implementation of the `MODEXP` precompiled contract, priced per EIP-2565.
"""

from typing import Tuple

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U256, Uint

from ..memory import buffer_read

GQUADDIVISOR = Uint(3)
MIN_GAS = Uint(200)


def _lengths(data: Bytes) -> Tuple[Uint, Uint, Uint]:
    base_length = Uint.from_be_bytes(buffer_read(data, U256(0), U256(32)))
    exp_length = Uint.from_be_bytes(buffer_read(data, U256(32), U256(32)))
    modulus_length = Uint.from_be_bytes(buffer_read(data, U256(64), U256(32)))
    return base_length, exp_length, modulus_length


def modexp_gas(data: Bytes) -> Uint:
    """
    Price a modular exponentiation from the three length words and the
    leading 32 bytes of the exponent.
    """
    base_length, exp_length, modulus_length = _lengths(data)
    exp_start = Uint(96) + base_length
    exp_head = Uint.from_be_bytes(
        buffer_read(data, exp_start, min(Uint(32), exp_length))
    )
    return gas_cost(base_length, modulus_length, exp_length, exp_head)


def modexp(data: Bytes) -> Bytes:
    """
    Calculates `(base**exp) % modulus` for arbitrary sized `base`, `exp` and
    `modulus`. The return value is the same length as the modulus.
    """
    base_length, exp_length, modulus_length = _lengths(data)
    if base_length == 0 and modulus_length == 0:
        return b""

    exp_start = Uint(96) + base_length
    modulus_start = exp_start + exp_length

    base = int.from_bytes(buffer_read(data, Uint(96), base_length), "big")
    exp = int.from_bytes(buffer_read(data, exp_start, exp_length), "big")
    modulus = int.from_bytes(
        buffer_read(data, modulus_start, modulus_length), "big"
    )

    if modulus == 0:
        return b"\x00" * int(modulus_length)
    return pow(base, exp, modulus).to_bytes(int(modulus_length), "big")


def complexity(base_length: Uint, modulus_length: Uint) -> Uint:
    """
    Estimate the complexity of performing a modular exponentiation: the
    square of the number of 64 bit words of the longer operand.
    """
    max_length = max(base_length, modulus_length)
    words = (max_length + Uint(7)) // Uint(8)
    return words * words


def iterations(exponent_length: Uint, exponent_head: Uint) -> Uint:
    """
    Calculate the number of iterations required to perform a modular
    exponentiation.

    Parameters
    ----------
    exponent_length :
        Length of the array representing the exponent integer.
    exponent_head :
        First 32 bytes of the exponent (with leading zero padding if it is
        shorter than 32 bytes), as an unsigned integer.
    """
    if exponent_length <= Uint(32) and exponent_head == 0:
        count = Uint(0)
    elif exponent_length <= Uint(32):
        bit_length = exponent_head.bit_length()

        if bit_length > Uint(0):
            bit_length -= Uint(1)

        count = bit_length
    else:
        length_part = Uint(8) * (exponent_length - Uint(32))
        bits_part = exponent_head.bit_length()

        if bits_part > Uint(0):
            bits_part -= Uint(1)

        count = length_part + bits_part

    return max(count, Uint(1))


def gas_cost(
    base_length: Uint,
    modulus_length: Uint,
    exponent_length: Uint,
    exponent_head: Uint,
) -> Uint:
    """
    Calculate the gas cost of performing a modular exponentiation, never
    less than `MIN_GAS`.
    """
    multiplication_complexity = complexity(base_length, modulus_length)
    iteration_count = iterations(exponent_length, exponent_head)
    cost = multiplication_complexity * iteration_count
    cost //= GQUADDIVISOR
    return max(MIN_GAS, cost)
