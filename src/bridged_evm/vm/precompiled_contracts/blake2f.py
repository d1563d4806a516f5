"""
Ethereum Virtual Machine (EVM) Blake2 PRECOMPILED CONTRACT
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Implementation of the `Blake2` precompiled contract (EIP-152).
"""

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import Uint

from ...crypto.blake2 import Blake2Parameters, compress
from ...utils.ensure import ensure
from ..exceptions import InvalidParameter
from ..gas import GAS_BLAKE2_PER_ROUND

INPUT_LENGTH = 213


def blake2f_gas(data: Bytes) -> Uint:
    """
    One unit of gas per round. Malformed input costs nothing and fails.
    """
    if len(data) != INPUT_LENGTH:
        return Uint(0)
    return GAS_BLAKE2_PER_ROUND * Uint.from_be_bytes(data[:4])


def blake2f(data: Bytes) -> Bytes:
    """
    Run the BLAKE2b compression function F over the decoded input.
    """
    ensure(len(data) == INPUT_LENGTH, InvalidParameter)
    ensure(data[212] in (0, 1), InvalidParameter)

    return compress(Blake2Parameters.from_bytes(data))
