"""
Ethereum Virtual Machine (EVM) RIPEMD160 PRECOMPILED CONTRACT
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Implementation of the `RIPEMD160` precompiled contract.
"""

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import Uint

from ...crypto.hash import ripemd160 as ripemd160_digest
from ...utils.byte import left_pad_zero_bytes
from ...utils.numeric import words
from ..gas import GAS_RIPEMD160, GAS_RIPEMD160_WORD


def ripemd160_gas(data: Bytes) -> Uint:
    """
    Base cost plus a charge per 32 byte word of input.
    """
    return GAS_RIPEMD160 + GAS_RIPEMD160_WORD * words(Uint(len(data)))


def ripemd160(data: Bytes) -> Bytes:
    """
    Returns the RIPEMD160 digest of the input, left padded to 32 bytes.
    """
    return left_pad_zero_bytes(ripemd160_digest(data), 32)
