"""
Ethereum Virtual Machine (EVM) SHA256 PRECOMPILED CONTRACT
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Implementation of the `SHA256` precompiled contract.
"""

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import Uint

from ...crypto.hash import sha256 as sha256_digest
from ...utils.numeric import words
from ..gas import GAS_SHA256, GAS_SHA256_WORD


def sha256_gas(data: Bytes) -> Uint:
    """
    Base cost plus a charge per 32 byte word of input.
    """
    return GAS_SHA256 + GAS_SHA256_WORD * words(Uint(len(data)))


def sha256(data: Bytes) -> Bytes:
    """
    Returns the SHA256 digest of the input.
    """
    return sha256_digest(data)
