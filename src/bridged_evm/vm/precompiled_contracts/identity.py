"""
Ethereum Virtual Machine (EVM) IDENTITY PRECOMPILED CONTRACT
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Implementation of the `IDENTITY` precompiled contract.
"""

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import Uint

from ...utils.numeric import words
from ..gas import GAS_IDENTITY, GAS_IDENTITY_WORD


def identity_gas(data: Bytes) -> Uint:
    """
    Base cost plus a charge per 32 byte word of input.
    """
    return GAS_IDENTITY + GAS_IDENTITY_WORD * words(Uint(len(data)))


def identity(data: Bytes) -> Bytes:
    """
    Returns the input unchanged.
    """
    return data
