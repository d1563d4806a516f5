"""
Cryptographic Hash Functions
^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Hash functions needed by the EVM and by the account directory.
"""

import hashlib

from Crypto.Hash import RIPEMD160, keccak
from ethereum_types.bytes import Bytes, Bytes20, Bytes32

Hash32 = Bytes32


def keccak256(buffer: Bytes) -> Hash32:
    """
    Computes the keccak256 hash of the input `buffer`.

    Parameters
    ----------
    buffer :
        Input for the hashing function.

    Returns
    -------
    hash : `Hash32`
        Output of the hash function.
    """
    k = keccak.new(digest_bits=256)
    return Hash32(k.update(buffer).digest())


def sha256(buffer: Bytes) -> Hash32:
    """
    Computes the sha256 hash of the input `buffer`.
    """
    return Hash32(hashlib.sha256(buffer).digest())


def ripemd160(buffer: Bytes) -> Bytes20:
    """
    Computes the ripemd160 hash of the input `buffer`.

    OpenSSL 3 no longer ships ripemd160 by default, so the pycryptodome
    implementation is used instead of `hashlib`.
    """
    return Bytes20(RIPEMD160.new(buffer).digest())
