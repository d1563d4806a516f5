"""
Ethereum Virtual Machine (EVM) ECRECOVER PRECOMPILED CONTRACT
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Implementation of the ECRECOVER precompiled contract.
"""

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U256, Uint

from ...crypto.elliptic_curve import SECP256K1N, secp256k1_recover
from ...crypto.hash import Hash32, keccak256
from ...exceptions import InvalidSignatureError
from ...utils.byte import left_pad_zero_bytes
from ..gas import GAS_ECRECOVER
from ..memory import buffer_read


def ecrecover_gas(data: Bytes) -> Uint:
    """
    Flat cost, whatever the input.
    """
    return GAS_ECRECOVER


def ecrecover(data: Bytes) -> Bytes:
    """
    Decrypts the address using elliptic curve DSA recovery mechanism and
    returns it left padded to 32 bytes. Any malformed signature gives an
    empty output rather than a failure.

    Parameters
    ----------
    data :
        `hash || v || r || s`, each 32 bytes, zero padded when short.
    """
    message_hash = Hash32(buffer_read(data, U256(0), U256(32)))
    v = U256.from_be_bytes(buffer_read(data, U256(32), U256(32)))
    r = U256.from_be_bytes(buffer_read(data, U256(64), U256(32)))
    s = U256.from_be_bytes(buffer_read(data, U256(96), U256(32)))

    if v != U256(27) and v != U256(28):
        return b""
    if U256(0) >= r or r >= SECP256K1N:
        return b""
    if U256(0) >= s or s >= SECP256K1N:
        return b""

    try:
        public_key = secp256k1_recover(r, s, v - U256(27), message_hash)
    except InvalidSignatureError:
        # unable to extract public key
        return b""

    address = keccak256(public_key)[12:32]
    return left_pad_zero_bytes(address, 32)
