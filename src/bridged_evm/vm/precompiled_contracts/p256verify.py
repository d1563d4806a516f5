"""
Ethereum Virtual Machine (EVM) P256VERIFY PRECOMPILED CONTRACT
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Implementation of the secp256r1 signature verification precompile
(RIP-7212).
"""

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U256, Uint

from ...crypto.elliptic_curve import secp256r1_verify
from ...crypto.hash import Hash32
from ..gas import GAS_P256VERIFY
from ..memory import buffer_read

INPUT_LENGTH = 160


def p256verify_gas(data: Bytes) -> Uint:
    """
    Flat cost.
    """
    return GAS_P256VERIFY


def p256verify(data: Bytes) -> Bytes:
    """
    Verify a P-256 signature given as `hash || r || s || x || y`.

    A valid signature returns one as a word. Anything else, including a
    malformed input, returns empty output without failing.
    """
    if len(data) != INPUT_LENGTH:
        return b""

    message_hash = Hash32(buffer_read(data, U256(0), U256(32)))
    r = U256.from_be_bytes(buffer_read(data, U256(32), U256(32)))
    s = U256.from_be_bytes(buffer_read(data, U256(64), U256(32)))
    public_key_x = U256.from_be_bytes(buffer_read(data, U256(96), U256(32)))
    public_key_y = U256.from_be_bytes(buffer_read(data, U256(128), U256(32)))

    if not secp256r1_verify(r, s, public_key_x, public_key_y, message_hash):
        return b""

    return U256(1).to_be_bytes32()
