"""
Precompiled Contract Addresses
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Mapping of precompiled contract addresses to their implementations.

Every entry pairs a pricing function with the routine itself, both taking
the call data. The frame is charged before the routine runs, and a routine
rejecting its input with `InvalidParameter` reverts the frame while the
charged gas stays spent.
"""

from typing import Callable, Dict, NamedTuple

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import Uint

from ...fork_types import Address
from .. import Evm
from ..exceptions import InvalidParameter, PrecompileFailed
from ..gas import charge_gas
from . import (
    ALT_BN128_ADD_ADDRESS,
    ALT_BN128_MUL_ADDRESS,
    ALT_BN128_PAIRING_CHECK_ADDRESS,
    BLAKE2F_ADDRESS,
    ECRECOVER_ADDRESS,
    IDENTITY_ADDRESS,
    MODEXP_ADDRESS,
    P256VERIFY_ADDRESS,
    RIPEMD160_ADDRESS,
    SHA256_ADDRESS,
)
from .alt_bn128 import (
    alt_bn128_add,
    alt_bn128_add_gas,
    alt_bn128_mul,
    alt_bn128_mul_gas,
    alt_bn128_pairing_check,
    alt_bn128_pairing_check_gas,
)
from .blake2f import blake2f, blake2f_gas
from .ecrecover import ecrecover, ecrecover_gas
from .identity import identity, identity_gas
from .modexp import modexp, modexp_gas
from .p256verify import p256verify, p256verify_gas
from .ripemd160 import ripemd160, ripemd160_gas
from .sha256 import sha256, sha256_gas


class Precompile(NamedTuple):
    """
    A precompiled contract: what it costs for a given input, and what it
    returns.
    """

    gas_cost: Callable[[Bytes], Uint]
    execute: Callable[[Bytes], Bytes]


PRE_COMPILED_CONTRACTS: Dict[Address, Precompile] = {
    ECRECOVER_ADDRESS: Precompile(ecrecover_gas, ecrecover),
    SHA256_ADDRESS: Precompile(sha256_gas, sha256),
    RIPEMD160_ADDRESS: Precompile(ripemd160_gas, ripemd160),
    IDENTITY_ADDRESS: Precompile(identity_gas, identity),
    MODEXP_ADDRESS: Precompile(modexp_gas, modexp),
    ALT_BN128_ADD_ADDRESS: Precompile(alt_bn128_add_gas, alt_bn128_add),
    ALT_BN128_MUL_ADDRESS: Precompile(alt_bn128_mul_gas, alt_bn128_mul),
    ALT_BN128_PAIRING_CHECK_ADDRESS: Precompile(
        alt_bn128_pairing_check_gas, alt_bn128_pairing_check
    ),
    BLAKE2F_ADDRESS: Precompile(blake2f_gas, blake2f),
    P256VERIFY_ADDRESS: Precompile(p256verify_gas, p256verify),
}


def run_precompile(evm: Evm, precompile: Precompile) -> None:
    """
    Charge `evm` for running `precompile` on its call data and store the
    result as the frame output.

    Raises
    ------
    OutOfGasError
        The frame cannot pay for the call.
    PrecompileFailed
        The routine rejected its input.
    """
    data = evm.message.data
    charge_gas(evm, precompile.gas_cost(data))
    try:
        evm.output = precompile.execute(data)
    except InvalidParameter as error:
        raise PrecompileFailed(str(error)) from error
    evm.running = False
