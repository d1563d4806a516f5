"""
Ethereum Types
^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Types re-used throughout the engine.
"""

from dataclasses import dataclass
from typing import Tuple

from ethereum_types.bytes import Bytes, Bytes20, Bytes32
from ethereum_types.frozen import slotted_freezable
from ethereum_types.numeric import U256, Uint

from .crypto.hash import Hash32, keccak256

Address = Bytes20

BackendId = U256
"""
Identifier of an account on the host backend. Values are at most 251 bits
wide.
"""

EMPTY_CODE_HASH = keccak256(b"")


@slotted_freezable
@dataclass
class Account:
    """
    State associated with an address.
    """

    nonce: Uint
    balance: U256
    code: Bytes

    @property
    def code_hash(self) -> Hash32:
        """
        keccak256 of the account's code.
        """
        return keccak256(self.code)


EMPTY_ACCOUNT = Account(
    nonce=Uint(0),
    balance=U256(0),
    code=b"",
)


@slotted_freezable
@dataclass
class Log:
    """
    Data record produced during the execution of a transaction.
    """

    address: Address
    topics: Tuple[Bytes32, ...]
    data: Bytes
