"""
Account Directory
^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Bridges 20 byte EVM addresses to backend account identifiers.

A backend identifier is derived from the address alone (together with the
deployer and the account class of the kernel), in the same content addressed
way CREATE2 derives contract addresses. Derivation never needs the registry;
the registry only remembers which addresses have been materialized on the
backend, and who may claim them.

The module also hosts the EVM address derivation rules used by CREATE and
CREATE2.
"""

import logging
from typing import Union

from ethereum_rlp import rlp
from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.numeric import U256, Uint

from .crypto.hash import Hash32, keccak256
from .exceptions import AccountAlreadyRegisteredError, CallerMismatchError
from .fork_types import Address, BackendId
from .store import AccountStore

logger = logging.getLogger(__name__)

BACKEND_ADDRESS_PREFIX = b"\x02"
BACKEND_ADDRESS_SALT = keccak256(b"bridged_evm.account")
BACKEND_ADDRESS_MASK = 2**251 - 1


def to_address(data: Union[Uint, U256]) -> Address:
    """
    Keep the low 20 bytes of a word as an address.
    """
    return Address(data.to_be_bytes32()[-20:])


def compute_contract_address(address: Address, nonce: Uint) -> Address:
    """
    Address of a contract created with CREATE by `address` at `nonce`.
    """
    computed_address = keccak256(rlp.encode([address, nonce]))
    return Address(computed_address[-20:])


def compute_create2_contract_address(
    address: Address, salt: Bytes32, call_data: Bytes
) -> Address:
    """
    Address of a contract created with CREATE2 by `address`.
    """
    return create2_address_from_hash(address, salt, keccak256(call_data))


def create2_address_from_hash(
    address: Address, salt: Bytes32, initcode_hash: Hash32
) -> Address:
    """
    CREATE2 derivation when only the init code hash is known.
    """
    preimage = b"\xff" + address + salt + initcode_hash
    return Address(keccak256(preimage)[-20:])


def deployment_address(
    deployer: Address,
    nonce_or_salt: Union[Uint, Bytes32],
    initcode_hash: Hash32,
    is_create2: bool,
) -> Address:
    """
    EVM address of a contract deployed by `deployer`.

    Parameters
    ----------
    deployer :
        Address running CREATE or CREATE2.
    nonce_or_salt :
        Deployer nonce for CREATE, 32 byte salt for CREATE2.
    initcode_hash :
        keccak256 of the init code. Ignored by CREATE.
    is_create2 :
        Which rule to apply.
    """
    if is_create2:
        assert isinstance(nonce_or_salt, bytes)
        return create2_address_from_hash(
            deployer, Bytes32(nonce_or_salt), initcode_hash
        )
    assert isinstance(nonce_or_salt, Uint)
    return compute_contract_address(deployer, nonce_or_salt)


class AccountDirectory:
    """
    EVM address to backend identifier mapping.

    Parameters
    ----------
    store :
        Backend holding the registry.
    deployer :
        Backend identifier of the kernel deploying accounts.
    class_hash :
        Class of the accounts deployed for EVM addresses.
    """

    def __init__(
        self, store: AccountStore, deployer: BackendId, class_hash: U256
    ) -> None:
        self._store = store
        self.deployer = deployer
        self.class_hash = class_hash

    def compute_backend_id(self, evm_address: Address) -> BackendId:
        """
        Backend identifier derived for `evm_address`, ignoring the registry.
        """
        preimage = (
            BACKEND_ADDRESS_PREFIX
            + self.deployer.to_be_bytes32()
            + self.class_hash.to_be_bytes32()
            + BACKEND_ADDRESS_SALT
            + keccak256(evm_address)
        )
        digest = U256.from_be_bytes(keccak256(preimage))
        return BackendId(int(digest) & BACKEND_ADDRESS_MASK)

    def resolve(self, evm_address: Address) -> BackendId:
        """
        Backend identifier of `evm_address`. A recorded registration wins
        over derivation.
        """
        recorded = self._store.get_backend_id(evm_address)
        if recorded is not None:
            return recorded
        return self.compute_backend_id(evm_address)

    def is_registered(self, evm_address: Address) -> bool:
        """
        Whether `evm_address` has been recorded in the registry.
        """
        return self._store.get_backend_id(evm_address) is not None

    def register(self, evm_address: Address, caller: BackendId) -> BackendId:
        """
        Record `evm_address` on behalf of the backend account `caller`.

        Raises
        ------
        AccountAlreadyRegisteredError
            If the address was registered before.
        CallerMismatchError
            If `caller` is not the identifier derived for `evm_address`.
        """
        if self.is_registered(evm_address):
            raise AccountAlreadyRegisteredError()

        expected = self.compute_backend_id(evm_address)
        if caller != expected:
            raise CallerMismatchError(int(expected), int(caller))

        self._store.set_backend_id(evm_address, expected)
        logger.info(
            "registered 0x%s as backend account %#x",
            evm_address.hex(),
            int(expected),
        )
        return expected

    def materialize(self, evm_address: Address) -> BackendId:
        """
        Make sure `evm_address` is recorded, deriving its identifier if this
        is the first time it is persisted.
        """
        recorded = self._store.get_backend_id(evm_address)
        if recorded is not None:
            return recorded

        backend_id = self.compute_backend_id(evm_address)
        self._store.set_backend_id(evm_address, backend_id)
        logger.debug(
            "materialized 0x%s as backend account %#x",
            evm_address.hex(),
            int(backend_id),
        )
        return backend_id
