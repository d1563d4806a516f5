"""
Account Store
^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

The host backend seen by the engine: accounts and storage keyed by backend
identifier, the EVM address to backend identifier registry, and named
configuration values.

The engine never writes through to a store while a transaction runs; it
buffers into :class:`bridged_evm.state.State` and flushes once the outcome is
final, so a store needs no snapshot support of its own.
"""

from typing import Dict, Iterable, Optional, Protocol, Tuple

from ethereum_types.bytes import Bytes32
from ethereum_types.numeric import U256
from typing_extensions import override

from .fork_types import Account, Address, BackendId


class AccountStore(Protocol):
    """
    Storage backend interface.
    """

    def get_account(self, backend_id: BackendId) -> Optional[Account]:
        """
        Account record for `backend_id`, or `None` if it does not exist.
        """
        ...

    def set_account(
        self, backend_id: BackendId, account: Optional[Account]
    ) -> None:
        """
        Replace or (with `None`) delete the account record.
        """
        ...

    def get_storage(self, backend_id: BackendId, key: Bytes32) -> U256:
        """
        Storage value at `key`, zero when unset.
        """
        ...

    def set_storage(
        self, backend_id: BackendId, key: Bytes32, value: U256
    ) -> None:
        """
        Write a storage value. Writing zero removes the slot.
        """
        ...

    def storage_items(
        self, backend_id: BackendId
    ) -> Iterable[Tuple[Bytes32, U256]]:
        """
        All non-zero storage slots of the account.
        """
        ...

    def destroy_storage(self, backend_id: BackendId) -> None:
        """
        Remove every storage slot of the account.
        """
        ...

    def get_backend_id(self, address: Address) -> Optional[BackendId]:
        """
        Recorded backend identifier for `address`, if registered.
        """
        ...

    def set_backend_id(self, address: Address, backend_id: BackendId) -> None:
        """
        Record the backend identifier of `address`.
        """
        ...

    def get_config(self, key: str) -> Optional[object]:
        """
        Named configuration value, or `None` when never set.
        """
        ...

    def set_config(self, key: str, value: object) -> None:
        """
        Write a named configuration value.
        """
        ...


class MemoryAccountStore(AccountStore):
    """
    `AccountStore` kept in Python dictionaries.
    """

    def __init__(self) -> None:
        self._accounts: Dict[BackendId, Account] = {}
        self._storage: Dict[BackendId, Dict[Bytes32, U256]] = {}
        self._registry: Dict[Address, BackendId] = {}
        self._config: Dict[str, object] = {}

    @override
    def get_account(self, backend_id: BackendId) -> Optional[Account]:
        """See `AccountStore.get_account`."""
        return self._accounts.get(backend_id)

    @override
    def set_account(
        self, backend_id: BackendId, account: Optional[Account]
    ) -> None:
        """See `AccountStore.set_account`."""
        if account is None:
            self._accounts.pop(backend_id, None)
        else:
            self._accounts[backend_id] = account

    @override
    def get_storage(self, backend_id: BackendId, key: Bytes32) -> U256:
        """See `AccountStore.get_storage`."""
        return self._storage.get(backend_id, {}).get(key, U256(0))

    @override
    def set_storage(
        self, backend_id: BackendId, key: Bytes32, value: U256
    ) -> None:
        """See `AccountStore.set_storage`."""
        slots = self._storage.setdefault(backend_id, {})
        if value == 0:
            slots.pop(key, None)
            if not slots:
                del self._storage[backend_id]
        else:
            slots[key] = value

    @override
    def storage_items(
        self, backend_id: BackendId
    ) -> Iterable[Tuple[Bytes32, U256]]:
        """See `AccountStore.storage_items`."""
        return tuple(self._storage.get(backend_id, {}).items())

    @override
    def destroy_storage(self, backend_id: BackendId) -> None:
        """See `AccountStore.destroy_storage`."""
        self._storage.pop(backend_id, None)

    @override
    def get_backend_id(self, address: Address) -> Optional[BackendId]:
        """See `AccountStore.get_backend_id`."""
        return self._registry.get(address)

    @override
    def set_backend_id(self, address: Address, backend_id: BackendId) -> None:
        """See `AccountStore.set_backend_id`."""
        self._registry[address] = backend_id

    @override
    def get_config(self, key: str) -> Optional[object]:
        """See `AccountStore.get_config`."""
        return self._config.get(key)

    @override
    def set_config(self, key: str, value: object) -> None:
        """See `AccountStore.set_config`."""
        self._config[key] = value
