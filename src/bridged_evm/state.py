"""
State
^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

The world state as seen by a running transaction.

Reads fall through to the host `AccountStore`; writes are buffered in an
overlay and every change is recorded in a `StateJournal`, so a call frame can
be rolled back exactly. The overlay reaches the store only through
`commit_to_store`, once the transaction outcome is final. Because the store
is untouched until then, it also serves the storage values that held when the
transaction started.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Set, Tuple

from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.frozen import modify
from ethereum_types.numeric import U256, Uint

from .directory import AccountDirectory
from .fork_types import EMPTY_ACCOUNT, Account, Address, Log
from .journal import (
    AccountCreated,
    BalanceChanged,
    Checkpoint,
    CodeChanged,
    CreationMarked,
    DestructionMarked,
    JournalEntry,
    LogEmitted,
    NonceChanged,
    StateJournal,
    StorageWritten,
    TransientStorageWritten,
)
from .store import AccountStore


@dataclass
class State:
    """
    Overlay of pending changes on top of an `AccountStore`.
    """

    store: AccountStore
    directory: AccountDirectory
    journal: StateJournal = field(default_factory=StateJournal)
    _accounts: Dict[Address, Optional[Account]] = field(default_factory=dict)
    _storage: Dict[Address, Dict[Bytes32, U256]] = field(default_factory=dict)
    _wiped: Set[Address] = field(default_factory=set)
    _transient_storage: Dict[Tuple[Address, Bytes32], U256] = field(
        default_factory=dict
    )
    created_accounts: Set[Address] = field(default_factory=set)
    accounts_to_delete: Set[Address] = field(default_factory=set)


@dataclass(frozen=True)
class AccountDiff:
    """
    Post-state of one account touched by a transaction.
    """

    balance: U256
    nonce: Uint
    code: Bytes
    storage: Dict[Bytes32, U256]


def _stored_account(state: State, address: Address) -> Optional[Account]:
    return state.store.get_account(state.directory.resolve(address))


def begin_transaction(state: State) -> Checkpoint:
    """
    Start a call frame scope.
    """
    return state.journal.checkpoint()


def commit_transaction(state: State, checkpoint: Checkpoint) -> None:
    """
    Keep the changes made since `checkpoint`.
    """
    state.journal.commit(checkpoint)


def rollback_transaction(state: State, checkpoint: Checkpoint) -> None:
    """
    Undo every change made since `checkpoint`.
    """
    for entry in state.journal.rollback(checkpoint):
        _undo(state, entry)


def _undo(state: State, entry: JournalEntry) -> None:
    if isinstance(entry, AccountCreated):
        state._accounts[entry.address] = None
    elif isinstance(entry, BalanceChanged):
        _set_field(state, entry.address, "balance", entry.previous)
    elif isinstance(entry, NonceChanged):
        _set_field(state, entry.address, "nonce", entry.previous)
    elif isinstance(entry, CodeChanged):
        _set_field(state, entry.address, "code", entry.previous)
    elif isinstance(entry, StorageWritten):
        slots = state._storage[entry.address]
        if entry.previous is None:
            del slots[entry.key]
        else:
            slots[entry.key] = entry.previous
    elif isinstance(entry, TransientStorageWritten):
        state._transient_storage[(entry.address, entry.key)] = entry.previous
    elif isinstance(entry, CreationMarked):
        state.created_accounts.discard(entry.address)
    elif isinstance(entry, DestructionMarked):
        state.accounts_to_delete.discard(entry.address)
    elif isinstance(entry, LogEmitted):
        pass
    else:
        raise TypeError(f"unknown journal entry {entry!r}")


def _set_field(
    state: State, address: Address, name: str, value: object
) -> None:
    account = state._accounts[address]
    assert account is not None

    def restore(account: Account) -> None:
        setattr(account, name, value)

    state._accounts[address] = modify(account, restore)


def get_account_optional(state: State, address: Address) -> Optional[Account]:
    """
    Get the `Account` object at an address. Returns `None` (rather than
    `EMPTY_ACCOUNT`) if there is no account at the address.
    """
    if address in state._accounts:
        return state._accounts[address]
    return _stored_account(state, address)


def get_account(state: State, address: Address) -> Account:
    """
    Get the `Account` object at an address. Returns `EMPTY_ACCOUNT` if there
    is no account at the address.

    Use `get_account_optional()` if you care about the difference between a
    non-existent account and `EMPTY_ACCOUNT`.
    """
    account = get_account_optional(state, address)
    if account is None:
        return EMPTY_ACCOUNT
    return account


def is_account_alive(state: State, address: Address) -> bool:
    """
    Check whether an account exists and is not empty.
    """
    account = get_account_optional(state, address)
    if account is None:
        return False
    return not (
        account.nonce == Uint(0)
        and account.code == b""
        and account.balance == 0
    )


def account_has_code_or_nonce(state: State, address: Address) -> bool:
    """
    Checks if an account has non zero nonce or non empty code.
    """
    account = get_account(state, address)
    return account.nonce != Uint(0) or account.code != b""


def account_has_storage(state: State, address: Address) -> bool:
    """
    Checks if an account has storage.
    """
    return bool(storage_snapshot(state, address))


def modify_state(
    state: State, address: Address, f: Callable[[Account], None]
) -> None:
    """
    Modify an `Account` in the `State`, creating it if needed, and journal
    every field that changed.
    """
    if address not in state._accounts:
        state._accounts[address] = _stored_account(state, address)

    account = state._accounts[address]
    if account is None:
        state.journal.record(AccountCreated(address))
        account = EMPTY_ACCOUNT

    updated = modify(account, f)
    if updated.balance != account.balance:
        state.journal.record(BalanceChanged(address, account.balance))
    if updated.nonce != account.nonce:
        state.journal.record(NonceChanged(address, account.nonce))
    if updated.code != account.code:
        state.journal.record(CodeChanged(address, account.code))
    state._accounts[address] = updated


def _ensure_account(state: State, address: Address) -> None:
    def noop(account: Account) -> None:
        pass

    if get_account_optional(state, address) is None:
        modify_state(state, address, noop)


def move_ether(
    state: State,
    sender_address: Address,
    recipient_address: Address,
    amount: U256,
) -> None:
    """
    Move funds between accounts.
    """

    def reduce_sender_balance(sender: Account) -> None:
        if sender.balance < amount:
            raise AssertionError
        sender.balance -= amount

    def increase_recipient_balance(recipient: Account) -> None:
        recipient.balance += amount

    modify_state(state, sender_address, reduce_sender_balance)
    modify_state(state, recipient_address, increase_recipient_balance)


def set_account_balance(state: State, address: Address, amount: U256) -> None:
    """
    Sets the balance of an account.
    """

    def set_balance(account: Account) -> None:
        account.balance = amount

    modify_state(state, address, set_balance)


def increment_nonce(state: State, address: Address) -> None:
    """
    Increments the nonce of an account.
    """

    def increase_nonce(sender: Account) -> None:
        sender.nonce += Uint(1)

    modify_state(state, address, increase_nonce)


def set_code(state: State, address: Address, code: Bytes) -> None:
    """
    Sets Account code.
    """

    def write_code(sender: Account) -> None:
        sender.code = code

    modify_state(state, address, write_code)


def get_storage(state: State, address: Address, key: Bytes32) -> U256:
    """
    Get a value at a storage key on an account. Returns `U256(0)` if the
    storage key has not been set previously.
    """
    slots = state._storage.get(address, {})
    if key in slots:
        return slots[key]
    if address in state._wiped:
        return U256(0)
    return state.store.get_storage(state.directory.resolve(address), key)


def set_storage(
    state: State, address: Address, key: Bytes32, value: U256
) -> None:
    """
    Set a value at a storage key on an account. Setting to `U256(0)` deletes
    the key.
    """
    _ensure_account(state, address)
    slots = state._storage.setdefault(address, {})
    state.journal.record(StorageWritten(address, key, slots.get(key)))
    slots[key] = value


def get_storage_original(state: State, address: Address, key: Bytes32) -> U256:
    """
    Get the original value in a storage slot i.e. the value before the current
    transaction began.
    """
    # An account created by this transaction started out with no storage.
    if address in state.created_accounts:
        return U256(0)
    return state.store.get_storage(state.directory.resolve(address), key)


def storage_snapshot(state: State, address: Address) -> Dict[Bytes32, U256]:
    """
    All non-zero storage slots of `address`, pending writes included.
    """
    slots: Dict[Bytes32, U256] = {}
    if address not in state._wiped:
        backend_id = state.directory.resolve(address)
        slots.update(state.store.storage_items(backend_id))
    slots.update(state._storage.get(address, {}))
    return {key: value for key, value in slots.items() if value != 0}


def get_transient_storage(
    state: State, address: Address, key: Bytes32
) -> U256:
    """
    Get a value at a transient storage key on an account.
    """
    return state._transient_storage.get((address, key), U256(0))


def set_transient_storage(
    state: State, address: Address, key: Bytes32, value: U256
) -> None:
    """
    Set a value at a transient storage key on an account.
    """
    previous = get_transient_storage(state, address, key)
    state.journal.record(TransientStorageWritten(address, key, previous))
    state._transient_storage[(address, key)] = value


def mark_account_created(state: State, address: Address) -> None:
    """
    Remember that `address` was created by the running transaction.
    """
    if address not in state.created_accounts:
        state.journal.record(CreationMarked(address))
        state.created_accounts.add(address)


def mark_account_for_deletion(state: State, address: Address) -> None:
    """
    Schedule `address` for removal at the end of the transaction.
    """
    if address not in state.accounts_to_delete:
        state.journal.record(DestructionMarked(address))
        state.accounts_to_delete.add(address)


def emit_log(state: State, log: Log) -> None:
    """
    Record a log. It survives only if every enclosing frame succeeds.
    """
    state.journal.record(LogEmitted(log))


def destroy_account(state: State, address: Address) -> None:
    """
    Completely remove the account at `address` and all of its storage.

    Only used while finalizing a transaction, after every frame has closed,
    so the removal is not journaled.
    """
    state._accounts[address] = None
    state._storage.pop(address, None)
    state._wiped.add(address)


def touched_addresses(state: State) -> Set[Address]:
    """
    Addresses with pending account or storage writes.
    """
    return set(state._accounts) | set(state._storage) | state._wiped


def state_diff(state: State) -> Dict[Address, Optional[AccountDiff]]:
    """
    Post-state of every account that differs from the store. Deleted
    accounts map to `None`.
    """
    diff: Dict[Address, Optional[AccountDiff]] = {}
    for address in sorted(touched_addresses(state)):
        account = get_account_optional(state, address)
        storage = storage_snapshot(state, address)
        backend_id = state.directory.resolve(address)
        stored = state.store.get_account(backend_id)
        stored_storage = dict(state.store.storage_items(backend_id))
        if account == stored and storage == stored_storage:
            continue
        if account is None:
            diff[address] = None
            continue
        diff[address] = AccountDiff(
            balance=account.balance,
            nonce=account.nonce,
            code=account.code,
            storage=storage,
        )
    return diff


def commit_to_store(state: State) -> None:
    """
    Write every pending change to the store and reset the overlay.

    Accounts persisted for the first time are materialized in the directory.
    """
    assert state.journal.depth == 0

    for address in sorted(touched_addresses(state)):
        account = get_account_optional(state, address)
        backend_id = state.directory.resolve(address)

        if address in state._wiped:
            state.store.destroy_storage(backend_id)

        if account is None:
            if state.store.get_account(backend_id) is not None:
                state.store.set_account(backend_id, None)
            continue

        if account != state.store.get_account(backend_id):
            backend_id = state.directory.materialize(address)
            state.store.set_account(backend_id, account)

        for key, value in state._storage.get(address, {}).items():
            backend_id = state.directory.materialize(address)
            state.store.set_storage(backend_id, key, value)

    discard_changes(state)


def discard_changes(state: State) -> None:
    """
    Drop the overlay and the journal without touching the store.
    """
    assert state.journal.depth == 0
    state.journal.clear()
    state._accounts.clear()
    state._storage.clear()
    state._wiped.clear()
    state._transient_storage.clear()
    state.created_accounts.clear()
    state.accounts_to_delete.clear()
