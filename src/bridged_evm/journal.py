"""
State Journal
^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Append-only record of every mutation made while a transaction executes.

Each call frame opens a checkpoint when it starts and either commits it (the
entries become part of the enclosing scope) or rolls it back (the entries are
handed back, newest first, so the owner of the data can undo them). The
journal itself never touches account data, which keeps it usable by any
state implementation.

Checkpoints nest strictly: only the innermost open checkpoint may be
committed or rolled back.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.numeric import U256, Uint

from .fork_types import Address, Log


@dataclass(frozen=True)
class AccountCreated:
    """
    An account record was materialized in the overlay for writing.
    """

    address: Address


@dataclass(frozen=True)
class BalanceChanged:
    """
    Balance of `address` was changed from `previous`.
    """

    address: Address
    previous: U256


@dataclass(frozen=True)
class NonceChanged:
    """
    Nonce of `address` was changed from `previous`.
    """

    address: Address
    previous: Uint


@dataclass(frozen=True)
class CodeChanged:
    """
    Code of `address` was changed from `previous`.
    """

    address: Address
    previous: Bytes


@dataclass(frozen=True)
class StorageWritten:
    """
    A storage slot was written. `previous` is `None` when the slot had not
    been written before in this transaction.
    """

    address: Address
    key: Bytes32
    previous: Optional[U256]


@dataclass(frozen=True)
class TransientStorageWritten:
    """
    A transient storage slot was written.
    """

    address: Address
    key: Bytes32
    previous: U256


@dataclass(frozen=True)
class CreationMarked:
    """
    `address` was created by the running transaction.
    """

    address: Address


@dataclass(frozen=True)
class DestructionMarked:
    """
    `address` self-destructed and is removed when the transaction ends.
    """

    address: Address


@dataclass(frozen=True)
class LogEmitted:
    """
    A log was emitted.
    """

    log: Log


JournalEntry = Union[
    AccountCreated,
    BalanceChanged,
    NonceChanged,
    CodeChanged,
    StorageWritten,
    TransientStorageWritten,
    CreationMarked,
    DestructionMarked,
    LogEmitted,
]


@dataclass(frozen=True)
class Checkpoint:
    """
    Opaque token returned by `StateJournal.checkpoint`.
    """

    depth: int
    position: int


@dataclass
class StateJournal:
    """
    Ordered list of entries with a stack of open checkpoints.
    """

    _entries: List[JournalEntry] = field(default_factory=list)
    _checkpoints: List[Checkpoint] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[JournalEntry]:
        return iter(self._entries)

    @property
    def depth(self) -> int:
        """
        Number of checkpoints currently open.
        """
        return len(self._checkpoints)

    def record(self, entry: JournalEntry) -> None:
        """
        Append `entry` to the journal.
        """
        self._entries.append(entry)

    def checkpoint(self) -> Checkpoint:
        """
        Open a new checkpoint at the current end of the journal.
        """
        token = Checkpoint(
            depth=len(self._checkpoints), position=len(self._entries)
        )
        self._checkpoints.append(token)
        return token

    def _close(self, token: Checkpoint) -> None:
        assert self._checkpoints, "no checkpoint is open"
        assert self._checkpoints[-1] == token, (
            "checkpoints must be closed in reverse order of creation"
        )
        self._checkpoints.pop()

    def commit(self, token: Checkpoint) -> None:
        """
        Close `token`, keeping its entries as part of the enclosing scope.
        """
        self._close(token)

    def rollback(self, token: Checkpoint) -> Tuple[JournalEntry, ...]:
        """
        Close `token` and drop every entry recorded since it was opened.

        Returns
        -------
        entries : `Tuple[JournalEntry, ...]`
            The dropped entries, newest first, in the order they must be
            undone.
        """
        self._close(token)
        discarded = self._entries[token.position :]
        del self._entries[token.position :]
        return tuple(reversed(discarded))

    def logs(self) -> Tuple[Log, ...]:
        """
        Logs that are still part of the journal, in emission order.
        """
        return tuple(
            entry.log
            for entry in self._entries
            if isinstance(entry, LogEmitted)
        )

    def clear(self) -> None:
        """
        Forget everything. Only valid once every checkpoint is closed.
        """
        assert not self._checkpoints, "cannot clear with open checkpoints"
        self._entries.clear()
