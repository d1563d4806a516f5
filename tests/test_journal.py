from typing import List, Tuple

import pytest
from ethereum_types.bytes import Bytes32
from ethereum_types.numeric import U256, Uint
from hypothesis import given, settings
from hypothesis import strategies as st

from bridged_evm.fork_types import Account, Log
from bridged_evm.journal import (
    BalanceChanged,
    NonceChanged,
    StateJournal,
)
from bridged_evm.state import (
    State,
    begin_transaction,
    commit_to_store,
    commit_transaction,
    emit_log,
    get_account,
    get_account_optional,
    get_storage,
    get_storage_original,
    get_transient_storage,
    increment_nonce,
    mark_account_created,
    mark_account_for_deletion,
    rollback_transaction,
    set_account_balance,
    set_code,
    set_storage,
    set_transient_storage,
    state_diff,
)
from tests.helpers import CONTRACT, OTHER, SENDER, new_state

ADDRESSES = [SENDER, CONTRACT, OTHER]
KEYS = [Bytes32(bytes([i]) * 32) for i in range(3)]

mutations = st.lists(
    st.tuples(
        st.sampled_from(["balance", "nonce", "code", "storage", "transient"]),
        st.sampled_from(range(len(ADDRESSES))),
        st.sampled_from(range(len(KEYS))),
        st.integers(min_value=0, max_value=2**256 - 1),
    ),
    max_size=25,
)


def _seeded_state() -> State:
    return new_state(
        {
            SENDER: Account(nonce=Uint(3), balance=U256(1000), code=b""),
            CONTRACT: Account(nonce=Uint(1), balance=U256(0), code=b"\x00"),
        },
        {CONTRACT: {KEYS[0]: U256(7)}},
    )


def _apply(state: State, mutation: Tuple[str, int, int, int]) -> None:
    kind, address_index, key_index, value = mutation
    address = ADDRESSES[address_index]
    key = KEYS[key_index]
    if kind == "balance":
        set_account_balance(state, address, U256(value))
    elif kind == "nonce":
        increment_nonce(state, address)
    elif kind == "code":
        set_code(state, address, value.to_bytes(32, "big"))
    elif kind == "storage":
        set_storage(state, address, key, U256(value))
    else:
        set_transient_storage(state, address, key, U256(value))


def _observe(state: State) -> List[object]:
    observed: List[object] = []
    for address in ADDRESSES:
        observed.append(get_account_optional(state, address))
        for key in KEYS:
            observed.append(get_storage(state, address, key))
            observed.append(get_transient_storage(state, address, key))
    return observed


@given(before=mutations, inside=mutations)
@settings(max_examples=200)
def test_rollback_restores_state_exactly(
    before: List[Tuple[str, int, int, int]],
    inside: List[Tuple[str, int, int, int]],
) -> None:
    state = _seeded_state()
    for mutation in before:
        _apply(state, mutation)

    expected = _observe(state)
    expected_diff = state_diff(state)
    entries = len(state.journal)

    checkpoint = begin_transaction(state)
    for mutation in inside:
        _apply(state, mutation)
    rollback_transaction(state, checkpoint)

    assert _observe(state) == expected
    assert state_diff(state) == expected_diff
    assert len(state.journal) == entries


@given(inside=mutations)
@settings(max_examples=100)
def test_commit_keeps_changes(inside: List[Tuple[str, int, int, int]]) -> None:
    state = _seeded_state()
    checkpoint = begin_transaction(state)
    for mutation in inside:
        _apply(state, mutation)
    expected = _observe(state)
    commit_transaction(state, checkpoint)
    assert _observe(state) == expected


def test_nested_rollback_keeps_outer_changes() -> None:
    state = _seeded_state()
    outer = begin_transaction(state)
    set_account_balance(state, SENDER, U256(1))
    inner = begin_transaction(state)
    set_account_balance(state, SENDER, U256(2))
    set_storage(state, CONTRACT, KEYS[1], U256(9))
    rollback_transaction(state, inner)
    commit_transaction(state, outer)

    assert get_account(state, SENDER).balance == U256(1)
    assert get_storage(state, CONTRACT, KEYS[1]) == U256(0)


def test_rollback_of_created_account_removes_it() -> None:
    state = _seeded_state()
    checkpoint = begin_transaction(state)
    set_account_balance(state, OTHER, U256(5))
    assert get_account_optional(state, OTHER) is not None
    rollback_transaction(state, checkpoint)
    assert get_account_optional(state, OTHER) is None


def test_rollback_returns_entries_newest_first() -> None:
    journal = StateJournal()
    token = journal.checkpoint()
    journal.record(BalanceChanged(SENDER, U256(1)))
    journal.record(NonceChanged(SENDER, Uint(2)))
    assert journal.rollback(token) == (
        NonceChanged(SENDER, Uint(2)),
        BalanceChanged(SENDER, U256(1)),
    )
    assert len(journal) == 0


def test_checkpoints_close_in_reverse_order() -> None:
    journal = StateJournal()
    outer = journal.checkpoint()
    journal.checkpoint()
    with pytest.raises(AssertionError):
        journal.commit(outer)


def test_closing_without_checkpoint_fails() -> None:
    journal = StateJournal()
    token = journal.checkpoint()
    journal.commit(token)
    with pytest.raises(AssertionError):
        journal.rollback(token)


def test_logs_and_marks_follow_the_frame_outcome() -> None:
    state = _seeded_state()
    log = Log(address=CONTRACT, topics=(), data=b"\x01")

    kept = begin_transaction(state)
    emit_log(state, log)
    mark_account_created(state, OTHER)
    commit_transaction(state, kept)

    dropped = begin_transaction(state)
    emit_log(state, log)
    mark_account_for_deletion(state, OTHER)
    rollback_transaction(state, dropped)

    assert state.journal.logs() == (log,)
    assert state.created_accounts == {OTHER}
    assert state.accounts_to_delete == set()


def test_original_storage_comes_from_the_store() -> None:
    state = _seeded_state()
    set_storage(state, CONTRACT, KEYS[0], U256(8))
    assert get_storage(state, CONTRACT, KEYS[0]) == U256(8)
    assert get_storage_original(state, CONTRACT, KEYS[0]) == U256(7)


def test_commit_to_store_flushes_and_resets() -> None:
    state = _seeded_state()
    set_storage(state, CONTRACT, KEYS[0], U256(0))
    set_account_balance(state, OTHER, U256(5))
    commit_to_store(state)

    assert state_diff(state) == {}
    backend_id = state.directory.resolve(CONTRACT)
    assert state.store.get_storage(backend_id, KEYS[0]) == U256(0)
    assert get_account(state, OTHER).balance == U256(5)
    assert state.directory.is_registered(OTHER)
