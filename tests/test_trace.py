import logging
from typing import Iterator, List, Tuple

import pytest
from ethereum_types.numeric import U256, Uint

from bridged_evm.fork_types import Account
from bridged_evm.trace import (
    EvmStop,
    GasAndRefund,
    OpException,
    OpStart,
    PrecompileEnd,
    PrecompileStart,
    TraceEvent,
    TransactionEnd,
    TransactionStart,
    log_evm_trace,
    set_evm_trace,
)
from bridged_evm.vm.exceptions import InvalidOpcode
from bridged_evm.vm.instructions import Ops
from bridged_evm.vm.interpreter import process_message_call
from bridged_evm.vm.precompiled_contracts import IDENTITY_ADDRESS
from tests.helpers import (
    SENDER,
    assemble,
    call_message,
    new_environment,
    new_state,
    run_code,
)

Events = List[Tuple[object, TraceEvent]]


@pytest.fixture
def events() -> Iterator[Events]:
    collected: Events = []

    def collect(evm: object, event: TraceEvent, /) -> None:
        collected.append((evm, event))

    previous = set_evm_trace(collect)
    try:
        yield collected
    finally:
        set_evm_trace(previous)


def only(events: Events, kind: type) -> List[TraceEvent]:
    return [event for _, event in events if isinstance(event, kind)]


def test_opcode_events_in_execution_order(events: Events) -> None:
    output, _ = run_code(assemble(1, 2, Ops.ADD, Ops.POP), gas=100)

    assert isinstance(events[0][1], TransactionStart)
    assert [event.op for event in only(events, OpStart)] == [
        Ops.PUSH1,
        Ops.PUSH1,
        Ops.ADD,
        Ops.POP,
    ]
    assert [event.gas_cost for event in only(events, GasAndRefund)] == [
        3,
        3,
        3,
        2,
    ]
    assert only(events, EvmStop) == [EvmStop(Ops.STOP)]

    end = events[-1][1]
    assert isinstance(end, TransactionEnd)
    assert end.gas_used == 11
    assert end.error is None
    assert output.gas_left == Uint(100 - 11)


def test_exceptional_halt_is_reported(events: Events) -> None:
    run_code(b"\x0c")

    (exception,) = only(events, OpException)
    assert isinstance(exception.error, InvalidOpcode)
    assert only(events, EvmStop) == []
    end = events[-1][1]
    assert isinstance(end, TransactionEnd)
    assert isinstance(end.error, InvalidOpcode)


def test_precompile_events(events: Events) -> None:
    state = new_state(
        {SENDER: Account(nonce=Uint(0), balance=U256(10**18), code=b"")}
    )
    message = call_message(
        new_environment(state), to=IDENTITY_ADDRESS, data=b"\x01"
    )
    process_message_call(message)

    assert only(events, PrecompileStart) == [
        PrecompileStart(IDENTITY_ADDRESS)
    ]
    assert len(only(events, PrecompileEnd)) == 1
    assert only(events, OpStart) == []


def test_transaction_start_precedes_a_precompile_root(
    events: Events,
) -> None:
    state = new_state(
        {SENDER: Account(nonce=Uint(0), balance=U256(10**18), code=b"")}
    )
    message = call_message(
        new_environment(state), to=IDENTITY_ADDRESS, data=b"\x01"
    )
    process_message_call(message)

    kinds = [type(event) for _, event in events]
    assert kinds[:3] == [TransactionStart, PrecompileStart, PrecompileEnd]
    assert kinds[-1] is TransactionEnd


class _Records(logging.Handler):
    def __init__(self) -> None:
        super().__init__(logging.DEBUG)
        self.messages: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


def test_log_evm_trace_writes_debug_records() -> None:
    logger = logging.getLogger("bridged_evm.trace")
    handler = _Records()
    level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    previous = set_evm_trace(log_evm_trace)
    try:
        run_code(assemble(1, Ops.POP))
    finally:
        set_evm_trace(previous)
        logger.removeHandler(handler)
        logger.setLevel(level)

    assert "pc=0 op=PUSH1 gas=1000000 depth=0" in handler.messages
    assert "pc=2 op=POP gas=999997 depth=0" in handler.messages
    assert handler.messages[0] == "TransactionStart()"


def test_log_evm_trace_is_silent_above_debug() -> None:
    logger = logging.getLogger("bridged_evm.trace")
    handler = _Records()
    level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    previous = set_evm_trace(log_evm_trace)
    try:
        run_code(assemble(1, Ops.POP))
    finally:
        set_evm_trace(previous)
        logger.removeHandler(handler)
        logger.setLevel(level)

    assert handler.messages == []
