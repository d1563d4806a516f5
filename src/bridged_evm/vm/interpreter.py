"""
Ethereum Virtual Machine (EVM) Interpreter
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

A straightforward interpreter that executes EVM code.

Nested calls do not recurse. `run_frames` keeps every live frame on a list:
it steps the innermost one, opens a child when an instruction suspends its
frame, and resumes the parent through its continuation once the child is
finalized.
"""

from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from ethereum_types.bytes import Bytes, Bytes0
from ethereum_types.numeric import U256, Uint

from ..exceptions import EthereumException
from ..fork_types import Address, Log
from ..state import (
    account_has_code_or_nonce,
    account_has_storage,
    begin_transaction,
    commit_transaction,
    increment_nonce,
    mark_account_created,
    move_ether,
    rollback_transaction,
    set_code,
)
from ..trace import (
    EvmStop,
    OpEnd,
    OpException,
    OpStart,
    PrecompileEnd,
    PrecompileStart,
    TransactionEnd,
    TransactionStart,
    evm_trace,
)
from . import Evm, Message
from .exceptions import (
    AddressCollision,
    ExceptionalHalt,
    InvalidContractPrefix,
    InvalidOpcode,
    OutOfGasError,
    Revert,
)
from .gas import GAS_CODE_DEPOSIT, charge_gas
from .instructions import Ops, op_implementation
from .precompiled_contracts.mapping import (
    PRE_COMPILED_CONTRACTS,
    run_precompile,
)
from .runtime import get_valid_jump_destinations

STACK_DEPTH_LIMIT = Uint(1024)
MAX_CODE_SIZE = 0x6000


@dataclass
class MessageCallOutput:
    """
    Output of a particular message call

    Contains the following:

          1. `gas_left`: remaining gas after execution.
          2. `refund_counter`: gas to refund after execution.
          3. `logs`: list of `Log` generated during execution.
          4. `accounts_to_delete`: Contracts which have self-destructed.
          5. `error`: The error from the execution if any.
          6. `return_data`: Output of the outermost frame.
    """

    gas_left: Uint
    refund_counter: U256
    logs: Tuple[Log, ...]
    accounts_to_delete: Set[Address]
    error: Optional[EthereumException]
    return_data: Bytes


def process_message_call(message: Message) -> MessageCallOutput:
    """
    If `message.target` is empty then it creates a smart contract
    else it executes a call from the `message.caller` to the `message.target`.

    Parameters
    ----------
    message :
        Transaction specific items.

    Returns
    -------
    output : `MessageCallOutput`
        Output of the message call
    """
    state = message.env.state
    refund_counter = U256(0)
    if message.target == Bytes0(b""):
        is_collision = account_has_code_or_nonce(
            state, message.current_target
        ) or account_has_storage(state, message.current_target)
        if is_collision:
            return MessageCallOutput(
                Uint(0), U256(0), (), set(), AddressCollision(), b""
            )

    evm = run_frames(message)

    if evm.error:
        logs: Tuple[Log, ...] = ()
        accounts_to_delete: Set[Address] = set()
    else:
        logs = state.journal.logs()
        accounts_to_delete = set(state.accounts_to_delete)
        if evm.refund_counter > 0:
            refund_counter += U256(evm.refund_counter)

    tx_end = TransactionEnd(
        int(message.gas) - int(evm.gas_left), evm.output, evm.error
    )
    evm_trace(evm, tx_end)

    return MessageCallOutput(
        gas_left=evm.gas_left,
        refund_counter=refund_counter,
        logs=logs,
        accounts_to_delete=accounts_to_delete,
        error=evm.error,
        return_data=evm.output,
    )


def run_frames(message: Message) -> Evm:
    """
    Execute `message` and every frame it spawns, returning the finalized
    outermost frame.
    """
    if message.depth == Uint(0):
        evm_trace(message, TransactionStart())
    root = prepare_frame(message)
    frames: List[Evm] = [root]

    while True:
        evm = frames[-1]

        if evm.pending is not None:
            frames.append(prepare_frame(evm.pending.message))
            continue

        if evm.running and evm.pc < Uint(len(evm.code)):
            execute_step(evm)
            continue

        is_precompile = evm.message.code_address in PRE_COMPILED_CONTRACTS
        if evm.error is None and not is_precompile:
            evm_trace(evm, EvmStop(Ops.STOP))
        finalize_frame(evm)
        frames.pop()

        if not frames:
            return evm

        parent = frames[-1]
        pending = parent.pending
        assert pending is not None
        parent.pending = None
        pending.on_return(parent, evm)


def prepare_frame(message: Message) -> Evm:
    """
    Open the checkpoint of a new frame and apply what happens before its
    first instruction: the creation bookkeeping, the value transfer and, for
    precompiles, the whole execution.
    """
    state = message.env.state
    code = message.code

    evm = Evm(
        pc=Uint(0),
        stack=[],
        memory=bytearray(),
        code=code,
        gas_left=message.gas,
        env=message.env,
        valid_jump_destinations=get_valid_jump_destinations(code),
        refund_counter=0,
        running=True,
        message=message,
        output=b"",
        return_data=b"",
        error=None,
        accessed_addresses=message.accessed_addresses,
        accessed_storage_keys=message.accessed_storage_keys,
        checkpoint=begin_transaction(state),
        pending=None,
    )

    if message.target == Bytes0(b""):
        # Lets a SELFDESTRUCT later in this transaction remove the account.
        mark_account_created(state, message.current_target)
        increment_nonce(state, message.current_target)

    if message.should_transfer_value and message.value != 0:
        move_ether(
            state, message.caller, message.current_target, message.value
        )

    code_address = message.code_address
    if code_address is not None and code_address in PRE_COMPILED_CONTRACTS:
        evm_trace(evm, PrecompileStart(code_address))
        try:
            run_precompile(evm, PRE_COMPILED_CONTRACTS[code_address])
        except ExceptionalHalt as error:
            halt_frame(evm, error)
        except Revert as error:
            revert_frame(evm, error)
        evm_trace(evm, PrecompileEnd())

    return evm


def execute_step(evm: Evm) -> None:
    """
    Decode and run the instruction at `evm.pc`. Errors end the frame rather
    than propagating.
    """
    try:
        try:
            op = Ops(evm.code[evm.pc])
        except ValueError:
            raise InvalidOpcode(evm.code[evm.pc])

        evm_trace(evm, OpStart(op))
        op_implementation[op](evm)
        evm_trace(evm, OpEnd())
    except ExceptionalHalt as error:
        halt_frame(evm, error)
    except Revert as error:
        revert_frame(evm, error)


def halt_frame(evm: Evm, error: ExceptionalHalt) -> None:
    """
    End `evm` on an exceptional halt: all of its gas is consumed and it
    returns nothing.
    """
    evm_trace(evm, OpException(error))
    evm.gas_left = Uint(0)
    evm.output = b""
    evm.error = error
    evm.running = False
    evm.pending = None


def revert_frame(evm: Evm, error: Revert) -> None:
    """
    End `evm` on a revert, keeping its output and unused gas.
    """
    evm_trace(evm, OpException(error))
    evm.error = error
    evm.running = False
    evm.pending = None


def finalize_frame(evm: Evm) -> None:
    """
    Close the checkpoint of a finished frame. A successful creation frame
    first pays for and deploys its code, which can still fail it.
    """
    state = evm.env.state
    checkpoint = evm.checkpoint
    assert checkpoint is not None

    if evm.message.target == Bytes0(b"") and not evm.error:
        contract_code = evm.output
        contract_code_gas = Uint(len(contract_code)) * GAS_CODE_DEPOSIT
        try:
            if len(contract_code) > 0:
                if contract_code[0] == 0xEF:
                    raise InvalidContractPrefix
            charge_gas(evm, contract_code_gas)
            if len(contract_code) > MAX_CODE_SIZE:
                raise OutOfGasError
        except ExceptionalHalt as error:
            halt_frame(evm, error)
        else:
            set_code(state, evm.message.current_target, contract_code)

    if evm.error:
        rollback_transaction(state, checkpoint)
    else:
        commit_transaction(state, checkpoint)
    evm.checkpoint = None
