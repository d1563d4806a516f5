"""
Ethereum Virtual Machine (EVM) System Instructions
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Implementations of the EVM system related instructions.

The CALL and CREATE families never run their child frame directly. They
pay for it, build the child `Message`, and `suspend` the current frame with
a continuation that pushes the result once the interpreter has run the
child.
"""

from functools import partial
from typing import NamedTuple, Tuple

from ethereum_types.bytes import Bytes0
from ethereum_types.numeric import U256, Uint

from ...directory import (
    compute_contract_address,
    compute_create2_contract_address,
    to_address,
)
from ...fork_types import Address
from ...state import (
    account_has_code_or_nonce,
    account_has_storage,
    get_account,
    increment_nonce,
    is_account_alive,
    mark_account_for_deletion,
    move_ether,
    set_account_balance,
)
from ...utils.numeric import ceil32
from .. import (
    Evm,
    Message,
    incorporate_child_on_error,
    incorporate_child_on_success,
    suspend,
)
from ..exceptions import OutOfGasError, Revert, WriteInStaticContext
from ..gas import (
    GAS_CALL_VALUE,
    GAS_COLD_ACCOUNT_ACCESS,
    GAS_CREATE,
    GAS_KECCAK256_WORD,
    GAS_NEW_ACCOUNT,
    GAS_SELF_DESTRUCT,
    GAS_SELF_DESTRUCT_NEW_ACCOUNT,
    GAS_WARM_ACCESS,
    ExtendMemory,
    calculate_gas_extend_memory,
    calculate_message_call_gas,
    charge_gas,
    init_code_cost,
    max_message_call_gas,
)
from ..memory import memory_read_bytes, memory_write
from ..stack import pop, push


def _access_cost(evm: Evm, address: Address) -> Uint:
    if address in evm.accessed_addresses:
        return GAS_WARM_ACCESS
    evm.accessed_addresses.add(address)
    return GAS_COLD_ACCOUNT_ACCESS


def _finish_create(evm: Evm, child_evm: Evm) -> None:
    if child_evm.error:
        incorporate_child_on_error(evm, child_evm)
        evm.return_data = child_evm.output
        push(evm.stack, U256(0))
    else:
        incorporate_child_on_success(evm, child_evm)
        evm.return_data = b""
        push(
            evm.stack, U256.from_be_bytes(child_evm.message.current_target)
        )


def generic_create(
    evm: Evm,
    endowment: U256,
    contract_address: Address,
    memory_start_position: U256,
    memory_size: U256,
) -> None:
    """
    Core logic used by the `CREATE*` family of opcodes.

    Every outcome that does not need a child frame pushes its result right
    away. Otherwise the child is scheduled and `_finish_create` pushes the
    new address (or zero) when it is done.
    """
    # This import causes a circular import error
    # if it's not moved inside this method
    from ..interpreter import MAX_CODE_SIZE, STACK_DEPTH_LIMIT

    call_data = memory_read_bytes(
        evm.memory, memory_start_position, memory_size
    )
    if len(call_data) > 2 * MAX_CODE_SIZE:
        raise OutOfGasError

    evm.accessed_addresses.add(contract_address)

    create_message_gas = max_message_call_gas(Uint(evm.gas_left))
    evm.gas_left -= create_message_gas
    if evm.message.is_static:
        raise WriteInStaticContext
    evm.return_data = b""

    state = evm.env.state
    sender_address = evm.message.current_target
    sender = get_account(state, sender_address)

    if (
        sender.balance < endowment
        or sender.nonce == Uint(2**64 - 1)
        or evm.message.depth + Uint(1) > STACK_DEPTH_LIMIT
    ):
        evm.gas_left += create_message_gas
        push(evm.stack, U256(0))
        return

    if account_has_code_or_nonce(
        state, contract_address
    ) or account_has_storage(state, contract_address):
        increment_nonce(state, sender_address)
        push(evm.stack, U256(0))
        return

    increment_nonce(state, sender_address)

    child_message = Message(
        caller=sender_address,
        target=Bytes0(),
        gas=create_message_gas,
        value=endowment,
        data=b"",
        code=call_data,
        current_target=contract_address,
        depth=evm.message.depth + Uint(1),
        code_address=None,
        should_transfer_value=True,
        is_static=False,
        accessed_addresses=evm.accessed_addresses.copy(),
        accessed_storage_keys=evm.accessed_storage_keys.copy(),
        env=evm.env,
    )
    suspend(evm, child_message, _finish_create)


def create(evm: Evm) -> None:
    """
    Creates a new account with associated code.
    """
    # STACK
    endowment = pop(evm.stack)
    memory_start_position = pop(evm.stack)
    memory_size = pop(evm.stack)

    # GAS
    extend_memory = calculate_gas_extend_memory(
        evm.memory, [(memory_start_position, memory_size)]
    )
    init_code_gas = init_code_cost(Uint(memory_size))

    charge_gas(evm, GAS_CREATE + extend_memory.cost + init_code_gas)

    # OPERATION
    evm.memory += b"\x00" * extend_memory.expand_by
    contract_address = compute_contract_address(
        evm.message.current_target,
        get_account(evm.env.state, evm.message.current_target).nonce,
    )

    generic_create(
        evm,
        endowment,
        contract_address,
        memory_start_position,
        memory_size,
    )

    # PROGRAM COUNTER
    evm.pc += Uint(1)


def create2(evm: Evm) -> None:
    """
    Creates a new account with associated code.

    It's similar to CREATE opcode except that the address of new account
    depends on the init_code instead of the nonce of sender.
    """
    # STACK
    endowment = pop(evm.stack)
    memory_start_position = pop(evm.stack)
    memory_size = pop(evm.stack)
    salt = pop(evm.stack).to_be_bytes32()

    # GAS
    extend_memory = calculate_gas_extend_memory(
        evm.memory, [(memory_start_position, memory_size)]
    )
    call_data_words = ceil32(Uint(memory_size)) // Uint(32)
    init_code_gas = init_code_cost(Uint(memory_size))
    charge_gas(
        evm,
        GAS_CREATE
        + GAS_KECCAK256_WORD * call_data_words
        + extend_memory.cost
        + init_code_gas,
    )

    # OPERATION
    evm.memory += b"\x00" * extend_memory.expand_by
    contract_address = compute_create2_contract_address(
        evm.message.current_target,
        salt,
        memory_read_bytes(evm.memory, memory_start_position, memory_size),
    )

    generic_create(
        evm,
        endowment,
        contract_address,
        memory_start_position,
        memory_size,
    )

    # PROGRAM COUNTER
    evm.pc += Uint(1)


def return_(evm: Evm) -> None:
    """
    Halts execution returning output data.
    """
    # STACK
    memory_start_position = pop(evm.stack)
    memory_size = pop(evm.stack)

    # GAS
    extend_memory = calculate_gas_extend_memory(
        evm.memory, [(memory_start_position, memory_size)]
    )

    charge_gas(evm, extend_memory.cost)

    # OPERATION
    evm.memory += b"\x00" * extend_memory.expand_by
    evm.output = memory_read_bytes(
        evm.memory, memory_start_position, memory_size
    )

    evm.running = False

    # PROGRAM COUNTER
    pass


class CallRegions(NamedTuple):
    """
    Memory a CALL family instruction reads the call data from, and the area
    the callee's output is copied to.
    """

    input_start: U256
    input_size: U256
    output_start: U256
    output_size: U256


def _pop_call_regions(evm: Evm) -> Tuple[CallRegions, ExtendMemory]:
    regions = CallRegions(*(pop(evm.stack) for _ in range(4)))
    extend_memory = calculate_gas_extend_memory(
        evm.memory,
        [
            (regions.input_start, regions.input_size),
            (regions.output_start, regions.output_size),
        ],
    )
    return regions, extend_memory


def _finish_call(regions: CallRegions, evm: Evm, child_evm: Evm) -> None:
    evm.return_data = child_evm.output
    if child_evm.error:
        incorporate_child_on_error(evm, child_evm)
        push(evm.stack, U256(0))
    else:
        incorporate_child_on_success(evm, child_evm)
        push(evm.stack, U256(1))

    copied = min(regions.output_size, U256(len(child_evm.output)))
    memory_write(evm.memory, regions.output_start, child_evm.output[:copied])


def generic_call(
    evm: Evm,
    gas: Uint,
    value: U256,
    caller: Address,
    to: Address,
    code_address: Address,
    should_transfer_value: bool,
    is_static: bool,
    regions: CallRegions,
) -> None:
    """
    Perform the core logic of the `CALL*` family of opcodes: open the child
    frame, or push 0 and hand `gas` back when the depth limit is reached.
    """
    from ..interpreter import STACK_DEPTH_LIMIT

    evm.return_data = b""

    if evm.message.depth + Uint(1) > STACK_DEPTH_LIMIT:
        evm.gas_left += gas
        push(evm.stack, U256(0))
        return

    child_message = Message(
        caller=caller,
        target=to,
        gas=gas,
        value=value,
        data=memory_read_bytes(
            evm.memory, regions.input_start, regions.input_size
        ),
        code=get_account(evm.env.state, code_address).code,
        current_target=to,
        depth=evm.message.depth + Uint(1),
        code_address=code_address,
        should_transfer_value=should_transfer_value,
        is_static=is_static or evm.message.is_static,
        accessed_addresses=evm.accessed_addresses.copy(),
        accessed_storage_keys=evm.accessed_storage_keys.copy(),
        env=evm.env,
    )
    suspend(evm, child_message, partial(_finish_call, regions))


def _call_with_value(
    evm: Evm,
    gas: Uint,
    value: U256,
    to: Address,
    code_address: Address,
    regions: CallRegions,
) -> None:
    # A caller that cannot cover `value` gets 0 back and keeps the stipend.
    balance = get_account(evm.env.state, evm.message.current_target).balance
    if balance < value:
        push(evm.stack, U256(0))
        evm.return_data = b""
        evm.gas_left += gas
        return
    generic_call(
        evm,
        gas,
        value,
        evm.message.current_target,
        to,
        code_address,
        True,
        False,
        regions,
    )


def call(evm: Evm) -> None:
    """
    Message-call into an account.
    """
    # STACK
    gas = Uint(pop(evm.stack))
    to = to_address(pop(evm.stack))
    value = pop(evm.stack)
    regions, extend_memory = _pop_call_regions(evm)

    # GAS
    extra_gas = _access_cost(evm, to)
    if value != 0:
        extra_gas += GAS_CALL_VALUE
        if not is_account_alive(evm.env.state, to):
            extra_gas += GAS_NEW_ACCOUNT
    message_call_gas = calculate_message_call_gas(
        value, gas, Uint(evm.gas_left), extend_memory.cost, extra_gas
    )
    charge_gas(evm, message_call_gas.cost + extend_memory.cost)
    if evm.message.is_static and value != U256(0):
        raise WriteInStaticContext

    # OPERATION
    evm.memory += b"\x00" * extend_memory.expand_by
    _call_with_value(evm, message_call_gas.stipend, value, to, to, regions)

    # PROGRAM COUNTER
    evm.pc += Uint(1)


def callcode(evm: Evm) -> None:
    """
    Message-call into this account with alternative account's code.
    """
    # STACK
    gas = Uint(pop(evm.stack))
    code_address = to_address(pop(evm.stack))
    value = pop(evm.stack)
    regions, extend_memory = _pop_call_regions(evm)

    # GAS
    extra_gas = _access_cost(evm, code_address)
    if value != 0:
        extra_gas += GAS_CALL_VALUE
    message_call_gas = calculate_message_call_gas(
        value, gas, Uint(evm.gas_left), extend_memory.cost, extra_gas
    )
    charge_gas(evm, message_call_gas.cost + extend_memory.cost)

    # OPERATION
    evm.memory += b"\x00" * extend_memory.expand_by
    _call_with_value(
        evm,
        message_call_gas.stipend,
        value,
        evm.message.current_target,
        code_address,
        regions,
    )

    # PROGRAM COUNTER
    evm.pc += Uint(1)


def selfdestruct(evm: Evm) -> None:
    """
    Halt execution and send the whole balance to a beneficiary. The account
    itself is only removed when it was created by the same transaction.
    """
    # STACK
    beneficiary = to_address(pop(evm.stack))

    # GAS
    gas_cost = GAS_SELF_DESTRUCT
    if beneficiary not in evm.accessed_addresses:
        evm.accessed_addresses.add(beneficiary)
        gas_cost += GAS_COLD_ACCOUNT_ACCESS

    state = evm.env.state
    originator = evm.message.current_target
    if (
        not is_account_alive(state, beneficiary)
        and get_account(state, originator).balance != 0
    ):
        gas_cost += GAS_SELF_DESTRUCT_NEW_ACCOUNT

    charge_gas(evm, gas_cost)
    if evm.message.is_static:
        raise WriteInStaticContext

    originator_balance = get_account(state, originator).balance

    move_ether(state, originator, beneficiary, originator_balance)

    # Only accounts created in this transaction are actually removed.
    if originator in state.created_accounts:
        # If beneficiary is the same as originator, then
        # the ether is burnt.
        set_account_balance(state, originator, U256(0))
        mark_account_for_deletion(state, originator)

    # HALT the execution
    evm.running = False

    # PROGRAM COUNTER
    pass


def delegatecall(evm: Evm) -> None:
    """
    Message-call into this account with an alternative account's code, but
    persisting the current values for sender and value.
    """
    # STACK
    gas = Uint(pop(evm.stack))
    code_address = to_address(pop(evm.stack))
    regions, extend_memory = _pop_call_regions(evm)

    # GAS
    message_call_gas = calculate_message_call_gas(
        U256(0),
        gas,
        Uint(evm.gas_left),
        extend_memory.cost,
        _access_cost(evm, code_address),
    )
    charge_gas(evm, message_call_gas.cost + extend_memory.cost)

    # OPERATION
    evm.memory += b"\x00" * extend_memory.expand_by
    generic_call(
        evm,
        message_call_gas.stipend,
        evm.message.value,
        evm.message.caller,
        evm.message.current_target,
        code_address,
        False,
        False,
        regions,
    )

    # PROGRAM COUNTER
    evm.pc += Uint(1)


def staticcall(evm: Evm) -> None:
    """
    Message-call into an account, forbidding any state change in the
    callee and everything it calls.
    """
    # STACK
    gas = Uint(pop(evm.stack))
    to = to_address(pop(evm.stack))
    regions, extend_memory = _pop_call_regions(evm)

    # GAS
    message_call_gas = calculate_message_call_gas(
        U256(0),
        gas,
        Uint(evm.gas_left),
        extend_memory.cost,
        _access_cost(evm, to),
    )
    charge_gas(evm, message_call_gas.cost + extend_memory.cost)

    # OPERATION
    evm.memory += b"\x00" * extend_memory.expand_by
    generic_call(
        evm,
        message_call_gas.stipend,
        U256(0),
        evm.message.current_target,
        to,
        to,
        True,
        True,
        regions,
    )

    # PROGRAM COUNTER
    evm.pc += Uint(1)


def revert(evm: Evm) -> None:
    """
    Stop execution and revert state changes, without consuming all provided
    gas and also has the ability to return a reason.
    """
    # STACK
    memory_start_index = pop(evm.stack)
    size = pop(evm.stack)

    # GAS
    extend_memory = calculate_gas_extend_memory(
        evm.memory, [(memory_start_index, size)]
    )

    charge_gas(evm, extend_memory.cost)

    # OPERATION
    evm.memory += b"\x00" * extend_memory.expand_by
    output = memory_read_bytes(evm.memory, memory_start_index, size)
    evm.output = bytes(output)
    raise Revert

    # PROGRAM COUNTER
    # no-op
