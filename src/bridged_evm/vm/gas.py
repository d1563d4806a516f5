"""
Ethereum Virtual Machine (EVM) Gas
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

EVM gas constants and calculators, following the Cancun schedule.
"""

from dataclasses import dataclass
from typing import List, Tuple

from ethereum_types.numeric import U256, Uint

from ..trace import GasAndRefund, evm_trace
from ..utils.numeric import ceil32
from . import Evm
from .exceptions import OutOfGasError

GAS_JUMPDEST = Uint(1)
GAS_BASE = Uint(2)
GAS_VERY_LOW = Uint(3)
GAS_STORAGE_SET = Uint(20000)
GAS_STORAGE_UPDATE = Uint(5000)
GAS_STORAGE_CLEAR_REFUND = Uint(4800)
GAS_LOW = Uint(5)
GAS_MID = Uint(8)
GAS_HIGH = Uint(10)
GAS_EXPONENTIATION = Uint(10)
GAS_EXPONENTIATION_PER_BYTE = Uint(50)
GAS_MEMORY = Uint(3)
GAS_KECCAK256 = Uint(30)
GAS_KECCAK256_WORD = Uint(6)
GAS_COPY = Uint(3)
GAS_BLOCK_HASH = Uint(20)
GAS_LOG = Uint(375)
GAS_LOG_DATA = Uint(8)
GAS_LOG_TOPIC = Uint(375)
GAS_CREATE = Uint(32000)
GAS_CODE_DEPOSIT = Uint(200)
GAS_NEW_ACCOUNT = Uint(25000)
GAS_CALL_VALUE = Uint(9000)
GAS_CALL_STIPEND = Uint(2300)
GAS_SELF_DESTRUCT = Uint(5000)
GAS_SELF_DESTRUCT_NEW_ACCOUNT = Uint(25000)
GAS_ECRECOVER = Uint(3000)
GAS_SHA256 = Uint(60)
GAS_SHA256_WORD = Uint(12)
GAS_RIPEMD160 = Uint(600)
GAS_RIPEMD160_WORD = Uint(120)
GAS_IDENTITY = Uint(15)
GAS_IDENTITY_WORD = Uint(3)
GAS_BLAKE2_PER_ROUND = Uint(1)
GAS_COLD_SLOAD = Uint(2100)
GAS_COLD_ACCOUNT_ACCESS = Uint(2600)
GAS_WARM_ACCESS = Uint(100)
GAS_INIT_CODE_WORD_COST = Uint(2)
GAS_BLOBHASH_OPCODE = Uint(3)
GAS_P256VERIFY = Uint(3450)

REFUND_QUOTIENT = Uint(5)


@dataclass
class ExtendMemory:
    """
    Gas owed for growing memory, and by how many bytes it grows.
    """

    cost: Uint
    expand_by: Uint


@dataclass
class MessageCallGas:
    """
    Gas taken from the caller for a CALL family instruction (`cost`) and
    gas handed to the child frame (`stipend`, which includes the value
    transfer stipend).
    """

    cost: Uint
    stipend: Uint


def charge_gas(evm: Evm, amount: Uint) -> None:
    """
    Subtracts `amount` from `evm.gas_left`, halting the frame with
    `OutOfGasError` when there is not enough left.
    """
    evm_trace(evm, GasAndRefund(int(amount)))

    if evm.gas_left < amount:
        raise OutOfGasError
    evm.gas_left -= amount


def calculate_memory_gas_cost(size_in_bytes: Uint) -> Uint:
    """
    Total cost of a memory of `size_in_bytes` (rounded up to whole words):
    linear in the number of words plus a quadratic term.
    """
    size_in_words = ceil32(size_in_bytes) // Uint(32)
    linear_cost = size_in_words * GAS_MEMORY
    quadratic_cost = size_in_words * size_in_words // Uint(512)
    return linear_cost + quadratic_cost


def calculate_gas_extend_memory(
    memory: bytearray, extensions: List[Tuple[U256, U256]]
) -> ExtendMemory:
    """
    Price the memory growth needed so every `(start, size)` region of
    `extensions` is addressable. Zero sized regions never grow memory.
    """
    size_to_extend = Uint(0)
    to_be_paid = Uint(0)
    current_size = Uint(len(memory))
    for start_position, size in extensions:
        if size == 0:
            continue
        before_size = ceil32(current_size)
        after_size = ceil32(Uint(start_position) + Uint(size))
        if after_size <= before_size:
            continue

        size_to_extend += after_size - before_size
        already_paid = calculate_memory_gas_cost(before_size)
        total_cost = calculate_memory_gas_cost(after_size)
        to_be_paid += total_cost - already_paid

        current_size = after_size

    return ExtendMemory(to_be_paid, size_to_extend)


def calculate_message_call_gas(
    value: U256,
    gas: Uint,
    gas_left: Uint,
    memory_cost: Uint,
    extra_gas: Uint,
    call_stipend: Uint = GAS_CALL_STIPEND,
) -> MessageCallGas:
    """
    Split gas between caller and callee for a CALL family instruction.

    Parameters
    ----------
    value:
        Wei transferred with the call. The stipend is only granted when it is
        non-zero.
    gas :
        Gas requested by the caller.
    gas_left :
        Gas left in the calling frame.
    memory_cost :
        Memory expansion cost of the instruction.
    extra_gas :
        Access, value transfer and account creation surcharges.
    call_stipend :
        Free gas given to the callee on value transfers.
    """
    call_stipend = Uint(0) if value == 0 else call_stipend
    if gas_left < extra_gas + memory_cost:
        return MessageCallGas(gas + extra_gas, gas + call_stipend)

    gas = min(gas, max_message_call_gas(gas_left - memory_cost - extra_gas))

    return MessageCallGas(gas + extra_gas, gas + call_stipend)


def max_message_call_gas(gas: Uint) -> Uint:
    """
    All but one 64th of `gas`, the most a child frame may receive.
    """
    return gas - (gas // Uint(64))


def init_code_cost(init_code_length: Uint) -> Uint:
    """
    Per word charge for init code, paid by CREATE, CREATE2 and creation
    transactions.
    """
    return GAS_INIT_CODE_WORD_COST * ceil32(init_code_length) // Uint(32)


def calculate_refund(gas_used: Uint, refund_counter: int) -> Uint:
    """
    Gas returned to the sender at the end of a transaction: the refund
    counter, capped at a fifth of the gas used.
    """
    if refund_counter <= 0:
        return Uint(0)
    return min(gas_used // REFUND_QUOTIENT, Uint(refund_counter))
