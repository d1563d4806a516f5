"""
Ethereum Virtual Machine (EVM)
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

The abstract computer which runs the code stored in an
`.fork_types.Account`.

A running frame is an `Evm`. When an instruction needs a child frame (any of
the CALL or CREATE family) it does not run it itself: it parks a
`PendingCall` on the frame and returns. The interpreter then pushes the child
on its frame stack and, once the child has finished, hands it to the
`PendingCall.on_return` continuation of the parent.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Set, Tuple, Union

from ethereum_types.bytes import Bytes, Bytes0, Bytes32
from ethereum_types.numeric import U64, U256, Uint

from ..crypto.hash import Hash32
from ..exceptions import EthereumException
from ..fork_types import Address
from ..journal import Checkpoint
from ..state import State

__all__ = ("Environment", "Evm", "Message", "PendingCall")


@dataclass
class Environment:
    """
    Items external to the virtual machine itself, provided by the environment.
    """

    origin: Address
    coinbase: Address
    number: Uint
    base_fee_per_gas: Uint
    gas_limit: Uint
    gas_price: Uint
    time: U256
    prev_randao: Bytes32
    chain_id: U64
    block_hashes: List[Hash32]
    blob_base_fee: Uint
    state: State


@dataclass
class Message:
    """
    Items that are used by contract creation or message call.
    """

    caller: Address
    target: Union[Bytes0, Address]
    current_target: Address
    gas: Uint
    value: U256
    data: Bytes
    code_address: Optional[Address]
    code: Bytes
    depth: Uint
    should_transfer_value: bool
    is_static: bool
    accessed_addresses: Set[Address]
    accessed_storage_keys: Set[Tuple[Address, Bytes32]]
    env: Environment


@dataclass
class Evm:
    """The internal state of the virtual machine."""

    pc: Uint
    stack: List[U256]
    memory: bytearray
    code: Bytes
    gas_left: Uint
    env: Environment
    valid_jump_destinations: Set[Uint]
    refund_counter: int
    running: bool
    message: Message
    output: Bytes
    return_data: Bytes
    error: Optional[EthereumException]
    accessed_addresses: Set[Address]
    accessed_storage_keys: Set[Tuple[Address, Bytes32]]
    checkpoint: Optional[Checkpoint]
    pending: Optional["PendingCall"]


@dataclass
class PendingCall:
    """
    A child frame requested by the running instruction, and the code that
    finishes that instruction once the child is done.
    """

    message: Message
    on_return: Callable[[Evm, Evm], None]


def suspend(
    evm: Evm, message: Message, on_return: Callable[[Evm, Evm], None]
) -> None:
    """
    Ask the interpreter to run `message` before `evm` continues.
    """
    assert evm.pending is None
    evm.pending = PendingCall(message, on_return)


def incorporate_child_on_success(evm: Evm, child_evm: Evm) -> None:
    """
    Incorporate the state of a successful `child_evm` into the parent `evm`.

    Logs and scheduled deletions live in the state journal and were kept when
    the child's checkpoint was committed.

    Parameters
    ----------
    evm :
        The parent `EVM`.
    child_evm :
        The child evm to incorporate.
    """
    evm.gas_left += child_evm.gas_left
    evm.refund_counter += child_evm.refund_counter
    evm.accessed_addresses.update(child_evm.accessed_addresses)
    evm.accessed_storage_keys.update(child_evm.accessed_storage_keys)


def incorporate_child_on_error(evm: Evm, child_evm: Evm) -> None:
    """
    Incorporate the state of an unsuccessful `child_evm` into the parent `evm`.

    Only unused gas comes back, and it is zero unless the child reverted.

    Parameters
    ----------
    evm :
        The parent `EVM`.
    child_evm :
        The child evm to incorporate.
    """
    evm.gas_left += child_evm.gas_left
