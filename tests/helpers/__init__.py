from typing import Dict, Optional, Tuple, Union

from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.numeric import U64, U256, Uint

from bridged_evm.directory import AccountDirectory
from bridged_evm.fork_types import Account, Address, BackendId
from bridged_evm.state import State, get_account
from bridged_evm.store import MemoryAccountStore
from bridged_evm.utils.hexadecimal import hex_to_address
from bridged_evm.vm import Environment, Message
from bridged_evm.vm.instructions import Ops
from bridged_evm.vm.interpreter import MessageCallOutput, process_message_call
from bridged_evm.vm.precompiled_contracts.mapping import (
    PRE_COMPILED_CONTRACTS,
)

SENDER = hex_to_address("0x00000000000000000000000000000000000ca11e")
CONTRACT = hex_to_address("0x000000000000000000000000000000000000c0de")
OTHER = hex_to_address("0x0000000000000000000000000000000000000b0b")
COINBASE = hex_to_address("0x000000000000000000000000000000000000beef")

DEPLOYER = BackendId(0x1234)
CLASS_HASH = U256(0x5678)

Asm = Union[Ops, int, bytes]


def push(value: int, size: Optional[int] = None) -> Bytes:
    """
    Smallest PUSH instruction for `value`, or PUSH`size` when given.
    """
    if size is None:
        size = max(1, (value.bit_length() + 7) // 8)
    return bytes([Ops.PUSH1.value + size - 1]) + value.to_bytes(size, "big")


def assemble(*parts: Asm) -> Bytes:
    """
    Concatenate opcodes, raw bytes and PUSH instructions (bare ints) into
    bytecode.
    """
    code = b""
    for part in parts:
        if isinstance(part, Ops):
            code += bytes([part.value])
        elif isinstance(part, int):
            code += push(part)
        else:
            code += part
    return code


def return_top() -> Bytes:
    """
    Code returning the top of the stack as a 32 byte word.
    """
    return assemble(0, Ops.MSTORE, 32, 0, Ops.RETURN)


def new_state(
    accounts: Optional[Dict[Address, Account]] = None,
    storage: Optional[Dict[Address, Dict[Bytes32, U256]]] = None,
) -> State:
    """
    `State` over a fresh in-memory store holding `accounts`.
    """
    store = MemoryAccountStore()
    directory = AccountDirectory(store, DEPLOYER, CLASS_HASH)
    for address, account in (accounts or {}).items():
        store.set_account(directory.materialize(address), account)
    for address, slots in (storage or {}).items():
        backend_id = directory.materialize(address)
        for key, value in slots.items():
            store.set_storage(backend_id, key, value)
    return State(store=store, directory=directory)


def new_environment(state: State, gas_price: Uint = Uint(0)) -> Environment:
    return Environment(
        origin=SENDER,
        coinbase=COINBASE,
        number=Uint(10),
        base_fee_per_gas=Uint(0),
        gas_limit=Uint(30_000_000),
        gas_price=gas_price,
        time=U256(1_700_000_000),
        prev_randao=Bytes32(b"\x00" * 32),
        chain_id=U64(1),
        block_hashes=[],
        blob_base_fee=Uint(1),
        state=state,
    )


def call_message(
    env: Environment,
    to: Address = CONTRACT,
    data: Bytes = b"",
    gas: Uint = Uint(1_000_000),
    value: U256 = U256(0),
    depth: Uint = Uint(0),
    is_static: bool = False,
) -> Message:
    return Message(
        caller=SENDER,
        target=to,
        gas=gas,
        value=value,
        data=data,
        code=get_account(env.state, to).code,
        depth=depth,
        current_target=to,
        code_address=to,
        should_transfer_value=True,
        is_static=is_static,
        accessed_addresses={to, SENDER, *PRE_COMPILED_CONTRACTS.keys()},
        accessed_storage_keys=set(),
        env=env,
    )


def contract(code: Bytes, balance: int = 0) -> Account:
    return Account(nonce=Uint(1), balance=U256(balance), code=code)


def run_code(
    code: Bytes,
    data: Bytes = b"",
    gas: int = 1_000_000,
    extra_accounts: Optional[Dict[Address, Account]] = None,
    storage: Optional[Dict[Address, Dict[Bytes32, U256]]] = None,
    depth: int = 0,
    is_static: bool = False,
) -> Tuple[MessageCallOutput, State]:
    """
    Run `code` installed at `CONTRACT`, called by `SENDER`.
    """
    accounts = {
        SENDER: Account(nonce=Uint(0), balance=U256(10**18), code=b""),
        CONTRACT: contract(code),
    }
    accounts.update(extra_accounts or {})
    state = new_state(accounts, storage)
    env = new_environment(state)
    message = call_message(
        env,
        data=data,
        gas=Uint(gas),
        depth=Uint(depth),
        is_static=is_static,
    )
    return process_message_call(message), state


def word(value: int) -> Bytes:
    return int(value).to_bytes(32, "big")
