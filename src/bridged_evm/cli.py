"""
Command line access to the engine.

Both subcommands read a prestate document from a file (or stdin) shaped
like::

    {
        "env": {"chainId": "0x1", "baseFee": "0x7", "coinbase": "0x..."},
        "alloc": {
            "0x...": {
                "balance": "0x...",
                "nonce": "0x...",
                "code": "0x...",
                "storage": {"0x00": "0x01"}
            }
        }
    }

and print the `ExecutionResult` as JSON.
"""

import argparse
import json
import sys
from typing import Any, Dict, Optional, Sequence, Text, TextIO

from ethereum_types.bytes import Bytes0
from ethereum_types.numeric import U64, U256, Uint

from . import __version__
from .config import BASE_FEE, BLOCK_GAS_LIMIT, COINBASE, PREV_RANDAO
from .fork import ExecutionResult, ExecutionStatus
from .fork_types import Account, Address, BackendId
from .kernel import Kernel
from .logger import setup_logger
from .state import AccountDiff
from .store import MemoryAccountStore
from .trace import log_evm_trace, set_evm_trace
from .transactions import UnsignedFeeMarketTransaction, encode_transaction
from .utils.hexadecimal import (
    hex_to_address,
    hex_to_bytes,
    hex_to_bytes32,
    hex_to_u256,
    hex_to_uint,
)

DESCRIPTION = """
Run EVM bytecode against a JSON prestate.

    run:  install code at an address and send a transaction to it.
    call: simulate a transaction, persisting nothing.
"""

DEFAULT_TARGET = "0x000000000000000000000000000000000000c0de"
DEFAULT_SENDER = "0x00000000000000000000000000000000000ca11e"
KERNEL_OWNER = BackendId(1)


def create_parser() -> argparse.ArgumentParser:
    """
    Create a command-line argument parser for the tool.
    """
    parser = argparse.ArgumentParser(
        prog="bridged-evm",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show the version of the tool.",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Log every executed opcode to stderr.",
    )

    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser(
        "run", help="Execute bytecode and print the resulting state."
    )
    run_parser.add_argument("code", help="Bytecode to run, hex encoded.")
    _transaction_arguments(run_parser, DEFAULT_TARGET)

    call_parser = subparsers.add_parser(
        "call", help="Simulate a transaction against the prestate."
    )
    _transaction_arguments(call_parser, "")

    return parser


def _transaction_arguments(
    parser: argparse.ArgumentParser, default_to: str
) -> None:
    parser.add_argument(
        "--prestate",
        type=argparse.FileType("r"),
        default=None,
        help="Prestate JSON file, stdin when '-'.",
    )
    parser.add_argument("--sender", default=DEFAULT_SENDER)
    parser.add_argument(
        "--to",
        default=default_to,
        help="Target address, empty to create a contract.",
    )
    parser.add_argument("--input", default="0x", help="Call data.")
    parser.add_argument("--gas", type=int, default=1_000_000)
    parser.add_argument("--gas-price", type=int, default=0)
    parser.add_argument("--value", type=int, default=0)


def load_kernel(prestate: Dict[str, Any]) -> Kernel:
    """
    Build a `Kernel` over an in-memory store filled from `prestate`.
    """
    store = MemoryAccountStore()
    kernel = Kernel(store, owner=KERNEL_OWNER)

    env = prestate.get("env", {})
    if "chainId" in env:
        chain_id = U64(hex_to_uint(env["chainId"]))
        kernel.initialize_chain_id(KERNEL_OWNER, chain_id)
    if "baseFee" in env:
        store.set_config(BASE_FEE, int(hex_to_uint(env["baseFee"])))
    if "gasLimit" in env:
        store.set_config(BLOCK_GAS_LIMIT, int(hex_to_uint(env["gasLimit"])))
    if "coinbase" in env:
        store.set_config(COINBASE, bytes(hex_to_address(env["coinbase"])))
    if "prevRandao" in env:
        prev_randao = hex_to_bytes32(env["prevRandao"])
        store.set_config(PREV_RANDAO, bytes(prev_randao))
    if "number" in env:
        kernel.block_number = hex_to_uint(env["number"])
    if "timestamp" in env:
        kernel.block_timestamp = hex_to_u256(env["timestamp"])

    directory = kernel.directory
    for address_hex, account in prestate.get("alloc", {}).items():
        address = hex_to_address(address_hex)
        install_account(
            kernel,
            address,
            Account(
                nonce=hex_to_uint(account.get("nonce", "0x0")),
                balance=hex_to_u256(account.get("balance", "0x0")),
                code=hex_to_bytes(account.get("code", "0x")),
            ),
        )
        backend_id = directory.resolve(address)
        for key, value in account.get("storage", {}).items():
            store.set_storage(
                backend_id, hex_to_bytes32(key), hex_to_u256(value)
            )

    return kernel


def install_account(
    kernel: Kernel, address: Address, account: Account
) -> None:
    """
    Write `account` straight to the store of `kernel`.
    """
    backend_id = kernel.directory.materialize(address)
    kernel.store.set_account(backend_id, account)


def result_to_json(result: ExecutionResult) -> Dict[str, Any]:
    """
    JSON friendly rendering of `result`.
    """

    def diff_to_json(diff: Optional[AccountDiff]) -> Optional[Dict[str, Any]]:
        if diff is None:
            return None
        return {
            "balance": hex(diff.balance),
            "nonce": hex(diff.nonce),
            "code": "0x" + diff.code.hex(),
            "storage": {
                "0x" + key.hex(): hex(value)
                for key, value in diff.storage.items()
            },
        }

    created = result.created_address
    return {
        "status": result.status.value,
        "returnData": "0x" + result.return_data.hex(),
        "gasUsed": hex(result.gas_used),
        "gasRefunded": hex(result.gas_refunded),
        "error": None if result.error is None else repr(result.error),
        "createdAddress": None if created is None else "0x" + created.hex(),
        "logs": [
            {
                "address": "0x" + log.address.hex(),
                "topics": ["0x" + topic.hex() for topic in log.topics],
                "data": "0x" + log.data.hex(),
            }
            for log in result.logs
        ],
        "postState": {
            "0x" + address.hex(): diff_to_json(diff)
            for address, diff in result.post_state.items()
        },
    }


def _target(options: argparse.Namespace) -> Any:
    if options.to:
        return hex_to_address(options.to)
    return Bytes0(b"")


def run(options: argparse.Namespace, kernel: Kernel) -> ExecutionResult:
    """
    Install `options.code` at the target and send a transaction to it.
    """
    target = _target(options)
    if isinstance(target, Bytes0):
        data = hex_to_bytes(options.code)
    else:
        install_account(
            kernel,
            target,
            Account(
                nonce=Uint(1),
                balance=U256(0),
                code=hex_to_bytes(options.code),
            ),
        )
        data = hex_to_bytes(options.input)

    sender = hex_to_address(options.sender)
    backend_id = kernel.directory.resolve(sender)
    account = kernel.store.get_account(backend_id)
    nonce = U256(0) if account is None else U256(account.nonce)

    tx = UnsignedFeeMarketTransaction(
        chain_id=kernel.eth_chain_id(),
        nonce=nonce,
        max_priority_fee_per_gas=Uint(0),
        max_fee_per_gas=Uint(options.gas_price),
        gas=Uint(options.gas),
        to=target,
        value=U256(options.value),
        data=data,
        access_list=(),
    )
    return kernel.eth_send_raw_unsigned_tx(encode_transaction(tx), sender)


def call(options: argparse.Namespace, kernel: Kernel) -> ExecutionResult:
    """
    Simulate the transaction described by `options`.
    """
    return kernel.eth_call(
        origin=hex_to_address(options.sender),
        to=_target(options),
        gas_limit=Uint(options.gas),
        gas_price=Uint(options.gas_price),
        value=U256(options.value),
        data=hex_to_bytes(options.input),
    )


def main(
    args: Optional[Sequence[Text]] = None,
    out_file: Optional[TextIO] = None,
) -> int:
    """Run the tool based on the given options."""
    parser = create_parser()
    options = parser.parse_args(args)

    if out_file is None:
        out_file = sys.stdout

    if options.command is None:
        parser.print_help(file=out_file)
        return 0

    if options.trace:
        setup_logger("bridged_evm", "DEBUG")
        set_evm_trace(log_evm_trace)
    else:
        setup_logger("bridged_evm")

    prestate: Dict[str, Any] = {}
    if options.prestate is not None:
        with options.prestate as prestate_file:
            prestate = json.load(prestate_file)

    kernel = load_kernel(prestate)
    if options.command == "run":
        result = run(options, kernel)
    else:
        result = call(options, kernel)

    json.dump(result_to_json(result), out_file, indent=4)
    out_file.write("\n")
    return 0 if result.status == ExecutionStatus.SUCCESS else 1
