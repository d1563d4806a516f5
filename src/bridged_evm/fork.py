"""
Transaction Processing
^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Entry point for executing an admitted transaction: charge for it, run the
message call, settle refunds and fees, and describe the outcome as an
`ExecutionResult`.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple, Union

from ethereum_types.bytes import Bytes, Bytes0, Bytes32
from ethereum_types.numeric import U256, Uint

from .config import ChainConfig
from .directory import compute_contract_address
from .exceptions import EthereumException
from .fork_types import Address, Log
from .state import (
    AccountDiff,
    State,
    destroy_account,
    get_account,
    increment_nonce,
    set_account_balance,
    state_diff,
)
from .transactions import transaction_access_list
from .validation import AdmittedTransaction
from .vm import Environment, Message
from .vm.exceptions import InitCodeTooLarge, IntrinsicGasTooLow, Revert
from .vm.gas import calculate_refund
from .vm.interpreter import MAX_CODE_SIZE, process_message_call
from .vm.precompiled_contracts.mapping import PRE_COMPILED_CONTRACTS

logger = logging.getLogger(__name__)


class ExecutionStatus(enum.Enum):
    """
    How the outermost frame of a transaction ended.
    """

    SUCCESS = "success"
    REVERT = "revert"
    HALT = "halt"


@dataclass
class ExecutionResult:
    """
    Everything a host needs to know about an executed transaction.

    `post_state` maps every account that differs from the store to its new
    content, or to `None` when it was deleted.
    """

    status: ExecutionStatus
    return_data: Bytes
    gas_used: Uint
    gas_refunded: Uint
    logs: Tuple[Log, ...]
    error: Optional[EthereumException]
    created_address: Optional[Address]
    post_state: Dict[Address, Optional[AccountDiff]]

    @property
    def reverted(self) -> bool:
        """
        Whether the transaction failed, by revert or by halt.
        """
        return self.status != ExecutionStatus.SUCCESS


def build_environment(
    config: ChainConfig,
    state: State,
    origin: Address,
    gas_price: Uint,
) -> Environment:
    """
    Assemble the `Environment` of a transaction sent by `origin`.
    """
    return Environment(
        origin=origin,
        coinbase=config.coinbase,
        number=config.number,
        base_fee_per_gas=config.base_fee_per_gas,
        gas_limit=config.block_gas_limit,
        gas_price=gas_price,
        time=config.time,
        prev_randao=config.prev_randao,
        chain_id=config.chain_id,
        block_hashes=config.block_hashes,
        blob_base_fee=config.blob_base_fee,
        state=state,
    )


def prepare_message(
    caller: Address,
    target: Union[Bytes0, Address],
    value: U256,
    data: Bytes,
    gas: Uint,
    env: Environment,
    preaccessed_addresses: FrozenSet[Address] = frozenset(),
    preaccessed_storage_keys: FrozenSet[
        Tuple[(Address, Bytes32)]
    ] = frozenset(),
) -> Message:
    """
    Build the outermost message of a transaction.

    Parameters
    ----------
    caller :
        Address which initiated the transaction. Its nonce must already have
        been incremented.
    target :
        Address whose code will be executed, empty for a creation.
    value :
        Value to be transferred.
    data :
        Array of bytes provided to the code in `target`, or the init code of
        a creation.
    gas :
        Gas provided for the code in `target`.
    env :
        Environment for the Ethereum Virtual Machine.
    preaccessed_addresses:
        Addresses that should be marked as accessed prior to the message call
    preaccessed_storage_keys:
        Storage keys that should be marked as accessed prior to the message
        call

    Returns
    -------
    message: `bridged_evm.vm.Message`
        Items containing contract creation or message call specific data.
    """
    if isinstance(target, Bytes0):
        current_target = compute_contract_address(
            caller,
            get_account(env.state, caller).nonce - Uint(1),
        )
        msg_data = Bytes(b"")
        code = data
        code_address = None
    elif isinstance(target, Address):
        current_target = target
        msg_data = data
        code = get_account(env.state, target).code
        code_address = target
    else:
        raise AssertionError("Target must be address or empty bytes")

    accessed_addresses = set()
    accessed_addresses.add(current_target)
    accessed_addresses.add(caller)
    accessed_addresses.update(PRE_COMPILED_CONTRACTS.keys())
    accessed_addresses.update(preaccessed_addresses)

    return Message(
        caller=caller,
        target=target,
        gas=gas,
        value=value,
        data=msg_data,
        code=code,
        depth=Uint(0),
        current_target=current_target,
        code_address=code_address,
        should_transfer_value=True,
        is_static=False,
        accessed_addresses=accessed_addresses,
        accessed_storage_keys=set(preaccessed_storage_keys),
        env=env,
    )


def _pay_coinbase(env: Environment, fee: Uint) -> None:
    if fee == 0:
        return
    coinbase_balance = get_account(env.state, env.coinbase).balance
    set_account_balance(env.state, env.coinbase, coinbase_balance + U256(fee))


def process_transaction(
    env: Environment, admitted: AdmittedTransaction
) -> ExecutionResult:
    """
    Execute a transaction against the provided environment.

    This function processes the actions needed to execute a transaction.
    It decrements the sender's account after calculating the gas fee and
    refunds them the proper amount after execution. Calling contracts,
    deploying code, and incrementing nonces are all examples of actions that
    happen within this function or from a call made within this function.

    A transaction that cannot even start (intrinsic gas above its gas limit,
    or init code too large) is still included: its nonce is consumed and its
    whole gas limit is paid.

    Accounts that are marked for deletion are processed and destroyed after
    execution. Nothing is written to the store: the caller commits or
    discards `env.state`.

    Parameters
    ----------
    env :
        Environment for the Ethereum Virtual Machine. `env.gas_price` must be
        the effective gas price of `admitted`.
    admitted :
        Transaction to execute.
    """
    tx = admitted.tx
    sender = admitted.sender
    state = env.state
    priority_fee_per_gas = env.gas_price - env.base_fee_per_gas

    effective_gas_fee = tx.gas * env.gas_price
    sender_account = get_account(state, sender)
    sender_balance_after_gas_fee = (
        Uint(sender_account.balance) - effective_gas_fee
    )
    set_account_balance(state, sender, U256(sender_balance_after_gas_fee))
    increment_nonce(state, sender)

    is_create = tx.to == Bytes0(b"")
    early_error: Optional[EthereumException] = None
    if admitted.intrinsic_gas > tx.gas:
        early_error = IntrinsicGasTooLow()
    elif is_create and len(tx.data) > 2 * MAX_CODE_SIZE:
        early_error = InitCodeTooLarge()

    if early_error is not None:
        logger.debug(
            "transaction from 0x%s halted before execution: %r",
            sender.hex(),
            early_error,
        )
        _pay_coinbase(env, tx.gas * priority_fee_per_gas)
        return ExecutionResult(
            status=ExecutionStatus.HALT,
            return_data=b"",
            gas_used=tx.gas,
            gas_refunded=Uint(0),
            logs=(),
            error=early_error,
            created_address=None,
            post_state=state_diff(state),
        )

    preaccessed_addresses = set()
    preaccessed_storage_keys = set()
    preaccessed_addresses.add(env.coinbase)
    for address, keys in transaction_access_list(tx):
        preaccessed_addresses.add(address)
        for key in keys:
            preaccessed_storage_keys.add((address, key))

    message = prepare_message(
        sender,
        tx.to,
        tx.value,
        tx.data,
        tx.gas - admitted.intrinsic_gas,
        env,
        preaccessed_addresses=frozenset(preaccessed_addresses),
        preaccessed_storage_keys=frozenset(preaccessed_storage_keys),
    )

    output = process_message_call(message)

    gas_used = tx.gas - output.gas_left
    gas_refund = calculate_refund(gas_used, int(output.refund_counter))
    gas_refund_amount = (output.gas_left + gas_refund) * env.gas_price

    # For legacy transactions env.gas_price == tx.gas_price
    total_gas_used = gas_used - gas_refund
    transaction_fee = total_gas_used * priority_fee_per_gas

    # refund gas
    sender_balance_after_refund = get_account(
        state, sender
    ).balance + U256(gas_refund_amount)
    set_account_balance(state, sender, sender_balance_after_refund)

    # transfer miner fees
    _pay_coinbase(env, transaction_fee)

    for address in output.accounts_to_delete:
        destroy_account(state, address)

    if output.error is None:
        status = ExecutionStatus.SUCCESS
    elif isinstance(output.error, Revert):
        status = ExecutionStatus.REVERT
    else:
        status = ExecutionStatus.HALT

    created_address = None
    if is_create and status == ExecutionStatus.SUCCESS:
        created_address = message.current_target

    logger.debug(
        "transaction from 0x%s: %s, gas used %d, refund %d",
        sender.hex(),
        status.value,
        int(total_gas_used),
        int(gas_refund),
    )

    return ExecutionResult(
        status=status,
        return_data=output.return_data,
        gas_used=total_gas_used,
        gas_refunded=gas_refund,
        logs=output.logs,
        error=output.error,
        created_address=created_address,
        post_state=state_diff(state),
    )
