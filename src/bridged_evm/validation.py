"""
Admission checks run on a transaction before it is executed.

The checks are pure: they only read the transaction and the
`AdmissionContext` the host gathered for it, and they run in a fixed order
so the first failing rule always decides the error.
"""

import logging
from dataclasses import dataclass

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U64, U256, Uint

from .exceptions import (
    GasLimitExceedsBlockError,
    GasLimitTooHighError,
    InsufficientBalanceError,
    InsufficientMaxFeePerGasError,
    InvalidChainIdError,
    InvalidTransaction,
    MaxFeePerGasTooHighError,
    NonceMismatchError,
    PriorityFeeGreaterThanMaxFeeError,
)
from .fork_types import Address
from .transactions import (
    AnyTransaction,
    calculate_intrinsic_cost,
    decode_unsigned_transaction,
    is_typed,
    max_fee_per_gas,
    max_priority_fee_per_gas,
    transaction_chain_id,
)
from .utils.ensure import ensure

logger = logging.getLogger(__name__)

MAX_GAS_LIMIT = Uint(2**64 - 1)
MAX_FEE_PER_GAS = Uint(2**128 - 1)


@dataclass(frozen=True)
class AdmissionContext:
    """
    Everything the checks need besides the transaction itself.
    """

    chain_id: U64
    block_gas_limit: Uint
    base_fee_per_gas: Uint
    sender_nonce: Uint
    sender_balance: U256


@dataclass(frozen=True)
class AdmittedTransaction:
    """
    A transaction that passed every admission check, with what execution
    needs to charge for it. The intrinsic gas is computed but not yet paid.
    """

    tx: AnyTransaction
    sender: Address
    intrinsic_gas: Uint
    effective_gas_price: Uint
    priority_fee_per_gas: Uint


def validate_transaction(
    tx: AnyTransaction, context: AdmissionContext
) -> None:
    """
    Run the admission checks on `tx`, in order.

    Raises
    ------
    InvalidChainIdError
        A typed transaction is bound to another chain.
    GasLimitTooHighError
        The gas limit does not fit in 64 bits.
    MaxFeePerGasTooHighError
        The fee cap (gas price for older envelopes) does not fit in 128 bits.
    PriorityFeeGreaterThanMaxFeeError
        The tip is above the fee cap.
    NonceMismatchError
        The nonce is not the sender's current one.
    GasLimitExceedsBlockError
        The gas limit is above the block gas limit.
    InsufficientMaxFeePerGasError
        The fee cap is below the base fee.
    InsufficientBalanceError
        The sender cannot pay the value and the worst case gas fee.
    """
    if is_typed(tx):
        ensure(
            transaction_chain_id(tx) == context.chain_id, InvalidChainIdError
        )

    max_fee = max_fee_per_gas(tx)
    priority_fee = max_priority_fee_per_gas(tx)

    ensure(tx.gas <= MAX_GAS_LIMIT, GasLimitTooHighError)
    ensure(max_fee <= MAX_FEE_PER_GAS, MaxFeePerGasTooHighError)
    ensure(priority_fee <= max_fee, PriorityFeeGreaterThanMaxFeeError)
    ensure(Uint(tx.nonce) == context.sender_nonce, NonceMismatchError)
    ensure(tx.gas <= context.block_gas_limit, GasLimitExceedsBlockError)
    ensure(
        max_fee >= context.base_fee_per_gas, InsufficientMaxFeePerGasError
    )

    max_gas_fee = int(tx.gas) * int(max_fee)
    ensure(
        int(context.sender_balance) >= int(tx.value) + max_gas_fee,
        InsufficientBalanceError,
    )


def effective_gas_price(tx: AnyTransaction, base_fee_per_gas: Uint) -> Uint:
    """
    Price per unit of gas actually paid: the base fee plus the tip, the tip
    being capped so the total never exceeds the fee cap.
    """
    priority_fee = min(
        max_priority_fee_per_gas(tx),
        max_fee_per_gas(tx) - base_fee_per_gas,
    )
    return priority_fee + base_fee_per_gas


def admit_transaction(
    tx: AnyTransaction, sender: Address, context: AdmissionContext
) -> AdmittedTransaction:
    """
    Validate `tx` sent by `sender` and wrap it for execution.
    """
    try:
        validate_transaction(tx, context)
    except InvalidTransaction as error:
        logger.info(
            "rejected transaction from 0x%s: %s", sender.hex(), error
        )
        raise

    gas_price = effective_gas_price(tx, context.base_fee_per_gas)
    return AdmittedTransaction(
        tx=tx,
        sender=sender,
        intrinsic_gas=calculate_intrinsic_cost(tx),
        effective_gas_price=gas_price,
        priority_fee_per_gas=gas_price - context.base_fee_per_gas,
    )


def admit_raw_transaction(
    raw: Bytes, sender: Address, context: AdmissionContext
) -> AdmittedTransaction:
    """
    Decode an unsigned transaction payload and admit it on behalf of
    `sender`.

    Raises
    ------
    TransactionDecodingError
        `raw` is not a valid payload.
    """
    tx = decode_unsigned_transaction(raw)
    return admit_transaction(tx, sender, context)
