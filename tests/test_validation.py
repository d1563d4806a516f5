import re
from typing import Any

import pytest
from ethereum_types.bytes import Bytes0
from ethereum_types.numeric import U64, U256, Uint
from hypothesis import given
from hypothesis import strategies as st

from bridged_evm.exceptions import (
    GasLimitExceedsBlockError,
    GasLimitTooHighError,
    InsufficientBalanceError,
    InsufficientMaxFeePerGasError,
    InvalidChainIdError,
    InvalidTransaction,
    MaxFeePerGasTooHighError,
    NonceMismatchError,
    PriorityFeeGreaterThanMaxFeeError,
    TransactionDecodingError,
)
from bridged_evm.transactions import (
    UnsignedFeeMarketTransaction,
    UnsignedLegacyTransaction,
    encode_transaction,
)
from bridged_evm.validation import (
    AdmissionContext,
    admit_raw_transaction,
    admit_transaction,
    effective_gas_price,
    validate_transaction,
)
from tests.helpers import CONTRACT, SENDER

CONTEXT = AdmissionContext(
    chain_id=U64(1),
    block_gas_limit=Uint(7_000_000),
    base_fee_per_gas=Uint(10),
    sender_nonce=Uint(5),
    sender_balance=U256(10**18),
)


def fee_market_tx(**overrides: Any) -> UnsignedFeeMarketTransaction:
    fields = dict(
        chain_id=U64(1),
        nonce=U256(5),
        max_priority_fee_per_gas=Uint(2),
        max_fee_per_gas=Uint(20),
        gas=Uint(100_000),
        to=CONTRACT,
        value=U256(0),
        data=b"",
        access_list=(),
    )
    fields.update(overrides)
    return UnsignedFeeMarketTransaction(**fields)


def test_valid_transaction_is_admitted() -> None:
    admitted = admit_transaction(fee_market_tx(), SENDER, CONTEXT)
    assert admitted.sender == SENDER
    assert admitted.intrinsic_gas == Uint(21000)
    assert admitted.effective_gas_price == Uint(12)
    assert admitted.priority_fee_per_gas == Uint(2)


def test_effective_gas_price_is_capped_by_max_fee() -> None:
    tx = fee_market_tx(max_priority_fee_per_gas=Uint(15))
    assert effective_gas_price(tx, Uint(10)) == Uint(20)


@pytest.mark.parametrize(
    "overrides, error, message",
    [
        (
            {"chain_id": U64(2)},
            InvalidChainIdError,
            "Invalid chain id",
        ),
        (
            {"gas": Uint(2**64)},
            GasLimitTooHighError,
            "Gas limit too high",
        ),
        (
            {"max_fee_per_gas": Uint(2**128)},
            MaxFeePerGasTooHighError,
            "Max fee per gas too high",
        ),
        (
            {"max_priority_fee_per_gas": Uint(21)},
            PriorityFeeGreaterThanMaxFeeError,
            "Max priority fee greater than max fee per gas",
        ),
        (
            {"nonce": U256(4)},
            NonceMismatchError,
            "Invalid nonce",
        ),
        (
            {"gas": Uint(7_000_001)},
            GasLimitExceedsBlockError,
            "Transaction gas_limit > Block gas_limit",
        ),
        (
            {"max_fee_per_gas": Uint(9), "max_priority_fee_per_gas": Uint(0)},
            InsufficientMaxFeePerGasError,
            "Max fee per gas too low",
        ),
        (
            {"value": U256(10**18)},
            InsufficientBalanceError,
            "Not enough ETH to pay msg.value + max gas fees",
        ),
    ],
)
def test_each_check_has_a_fixed_message(
    overrides: Any, error: type, message: str
) -> None:
    with pytest.raises(error, match=re.escape(message)):
        validate_transaction(fee_market_tx(**overrides), CONTEXT)


@pytest.mark.parametrize(
    "overrides, error",
    [
        (
            {"chain_id": U64(2), "gas": Uint(2**64)},
            InvalidChainIdError,
        ),
        (
            {"gas": Uint(2**64), "max_fee_per_gas": Uint(2**128)},
            GasLimitTooHighError,
        ),
        (
            {"max_priority_fee_per_gas": Uint(21), "nonce": U256(0)},
            PriorityFeeGreaterThanMaxFeeError,
        ),
        (
            {"nonce": U256(0), "gas": Uint(7_000_001)},
            NonceMismatchError,
        ),
        (
            {
                "gas": Uint(7_000_001),
                "max_fee_per_gas": Uint(1),
                "max_priority_fee_per_gas": Uint(0),
            },
            GasLimitExceedsBlockError,
        ),
        (
            {
                "max_fee_per_gas": Uint(1),
                "max_priority_fee_per_gas": Uint(0),
                "value": U256(10**18),
            },
            InsufficientMaxFeePerGasError,
        ),
    ],
)
def test_first_failing_check_wins(overrides: Any, error: type) -> None:
    with pytest.raises(error):
        validate_transaction(fee_market_tx(**overrides), CONTEXT)


def test_legacy_transactions_skip_the_chain_id_check() -> None:
    tx = UnsignedLegacyTransaction(
        nonce=U256(5),
        gas_price=Uint(10),
        gas=Uint(21000),
        to=CONTRACT,
        value=U256(0),
        data=b"",
    )
    validate_transaction(tx, CONTEXT)


def test_legacy_gas_price_is_the_fee_cap() -> None:
    tx = UnsignedLegacyTransaction(
        nonce=U256(5),
        gas_price=Uint(9),
        gas=Uint(21000),
        to=Bytes0(b""),
        value=U256(0),
        data=b"",
    )
    with pytest.raises(InsufficientMaxFeePerGasError):
        validate_transaction(tx, CONTEXT)


@given(nonce=st.integers(min_value=0, max_value=2**64 - 1))
def test_any_other_nonce_is_rejected(nonce: int) -> None:
    tx = fee_market_tx(nonce=U256(nonce))
    if nonce == 5:
        validate_transaction(tx, CONTEXT)
    else:
        with pytest.raises(NonceMismatchError, match="Invalid nonce"):
            validate_transaction(tx, CONTEXT)


@given(
    max_fee=st.integers(min_value=0, max_value=2**128 - 2),
    excess=st.integers(min_value=1, max_value=2**64),
    gas=st.integers(min_value=0, max_value=2**64 - 1),
    nonce=st.integers(min_value=0, max_value=2**64 - 1),
)
def test_priority_fee_above_max_fee_is_rejected(
    max_fee: int, excess: int, gas: int, nonce: int
) -> None:
    tx = fee_market_tx(
        max_fee_per_gas=Uint(max_fee),
        max_priority_fee_per_gas=Uint(max_fee + excess),
        gas=Uint(gas),
        nonce=U256(nonce),
    )
    with pytest.raises(PriorityFeeGreaterThanMaxFeeError):
        validate_transaction(tx, CONTEXT)


@given(gas=st.integers(min_value=0, max_value=2**64 - 1))
def test_gas_limit_against_block_gas_limit(gas: int) -> None:
    tx = fee_market_tx(gas=Uint(gas))
    if gas > 7_000_000:
        with pytest.raises(GasLimitExceedsBlockError):
            validate_transaction(tx, CONTEXT)
    else:
        validate_transaction(tx, CONTEXT)


@given(raw=st.binary(max_size=200))
def test_decoding_never_escapes_as_another_error(raw: bytes) -> None:
    try:
        admit_raw_transaction(raw, SENDER, CONTEXT)
    except InvalidTransaction:
        pass


def test_unknown_envelope_type_fails_decoding() -> None:
    with pytest.raises(TransactionDecodingError):
        admit_raw_transaction(b"\x05\xc0", SENDER, CONTEXT)


def test_raw_payload_round_trip_admits() -> None:
    raw = encode_transaction(fee_market_tx())
    admitted = admit_raw_transaction(raw, SENDER, CONTEXT)
    assert admitted.tx == fee_market_tx()
