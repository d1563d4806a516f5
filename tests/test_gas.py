import pytest
from ethereum_types.bytes import Bytes0, Bytes32
from ethereum_types.numeric import U64, U256, Uint

from bridged_evm.transactions import (
    UnsignedAccessListTransaction,
    UnsignedLegacyTransaction,
    calculate_intrinsic_cost,
)
from bridged_evm.vm.gas import (
    calculate_gas_extend_memory,
    calculate_memory_gas_cost,
    calculate_message_call_gas,
    calculate_refund,
    init_code_cost,
    max_message_call_gas,
)
from tests.helpers import CONTRACT, OTHER


def legacy(data: bytes, to: object = CONTRACT) -> UnsignedLegacyTransaction:
    return UnsignedLegacyTransaction(
        nonce=U256(0),
        gas_price=Uint(1),
        gas=Uint(100_000),
        to=to,  # type: ignore[arg-type]
        value=U256(0),
        data=data,
    )


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"", 21000),
        (b"\x00", 21004),
        (b"\x01", 21016),
        (b"\x00\x01\x00\x02", 21000 + 4 * 2 + 16 * 2),
    ],
)
def test_intrinsic_cost_of_call_data(data: bytes, expected: int) -> None:
    assert calculate_intrinsic_cost(legacy(data)) == Uint(expected)


def test_intrinsic_cost_of_creation() -> None:
    init_code = b"\x60" * 33
    expected = 21000 + 32000 + 16 * 33 + 2 * 2
    assert calculate_intrinsic_cost(
        legacy(init_code, Bytes0(b""))
    ) == Uint(expected)


def test_intrinsic_cost_of_access_list() -> None:
    tx = UnsignedAccessListTransaction(
        chain_id=U64(1),
        nonce=U256(0),
        gas_price=Uint(1),
        gas=Uint(100_000),
        to=CONTRACT,
        value=U256(0),
        data=b"",
        access_list=(
            (CONTRACT, (Bytes32(b"\x00" * 32), Bytes32(b"\x01" * 32))),
            (OTHER, ()),
        ),
    )
    assert calculate_intrinsic_cost(tx) == Uint(21000 + 2 * 2400 + 2 * 1900)


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, 0),
        (1, 3),
        (32, 3),
        (33, 6),
        (1024, 32 * 3 + 32 * 32 // 512),
        (32 * 1024, 1024 * 3 + 1024 * 1024 // 512),
    ],
)
def test_memory_cost(size: int, expected: int) -> None:
    assert calculate_memory_gas_cost(Uint(size)) == Uint(expected)


def test_memory_extension_only_charges_growth() -> None:
    memory = bytearray(64)
    extend = calculate_gas_extend_memory(
        memory, [(U256(0), U256(32)), (U256(64), U256(1))]
    )
    assert extend.expand_by == Uint(32)
    assert extend.cost == Uint(3)


def test_zero_sized_regions_never_grow_memory() -> None:
    extend = calculate_gas_extend_memory(
        bytearray(), [(U256(2**200), U256(0))]
    )
    assert extend.expand_by == Uint(0)
    assert extend.cost == Uint(0)


def test_child_gets_all_but_one_64th() -> None:
    assert max_message_call_gas(Uint(6400)) == Uint(6300)
    call_gas = calculate_message_call_gas(
        U256(0), Uint(10**6), Uint(6400), Uint(0), Uint(100)
    )
    assert call_gas.stipend == max_message_call_gas(Uint(6300))
    assert call_gas.cost == call_gas.stipend + Uint(100)


def test_value_transfer_adds_stipend() -> None:
    call_gas = calculate_message_call_gas(
        U256(1), Uint(0), Uint(100_000), Uint(0), Uint(9000)
    )
    assert call_gas.cost == Uint(9000)
    assert call_gas.stipend == Uint(2300)


def test_init_code_cost_per_word() -> None:
    assert init_code_cost(Uint(0)) == Uint(0)
    assert init_code_cost(Uint(1)) == Uint(2)
    assert init_code_cost(Uint(64)) == Uint(4)


@pytest.mark.parametrize(
    "gas_used, counter, expected",
    [
        (100_000, 0, 0),
        (100_000, -4800, 0),
        (100_000, 4800, 4800),
        (100_000, 50_000, 20_000),
    ],
)
def test_refund_is_capped_at_a_fifth(
    gas_used: int, counter: int, expected: int
) -> None:
    assert calculate_refund(Uint(gas_used), counter) == Uint(expected)
