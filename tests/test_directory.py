import pytest
from ethereum_types.bytes import Bytes32
from ethereum_types.numeric import U256, Uint
from hypothesis import given
from hypothesis import strategies as st

from bridged_evm.crypto.hash import keccak256
from bridged_evm.directory import (
    AccountDirectory,
    compute_contract_address,
    compute_create2_contract_address,
    deployment_address,
)
from bridged_evm.exceptions import (
    AccountAlreadyRegisteredError,
    CallerMismatchError,
)
from bridged_evm.fork_types import Address, BackendId
from bridged_evm.store import MemoryAccountStore
from bridged_evm.utils.hexadecimal import hex_to_address, hex_to_bytes
from tests.helpers import CLASS_HASH, CONTRACT, DEPLOYER, OTHER


def new_directory() -> AccountDirectory:
    return AccountDirectory(MemoryAccountStore(), DEPLOYER, CLASS_HASH)


@given(raw=st.binary(min_size=20, max_size=20))
def test_backend_id_is_deterministic_and_fits_251_bits(raw: bytes) -> None:
    address = Address(raw)
    first = new_directory().compute_backend_id(address)
    second = new_directory().compute_backend_id(address)
    assert first == second
    assert int(first) < 2**251


def test_backend_id_depends_on_deployer_and_class() -> None:
    store = MemoryAccountStore()
    base = AccountDirectory(store, DEPLOYER, CLASS_HASH)
    other_deployer = AccountDirectory(store, BackendId(1), CLASS_HASH)
    other_class = AccountDirectory(store, DEPLOYER, U256(1))
    ids = {
        base.compute_backend_id(CONTRACT),
        other_deployer.compute_backend_id(CONTRACT),
        other_class.compute_backend_id(CONTRACT),
        base.compute_backend_id(OTHER),
    }
    assert len(ids) == 4


def test_register_once() -> None:
    directory = new_directory()
    expected = directory.compute_backend_id(CONTRACT)
    assert directory.register(CONTRACT, expected) == expected
    assert directory.is_registered(CONTRACT)

    with pytest.raises(
        AccountAlreadyRegisteredError,
        match="Kernel: account already registered",
    ):
        directory.register(CONTRACT, expected)


def test_register_from_the_wrong_caller() -> None:
    directory = new_directory()
    expected = directory.compute_backend_id(CONTRACT)
    with pytest.raises(
        CallerMismatchError,
        match=f"Kernel: Caller should be {int(expected)}, got 42",
    ):
        directory.register(CONTRACT, BackendId(42))
    assert not directory.is_registered(CONTRACT)


def test_recorded_mapping_wins_over_derivation() -> None:
    store = MemoryAccountStore()
    store.set_backend_id(CONTRACT, BackendId(99))
    directory = AccountDirectory(store, DEPLOYER, CLASS_HASH)
    assert directory.resolve(CONTRACT) == BackendId(99)
    assert directory.materialize(CONTRACT) == BackendId(99)


def test_materialize_records_the_derived_id() -> None:
    directory = new_directory()
    assert not directory.is_registered(OTHER)
    backend_id = directory.materialize(OTHER)
    assert backend_id == directory.compute_backend_id(OTHER)
    assert directory.is_registered(OTHER)


def test_create_address() -> None:
    sender = hex_to_address("0x6ac7ea33f8831ea9dcc53393aaa88b25a785dbf0")
    assert compute_contract_address(sender, Uint(0)) == hex_to_address(
        "0xcd234a471b72ba2f1ccf0a70fcaba648a5eecd8d"
    )
    assert compute_contract_address(sender, Uint(1)) == hex_to_address(
        "0x343c43a37d37dff08ae8c4a11544c718abb4fcf8"
    )


@pytest.mark.parametrize(
    "deployer, salt, init_code, expected",
    [
        (
            "0x0000000000000000000000000000000000000000",
            "0x00",
            "0x00",
            "0x4d1a2e2bb4f88f0250f26ffff098b0b30b26bf38",
        ),
        (
            "0xdeadbeef00000000000000000000000000000000",
            "0x00",
            "0x00",
            "0xb928f69bb1d91cd65274e3c79d8986362984fda3",
        ),
        (
            "0x00000000000000000000000000000000deadbeef",
            "0xcafebabe",
            "0xdeadbeef",
            "0x60f3f640a8508fc6a86d45df051962668e1e8ac7",
        ),
        (
            "0x0000000000000000000000000000000000000000",
            "0x00",
            "0x",
            "0xe33c0c7f7df4809055c3eba6c09cfe4baf1bd9e0",
        ),
    ],
)
def test_create2_address(
    deployer: str, salt: str, init_code: str, expected: str
) -> None:
    salt_bytes = Bytes32(hex_to_bytes(salt).rjust(32, b"\x00"))
    code = hex_to_bytes(init_code)
    address = compute_create2_contract_address(
        hex_to_address(deployer), salt_bytes, code
    )
    assert address == hex_to_address(expected)
    assert address == deployment_address(
        hex_to_address(deployer), salt_bytes, keccak256(code), True
    )


def test_deployment_address_with_create() -> None:
    sender = hex_to_address("0x6ac7ea33f8831ea9dcc53393aaa88b25a785dbf0")
    assert deployment_address(
        sender, Uint(0), keccak256(b""), False
    ) == compute_contract_address(sender, Uint(0))
