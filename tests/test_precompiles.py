import hashlib
import struct

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
)
from ethereum_types.numeric import U256, Uint

from bridged_evm.crypto.elliptic_curve import secp256k1_sign
from bridged_evm.crypto.hash import keccak256
from bridged_evm.fork_types import Account, Address
from bridged_evm.utils.hexadecimal import hex_to_address, hex_to_bytes
from bridged_evm.vm.exceptions import (
    InvalidParameter,
    OutOfGasError,
    PrecompileFailed,
    Revert,
)
from bridged_evm.vm.interpreter import MessageCallOutput, process_message_call
from bridged_evm.vm.precompiled_contracts import (
    ALT_BN128_ADD_ADDRESS,
    BLAKE2F_ADDRESS,
    IDENTITY_ADDRESS,
    SHA256_ADDRESS,
)
from bridged_evm.vm.precompiled_contracts.alt_bn128 import alt_bn128_add
from bridged_evm.vm.precompiled_contracts.blake2f import blake2f
from bridged_evm.vm.precompiled_contracts.ecrecover import ecrecover
from bridged_evm.vm.precompiled_contracts.identity import (
    identity,
    identity_gas,
)
from bridged_evm.vm.precompiled_contracts.modexp import modexp, modexp_gas
from bridged_evm.vm.precompiled_contracts.p256verify import p256verify
from bridged_evm.vm.precompiled_contracts.ripemd160 import ripemd160
from bridged_evm.vm.precompiled_contracts.sha256 import sha256, sha256_gas
from tests.helpers import (
    SENDER,
    call_message,
    new_environment,
    new_state,
    word,
)


def call_precompile(
    address: Address, data: bytes, gas: int = 100_000
) -> MessageCallOutput:
    state = new_state(
        {SENDER: Account(nonce=Uint(0), balance=U256(10**18), code=b"")}
    )
    env = new_environment(state)
    return process_message_call(
        call_message(env, to=address, data=data, gas=Uint(gas))
    )


def test_sha256() -> None:
    assert sha256(b"") == hex_to_bytes(
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )
    assert sha256_gas(b"") == Uint(60)
    assert sha256_gas(b"\x00" * 33) == Uint(60 + 2 * 12)


def test_ripemd160_is_left_padded() -> None:
    assert ripemd160(b"") == b"\x00" * 12 + hex_to_bytes(
        "9c1185a5c5e9fc54612808977ee8f548b2258d31"
    )


def test_identity() -> None:
    assert identity(b"\x01\x02\x03") == b"\x01\x02\x03"
    assert identity_gas(b"\x00" * 64) == Uint(15 + 2 * 3)


def _ecrecover_input(message_hash: bytes, v: int, r: int, s: int) -> bytes:
    return message_hash + word(v) + word(r) + word(s)


def test_ecrecover() -> None:
    message_hash = keccak256(b"hello")
    r, s, v = secp256k1_sign(message_hash, 1)
    expected = hex_to_address("0x7e5f4552091a69125d5dfcb7b8c2659029395bdf")

    output = ecrecover(_ecrecover_input(message_hash, int(v) + 27, r, s))
    assert output == b"\x00" * 12 + expected


@pytest.mark.parametrize(
    "v, r, s",
    [
        (29, 1, 1),
        (27, 0, 1),
        (28, 1, 0),
        (27, 2**256 - 1, 1),
    ],
)
def test_ecrecover_of_a_malformed_signature_is_empty(
    v: int, r: int, s: int
) -> None:
    assert ecrecover(_ecrecover_input(b"\x00" * 32, v, r, s)) == b""


def _modexp_input(base: bytes, exponent: bytes, modulus: bytes) -> bytes:
    return (
        word(len(base))
        + word(len(exponent))
        + word(len(modulus))
        + base
        + exponent
        + modulus
    )


def test_modexp() -> None:
    data = _modexp_input(b"\x03", b"\x05", b"\x07")
    assert modexp(data) == b"\x05"
    assert modexp_gas(data) == Uint(200)


def test_modexp_with_zero_modulus() -> None:
    assert modexp(_modexp_input(b"\x03", b"\x05", b"\x00\x00")) == b"\x00\x00"


def test_modexp_of_large_exponent_is_priced_per_bit() -> None:
    modulus = b"\xff" * 64
    data = _modexp_input(b"\x02" * 64, b"\xff" * 32, modulus)
    # (64 / 8) ** 2 multiplications times 255 iterations, over 3.
    assert modexp_gas(data) == Uint(64 * 255 // 3)


def test_alt_bn128_add_doubles_the_generator() -> None:
    generator = word(1) + word(2)
    assert alt_bn128_add(generator + generator) == (
        word(
            0x030644E72E131A029B85045B68181585D97816A916871CA8D3C208C16D87CFD3
        )
        + word(
            0x15ED738C0E0A7C92E7845F96B2AE9C0A68A6A449E3538FC7FF3EBF7A5A18A2C4
        )
    )


def test_alt_bn128_add_of_infinity_is_identity() -> None:
    generator = word(1) + word(2)
    assert alt_bn128_add(generator) == generator


def test_point_off_the_curve_reverts_and_keeps_the_charge() -> None:
    bad_point = word(1) + word(3)
    with pytest.raises(InvalidParameter):
        alt_bn128_add(bad_point)

    output = call_precompile(ALT_BN128_ADD_ADDRESS, bad_point)
    assert isinstance(output.error, PrecompileFailed)
    assert isinstance(output.error, Revert)
    assert output.gas_left == Uint(100_000 - 150)
    assert output.return_data == b""


def _blake2f_input(rounds: int, message: bytes, final: bool) -> bytes:
    # The blake2b-512 initial state: no key, 64 byte digest.
    state = [
        0x6A09E667F3BCC908 ^ 0x01010040,
        0xBB67AE8584CAA73B,
        0x3C6EF372FE94F82B,
        0xA54FF53A5F1D36F1,
        0x510E527FADE682D1,
        0x9B05688C2B3E6C1F,
        0x1F83D9ABFB41BD6B,
        0x5BE0CD19137E2179,
    ]
    return (
        struct.pack(">I", rounds)
        + struct.pack("<8Q", *state)
        + message.ljust(128, b"\x00")
        + struct.pack("<2Q", len(message), 0)
        + bytes([final])
    )


def test_blake2f_matches_blake2b() -> None:
    data = _blake2f_input(12, b"abc", True)
    assert len(data) == 213
    assert blake2f(data) == hashlib.blake2b(b"abc").digest()


@pytest.mark.parametrize(
    "data",
    [
        b"",
        _blake2f_input(12, b"abc", True)[:-1],
        _blake2f_input(12, b"abc", True)[:-1] + b"\x02",
    ],
)
def test_blake2f_rejects_malformed_input(data: bytes) -> None:
    with pytest.raises(InvalidParameter):
        blake2f(data)


def test_blake2f_of_wrong_length_fails_for_free() -> None:
    output = call_precompile(BLAKE2F_ADDRESS, b"\x00" * 10)
    assert isinstance(output.error, PrecompileFailed)
    assert output.gas_left == Uint(100_000)


def _p256_input(message: bytes) -> bytes:
    key = ec.generate_private_key(ec.SECP256R1())
    digest = hashlib.sha256(message).digest()
    signature = key.sign(digest, ec.ECDSA(Prehashed(hashes.SHA256())))
    r, s = decode_dss_signature(signature)
    public = key.public_key().public_numbers()
    return digest + word(r) + word(s) + word(public.x) + word(public.y)


def test_p256verify_accepts_a_valid_signature() -> None:
    assert p256verify(_p256_input(b"bridged")) == word(1)


def test_p256verify_failures_return_empty_output() -> None:
    data = _p256_input(b"bridged")
    tampered = bytes([data[0] ^ 1]) + data[1:]
    assert p256verify(tampered) == b""
    assert p256verify(data[:-1]) == b""
    assert p256verify(data[:32] + word(0) + data[64:]) == b""


def test_precompile_runs_in_its_own_frame() -> None:
    output = call_precompile(IDENTITY_ADDRESS, b"\xaa\xbb")
    assert output.error is None
    assert output.return_data == b"\xaa\xbb"
    assert output.gas_left == Uint(100_000 - 18)


def test_precompile_out_of_gas() -> None:
    output = call_precompile(SHA256_ADDRESS, b"", gas=10)
    assert isinstance(output.error, OutOfGasError)
    assert output.gas_left == Uint(0)
