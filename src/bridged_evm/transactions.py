"""
Transactions are atomic units of work created externally and submitted to be
executed. Each one is either signed (the sender is recovered from the
signature) or unsigned, in which case the host vouches for the sender.

Three envelopes are understood: legacy, EIP-2930 access lists (type `0x01`)
and EIP-1559 fee market (type `0x02`). Blob transactions are not.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ethereum_rlp import rlp
from ethereum_rlp.exceptions import DecodingError
from ethereum_types.bytes import Bytes, Bytes0, Bytes32
from ethereum_types.frozen import slotted_freezable
from ethereum_types.numeric import U64, U256, Uint

from .crypto.elliptic_curve import (
    SECP256K1N,
    secp256k1_recover,
    secp256k1_sign,
)
from .crypto.hash import Hash32, keccak256
from .exceptions import InvalidSignatureError, TransactionDecodingError
from .fork_types import Address

TX_BASE_COST = 21000
TX_DATA_COST_PER_NON_ZERO = 16
TX_DATA_COST_PER_ZERO = 4
TX_CREATE_COST = 32000
TX_ACCESS_LIST_ADDRESS_COST = 2400
TX_ACCESS_LIST_STORAGE_KEY_COST = 1900

AccessList = Tuple[Tuple[Address, Tuple[Bytes32, ...]], ...]


@slotted_freezable
@dataclass
class LegacyTransaction:
    """
    Atomic operation performed on the block chain.
    """

    nonce: U256
    gas_price: Uint
    gas: Uint
    to: Union[Bytes0, Address]
    value: U256
    data: Bytes
    v: U256
    r: U256
    s: U256


@slotted_freezable
@dataclass
class AccessListTransaction:
    """
    The transaction type added in EIP-2930 to support access lists.
    """

    chain_id: U64
    nonce: U256
    gas_price: Uint
    gas: Uint
    to: Union[Bytes0, Address]
    value: U256
    data: Bytes
    access_list: AccessList
    y_parity: U256
    r: U256
    s: U256


@slotted_freezable
@dataclass
class FeeMarketTransaction:
    """
    The transaction type added in EIP-1559.
    """

    chain_id: U64
    nonce: U256
    max_priority_fee_per_gas: Uint
    max_fee_per_gas: Uint
    gas: Uint
    to: Union[Bytes0, Address]
    value: U256
    data: Bytes
    access_list: AccessList
    y_parity: U256
    r: U256
    s: U256


@slotted_freezable
@dataclass
class UnsignedLegacyTransaction:
    """
    Signing payload of a legacy transaction without replay protection.
    """

    nonce: U256
    gas_price: Uint
    gas: Uint
    to: Union[Bytes0, Address]
    value: U256
    data: Bytes


@slotted_freezable
@dataclass
class UnsignedLegacyTransaction155:
    """
    Signing payload of a legacy transaction bound to a chain (EIP-155). The
    two trailing fields are always zero.
    """

    nonce: U256
    gas_price: Uint
    gas: Uint
    to: Union[Bytes0, Address]
    value: U256
    data: Bytes
    chain_id: U64
    zero_r: Uint
    zero_s: Uint


@slotted_freezable
@dataclass
class UnsignedAccessListTransaction:
    """
    Signing payload of an EIP-2930 transaction.
    """

    chain_id: U64
    nonce: U256
    gas_price: Uint
    gas: Uint
    to: Union[Bytes0, Address]
    value: U256
    data: Bytes
    access_list: AccessList


@slotted_freezable
@dataclass
class UnsignedFeeMarketTransaction:
    """
    Signing payload of an EIP-1559 transaction.
    """

    chain_id: U64
    nonce: U256
    max_priority_fee_per_gas: Uint
    max_fee_per_gas: Uint
    gas: Uint
    to: Union[Bytes0, Address]
    value: U256
    data: Bytes
    access_list: AccessList


Transaction = Union[
    LegacyTransaction,
    AccessListTransaction,
    FeeMarketTransaction,
]

UnsignedTransaction = Union[
    UnsignedLegacyTransaction,
    UnsignedLegacyTransaction155,
    UnsignedAccessListTransaction,
    UnsignedFeeMarketTransaction,
]

AnyTransaction = Union[Transaction, UnsignedTransaction]


def encode_transaction(tx: AnyTransaction) -> Bytes:
    """
    Serialize a transaction, signed or not, prefixing typed envelopes with
    their type byte.
    """
    if isinstance(
        tx, (AccessListTransaction, UnsignedAccessListTransaction)
    ):
        return b"\x01" + rlp.encode(tx)
    elif isinstance(
        tx, (FeeMarketTransaction, UnsignedFeeMarketTransaction)
    ):
        return b"\x02" + rlp.encode(tx)
    else:
        return rlp.encode(tx)


def _decode(raw: Bytes, cls: type) -> AnyTransaction:
    try:
        return rlp.decode_to(cls, raw)
    except (DecodingError, ValueError, TypeError) as e:
        raise TransactionDecodingError from e


def decode_transaction(raw: Bytes) -> Transaction:
    """
    Decode a signed transaction envelope.

    Raises
    ------
    TransactionDecodingError
        Unknown type byte or malformed RLP.
    """
    if len(raw) == 0:
        raise TransactionDecodingError
    if raw[0] == 1:
        return _decode(raw[1:], AccessListTransaction)
    elif raw[0] == 2:
        return _decode(raw[1:], FeeMarketTransaction)
    elif raw[0] >= 0xC0:
        return _decode(raw, LegacyTransaction)
    raise TransactionDecodingError(f"Unknown transaction type {raw[0]}")


def decode_unsigned_transaction(raw: Bytes) -> UnsignedTransaction:
    """
    Decode the signing payload of a transaction, as produced by
    `encode_transaction` on one of the unsigned types.

    Raises
    ------
    TransactionDecodingError
        Unknown type byte or malformed RLP.
    """
    if len(raw) == 0:
        raise TransactionDecodingError
    if raw[0] == 1:
        return _decode(raw[1:], UnsignedAccessListTransaction)
    elif raw[0] == 2:
        return _decode(raw[1:], UnsignedFeeMarketTransaction)
    elif raw[0] < 0xC0:
        raise TransactionDecodingError(f"Unknown transaction type {raw[0]}")

    try:
        fields = rlp.decode(raw)
    except DecodingError as e:
        raise TransactionDecodingError from e
    if not isinstance(fields, list):
        raise TransactionDecodingError
    if len(fields) == 9:
        return _decode(raw, UnsignedLegacyTransaction155)
    return _decode(raw, UnsignedLegacyTransaction)


def transaction_chain_id(tx: AnyTransaction) -> Optional[U64]:
    """
    Chain a typed or EIP-155 payload is bound to, `None` for anything else.
    """
    if isinstance(tx, LegacyTransaction):
        if tx.v < U256(35):
            return None
        return U64((int(tx.v) - 35) // 2)
    if isinstance(tx, UnsignedLegacyTransaction):
        return None
    return tx.chain_id


def is_typed(tx: AnyTransaction) -> bool:
    """
    Whether `tx` uses an EIP-2718 typed envelope.
    """
    return not isinstance(
        tx,
        (
            LegacyTransaction,
            UnsignedLegacyTransaction,
            UnsignedLegacyTransaction155,
        ),
    )


def max_fee_per_gas(tx: AnyTransaction) -> Uint:
    """
    Most the sender pays per unit of gas: the fee cap, or the gas price for
    transactions without one.
    """
    if isinstance(tx, (FeeMarketTransaction, UnsignedFeeMarketTransaction)):
        return tx.max_fee_per_gas
    return tx.gas_price


def max_priority_fee_per_gas(tx: AnyTransaction) -> Uint:
    """
    Most the coinbase receives per unit of gas. Transactions without a
    separate tip offer their whole gas price.
    """
    if isinstance(tx, (FeeMarketTransaction, UnsignedFeeMarketTransaction)):
        return tx.max_priority_fee_per_gas
    return tx.gas_price


def transaction_access_list(tx: AnyTransaction) -> AccessList:
    """
    Pre-declared accessed addresses and storage keys, empty for legacy
    transactions.
    """
    if is_typed(tx):
        return tx.access_list  # type: ignore[union-attr]
    return ()


def calculate_intrinsic_cost(tx: AnyTransaction) -> Uint:
    """
    Calculates the gas that is charged before execution is started.

    The intrinsic cost of the transaction is charged before execution has
    begun. It pays for the call data (per byte, cheaper for zero bytes), for
    contract creation including the init code words (EIP-3860) and for the
    pre-declared access list.

    Parameters
    ----------
    tx :
        Transaction to compute the intrinsic cost of.

    Returns
    -------
    verified : `ethereum_types.numeric.Uint`
        The intrinsic cost of the transaction.
    """
    from .vm.gas import init_code_cost

    data_cost = 0

    for byte in tx.data:
        if byte == 0:
            data_cost += TX_DATA_COST_PER_ZERO
        else:
            data_cost += TX_DATA_COST_PER_NON_ZERO

    if tx.to == Bytes0(b""):
        create_cost = TX_CREATE_COST + int(init_code_cost(Uint(len(tx.data))))
    else:
        create_cost = 0

    access_list_cost = 0
    for _address, keys in transaction_access_list(tx):
        access_list_cost += TX_ACCESS_LIST_ADDRESS_COST
        access_list_cost += len(keys) * TX_ACCESS_LIST_STORAGE_KEY_COST

    return Uint(TX_BASE_COST + data_cost + create_cost + access_list_cost)


def recover_sender(chain_id: U64, tx: Transaction) -> Address:
    """
    Extracts the sender address from a transaction.

    The v, r, and s values are the three parts that make up the signature
    of a transaction. In order to recover the sender of a transaction the two
    components needed are the signature (``v``, ``r``, and ``s``) and the
    signing hash of the transaction. The sender's public key can be obtained
    with these two values and therefore the sender address can be retrieved.

    Parameters
    ----------
    tx :
        Transaction of interest.
    chain_id :
        ID of the executing chain.

    Returns
    -------
    sender : `bridged_evm.fork_types.Address`
        The address of the account that signed the transaction.
    """
    r, s = tx.r, tx.s
    if U256(0) >= r or r >= SECP256K1N:
        raise InvalidSignatureError("bad r")
    if U256(0) >= s or s > SECP256K1N // U256(2):
        raise InvalidSignatureError("bad s")

    if isinstance(tx, LegacyTransaction):
        v = tx.v
        if v == 27 or v == 28:
            public_key = secp256k1_recover(
                r, s, v - U256(27), signing_hash_pre155(tx)
            )
        else:
            chain_id_x2 = U256(chain_id) * U256(2)
            if v != U256(35) + chain_id_x2 and v != U256(36) + chain_id_x2:
                raise InvalidSignatureError("bad v")
            public_key = secp256k1_recover(
                r,
                s,
                v - U256(35) - chain_id_x2,
                signing_hash_155(tx, chain_id),
            )
    elif isinstance(tx, AccessListTransaction):
        if tx.y_parity > U256(1):
            raise InvalidSignatureError("bad y_parity")
        public_key = secp256k1_recover(
            r, s, tx.y_parity, signing_hash_2930(tx)
        )
    elif isinstance(tx, FeeMarketTransaction):
        if tx.y_parity > U256(1):
            raise InvalidSignatureError("bad y_parity")
        public_key = secp256k1_recover(
            r, s, tx.y_parity, signing_hash_1559(tx)
        )

    return Address(keccak256(public_key)[12:32])


def signing_hash_pre155(
    tx: Union[LegacyTransaction, UnsignedLegacyTransaction]
) -> Hash32:
    """
    Compute the hash of a transaction used in a legacy (pre EIP-155)
    signature.
    """
    return keccak256(
        rlp.encode(
            (
                tx.nonce,
                tx.gas_price,
                tx.gas,
                tx.to,
                tx.value,
                tx.data,
            )
        )
    )


def signing_hash_155(
    tx: Union[LegacyTransaction, UnsignedLegacyTransaction155], chain_id: U64
) -> Hash32:
    """
    Compute the hash of a transaction used in a EIP-155 signature.
    """
    return keccak256(
        rlp.encode(
            (
                tx.nonce,
                tx.gas_price,
                tx.gas,
                tx.to,
                tx.value,
                tx.data,
                chain_id,
                Uint(0),
                Uint(0),
            )
        )
    )


def signing_hash_2930(
    tx: Union[AccessListTransaction, UnsignedAccessListTransaction]
) -> Hash32:
    """
    Compute the hash of a transaction used in a EIP-2930 signature.
    """
    return keccak256(
        b"\x01"
        + rlp.encode(
            (
                tx.chain_id,
                tx.nonce,
                tx.gas_price,
                tx.gas,
                tx.to,
                tx.value,
                tx.data,
                tx.access_list,
            )
        )
    )


def signing_hash_1559(
    tx: Union[FeeMarketTransaction, UnsignedFeeMarketTransaction]
) -> Hash32:
    """
    Compute the hash of a transaction used in a EIP-1559 signature.
    """
    return keccak256(
        b"\x02"
        + rlp.encode(
            (
                tx.chain_id,
                tx.nonce,
                tx.max_priority_fee_per_gas,
                tx.max_fee_per_gas,
                tx.gas,
                tx.to,
                tx.value,
                tx.data,
                tx.access_list,
            )
        )
    )


def sign_transaction(tx: UnsignedTransaction, secret_key: int) -> Transaction:
    """
    Sign `tx` with `secret_key`, producing the matching signed envelope.
    """
    if isinstance(tx, UnsignedLegacyTransaction):
        r, s, v = secp256k1_sign(signing_hash_pre155(tx), secret_key)
        return LegacyTransaction(
            nonce=tx.nonce,
            gas_price=tx.gas_price,
            gas=tx.gas,
            to=tx.to,
            value=tx.value,
            data=tx.data,
            v=U256(27) + v,
            r=r,
            s=s,
        )
    elif isinstance(tx, UnsignedLegacyTransaction155):
        r, s, v = secp256k1_sign(signing_hash_155(tx, tx.chain_id), secret_key)
        return LegacyTransaction(
            nonce=tx.nonce,
            gas_price=tx.gas_price,
            gas=tx.gas,
            to=tx.to,
            value=tx.value,
            data=tx.data,
            v=U256(35) + U256(tx.chain_id) * U256(2) + v,
            r=r,
            s=s,
        )
    elif isinstance(tx, UnsignedAccessListTransaction):
        r, s, v = secp256k1_sign(signing_hash_2930(tx), secret_key)
        return AccessListTransaction(
            chain_id=tx.chain_id,
            nonce=tx.nonce,
            gas_price=tx.gas_price,
            gas=tx.gas,
            to=tx.to,
            value=tx.value,
            data=tx.data,
            access_list=tx.access_list,
            y_parity=v,
            r=r,
            s=s,
        )
    else:
        r, s, v = secp256k1_sign(signing_hash_1559(tx), secret_key)
        return FeeMarketTransaction(
            chain_id=tx.chain_id,
            nonce=tx.nonce,
            max_priority_fee_per_gas=tx.max_priority_fee_per_gas,
            max_fee_per_gas=tx.max_fee_per_gas,
            gas=tx.gas,
            to=tx.to,
            value=tx.value,
            data=tx.data,
            access_list=tx.access_list,
            y_parity=v,
            r=r,
            s=s,
        )
