"""
Named configuration values kept in the `AccountStore`, and the snapshot of
them a transaction executes against.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ethereum_types.bytes import Bytes32
from ethereum_types.numeric import U64, U256, Uint

from .crypto.hash import Hash32
from .fork_types import Address
from .store import AccountStore

OWNER = "owner"
PAUSED = "paused"
CHAIN_ID = "chain_id"
NATIVE_TOKEN = "native_token"
BASE_FEE = "base_fee"
COINBASE = "coinbase"
PREV_RANDAO = "prev_randao"
BLOCK_GAS_LIMIT = "block_gas_limit"
ACCOUNT_CONTRACT_CLASS_HASH = "account_contract_class_hash"
UNINITIALIZED_ACCOUNT_CLASS_HASH = "uninitialized_account_class_hash"
AUTHORIZED_PRECOMPILE_CALLERS = "authorized_precompile_callers"

DEFAULT_BLOCK_GAS_LIMIT = Uint(7_000_000)


@dataclass
class ChainConfig:
    """
    Block level values a transaction executes against.
    """

    chain_id: U64
    base_fee_per_gas: Uint
    block_gas_limit: Uint
    coinbase: Address
    prev_randao: Bytes32
    number: Uint = Uint(0)
    time: U256 = U256(0)
    blob_base_fee: Uint = Uint(1)
    block_hashes: List[Hash32] = field(default_factory=list)


def get_int(store: AccountStore, key: str, default: int = 0) -> int:
    """
    Integer configuration value, `default` when never set.
    """
    value = store.get_config(key)
    if value is None:
        return default
    assert isinstance(value, int)
    return value


def get_bytes(store: AccountStore, key: str, size: int) -> bytes:
    """
    Byte string configuration value, zeroes when never set.
    """
    value = store.get_config(key)
    if value is None:
        return b"\x00" * size
    assert isinstance(value, bytes)
    return value


def load_chain_config(
    store: AccountStore,
    number: Uint = Uint(0),
    time: U256 = U256(0),
    block_hashes: Optional[List[Hash32]] = None,
) -> ChainConfig:
    """
    Snapshot the configuration in `store`. Values never set fall back to
    zero, except the block gas limit which defaults to
    `DEFAULT_BLOCK_GAS_LIMIT`.
    """
    return ChainConfig(
        chain_id=U64(get_int(store, CHAIN_ID)),
        base_fee_per_gas=Uint(get_int(store, BASE_FEE)),
        block_gas_limit=Uint(
            get_int(store, BLOCK_GAS_LIMIT, int(DEFAULT_BLOCK_GAS_LIMIT))
        ),
        coinbase=Address(get_bytes(store, COINBASE, 20)),
        prev_randao=Bytes32(get_bytes(store, PREV_RANDAO, 32)),
        number=number,
        time=time,
        block_hashes=list(block_hashes or []),
    )
