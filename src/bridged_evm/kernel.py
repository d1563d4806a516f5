"""
Kernel
^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

The entrypoints a host exposes: executing and simulating transactions,
bridging EVM addresses to backend accounts, and the owner-only
administration of the configuration kept in the `AccountStore`.

Every failure of an administrative or account entrypoint is raised before
the store is written.
"""

import logging
from typing import FrozenSet, Optional, Tuple, Union

from ethereum_types.bytes import Bytes, Bytes0, Bytes32
from ethereum_types.numeric import U64, U256, Uint

from .access_control import AccessControl, require_owner, require_unpaused
from .config import (
    ACCOUNT_CONTRACT_CLASS_HASH,
    AUTHORIZED_PRECOMPILE_CALLERS,
    BASE_FEE,
    BLOCK_GAS_LIMIT,
    CHAIN_ID,
    COINBASE,
    NATIVE_TOKEN,
    OWNER,
    PAUSED,
    PREV_RANDAO,
    UNINITIALIZED_ACCOUNT_CLASS_HASH,
    ChainConfig,
    get_int,
    load_chain_config,
)
from .crypto.hash import Hash32
from .directory import AccountDirectory
from .exceptions import (
    AccountAlreadyRegisteredError,
    ChainIdAlreadyInitializedError,
    InvalidTransaction,
)
from .fork import ExecutionResult, build_environment, process_transaction
from .fork_types import EMPTY_ACCOUNT, Address, BackendId
from .state import State, commit_to_store, discard_changes, get_account
from .store import AccountStore
from .transactions import (
    AccessList,
    AnyTransaction,
    UnsignedAccessListTransaction,
    decode_transaction,
    decode_unsigned_transaction,
    recover_sender,
)
from .validation import (
    AdmissionContext,
    AdmittedTransaction,
    admit_transaction,
)

logger = logging.getLogger(__name__)

PrecompileAuthorization = Tuple[BackendId, Address]


class Kernel:
    """
    Facade over an `AccountStore`.

    Parameters
    ----------
    store :
        Backend holding accounts, storage, the address registry and the
        configuration.
    owner :
        Backend account allowed to administer the kernel. Only used when the
        store has no owner recorded yet.
    deployer :
        Backend identifier of the kernel itself, part of every derived
        backend identifier.
    """

    def __init__(
        self,
        store: AccountStore,
        owner: BackendId,
        deployer: BackendId = BackendId(0),
    ) -> None:
        self.store = store
        self.deployer = deployer
        self.block_number = Uint(0)
        self.block_timestamp = U256(0)
        self.block_hashes: Tuple[Hash32, ...] = ()
        if store.get_config(OWNER) is None:
            store.set_config(OWNER, int(owner))

    @property
    def access_control(self) -> AccessControl:
        """
        Current owner and pause flag, as recorded in the store.
        """
        return AccessControl(
            owner=BackendId(get_int(self.store, OWNER)),
            paused=bool(get_int(self.store, PAUSED)),
        )

    @property
    def directory(self) -> AccountDirectory:
        """
        Directory deriving backend identifiers with the current
        uninitialized account class.
        """
        return AccountDirectory(
            self.store,
            self.deployer,
            U256(get_int(self.store, UNINITIALIZED_ACCOUNT_CLASS_HASH)),
        )

    def chain_config(self) -> ChainConfig:
        """
        Snapshot of the configuration for the next transaction.
        """
        return load_chain_config(
            self.store,
            number=self.block_number,
            time=self.block_timestamp,
            block_hashes=list(self.block_hashes),
        )

    def _new_state(self) -> State:
        return State(store=self.store, directory=self.directory)

    # Execution

    def eth_chain_id(self) -> U64:
        """
        Chain id transactions must be bound to.
        """
        return U64(get_int(self.store, CHAIN_ID))

    def eth_call(
        self,
        origin: Address,
        to: Union[Bytes0, Address],
        gas_limit: Uint,
        gas_price: Uint,
        value: U256,
        data: Bytes,
        nonce: Optional[U256] = None,
        access_list: AccessList = (),
    ) -> ExecutionResult:
        """
        Execute a transaction from `origin` without persisting anything.

        The transaction goes through the same admission checks as a real
        one. When `nonce` is omitted the current nonce of `origin` is used.
        """
        config = self.chain_config()
        state = self._new_state()
        if nonce is None:
            nonce = U256(get_account(state, origin).nonce)

        tx = UnsignedAccessListTransaction(
            chain_id=config.chain_id,
            nonce=nonce,
            gas_price=gas_price,
            gas=gas_limit,
            to=to,
            value=value,
            data=data,
            access_list=access_list,
        )
        admitted = self._admit(tx, origin, state, config)
        try:
            return self._execute(admitted, state, config)
        finally:
            discard_changes(state)

    def eth_send_raw_unsigned_tx(
        self, raw: Bytes, sender: Address
    ) -> ExecutionResult:
        """
        Decode, admit and execute an unsigned transaction on behalf of
        `sender`, persisting its effects.

        Raises
        ------
        PausedError
            The kernel is paused. Nothing is decoded.
        TransactionDecodingError
            `raw` is not a transaction payload.
        InvalidTransaction
            An admission check failed.
        """
        require_unpaused(self.access_control)
        tx = decode_unsigned_transaction(raw)
        return self._send(tx, sender)

    def eth_send_raw_transaction(self, raw: Bytes) -> ExecutionResult:
        """
        Decode a signed transaction, recover its sender, then admit and
        execute it, persisting its effects.

        Raises
        ------
        PausedError
            The kernel is paused. Nothing is decoded.
        TransactionDecodingError
            `raw` is not a signed transaction envelope.
        InvalidSignatureError
            The sender cannot be recovered.
        InvalidTransaction
            An admission check failed.
        """
        require_unpaused(self.access_control)
        tx = decode_transaction(raw)
        try:
            sender = recover_sender(self.eth_chain_id(), tx)
        except InvalidTransaction as error:
            logger.info("rejected signed transaction: %s", error)
            raise
        return self._send(tx, sender)

    def _send(self, tx: AnyTransaction, sender: Address) -> ExecutionResult:
        config = self.chain_config()
        state = self._new_state()
        admitted = self._admit(tx, sender, state, config)
        result = self._execute(admitted, state, config)
        commit_to_store(state)
        return result

    def _admit(
        self,
        tx: AnyTransaction,
        sender: Address,
        state: State,
        config: ChainConfig,
    ) -> AdmittedTransaction:
        account = get_account(state, sender)
        context = AdmissionContext(
            chain_id=config.chain_id,
            block_gas_limit=config.block_gas_limit,
            base_fee_per_gas=config.base_fee_per_gas,
            sender_nonce=account.nonce,
            sender_balance=account.balance,
        )
        return admit_transaction(tx, sender, context)

    def _execute(
        self, admitted: AdmittedTransaction, state: State, config: ChainConfig
    ) -> ExecutionResult:
        env = build_environment(
            config, state, admitted.sender, admitted.effective_gas_price
        )
        return process_transaction(env, admitted)

    # Accounts

    def compute_backend_address(self, evm_address: Address) -> BackendId:
        """
        Backend identifier derived for `evm_address`, whether or not it has
        been deployed.
        """
        return self.directory.compute_backend_id(evm_address)

    def register_account(
        self, evm_address: Address, caller: BackendId
    ) -> BackendId:
        """
        Record that the backend account `caller` stands for `evm_address`.
        """
        require_unpaused(self.access_control)
        return self.directory.register(evm_address, caller)

    def deploy_externally_owned_account(
        self, evm_address: Address
    ) -> BackendId:
        """
        Create the backend account of `evm_address` ahead of its first
        transaction.

        Raises
        ------
        PausedError
            The kernel is paused.
        AccountAlreadyRegisteredError
            A backend account is already recorded for `evm_address`.
        """
        require_unpaused(self.access_control)
        directory = self.directory
        if directory.is_registered(evm_address):
            raise AccountAlreadyRegisteredError()

        backend_id = directory.materialize(evm_address)
        if self.store.get_account(backend_id) is None:
            self.store.set_account(backend_id, EMPTY_ACCOUNT)
        logger.info(
            "deployed account for 0x%s at %#x",
            evm_address.hex(),
            int(backend_id),
        )
        return backend_id

    # Administration

    def _set(self, caller: BackendId, key: str, value: object) -> None:
        require_owner(self.access_control, caller)
        self.store.set_config(key, value)
        logger.info("%s set to %r", key, value)

    def initialize_chain_id(self, caller: BackendId, chain_id: U64) -> None:
        """
        Set the chain id. It can only be set once.

        Raises
        ------
        OwnershipError
            `caller` is not the owner.
        ChainIdAlreadyInitializedError
            A chain id is already recorded.
        """
        require_owner(self.access_control, caller)
        if self.store.get_config(CHAIN_ID) is not None:
            raise ChainIdAlreadyInitializedError()
        self._set(caller, CHAIN_ID, int(chain_id))

    def set_native_token(self, caller: BackendId, token: BackendId) -> None:
        """
        Set the backend token that balances are denominated in.
        """
        self._set(caller, NATIVE_TOKEN, int(token))

    def get_native_token(self) -> BackendId:
        """
        Backend token that balances are denominated in.
        """
        return BackendId(get_int(self.store, NATIVE_TOKEN))

    def set_base_fee(self, caller: BackendId, base_fee: Uint) -> None:
        """
        Set the base fee per gas of the following transactions.
        """
        self._set(caller, BASE_FEE, int(base_fee))

    def set_coinbase(self, caller: BackendId, coinbase: Address) -> None:
        """
        Set the address receiving priority fees.
        """
        self._set(caller, COINBASE, bytes(coinbase))

    def set_prev_randao(self, caller: BackendId, prev_randao: Bytes32) -> None:
        """
        Set the value returned by PREVRANDAO.
        """
        self._set(caller, PREV_RANDAO, bytes(prev_randao))

    def set_block_gas_limit(
        self, caller: BackendId, block_gas_limit: Uint
    ) -> None:
        """
        Set the largest gas limit a transaction may ask for.
        """
        self._set(caller, BLOCK_GAS_LIMIT, int(block_gas_limit))

    def set_account_contract_class_hash(
        self, caller: BackendId, class_hash: U256
    ) -> None:
        """
        Set the class the backend accounts are upgraded to.
        """
        self._set(caller, ACCOUNT_CONTRACT_CLASS_HASH, int(class_hash))

    def set_uninitialized_account_class_hash(
        self, caller: BackendId, class_hash: U256
    ) -> None:
        """
        Set the class backend accounts are deployed with. It takes part in
        backend identifier derivation.
        """
        self._set(caller, UNINITIALIZED_ACCOUNT_CLASS_HASH, int(class_hash))

    def set_authorized_precompile_caller(
        self,
        caller: BackendId,
        precompile_caller: BackendId,
        precompile_address: Address,
        authorized: bool,
    ) -> None:
        """
        Allow or forbid `precompile_caller` to call the precompile at
        `precompile_address`.
        """
        pair = (precompile_caller, precompile_address)
        pairs = set(self._authorized_precompile_callers())
        if authorized:
            pairs.add(pair)
        else:
            pairs.discard(pair)
        self._set(caller, AUTHORIZED_PRECOMPILE_CALLERS, frozenset(pairs))

    def is_authorized_precompile_caller(
        self, precompile_caller: BackendId, precompile_address: Address
    ) -> bool:
        """
        Whether `precompile_caller` may call the precompile at
        `precompile_address`.
        """
        pair = (precompile_caller, precompile_address)
        return pair in self._authorized_precompile_callers()

    def _authorized_precompile_callers(
        self,
    ) -> FrozenSet[PrecompileAuthorization]:
        pairs = self.store.get_config(AUTHORIZED_PRECOMPILE_CALLERS)
        if pairs is None:
            return frozenset()
        assert isinstance(pairs, frozenset)
        return pairs

    def pause(self, caller: BackendId) -> None:
        """
        Block every state mutating entrypoint.
        """
        self._set(caller, PAUSED, 1)

    def unpause(self, caller: BackendId) -> None:
        """
        Lift a pause.
        """
        self._set(caller, PAUSED, 0)

    def transfer_ownership(
        self, caller: BackendId, new_owner: BackendId
    ) -> None:
        """
        Hand the administration of the kernel to `new_owner`.
        """
        self._set(caller, OWNER, int(new_owner))
