"""
Error types raised by the engine.

Admission errors carry the fixed messages that callers match on, so each
subclass of `InvalidTransaction` supplies its own text.
"""

from typing import Any


class EthereumException(Exception):
    """
    Base class for all exceptions _expected_ to be thrown during normal
    operation.
    """


class InvalidTransaction(EthereumException):
    """
    Thrown when a transaction being processed is found to be invalid.
    """

    message = "Invalid transaction"

    def __init__(self, *args: Any) -> None:
        super().__init__(*(args or (self.message,)))


class TransactionDecodingError(InvalidTransaction):
    """
    Thrown when the raw transaction bytes cannot be decoded.
    """

    message = "Transaction decoding failed"


class InvalidSignatureError(InvalidTransaction):
    """
    Thrown when a transaction has an invalid signature.
    """

    message = "Invalid signature"


class InvalidChainIdError(InvalidTransaction):
    """
    Thrown when a typed transaction targets another chain.
    """

    message = "Invalid chain id"


class GasLimitTooHighError(InvalidTransaction):
    """
    Thrown when the gas limit does not fit in 64 bits.
    """

    message = "Gas limit too high"


class MaxFeePerGasTooHighError(InvalidTransaction):
    """
    Thrown when the fee cap does not fit in 128 bits.
    """

    message = "Max fee per gas too high"


class PriorityFeeGreaterThanMaxFeeError(InvalidTransaction):
    """
    Thrown when a transaction's priority fee is greater than its fee cap.
    """

    message = "Max priority fee greater than max fee per gas"


class NonceMismatchError(InvalidTransaction):
    """
    Thrown when a transaction's nonce does not match the expected nonce for the
    sender.
    """

    message = "Invalid nonce"


class GasLimitExceedsBlockError(InvalidTransaction):
    """
    Thrown when a transaction asks for more gas than the block allows.
    """

    message = "Transaction gas_limit > Block gas_limit"


class InsufficientMaxFeePerGasError(InvalidTransaction):
    """
    Thrown when the fee cap of a transaction is below the block base fee.
    """

    message = "Max fee per gas too low"


class InsufficientBalanceError(InvalidTransaction):
    """
    Thrown when a transaction cannot be executed due to insufficient sender
    funds.
    """

    message = "Not enough ETH to pay msg.value + max gas fees"


class KernelError(EthereumException):
    """
    Base class for failures of the administrative and account lifecycle
    entrypoints. These are raised before any state is touched.
    """


class OwnershipError(KernelError):
    """
    Thrown when an owner-only entrypoint is invoked by someone else.
    """

    def __init__(self) -> None:
        super().__init__("Ownable: caller is not the owner")


class PausedError(KernelError):
    """
    Thrown by state mutating entrypoints while the kernel is paused.
    """

    def __init__(self) -> None:
        super().__init__("Pausable: paused")


class ChainIdAlreadyInitializedError(KernelError):
    """
    Thrown on a second attempt to set the chain id.
    """

    def __init__(self) -> None:
        super().__init__("Kernel: chain_id already initialized")


class AccountAlreadyRegisteredError(KernelError):
    """
    Thrown when an EVM address already has a backend account recorded.
    """

    def __init__(self) -> None:
        super().__init__("Kernel: account already registered")


class CallerMismatchError(KernelError):
    """
    Thrown when an account registration does not come from the backend
    account derived for that address.
    """

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Kernel: Caller should be {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual
