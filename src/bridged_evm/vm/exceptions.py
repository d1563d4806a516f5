"""
Ethereum Virtual Machine (EVM) Exceptions
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Exceptions which cause the EVM to halt exceptionally, and the `Revert`
outcome. None of them escape the interpreter: they end the frame that raised
them and are stored on it.
"""

from ..exceptions import EthereumException


class ExceptionalHalt(EthereumException):
    """
    Indicates that the EVM has experienced an exceptional halt. This causes
    execution to immediately end with all gas being consumed.
    """


class Revert(EthereumException):
    """
    Raised by the `REVERT` opcode, and used for failing precompiles.

    Unlike other EVM exceptions this does not result in the consumption of all
    gas.
    """


class StackUnderflowError(ExceptionalHalt):
    """
    Occurs when a pop is executed on an empty stack.
    """


class StackOverflowError(ExceptionalHalt):
    """
    Occurs when a push is executed on a stack at max capacity.
    """


class OutOfGasError(ExceptionalHalt):
    """
    Occurs when an operation costs more than the amount of gas left in the
    frame.
    """


class InvalidOpcode(ExceptionalHalt):
    """
    Raised when an invalid opcode is encountered.
    """

    code: int

    def __init__(self, code: int) -> None:
        super().__init__(f"invalid opcode {code:#04x}")
        self.code = code


class InvalidJumpDestError(ExceptionalHalt):
    """
    Occurs when the destination of a jump operation doesn't meet any of the
    following criteria:

      * The jump destination is less than the length of the code.
      * The jump destination should have the `JUMPDEST` opcode (0x5B).
      * The jump destination shouldn't be part of the data corresponding to
        `PUSH-N` opcodes.
    """


class WriteInStaticContext(ExceptionalHalt):
    """
    Raised when an attempt is made to modify the state while operating inside
    of a STATICCALL context.
    """


class OutOfBoundsRead(ExceptionalHalt):
    """
    Raised when an attempt was made to read data beyond the
    boundaries of the buffer.
    """


class InvalidParameter(ExceptionalHalt):
    """
    Raised when invalid parameters are passed.
    """


class InvalidContractPrefix(ExceptionalHalt):
    """
    Raised when the new contract code starts with 0xEF.
    """


class AddressCollision(ExceptionalHalt):
    """
    Raised when the new contract address has a collision.
    """


class InitCodeTooLarge(ExceptionalHalt):
    """
    Raised when a creation transaction carries more than `2 * MAX_CODE_SIZE`
    bytes of init code.
    """


class IntrinsicGasTooLow(ExceptionalHalt):
    """
    Raised when the gas limit of a transaction does not cover its intrinsic
    cost. Execution never starts.
    """


class PrecompileFailed(Revert):
    """
    Raised when a precompiled contract rejects its input.
    """
