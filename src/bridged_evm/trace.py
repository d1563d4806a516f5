"""
Events emitted while the EVM runs, in the spirit of EIP-3155.

The interpreter reports every event through `evm_trace`.
By default events are discarded; `set_evm_trace(log_evm_trace)` sends them
to the `bridged_evm.trace` logger instead.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from .exceptions import EthereumException

logger = logging.getLogger(__name__)


@dataclass
class TransactionStart:
    """
    Trace event that is triggered at the start of a transaction.
    """


@dataclass
class TransactionEnd:
    """
    Trace event that is triggered at the end of a transaction.
    """

    gas_used: int
    output: bytes
    error: Optional[EthereumException]


@dataclass
class PrecompileStart:
    """
    Trace event that is triggered before executing a precompile.
    """

    address: bytes


@dataclass
class PrecompileEnd:
    """
    Trace event that is triggered after executing a precompile.
    """


@dataclass
class OpStart:
    """
    Trace event that is triggered before executing an opcode.
    """

    op: enum.Enum


@dataclass
class OpEnd:
    """
    Trace event that is triggered after executing an opcode.
    """


@dataclass
class OpException:
    """
    Trace event that is triggered when an opcode raises an exception.
    """

    error: Exception


@dataclass
class EvmStop:
    """
    Trace event that is triggered when the EVM stops.
    """

    op: enum.Enum


@dataclass
class GasAndRefund:
    """
    Trace event that is triggered when gas is deducted.
    """

    gas_cost: int


TraceEvent = Union[
    TransactionStart,
    TransactionEnd,
    PrecompileStart,
    PrecompileEnd,
    OpStart,
    OpEnd,
    OpException,
    EvmStop,
    GasAndRefund,
]


class EvmTracer(Protocol):
    """
    Callable receiving the live frame and the event that triggered it.
    """

    def __call__(self, evm: object, event: TraceEvent, /) -> None:
        """
        Record `event` raised while running `evm`.
        """


def discard_evm_trace(evm: object, event: TraceEvent, /) -> None:
    """
    An `EvmTracer` that discards all events.
    """


def log_evm_trace(evm: object, event: TraceEvent, /) -> None:
    """
    An `EvmTracer` writing one DEBUG record per event, with the program
    counter, remaining gas and depth of the frame for opcode events.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    if isinstance(event, OpStart):
        logger.debug(
            "pc=%s op=%s gas=%s depth=%s",
            getattr(evm, "pc", None),
            event.op.name,
            getattr(evm, "gas_left", None),
            getattr(getattr(evm, "message", None), "depth", None),
        )
    elif isinstance(event, (OpEnd, GasAndRefund)):
        return
    else:
        logger.debug("%r", event)


_active_tracer: EvmTracer = discard_evm_trace


def evm_trace(evm: object, event: TraceEvent, /) -> None:
    """
    Forward `event` to the active tracer.
    """
    _active_tracer(evm, event)


def set_evm_trace(tracer: EvmTracer) -> EvmTracer:
    """
    Install `tracer` as the active tracer and return the previous one.
    """
    global _active_tracer
    previous = _active_tracer
    _active_tracer = tracer
    return previous
