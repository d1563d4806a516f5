"""
EVM Instruction Encoding (Opcodes)
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Machine readable representations of EVM instructions, and a mapping to their
implementations. Any byte missing from `Ops` (including 0xFE, `INVALID`)
halts the frame with `InvalidOpcode`.
"""

import enum
from functools import partial
from typing import Callable, Dict

from . import (
    arithmetic,
    bitwise,
    block,
    comparison,
    control_flow,
    environment,
    keccak,
    log,
    memory,
    stack,
    storage,
    system,
)


class Ops(enum.Enum):
    """
    Enum for EVM Opcodes
    """

    # Arithmetic Ops
    ADD = 0x01
    MUL = 0x02
    SUB = 0x03
    DIV = 0x04
    SDIV = 0x05
    MOD = 0x06
    SMOD = 0x07
    ADDMOD = 0x08
    MULMOD = 0x09
    EXP = 0x0A
    SIGNEXTEND = 0x0B

    # Comparison Ops
    LT = 0x10
    GT = 0x11
    SLT = 0x12
    SGT = 0x13
    EQ = 0x14
    ISZERO = 0x15

    # Bitwise Ops
    AND = 0x16
    OR = 0x17
    XOR = 0x18
    NOT = 0x19
    BYTE = 0x1A
    SHL = 0x1B
    SHR = 0x1C
    SAR = 0x1D

    # Keccak Op
    KECCAK = 0x20

    # Environmental Ops
    ADDRESS = 0x30
    BALANCE = 0x31
    ORIGIN = 0x32
    CALLER = 0x33
    CALLVALUE = 0x34
    CALLDATALOAD = 0x35
    CALLDATASIZE = 0x36
    CALLDATACOPY = 0x37
    CODESIZE = 0x38
    CODECOPY = 0x39
    GASPRICE = 0x3A
    EXTCODESIZE = 0x3B
    EXTCODECOPY = 0x3C
    RETURNDATASIZE = 0x3D
    RETURNDATACOPY = 0x3E
    EXTCODEHASH = 0x3F

    # Block Ops
    BLOCKHASH = 0x40
    COINBASE = 0x41
    TIMESTAMP = 0x42
    NUMBER = 0x43
    PREVRANDAO = 0x44
    GASLIMIT = 0x45
    CHAINID = 0x46
    SELFBALANCE = 0x47
    BASEFEE = 0x48
    BLOBHASH = 0x49
    BLOBBASEFEE = 0x4A

    # Control Flow Ops
    STOP = 0x00
    JUMP = 0x56
    JUMPI = 0x57
    PC = 0x58
    GAS = 0x5A
    JUMPDEST = 0x5B

    # Storage Ops
    SLOAD = 0x54
    SSTORE = 0x55
    TLOAD = 0x5C
    TSTORE = 0x5D

    # Pop Operation
    POP = 0x50

    # Push Operations
    PUSH0 = 0x5F
    PUSH1 = 0x60
    PUSH2 = 0x61
    PUSH3 = 0x62
    PUSH4 = 0x63
    PUSH5 = 0x64
    PUSH6 = 0x65
    PUSH7 = 0x66
    PUSH8 = 0x67
    PUSH9 = 0x68
    PUSH10 = 0x69
    PUSH11 = 0x6A
    PUSH12 = 0x6B
    PUSH13 = 0x6C
    PUSH14 = 0x6D
    PUSH15 = 0x6E
    PUSH16 = 0x6F
    PUSH17 = 0x70
    PUSH18 = 0x71
    PUSH19 = 0x72
    PUSH20 = 0x73
    PUSH21 = 0x74
    PUSH22 = 0x75
    PUSH23 = 0x76
    PUSH24 = 0x77
    PUSH25 = 0x78
    PUSH26 = 0x79
    PUSH27 = 0x7A
    PUSH28 = 0x7B
    PUSH29 = 0x7C
    PUSH30 = 0x7D
    PUSH31 = 0x7E
    PUSH32 = 0x7F

    # Dup operations
    DUP1 = 0x80
    DUP2 = 0x81
    DUP3 = 0x82
    DUP4 = 0x83
    DUP5 = 0x84
    DUP6 = 0x85
    DUP7 = 0x86
    DUP8 = 0x87
    DUP9 = 0x88
    DUP10 = 0x89
    DUP11 = 0x8A
    DUP12 = 0x8B
    DUP13 = 0x8C
    DUP14 = 0x8D
    DUP15 = 0x8E
    DUP16 = 0x8F

    # Swap operations
    SWAP1 = 0x90
    SWAP2 = 0x91
    SWAP3 = 0x92
    SWAP4 = 0x93
    SWAP5 = 0x94
    SWAP6 = 0x95
    SWAP7 = 0x96
    SWAP8 = 0x97
    SWAP9 = 0x98
    SWAP10 = 0x99
    SWAP11 = 0x9A
    SWAP12 = 0x9B
    SWAP13 = 0x9C
    SWAP14 = 0x9D
    SWAP15 = 0x9E
    SWAP16 = 0x9F

    # Memory Operations
    MLOAD = 0x51
    MSTORE = 0x52
    MSTORE8 = 0x53
    MSIZE = 0x59
    MCOPY = 0x5E

    # Log Operations
    LOG0 = 0xA0
    LOG1 = 0xA1
    LOG2 = 0xA2
    LOG3 = 0xA3
    LOG4 = 0xA4

    # System Operations
    CREATE = 0xF0
    CALL = 0xF1
    CALLCODE = 0xF2
    RETURN = 0xF3
    DELEGATECALL = 0xF4
    CREATE2 = 0xF5
    STATICCALL = 0xFA
    REVERT = 0xFD
    SELFDESTRUCT = 0xFF


op_implementation: Dict[Ops, Callable] = {
    Ops.STOP: control_flow.stop,
    Ops.ADD: arithmetic.add,
    Ops.MUL: arithmetic.mul,
    Ops.SUB: arithmetic.sub,
    Ops.DIV: arithmetic.div,
    Ops.SDIV: arithmetic.sdiv,
    Ops.MOD: arithmetic.mod,
    Ops.SMOD: arithmetic.smod,
    Ops.ADDMOD: arithmetic.addmod,
    Ops.MULMOD: arithmetic.mulmod,
    Ops.EXP: arithmetic.exp,
    Ops.SIGNEXTEND: arithmetic.signextend,
    Ops.LT: comparison.less_than,
    Ops.GT: comparison.greater_than,
    Ops.SLT: comparison.signed_less_than,
    Ops.SGT: comparison.signed_greater_than,
    Ops.EQ: comparison.equal,
    Ops.ISZERO: comparison.is_zero,
    Ops.AND: bitwise.bitwise_and,
    Ops.OR: bitwise.bitwise_or,
    Ops.XOR: bitwise.bitwise_xor,
    Ops.NOT: bitwise.bitwise_not,
    Ops.BYTE: bitwise.get_byte,
    Ops.SHL: bitwise.bitwise_shl,
    Ops.SHR: bitwise.bitwise_shr,
    Ops.SAR: bitwise.bitwise_sar,
    Ops.KECCAK: keccak.keccak,
    Ops.SLOAD: storage.sload,
    Ops.BLOCKHASH: block.block_hash,
    Ops.COINBASE: block.coinbase,
    Ops.TIMESTAMP: block.timestamp,
    Ops.NUMBER: block.number,
    Ops.PREVRANDAO: block.prev_randao,
    Ops.GASLIMIT: block.gas_limit,
    Ops.CHAINID: block.chain_id,
    Ops.SELFBALANCE: block.self_balance,
    Ops.BASEFEE: block.base_fee,
    Ops.BLOBHASH: block.blob_hash,
    Ops.BLOBBASEFEE: block.blob_base_fee,
    Ops.MLOAD: memory.mload,
    Ops.MSTORE: memory.mstore,
    Ops.MSTORE8: memory.mstore8,
    Ops.MSIZE: memory.msize,
    Ops.MCOPY: memory.mcopy,
    Ops.ADDRESS: environment.address,
    Ops.BALANCE: environment.balance,
    Ops.ORIGIN: environment.origin,
    Ops.CALLER: environment.caller,
    Ops.CALLVALUE: environment.callvalue,
    Ops.CALLDATALOAD: environment.calldataload,
    Ops.CALLDATASIZE: environment.calldatasize,
    Ops.CALLDATACOPY: environment.calldatacopy,
    Ops.CODESIZE: environment.codesize,
    Ops.CODECOPY: environment.codecopy,
    Ops.GASPRICE: environment.gasprice,
    Ops.EXTCODESIZE: environment.extcodesize,
    Ops.EXTCODECOPY: environment.extcodecopy,
    Ops.RETURNDATASIZE: environment.returndatasize,
    Ops.RETURNDATACOPY: environment.returndatacopy,
    Ops.EXTCODEHASH: environment.extcodehash,
    Ops.SSTORE: storage.sstore,
    Ops.TLOAD: storage.tload,
    Ops.TSTORE: storage.tstore,
    Ops.JUMP: control_flow.jump,
    Ops.JUMPI: control_flow.jumpi,
    Ops.PC: control_flow.pc,
    Ops.GAS: control_flow.gas_left,
    Ops.JUMPDEST: control_flow.jumpdest,
    Ops.POP: stack.pop,
    Ops.CREATE: system.create,
    Ops.RETURN: system.return_,
    Ops.CALL: system.call,
    Ops.CALLCODE: system.callcode,
    Ops.SELFDESTRUCT: system.selfdestruct,
    Ops.STATICCALL: system.staticcall,
    Ops.REVERT: system.revert,
    Ops.DELEGATECALL: system.delegatecall,
    Ops.CREATE2: system.create2,
}

# Opcode families that differ only in an immediate size or stack position.
for _n in range(33):
    op_implementation[Ops[f"PUSH{_n}"]] = partial(stack.push_n, num_bytes=_n)
for _n in range(1, 17):
    op_implementation[Ops[f"DUP{_n}"]] = partial(stack.dup_n, item_number=_n)
    op_implementation[Ops[f"SWAP{_n}"]] = partial(stack.swap_n, item_number=_n)
for _n in range(5):
    op_implementation[Ops[f"LOG{_n}"]] = partial(log.log_n, num_topics=_n)
