"""
Static analysis of code before it runs.
"""

from typing import Set

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import Uint

OPCODE_JUMPDEST = 0x5B
OPCODE_PUSH1 = 0x60
OPCODE_PUSH32 = 0x7F


def get_valid_jump_destinations(code: Bytes) -> Set[Uint]:
    """
    Offsets of every `JUMPDEST` that is an instruction rather than part of
    the immediate data of a `PUSHn`.
    """
    valid_jump_destinations: Set[Uint] = set()
    pc = 0
    while pc < len(code):
        opcode = code[pc]
        if opcode == OPCODE_JUMPDEST:
            valid_jump_destinations.add(Uint(pc))
        elif OPCODE_PUSH1 <= opcode <= OPCODE_PUSH32:
            pc += opcode - OPCODE_PUSH1 + 1
        pc += 1
    return valid_jump_destinations
