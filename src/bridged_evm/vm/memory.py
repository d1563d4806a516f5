"""
Byte addressable memory of a call frame.

Memory only grows after the expansion has been paid for (see
`bridged_evm.vm.gas.calculate_gas_extend_memory`), so reads and writes here
never need bounds checks.
"""

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U256, Uint

from ..utils.byte import right_pad_zero_bytes


def memory_write(
    memory: bytearray, start_position: U256, value: Bytes
) -> None:
    """
    Copy `value` into memory at `start_position`.
    """
    start = int(start_position)
    memory[start : start + len(value)] = value


def memory_read_bytes(
    memory: bytearray, start_position: U256, size: U256
) -> Bytes:
    """
    Copy `size` bytes out of memory starting at `start_position`.
    """
    start = int(start_position)
    return Bytes(memory[start : start + int(size)])


def memory_read_word(memory: bytearray, start_position: U256) -> U256:
    """
    Interpret the 32 bytes at `start_position` as a big endian word.
    """
    return U256.from_be_bytes(
        memory_read_bytes(memory, start_position, U256(32))
    )


def buffer_read(buffer: Bytes, start_position: U256, size: U256) -> Bytes:
    """
    Read `size` bytes from an immutable buffer (code, call data, return data),
    padding with zeroes past its end.
    """
    start = Uint(start_position)
    return right_pad_zero_bytes(buffer[start : start + Uint(size)], size)
