"""
The BLAKE2b compression function `F`, exposed with a configurable number of
rounds as required by the blake2f precompile.
"""

from dataclasses import dataclass
from typing import List, Tuple

from ethereum_types.bytes import Bytes

MASK_64 = 2**64 - 1

BLAKE2B_IV = (
    0x6A09E667F3BCC908,
    0xBB67AE8584CAA73B,
    0x3C6EF372FE94F82B,
    0xA54FF53A5F1D36F1,
    0x510E527FADE682D1,
    0x9B05688C2B3E6C1F,
    0x1F83D9ABFB41BD6B,
    0x5BE0CD19137E2179,
)

SIGMA = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15),
    (14, 10, 4, 8, 9, 15, 13, 6, 1, 12, 0, 2, 11, 7, 5, 3),
    (11, 8, 12, 0, 5, 2, 15, 13, 10, 14, 3, 6, 7, 1, 9, 4),
    (7, 9, 3, 1, 13, 12, 11, 14, 2, 6, 5, 10, 4, 0, 15, 8),
    (9, 0, 5, 7, 2, 4, 10, 15, 14, 1, 11, 12, 6, 8, 3, 13),
    (2, 12, 6, 10, 0, 11, 8, 3, 4, 13, 7, 5, 15, 14, 1, 9),
    (12, 5, 1, 15, 14, 13, 4, 10, 0, 7, 6, 3, 9, 2, 8, 11),
    (13, 11, 7, 14, 12, 1, 3, 9, 5, 0, 15, 4, 8, 6, 2, 10),
    (6, 15, 14, 9, 11, 3, 0, 8, 12, 2, 13, 7, 1, 4, 10, 5),
    (10, 2, 8, 4, 7, 6, 1, 5, 15, 11, 9, 14, 3, 12, 13, 0),
)

# Column steps then diagonal steps of one round.
MIX_INDICES = (
    (0, 4, 8, 12),
    (1, 5, 9, 13),
    (2, 6, 10, 14),
    (3, 7, 11, 15),
    (0, 5, 10, 15),
    (1, 6, 11, 12),
    (2, 7, 8, 13),
    (3, 4, 9, 14),
)


def _rotr(x: int, n: int) -> int:
    return ((x >> n) | (x << (64 - n))) & MASK_64


def _mix(v: List[int], a: int, b: int, c: int, d: int, x: int, y: int) -> None:
    v[a] = (v[a] + v[b] + x) & MASK_64
    v[d] = _rotr(v[d] ^ v[a], 32)
    v[c] = (v[c] + v[d]) & MASK_64
    v[b] = _rotr(v[b] ^ v[c], 24)
    v[a] = (v[a] + v[b] + y) & MASK_64
    v[d] = _rotr(v[d] ^ v[a], 16)
    v[c] = (v[c] + v[d]) & MASK_64
    v[b] = _rotr(v[b] ^ v[c], 63)


@dataclass(frozen=True)
class Blake2Parameters:
    """
    Decoded input of the blake2f precompile.
    """

    rounds: int
    h: Tuple[int, ...]
    m: Tuple[int, ...]
    t_0: int
    t_1: int
    f: bool

    @classmethod
    def from_bytes(cls, data: Bytes) -> "Blake2Parameters":
        """
        Split a 213 byte input into its fields. Length and the final block
        flag must already have been checked by the caller.
        """

        def words(chunk: bytes) -> Tuple[int, ...]:
            return tuple(
                int.from_bytes(chunk[i : i + 8], "little")
                for i in range(0, len(chunk), 8)
            )

        return cls(
            rounds=int.from_bytes(data[:4], "big"),
            h=words(data[4:68]),
            m=words(data[68:196]),
            t_0=int.from_bytes(data[196:204], "little"),
            t_1=int.from_bytes(data[204:212], "little"),
            f=data[212] == 1,
        )


def compress(params: Blake2Parameters) -> Bytes:
    """
    Run `params.rounds` rounds of the compression function and return the
    new state vector, little endian encoded.
    """
    v = list(params.h) + list(BLAKE2B_IV)
    v[12] ^= params.t_0
    v[13] ^= params.t_1
    if params.f:
        v[14] ^= MASK_64

    m = params.m
    for i in range(params.rounds):
        s = SIGMA[i % 10]
        for step, (a, b, c, d) in enumerate(MIX_INDICES):
            _mix(v, a, b, c, d, m[s[2 * step]], m[s[2 * step + 1]])

    return b"".join(
        (params.h[i] ^ v[i] ^ v[i + 8]).to_bytes(8, "little") for i in range(8)
    )
