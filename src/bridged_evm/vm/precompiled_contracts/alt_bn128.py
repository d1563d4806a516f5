"""
Ethereum Virtual Machine (EVM) ALT_BN128 CONTRACTS
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Implementation of the ALT_BN128 precompiled contracts (EIP-196, EIP-197),
priced per EIP-1108.
"""

from typing import Optional, Tuple

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U256, Uint
from py_ecc.bn128.bn128_curve import (
    FQ,
    FQ2,
    FQ12,
    add,
    b,
    b2,
    curve_order,
    field_modulus,
    is_on_curve,
    multiply,
)
from py_ecc.bn128.bn128_pairing import pairing

from ..exceptions import InvalidParameter
from ..memory import buffer_read

GAS_ADD = Uint(150)
GAS_MUL = Uint(6000)
GAS_PAIRING_BASE = Uint(45000)
GAS_PAIRING_PER_POINT = Uint(34000)
PAIR_SIZE = 192


def _field_element(data: Bytes, offset: int) -> int:
    value = int(U256.from_be_bytes(buffer_read(data, U256(offset), U256(32))))
    if value >= field_modulus:
        raise InvalidParameter("Invalid field element")
    return value


def bytes_to_g1(data: Bytes) -> Optional[Tuple[FQ, FQ]]:
    """
    Decode 64 bytes to a point on the curve. `(0, 0)` is the point at
    infinity and decodes to `None`.

    Raises
    ------
    InvalidParameter
        Either a field element is invalid or the point is not on the curve.
    """
    x = _field_element(data, 0)
    y = _field_element(data, 32)

    if x == 0 and y == 0:
        return None

    point = (FQ(x), FQ(y))
    if not is_on_curve(point, b):
        raise InvalidParameter("Point is not on curve")
    return point


def bytes_to_g2(data: Bytes) -> Optional[Tuple[FQ2, FQ2]]:
    """
    Decode 128 bytes to a G2 point. Each coordinate is encoded imaginary
    part first.

    Raises
    ------
    InvalidParameter
        Either a field element is invalid or the point is not on the curve.
    """
    x1 = _field_element(data, 0)
    x0 = _field_element(data, 32)
    y1 = _field_element(data, 64)
    y0 = _field_element(data, 96)

    x = FQ2((x0, x1))
    y = FQ2((y0, y1))

    if x == FQ2((0, 0)) and y == FQ2((0, 0)):
        return None

    point = (x, y)
    if not is_on_curve(point, b2):
        raise InvalidParameter("Point is not on curve")
    return point


def _encode_g1(point: Optional[Tuple[FQ, FQ]]) -> Bytes:
    if point is None:
        return b"\x00" * 64
    x, y = point
    return U256(int(x)).to_be_bytes32() + U256(int(y)).to_be_bytes32()


def alt_bn128_add_gas(data: Bytes) -> Uint:
    """
    Flat cost.
    """
    return GAS_ADD


def alt_bn128_add(data: Bytes) -> Bytes:
    """
    Add two G1 points.
    """
    p0 = bytes_to_g1(buffer_read(data, U256(0), U256(64)))
    p1 = bytes_to_g1(buffer_read(data, U256(64), U256(64)))
    return _encode_g1(add(p0, p1))


def alt_bn128_mul_gas(data: Bytes) -> Uint:
    """
    Flat cost.
    """
    return GAS_MUL


def alt_bn128_mul(data: Bytes) -> Bytes:
    """
    Multiply a G1 point by a scalar.
    """
    p0 = bytes_to_g1(buffer_read(data, U256(0), U256(64)))
    n = int(U256.from_be_bytes(buffer_read(data, U256(64), U256(32))))
    return _encode_g1(multiply(p0, n))


def alt_bn128_pairing_check_gas(data: Bytes) -> Uint:
    """
    Base cost plus a charge per `(G1, G2)` pair.
    """
    return GAS_PAIRING_BASE + GAS_PAIRING_PER_POINT * Uint(
        len(data) // PAIR_SIZE
    )


def alt_bn128_pairing_check(data: Bytes) -> Bytes:
    """
    Return one, as a word, when the product of the pairings of every
    `(G1, G2)` pair in the input is the identity, and zero otherwise.
    """
    if len(data) % PAIR_SIZE != 0:
        raise InvalidParameter("Input length is not a multiple of 192")

    result = FQ12.one()
    for i in range(len(data) // PAIR_SIZE):
        start = PAIR_SIZE * i
        p = bytes_to_g1(data[start : start + 64])
        q = bytes_to_g2(data[start + 64 : start + PAIR_SIZE])
        if multiply(p, curve_order) is not None:
            raise InvalidParameter("G1 point is not in the subgroup")
        if multiply(q, curve_order) is not None:
            raise InvalidParameter("G2 point is not in the subgroup")
        if p is not None and q is not None:
            result *= pairing(q, p)

    if result == FQ12.one():
        return U256(1).to_be_bytes32()
    return U256(0).to_be_bytes32()
