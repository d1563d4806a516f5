"""
Elliptic Curves
^^^^^^^^^^^^^^^

Signature recovery on secp256k1 and verification on secp256r1.
"""

from typing import Tuple

import coincurve
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    encode_dss_signature,
)
from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U256

from ..exceptions import InvalidSignatureError
from .hash import Hash32

SECP256K1B = U256(7)
SECP256K1P = U256(
    0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
)
SECP256K1N = U256(
    0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
)

SECP256R1N = U256(
    0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551
)
SECP256R1P = U256(
    0xFFFFFFFF00000001000000000000000000000000FFFFFFFFFFFFFFFFFFFFFFFF
)


def secp256k1_recover(r: U256, s: U256, v: U256, msg_hash: Hash32) -> Bytes:
    """
    Recovers the public key from a given signature.

    Parameters
    ----------
    r :
        x coordinate of the signature's ephemeral point.
    s :
        Signature proof.
    v :
        Recovery id, `0` or `1`.
    msg_hash :
        Hash of the message being recovered.

    Returns
    -------
    public_key : `Bytes`
        Recovered public key, 64 bytes without the format prefix.
    """
    is_square = pow(
        pow(r, U256(3), SECP256K1P) + SECP256K1B,
        (SECP256K1P - U256(1)) // U256(2),
        SECP256K1P,
    )

    if is_square != 1:
        raise InvalidSignatureError(
            "r is not the x-coordinate of a point on the secp256k1 curve"
        )

    signature = r.to_be_bytes32() + s.to_be_bytes32() + bytes([int(v)])

    # The point at infinity is rejected by coincurve with a ValueError.
    try:
        public_key = coincurve.PublicKey.from_signature_and_message(
            signature, msg_hash, hasher=None
        )
    except ValueError as e:
        raise InvalidSignatureError from e

    return public_key.format(compressed=False)[1:]


def secp256k1_sign(msg_hash: Hash32, secret_key: int) -> Tuple[U256, ...]:
    """
    Returns the signature of a message hash given the secret key, as the
    `(r, s, v)` triple with `v` being the recovery id.
    """
    private_key = coincurve.PrivateKey.from_int(secret_key)
    signature = private_key.sign_recoverable(msg_hash, hasher=None)

    return (
        U256.from_be_bytes(signature[0:32]),
        U256.from_be_bytes(signature[32:64]),
        U256(signature[64]),
    )


def secp256r1_verify(
    r: U256, s: U256, x: U256, y: U256, msg_hash: Hash32
) -> bool:
    """
    Verifies a P-256 signature over a prehashed message.

    Returns `False` for malformed keys as well as for bad signatures.
    """
    if not (U256(0) < r < SECP256R1N and U256(0) < s < SECP256R1N):
        return False
    if not (x < SECP256R1P and y < SECP256R1P):
        return False

    try:
        public_numbers = ec.EllipticCurvePublicNumbers(
            int(x), int(y), ec.SECP256R1()
        )
        public_key = public_numbers.public_key()
        public_key.verify(
            encode_dss_signature(int(r), int(s)),
            msg_hash,
            ec.ECDSA(Prehashed(hashes.SHA256())),
        )
    except (ValueError, InvalidSignature):
        return False

    return True
