"""secp256k1 account keys.

Signatures are RFC6979 deterministic ECDSA over SHA-256(message), encoded as
64-byte r || s with s normalized to the lower half of the curve order.
"""

import hashlib
import logging

from ecdsa import SECP256k1, BadSignatureError, MalformedPointError
from ecdsa import SigningKey as EcdsaSigningKey
from ecdsa import VerifyingKey
from ecdsa.util import sigdecode_string, sigencode_string_canonize

from terrasign.errors import InvalidKey
from terrasign.signing.base import KeyAlgorithm, PublicKey, SigningKey
from terrasign.utils.secrets import SecretBytes

logger = logging.getLogger(__name__)

CURVE_ORDER = SECP256k1.order
HALF_CURVE_ORDER = CURVE_ORDER // 2


def _check_scalar(raw: bytes) -> None:
    if len(raw) != 32:
        raise InvalidKey(f"secp256k1 private key must be 32 bytes, got {len(raw)}")
    value = int.from_bytes(raw, "big")
    if not 0 < value < CURVE_ORDER:
        raise InvalidKey("secp256k1 private key outside of the valid scalar range")


class Secp256k1SigningKey(SigningKey):
    """Signing key for secp256k1 (account keys)."""

    algorithm = KeyAlgorithm.SECP256K1

    def __init__(self, private_key: SecretBytes):
        try:
            _check_scalar(private_key.reveal())
        except InvalidKey:
            private_key.wipe()
            raise
        super().__init__(private_key)
        sk = self._ecdsa_key()
        self._public_key = PublicKey(
            KeyAlgorithm.SECP256K1,
            sk.get_verifying_key().to_string("compressed"),
        )

    def _ecdsa_key(self) -> EcdsaSigningKey:
        return EcdsaSigningKey.from_string(
            self._private_key.reveal(), curve=SECP256k1, hashfunc=hashlib.sha256
        )

    def public_key(self) -> PublicKey:
        return self._public_key

    def _sign(self, message: bytes) -> bytes:
        digest = hashlib.sha256(message).digest()
        return self._ecdsa_key().sign_digest_deterministic(
            digest,
            hashfunc=hashlib.sha256,
            sigencode=sigencode_string_canonize,
        )


def signature_s(signature: bytes) -> int:
    """Return the s component of a compact signature."""
    return int.from_bytes(signature[32:], "big")


def is_low_s(signature: bytes) -> bool:
    return signature_s(signature) <= HALF_CURVE_ORDER


def verify_secp256k1(public_key: bytes, message: bytes, signature: bytes) -> bool:
    """Verify a compact low-S signature over SHA-256(message)."""
    if len(signature) != 64 or not is_low_s(signature):
        return False

    try:
        vk = VerifyingKey.from_string(public_key, curve=SECP256k1, hashfunc=hashlib.sha256)
    except (MalformedPointError, ValueError):
        return False

    digest = hashlib.sha256(message).digest()
    try:
        return vk.verify_digest(signature, digest, sigdecode=sigdecode_string)
    except BadSignatureError:
        return False
