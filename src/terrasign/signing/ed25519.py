"""ed25519 consensus / validator keys (cryptography package)."""

import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from terrasign.errors import InvalidKey
from terrasign.signing.base import KeyAlgorithm, PublicKey, SigningKey
from terrasign.utils.secrets import SecretBytes

logger = logging.getLogger(__name__)


class Ed25519SigningKey(SigningKey):
    """Signing key for ed25519.

    The 32-byte private key is the RFC8032 seed. Messages are signed
    directly; the algorithm hashes internally.
    """

    algorithm = KeyAlgorithm.ED25519

    def __init__(self, private_key: SecretBytes):
        if len(private_key) != 32:
            private_key.wipe()
            raise InvalidKey(f"ed25519 private key must be 32 bytes, got {len(private_key)}")
        super().__init__(private_key)
        raw_public = self._crypto_key().public_key().public_bytes(
            serialization.Encoding.Raw, serialization.PublicFormat.Raw
        )
        self._public_key = PublicKey(KeyAlgorithm.ED25519, raw_public)

    def _crypto_key(self) -> Ed25519PrivateKey:
        return Ed25519PrivateKey.from_private_bytes(self._private_key.reveal())

    def public_key(self) -> PublicKey:
        return self._public_key

    def _sign(self, message: bytes) -> bytes:
        return self._crypto_key().sign(message)


def verify_ed25519(public_key: bytes, message: bytes, signature: bytes) -> bool:
    """Verify a standard 64-byte ed25519 signature."""
    if len(signature) != 64:
        return False
    try:
        Ed25519PublicKey.from_public_bytes(public_key).verify(signature, message)
    except (InvalidSignature, ValueError):
        return False
    return True
