"""Signing keys for the two supported algorithms.

- Secp256k1SigningKey: account keys
- Ed25519SigningKey: consensus / validator keys
"""

from terrasign.signing.base import (
    KeyAlgorithm,
    PublicKey,
    Signature,
    SigningKey,
)
from terrasign.signing.ed25519 import Ed25519SigningKey
from terrasign.signing.factory import (
    create_signing_key,
    get_signing_key,
    signing_key_from_mnemonic,
)
from terrasign.signing.secp256k1 import Secp256k1SigningKey

__all__ = [
    "Ed25519SigningKey",
    "KeyAlgorithm",
    "PublicKey",
    "Secp256k1SigningKey",
    "Signature",
    "SigningKey",
    "create_signing_key",
    "get_signing_key",
    "signing_key_from_mnemonic",
]
