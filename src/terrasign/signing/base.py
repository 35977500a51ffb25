"""Base types for transaction signing.

Signing flow:
1. Build a SignDocument (terrasign.tx.document)
2. Sign its canonical bytes with a SigningKey
3. Attach the Signature to the signer slot declared in the document
4. Assemble and broadcast the SignedTransaction

Key algorithms form a closed set: every dispatch goes through KeyAlgorithm
and raises on anything else.
"""

import base64
import hashlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from Crypto.Hash import RIPEMD160

from terrasign.utils.secrets import SecretBytes

if TYPE_CHECKING:
    from terrasign.tx.document import SignDocument

logger = logging.getLogger(__name__)


class KeyAlgorithm(str, Enum):
    """Supported key algorithms."""
    SECP256K1 = "secp256k1"   # Account keys
    ED25519 = "ed25519"       # Consensus / validator keys


# Amino type names and binary prefixes (prefix bytes include the length byte)
AMINO_TYPES = {
    KeyAlgorithm.SECP256K1: "tendermint/PubKeySecp256k1",
    KeyAlgorithm.ED25519: "tendermint/PubKeyEd25519",
}
AMINO_PREFIXES = {
    KeyAlgorithm.SECP256K1: bytes.fromhex("eb5ae98721"),
    KeyAlgorithm.ED25519: bytes.fromhex("1624de6420"),
}
PUBLIC_KEY_LENGTHS = {
    KeyAlgorithm.SECP256K1: 33,
    KeyAlgorithm.ED25519: 32,
}

ADDRESS_LENGTH = 20
SIGNATURE_LENGTH = 64


@dataclass(frozen=True)
class PublicKey:
    """Public key tagged with its algorithm.

    Attributes:
        algorithm: Key algorithm
        key: 33-byte compressed secp256k1 point or 32-byte ed25519 key
    """
    algorithm: KeyAlgorithm
    key: bytes

    def __post_init__(self):
        expected = PUBLIC_KEY_LENGTHS[self.algorithm]
        if len(self.key) != expected:
            raise ValueError(
                f"{self.algorithm.value} public key must be {expected} bytes, got {len(self.key)}"
            )

    @property
    def amino_type(self) -> str:
        return AMINO_TYPES[self.algorithm]

    def amino_bytes(self) -> bytes:
        """Amino binary encoding (type prefix + key), used for bech32 public keys."""
        return AMINO_PREFIXES[self.algorithm] + self.key

    def address_digest(self) -> bytes:
        """20-byte digest that bech32 addresses encode.

        secp256k1: RIPEMD160(SHA256(key)); ed25519: SHA256(key)[:20].
        """
        sha = hashlib.sha256(self.key).digest()
        if self.algorithm == KeyAlgorithm.SECP256K1:
            return RIPEMD160.new(sha).digest()
        if self.algorithm == KeyAlgorithm.ED25519:
            return sha[:ADDRESS_LENGTH]
        raise ValueError(f"Unsupported key algorithm: {self.algorithm}")

    def to_base64(self) -> str:
        return base64.b64encode(self.key).decode()

    def to_amino_json(self) -> dict:
        return {"type": self.amino_type, "value": self.to_base64()}

    @classmethod
    def from_amino_json(cls, data: dict) -> "PublicKey":
        for algorithm, type_name in AMINO_TYPES.items():
            if data.get("type") == type_name:
                return cls(algorithm, base64.b64decode(data["value"]))
        raise ValueError(f"Unsupported public key type: {data.get('type')!r}")

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Verify a signature made over ``message`` by the matching private key."""
        if self.algorithm == KeyAlgorithm.SECP256K1:
            from terrasign.signing.secp256k1 import verify_secp256k1
            return verify_secp256k1(self.key, message, signature)
        if self.algorithm == KeyAlgorithm.ED25519:
            from terrasign.signing.ed25519 import verify_ed25519
            return verify_ed25519(self.key, message, signature)
        raise ValueError(f"Unsupported key algorithm: {self.algorithm}")

    def __repr__(self) -> str:
        return f"PublicKey({self.algorithm.value}, {self.key.hex()})"


@dataclass(frozen=True)
class Signature:
    """A signature together with the public key that produced it.

    Attributes:
        public_key: Signer public key (sent on the wire with the signature)
        signature: 64 bytes; r || s for secp256k1, standard encoding for ed25519
    """
    public_key: PublicKey
    signature: bytes

    def verify(self, message: bytes) -> bool:
        return self.public_key.verify(message, self.signature)

    def to_amino_json(self) -> dict:
        return {
            "signature": base64.b64encode(self.signature).decode(),
            "pub_key": self.public_key.to_amino_json(),
        }

    @classmethod
    def from_amino_json(cls, data: dict) -> "Signature":
        return cls(
            public_key=PublicKey.from_amino_json(data["pub_key"]),
            signature=base64.b64decode(data["signature"]),
        )


class SigningKey(ABC):
    """Owns one private key and signs with it.

    Use as a context manager to wipe the key on scope exit:

        with create_signing_key(KeyAlgorithm.SECP256K1, raw) as key:
            sig = key.sign_document(document)
    """

    algorithm: KeyAlgorithm

    def __init__(self, private_key: SecretBytes):
        self._private_key = private_key

    @abstractmethod
    def public_key(self) -> PublicKey:
        """Return the public key. Pure, always succeeds."""
        pass

    @abstractmethod
    def _sign(self, message: bytes) -> bytes:
        """Produce the raw 64-byte signature."""
        pass

    def sign(self, message: bytes) -> Signature:
        """Sign message bytes.

        Raises:
            ValueError: If the message is empty or the key was wiped
        """
        if not message:
            raise ValueError("Refusing to sign an empty message")
        return Signature(public_key=self.public_key(), signature=self._sign(bytes(message)))

    def sign_document(self, document: "SignDocument") -> Signature:
        """Sign the canonical bytes of a sign document."""
        return self.sign(document.sign_bytes)

    def wipe(self) -> None:
        """Overwrite the private key in memory."""
        self._private_key.wipe()

    @property
    def wiped(self) -> bool:
        return self._private_key.wiped

    def __enter__(self) -> "SigningKey":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(algorithm={self.algorithm.value}, private_key=<redacted>)"
