"""Bech32 address codec.

Account addresses are bech32(prefix, digest) where the digest is the 20-byte
hash of the public key (see PublicKey.address_digest). Bech32 public keys
encode the amino-prefixed key instead (terrapub1addwnpep...).

Prefixes come from configuration; AddressCodec derives the validator and
consensus variants from the account prefix the way Cosmos SDK chains do.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from bip_utils import Bech32ChecksumError, Bech32Decoder, Bech32Encoder

from terrasign.config import get_settings
from terrasign.errors import ChecksumMismatch, UnknownPrefix
from terrasign.signing.base import PublicKey

logger = logging.getLogger(__name__)

BECH32_SEPARATOR = "1"


def encode_digest(prefix: str, digest: bytes) -> str:
    """Bech32-encode raw bytes under ``prefix``."""
    return Bech32Encoder.Encode(prefix, digest)


def encode(public_key: PublicKey, prefix: str) -> str:
    """Compute the bech32 address of a public key.

    Args:
        public_key: secp256k1 or ed25519 public key
        prefix: Human-readable part (e.g., 'terra', 'terravaloper')

    Returns:
        Bech32 address string
    """
    return encode_digest(prefix, public_key.address_digest())


def encode_public_key(public_key: PublicKey, prefix: str) -> str:
    """Bech32-encode the amino form of a public key (e.g., 'terrapub1...')."""
    return encode_digest(prefix, public_key.amino_bytes())


def split_prefix(address: str) -> str:
    """Return the human-readable part of a bech32 string.

    Raises:
        ChecksumMismatch: If there is no separator
    """
    sep = address.rfind(BECH32_SEPARATOR)
    if sep < 1:
        raise ChecksumMismatch(f"Invalid bech32 address {address!r}: missing prefix")
    return address[:sep].lower()


def decode(address: str, expected_prefix: Optional[str] = None) -> tuple[str, bytes]:
    """Decode a bech32 address.

    Args:
        address: Bech32 string
        expected_prefix: If given, the prefix the address must carry

    Returns:
        Tuple of (prefix, data bytes)

    Raises:
        ChecksumMismatch: On bad framing, characters or checksum
        UnknownPrefix: If the prefix differs from expected_prefix
    """
    prefix = split_prefix(address)

    try:
        data = Bech32Decoder.Decode(prefix, address)
    except Bech32ChecksumError:
        raise ChecksumMismatch(f"Invalid bech32 checksum for {address!r}") from None
    except ValueError as e:
        raise ChecksumMismatch(f"Invalid bech32 address {address!r}: {e}") from None

    if expected_prefix is not None and prefix != expected_prefix:
        raise UnknownPrefix(expected_prefix, prefix)

    return prefix, data


def is_valid_address(address: str, prefix: Optional[str] = None) -> bool:
    """Check an account address: valid bech32, 20-byte digest, optional prefix."""
    try:
        _, data = decode(address, prefix)
    except (ChecksumMismatch, UnknownPrefix):
        return False
    return len(data) == 20


@dataclass(frozen=True)
class AddressCodec:
    """Address family of one chain, derived from its account prefix.

    Usage:
        codec = AddressCodec("terra")
        codec.account_address(pk)    # terra1...
        codec.operator_address(pk)   # terravaloper1...
    """

    prefix: str

    @classmethod
    def from_settings(cls) -> "AddressCodec":
        return cls(get_settings().bech32_prefix)

    @property
    def account_pub_prefix(self) -> str:
        return f"{self.prefix}pub"

    @property
    def validator_prefix(self) -> str:
        return f"{self.prefix}valoper"

    @property
    def validator_pub_prefix(self) -> str:
        return f"{self.prefix}valoperpub"

    @property
    def consensus_prefix(self) -> str:
        return f"{self.prefix}valcons"

    @property
    def consensus_pub_prefix(self) -> str:
        return f"{self.prefix}valconspub"

    def account_address(self, public_key: PublicKey) -> str:
        return encode(public_key, self.prefix)

    def operator_address(self, public_key: PublicKey) -> str:
        return encode(public_key, self.validator_prefix)

    def consensus_address(self, public_key: PublicKey) -> str:
        return encode(public_key, self.consensus_prefix)

    def application_public_key(self, public_key: PublicKey) -> str:
        return encode_public_key(public_key, self.account_pub_prefix)

    def operator_public_key(self, public_key: PublicKey) -> str:
        return encode_public_key(public_key, self.validator_pub_prefix)

    def consensus_public_key(self, public_key: PublicKey) -> str:
        return encode_public_key(public_key, self.consensus_pub_prefix)

    def decode_account(self, address: str) -> bytes:
        """Decode an account address and return its 20-byte digest."""
        _, digest = decode(address, self.prefix)
        return digest

    def operator_from_account(self, address: str) -> str:
        """Re-encode an account address under the validator operator prefix."""
        return encode_digest(self.validator_prefix, self.decode_account(address))
