"""Hierarchical deterministic key derivation.

secp256k1 keys follow BIP32; ed25519 keys follow SLIP-10, which only
defines hardened child derivation.
"""

import logging
from typing import Optional, Union

from bip_utils import Bip32KeyError, Bip32Slip10Ed25519, Bip32Slip10Secp256k1

from terrasign.errors import DerivationFailure, InvalidPath
from terrasign.hdwallet.mnemonic import mnemonic_to_seed
from terrasign.hdwallet.path import DEFAULT_PATH, DerivationPath, is_hardened
from terrasign.signing.base import KeyAlgorithm
from terrasign.utils.secrets import SecretBytes

logger = logging.getLogger(__name__)

_BIP32_CLASSES = {
    KeyAlgorithm.SECP256K1: Bip32Slip10Secp256k1,
    KeyAlgorithm.ED25519: Bip32Slip10Ed25519,
}


def _coerce_path(path: Union[DerivationPath, str]) -> DerivationPath:
    if isinstance(path, DerivationPath):
        return path
    return DerivationPath.parse(path)


def derive_from_seed(
    seed: bytes,
    path: Union[DerivationPath, str] = DEFAULT_PATH,
    algorithm: KeyAlgorithm = KeyAlgorithm.SECP256K1,
) -> SecretBytes:
    """Walk a derivation path from a raw BIP39 seed.

    Args:
        seed: 16-64 byte seed
        path: Derivation path
        algorithm: Curve of the HD scheme

    Returns:
        32-byte private key wrapped in SecretBytes

    Raises:
        InvalidPath: If the path is not usable with the algorithm
        DerivationFailure: If an intermediate key is invalid
    """
    path = _coerce_path(path)
    bip32_class = _BIP32_CLASSES[algorithm]

    if algorithm == KeyAlgorithm.ED25519:
        for index in path.indices:
            if not is_hardened(index):
                raise InvalidPath(f"ed25519 derivation requires hardened indices: {path}")

    try:
        ctx = bip32_class.FromSeed(seed)
    except Bip32KeyError:
        raise DerivationFailure(depth=0, index=0) from None

    for depth, index in enumerate(path.indices, start=1):
        try:
            ctx = ctx.ChildKey(index)
        except Bip32KeyError:
            raise DerivationFailure(depth=depth, index=index) from None

    return SecretBytes(ctx.PrivateKey().Raw().ToBytes())


def derive(
    mnemonic: str,
    passphrase: str = "",
    path: Union[DerivationPath, str] = DEFAULT_PATH,
    algorithm: KeyAlgorithm = KeyAlgorithm.SECP256K1,
) -> SecretBytes:
    """Derive a private key from a mnemonic.

    The same (mnemonic, passphrase, path, algorithm) always yields the same key.

    Raises:
        InvalidMnemonic: If the mnemonic fails validation
        InvalidPath: If the path is malformed or unusable
        DerivationFailure: If an intermediate key is invalid
    """
    path = _coerce_path(path)
    with mnemonic_to_seed(mnemonic, passphrase) as seed:
        return derive_from_seed(seed.reveal(), path, algorithm)


def derive_with_recovery(
    mnemonic: str,
    passphrase: str = "",
    path: Union[DerivationPath, str] = DEFAULT_PATH,
    algorithm: KeyAlgorithm = KeyAlgorithm.SECP256K1,
    max_attempts: int = 8,
) -> tuple[DerivationPath, SecretBytes]:
    """Derive a key, skipping invalid children per the BIP32 rule.

    On DerivationFailure the index at the failing depth is incremented and
    derivation restarts. The path actually used is returned so callers can
    record it.

    Raises:
        ValueError: If max_attempts is less than 1
        DerivationFailure: If every attempt failed
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    path = _coerce_path(path)
    last_error: Optional[DerivationFailure] = None

    for _ in range(max_attempts):
        try:
            return path, derive(mnemonic, passphrase, path, algorithm)
        except DerivationFailure as e:
            if e.depth == 0:
                raise
            last_error = e
            next_path = path.with_index_bumped(e.depth)
            logger.warning(f"Invalid child key at {path} (depth {e.depth}), retrying with {next_path}")
            path = next_path

    raise last_error
