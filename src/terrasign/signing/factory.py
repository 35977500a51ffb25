"""Signing key factory.

Creates the SigningKey variant for a KeyAlgorithm. This is the single place
where the algorithm tag is turned into a concrete class.
"""

import logging
from typing import Optional, Union

from terrasign.config import get_settings
from terrasign.signing.base import KeyAlgorithm, SigningKey
from terrasign.signing.ed25519 import Ed25519SigningKey
from terrasign.signing.secp256k1 import Secp256k1SigningKey
from terrasign.utils.secrets import SecretBytes

logger = logging.getLogger(__name__)


def create_signing_key(
    algorithm: KeyAlgorithm,
    private_key: Union[SecretBytes, bytes],
) -> SigningKey:
    """Wrap raw private key bytes in the SigningKey for ``algorithm``.

    Raises:
        InvalidKey: If the bytes are not a valid key for the curve
        ValueError: If the algorithm is not supported
    """
    if not isinstance(private_key, SecretBytes):
        private_key = SecretBytes(private_key)

    if algorithm == KeyAlgorithm.SECP256K1:
        return Secp256k1SigningKey(private_key)
    elif algorithm == KeyAlgorithm.ED25519:
        return Ed25519SigningKey(private_key)
    raise ValueError(f"Unsupported key algorithm: {algorithm!r}")


def signing_key_from_mnemonic(
    mnemonic: str,
    passphrase: str = "",
    path=None,
    algorithm: KeyAlgorithm = KeyAlgorithm.SECP256K1,
) -> SigningKey:
    """Derive a key from a mnemonic and wrap it.

    Args:
        mnemonic: BIP39 seed phrase
        passphrase: Optional BIP39 passphrase
        path: DerivationPath or string; defaults to m/44'/330'/0'/0/0
        algorithm: Key algorithm
    """
    from terrasign.hdwallet.derivation import derive
    from terrasign.hdwallet.path import DEFAULT_PATH

    private_key = derive(mnemonic, passphrase, path or DEFAULT_PATH, algorithm)
    return create_signing_key(algorithm, private_key)


def get_signing_key(account: int = 0, index: int = 0, coin_type: Optional[int] = None) -> SigningKey:
    """Derive the account key from the configured seed phrase.

    Raises:
        ValueError: If WALLET_SEED_PHRASE is not configured
    """
    from terrasign.hdwallet.path import DerivationPath

    settings = get_settings()
    if not settings.wallet_seed_phrase:
        raise ValueError("WALLET_SEED_PHRASE not configured")

    path = DerivationPath.bip44(
        coin_type=settings.coin_type if coin_type is None else coin_type,
        account=account,
        index=index,
    )
    logger.debug(f"Deriving signing key at {path}")
    return signing_key_from_mnemonic(
        settings.wallet_seed_phrase,
        settings.wallet_passphrase,
        path,
    )
