"""HD wallet module: mnemonics, derivation paths and key derivation."""

from terrasign.hdwallet.derivation import derive, derive_from_seed, derive_with_recovery
from terrasign.hdwallet.mnemonic import (
    generate_mnemonic,
    is_valid_mnemonic,
    mnemonic_to_seed,
    validate_mnemonic,
)
from terrasign.hdwallet.path import (
    DEFAULT_PATH,
    HARDENED_OFFSET,
    LUNA_COIN_TYPE,
    DerivationPath,
    harden,
)

__all__ = [
    "DEFAULT_PATH",
    "HARDENED_OFFSET",
    "LUNA_COIN_TYPE",
    "DerivationPath",
    "derive",
    "derive_from_seed",
    "derive_with_recovery",
    "generate_mnemonic",
    "harden",
    "is_valid_mnemonic",
    "mnemonic_to_seed",
    "validate_mnemonic",
]
