"""BIP39 mnemonic handling.

The English wordlist and checksum rules come from bip_utils.
"""

import logging

from bip_utils import (
    Bip39Languages,
    Bip39MnemonicGenerator,
    Bip39MnemonicValidator,
    Bip39SeedGenerator,
    Bip39WordsNum,
)

from terrasign.errors import InvalidMnemonic
from terrasign.utils.secrets import SecretBytes

logger = logging.getLogger(__name__)

WORDS_NUM: dict[int, Bip39WordsNum] = {
    12: Bip39WordsNum.WORDS_NUM_12,
    15: Bip39WordsNum.WORDS_NUM_15,
    18: Bip39WordsNum.WORDS_NUM_18,
    21: Bip39WordsNum.WORDS_NUM_21,
    24: Bip39WordsNum.WORDS_NUM_24,
}


def generate_mnemonic(words: int = 24) -> str:
    """Generate a new random English mnemonic.

    Args:
        words: Number of words (12, 15, 18, 21 or 24)

    Returns:
        Space separated mnemonic
    """
    words_num = WORDS_NUM.get(words)
    if words_num is None:
        raise ValueError(f"Unsupported mnemonic length: {words}")

    mnemonic = Bip39MnemonicGenerator(Bip39Languages.ENGLISH).FromWordsNumber(words_num)
    return mnemonic.ToStr()


def normalize_mnemonic(mnemonic: str) -> str:
    """Collapse whitespace and lowercase the words."""
    return " ".join(mnemonic.lower().split())


def validate_mnemonic(mnemonic: str) -> str:
    """Validate a mnemonic against the wordlist and checksum.

    Returns:
        The normalized mnemonic

    Raises:
        InvalidMnemonic: If a word is unknown, the length is wrong or the checksum fails
    """
    normalized = normalize_mnemonic(mnemonic)
    if len(normalized.split()) not in WORDS_NUM:
        raise InvalidMnemonic(f"Invalid mnemonic length: {len(normalized.split())} words")

    if not Bip39MnemonicValidator(Bip39Languages.ENGLISH).IsValid(normalized):
        raise InvalidMnemonic("Mnemonic failed wordlist or checksum validation")
    return normalized


def is_valid_mnemonic(mnemonic: str) -> bool:
    try:
        validate_mnemonic(mnemonic)
    except InvalidMnemonic:
        return False
    return True


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> SecretBytes:
    """Derive the 64-byte BIP39 seed.

    Args:
        mnemonic: Seed phrase
        passphrase: Optional passphrase (the BIP39 "25th word")

    Returns:
        Seed wrapped in SecretBytes; the caller owns and wipes it
    """
    normalized = validate_mnemonic(mnemonic)
    seed = Bip39SeedGenerator(normalized, Bip39Languages.ENGLISH).Generate(passphrase)
    return SecretBytes(seed)
