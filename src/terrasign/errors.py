"""Exception hierarchy for key management, signing and ledger access.

Messages never include private keys, seeds or mnemonics.
"""

from typing import Optional


class TerraSignError(Exception):
    """Base class for all terrasign errors."""
    pass


class InvalidMnemonic(TerraSignError):
    """Raised when a mnemonic fails the wordlist lookup or checksum."""
    pass


class InvalidPath(TerraSignError):
    """Raised when a derivation path is malformed or an index is out of range."""
    pass


class DerivationFailure(TerraSignError):
    """Raised when an intermediate HD key is invalid.

    The BIP32 recovery rule is to retry with the next index at the failing
    depth, see ``terrasign.hdwallet.derive_with_recovery``.
    """

    def __init__(self, depth: int, index: int):
        self.depth = depth
        self.index = index
        super().__init__(f"Invalid child key at depth {depth} (index {index})")


class InvalidKey(TerraSignError):
    """Raised when raw key bytes are outside the valid range for the curve."""
    pass


class AddressError(TerraSignError):
    """Base class for address decoding errors."""
    pass


class ChecksumMismatch(AddressError):
    """Raised when a bech32 string has bad framing or a bad checksum."""
    pass


class UnknownPrefix(AddressError):
    """Raised when a bech32 human-readable part is not the expected one."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Unexpected address prefix: expected {expected!r}, got {actual!r}")


class EmptyTransaction(TerraSignError):
    """Raised when building a sign document with no messages."""
    pass


class SequenceStale(TerraSignError):
    """Raised when the account sequence moved after the document was built.

    The document must be rebuilt with a fresh chain context.
    """

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Account sequence changed: document has {expected}, ledger reports {actual}"
        )


class SignerMismatch(TerraSignError):
    """Raised when a key or signature does not belong to a declared signer slot."""
    pass


class TransactionIncomplete(TerraSignError):
    """Raised when emitting a transaction that still has empty signer slots."""
    pass


class LedgerError(TerraSignError):
    """Base class for ledger service errors."""
    pass


class LedgerUnavailable(LedgerError):
    """Raised on network/transport failure or a non-success HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class LedgerRejected(LedgerError):
    """Raised when the ledger answers a broadcast with a non-zero code."""

    def __init__(self, code: int, tx_hash: str, raw_log: str):
        self.code = code
        self.tx_hash = tx_hash
        self.raw_log = raw_log
        super().__init__(f"Transaction {tx_hash} rejected with code {code}: {raw_log}")


class GasPriceError(LedgerError):
    """Raised when the gas price feed has no price for the requested denom."""

    def __init__(self, denom: str):
        self.denom = denom
        super().__init__(f"No gas price available for {denom}")
