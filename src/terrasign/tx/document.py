"""Canonical sign document construction.

The bytes produced here are exactly what signers sign and what the chain
recomputes to verify. They follow the legacy amino JSON convention:

- top-level fields in the fixed order of SIGN_DOC_FIELDS
- integers (account number, sequence, gas, amounts) as decimal strings
- message bodies with keys sorted, compact separators, UTF-8
- '<', '>', '&', U+2028 and U+2029 escaped as \\uXXXX, as Go's encoder does
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from terrasign.errors import EmptyTransaction, SignerMismatch
from terrasign.signing.base import PublicKey
from terrasign.tx.coins import Fee, check_uint64
from terrasign.tx.messages import Message

logger = logging.getLogger(__name__)

# Wire contract; do not derive from dict ordering
SIGN_DOC_FIELDS = ("account_number", "chain_id", "fee", "memo", "msgs", "sequence")

_GO_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

_LOG_LIMIT = 1000


def _escape(text: str) -> str:
    for char, escaped in _GO_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def sort_json(value: Any) -> Any:
    """Return a copy of a JSON value with every object's keys sorted."""
    if isinstance(value, dict):
        return {key: sort_json(value[key]) for key in sorted(value)}
    if isinstance(value, (list, tuple)):
        return [sort_json(item) for item in value]
    return value


def canonical_json(value: Any) -> str:
    """Compact, key-sorted JSON with Go-compatible escaping."""
    text = json.dumps(
        sort_json(value),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return _escape(text)


@dataclass(frozen=True)
class ChainContext:
    """Chain id plus the account's number and sequence at signing time.

    Fetched from the ledger immediately before building a document; never
    reused across transactions.
    """

    chain_id: str
    account_number: int
    sequence: int

    def __post_init__(self):
        if not self.chain_id:
            raise ValueError("chain_id must not be empty")
        check_uint64("account_number", self.account_number)
        check_uint64("sequence", self.sequence)


@dataclass(frozen=True)
class SignerInfo:
    """A declared signer slot: whose signature is required, at which sequence."""

    public_key: PublicKey
    sequence: int

    def to_json(self) -> dict:
        return {"public_key": self.public_key.to_amino_json(), "sequence": str(self.sequence)}


@dataclass(frozen=True)
class SignDocument:
    """Immutable sign document.

    ``sign_bytes`` is computed once at construction; building a different
    transaction requires a new document.
    """

    chain_context: ChainContext
    fee: Fee
    messages: tuple[Message, ...]
    memo: str = ""
    signer_infos: tuple[SignerInfo, ...] = ()
    sign_bytes: bytes = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "messages", tuple(self.messages))
        object.__setattr__(self, "signer_infos", tuple(self.signer_infos))
        if not self.messages:
            raise EmptyTransaction("A transaction needs at least one message")

        keys = [info.public_key for info in self.signer_infos]
        if len(set(keys)) != len(keys):
            raise SignerMismatch("A public key may hold only one signer slot")

        try:
            sign_bytes = self._encode().encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValueError(f"Document text cannot be encoded as UTF-8: {e.reason}") from None
        object.__setattr__(self, "sign_bytes", sign_bytes)

    @property
    def chain_id(self) -> str:
        return self.chain_context.chain_id

    @property
    def account_number(self) -> int:
        return self.chain_context.account_number

    @property
    def sequence(self) -> int:
        return self.chain_context.sequence

    def _field_values(self) -> dict:
        return {
            "account_number": str(self.chain_context.account_number),
            "chain_id": self.chain_context.chain_id,
            "fee": self.fee.to_amino(),
            "memo": self.memo,
            "msgs": [message.to_amino() for message in self.messages],
            "sequence": str(self.chain_context.sequence),
        }

    def _encode(self) -> str:
        values = self._field_values()
        parts = [
            f"{json.dumps(name)}:{canonical_json(values[name])}"
            for name in SIGN_DOC_FIELDS
        ]
        return "{" + ",".join(parts) + "}"

    def to_json(self) -> str:
        return self.sign_bytes.decode("utf-8")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignDocument):
            return NotImplemented
        return self.sign_bytes == other.sign_bytes and self.signer_infos == other.signer_infos

    def __hash__(self) -> int:
        return hash((self.sign_bytes, self.signer_infos))


def build(
    chain_context: ChainContext,
    fee: Fee,
    messages: Iterable[Message],
    memo: str = "",
    signer_infos: Sequence[SignerInfo] = (),
) -> SignDocument:
    """Build the canonical sign document for a pending transaction.

    Args:
        chain_context: Chain id, account number and sequence
        fee: Fee coins and gas limit
        messages: Messages, in the order they must execute
        memo: Free-form memo
        signer_infos: Declared signer slots, in order

    Raises:
        EmptyTransaction: If no messages are supplied
        SignerMismatch: If a public key is declared in more than one slot
        ValueError: If the memo or a message holds text that is not valid UTF-8
    """
    document = SignDocument(
        chain_context=chain_context,
        fee=fee,
        messages=tuple(messages),
        memo=memo,
        signer_infos=tuple(signer_infos),
    )

    text = document.to_json()
    if len(text) > _LOG_LIMIT:
        logger.debug(
            f"TO SIGN - {chain_context.chain_id} {chain_context.account_number} "
            f"{chain_context.sequence} #messages {len(document.messages)}"
        )
    else:
        logger.debug(f"TO SIGN - {text}")

    return document
