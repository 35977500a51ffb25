"""Signature collection and signed transaction assembly.

A TxDraft holds one slot per signer declared in the sign document:

    DRAFT             no slot filled
    PARTIALLY_SIGNED  some slots filled (empty ones stay None, in place)
    FULLY_SIGNED      every slot holds a signature verifying against its key

Only a fully signed draft can be turned into a SignedTransaction.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from terrasign.errors import SequenceStale, SignerMismatch, TransactionIncomplete
from terrasign.signing.base import PublicKey, Signature, SigningKey
from terrasign.tx.coins import Fee
from terrasign.tx.document import SignDocument, SignerInfo, sort_json
from terrasign.tx.messages import Message

if TYPE_CHECKING:
    from terrasign.ledger.base import LedgerService

logger = logging.getLogger(__name__)


class SigningState(str, Enum):
    """Signing progress of a draft."""
    DRAFT = "draft"
    PARTIALLY_SIGNED = "partially_signed"
    FULLY_SIGNED = "fully_signed"


@dataclass(frozen=True)
class TxBody:
    messages: tuple[Message, ...]
    memo: str = ""


@dataclass(frozen=True)
class AuthInfo:
    fee: Fee
    signer_infos: tuple[SignerInfo, ...]


@dataclass(frozen=True)
class SignedTransaction:
    """Final artifact handed to the ledger service."""

    body: TxBody
    auth_info: AuthInfo
    signatures: tuple[Signature, ...]

    def to_amino_json(self) -> dict:
        """Legacy StdTx JSON: msg, fee, signatures, memo."""
        return {
            "msg": [sort_json(message.to_amino()) for message in self.body.messages],
            "fee": self.auth_info.fee.to_amino(),
            "signatures": [signature.to_amino_json() for signature in self.signatures],
            "memo": self.body.memo,
        }

    def to_broadcast_payload(self, mode: str = "sync") -> dict:
        return {"tx": self.to_amino_json(), "mode": mode}

    def to_json(self, mode: str = "sync") -> str:
        return json.dumps(
            self.to_broadcast_payload(mode), separators=(",", ":"), ensure_ascii=False
        )

    def to_bytes(self, mode: str = "sync") -> bytes:
        return self.to_json(mode).encode("utf-8")


class TxDraft:
    """Accumulates signatures for one sign document.

    Usage:
        draft = TxDraft(document)
        draft.sign_with(key_a)
        draft.add_signature(signature_from_b)
        tx = draft.to_signed_transaction()
    """

    def __init__(self, document: SignDocument):
        if not document.signer_infos:
            raise ValueError("Sign document declares no signers")
        self.document = document
        self._slots: list[Optional[Signature]] = [None] * len(document.signer_infos)

    @property
    def required_signers(self) -> int:
        return len(self._slots)

    @property
    def signed_count(self) -> int:
        return sum(1 for slot in self._slots if slot is not None)

    @property
    def slots(self) -> tuple[Optional[Signature], ...]:
        return tuple(self._slots)

    @property
    def state(self) -> SigningState:
        signed = self.signed_count
        if signed == 0:
            return SigningState.DRAFT
        if signed < self.required_signers:
            return SigningState.PARTIALLY_SIGNED
        return SigningState.FULLY_SIGNED

    @property
    def missing_signers(self) -> list[PublicKey]:
        return [
            info.public_key
            for info, slot in zip(self.document.signer_infos, self._slots)
            if slot is None
        ]

    def slot_index(self, public_key: PublicKey) -> int:
        """Position of the signer slot declared for ``public_key``.

        Raises:
            SignerMismatch: If no slot is declared for the key
        """
        for i, info in enumerate(self.document.signer_infos):
            if info.public_key == public_key:
                return i
        raise SignerMismatch(f"No signer slot declared for {public_key!r}")

    def check_document(self, signed_document: Optional[SignDocument]) -> None:
        if signed_document is None or signed_document.sign_bytes == self.document.sign_bytes:
            return
        if signed_document.sequence != self.document.sequence:
            raise SequenceStale(expected=self.document.sequence, actual=signed_document.sequence)
        raise SignerMismatch("Signature was produced over a different sign document")

    def add_signature(
        self,
        signature: Signature,
        signed_document: Optional[SignDocument] = None,
    ) -> SigningState:
        """Record a signature collected out of band.

        Args:
            signature: Signature and the signer public key
            signed_document: Document the signer reports having signed, if known

        Raises:
            SequenceStale: If signed_document was built for another sequence
            SignerMismatch: If the key has no slot or the signature does not verify
        """
        self.check_document(signed_document)
        index = self.slot_index(signature.public_key)
        if not signature.verify(self.document.sign_bytes):
            raise SignerMismatch(f"Signature does not verify for signer slot {index}")

        self._slots[index] = signature
        logger.debug(f"Recorded signature for slot {index} ({self.signed_count}/{self.required_signers})")
        return self.state

    def sign_with(self, signing_key: SigningKey) -> SigningState:
        """Sign the document with ``signing_key`` and fill its slot.

        Raises:
            SignerMismatch: If the key's public key has no declared slot
        """
        index = self.slot_index(signing_key.public_key())
        self._slots[index] = signing_key.sign_document(self.document)
        logger.debug(f"Signed slot {index} ({self.signed_count}/{self.required_signers})")
        return self.state

    def to_signed_transaction(self) -> SignedTransaction:
        """Assemble the signed transaction.

        Raises:
            TransactionIncomplete: If any declared slot is still empty
        """
        if self.state != SigningState.FULLY_SIGNED:
            raise TransactionIncomplete(
                f"{self.signed_count} of {self.required_signers} signatures present"
            )

        return SignedTransaction(
            body=TxBody(messages=self.document.messages, memo=self.document.memo),
            auth_info=AuthInfo(fee=self.document.fee, signer_infos=self.document.signer_infos),
            signatures=tuple(s for s in self._slots if s is not None),
        )

    def __repr__(self) -> str:
        return f"TxDraft(state={self.state.value}, signed={self.signed_count}/{self.required_signers})"


def accumulate_signature(
    draft: TxDraft,
    signing_key: SigningKey,
    sign_document: SignDocument,
) -> TxDraft:
    """Multi-signer flow: sign ``sign_document`` and record it in the draft.

    Raises:
        SequenceStale: If sign_document was built for a different sequence
        SignerMismatch: If the key has no slot or the document differs otherwise
    """
    draft.check_document(sign_document)
    draft.sign_with(signing_key)
    return draft


def attach_signature(
    draft: TxDraft,
    signing_key: SigningKey,
    sign_document: SignDocument,
) -> SignedTransaction:
    """Single-signer flow: sign and return the finished transaction.

    Raises:
        TransactionIncomplete: If other declared slots are still empty
    """
    accumulate_signature(draft, signing_key, sign_document)
    return draft.to_signed_transaction()


async def ensure_sequence_fresh(
    document: SignDocument,
    ledger: "LedgerService",
    address: str,
) -> None:
    """Re-read the account and compare its sequence with the document.

    Raises:
        SequenceStale: If the ledger reports a different sequence
    """
    account = await ledger.account(address)
    if account.sequence != document.sequence:
        logger.warning(
            f"Sequence moved for {address}: document {document.sequence}, ledger {account.sequence}"
        )
        raise SequenceStale(expected=document.sequence, actual=account.sequence)
