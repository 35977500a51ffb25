"""Wallet: one signing key bound to one ledger service.

Chains the signing core together for the common single-signer case:
fetch account state, build the sign document, sign, re-check the
sequence and broadcast.
"""

import logging
from typing import Iterable, Optional

from terrasign.address import AddressCodec
from terrasign.config import get_settings
from terrasign.errors import EmptyTransaction
from terrasign.ledger.base import LedgerService
from terrasign.ledger.gas import GasOptions
from terrasign.ledger.models import BroadcastResult
from terrasign.signing.base import KeyAlgorithm, SigningKey
from terrasign.signing.factory import signing_key_from_mnemonic
from terrasign.tx.coins import Fee
from terrasign.tx.document import ChainContext, SignDocument, SignerInfo, build
from terrasign.tx.messages import Message
from terrasign.tx.signer import SignedTransaction, TxDraft, attach_signature, ensure_sequence_fresh

logger = logging.getLogger(__name__)


class Wallet:
    """Signs and submits transactions for a single account.

    Usage:
        async with LCDClient() as lcd:
            wallet = Wallet.from_mnemonic(seed_phrase, lcd)
            result = await wallet.send([MsgSend.create_single(...)])
    """

    def __init__(
        self,
        signing_key: SigningKey,
        ledger: LedgerService,
        chain_id: Optional[str] = None,
        prefix: Optional[str] = None,
    ):
        settings = get_settings()
        self.signing_key = signing_key
        self.ledger = ledger
        self.chain_id = chain_id or settings.chain_id
        self.codec = AddressCodec(prefix or settings.bech32_prefix)
        self._address: Optional[str] = None

    @classmethod
    def from_mnemonic(
        cls,
        mnemonic: str,
        ledger: LedgerService,
        passphrase: str = "",
        path=None,
        algorithm: KeyAlgorithm = KeyAlgorithm.SECP256K1,
        chain_id: Optional[str] = None,
        prefix: Optional[str] = None,
    ) -> "Wallet":
        signing_key = signing_key_from_mnemonic(mnemonic, passphrase, path, algorithm)
        return cls(signing_key, ledger, chain_id=chain_id, prefix=prefix)

    @property
    def address(self) -> str:
        if self._address is None:
            self._address = self.codec.account_address(self.signing_key.public_key())
        return self._address

    async def chain_context(self) -> ChainContext:
        """Fetch account number and sequence from the ledger.

        Never cached; every transaction reads fresh state.
        """
        account = await self.ledger.account(self.address)
        return ChainContext(
            chain_id=self.chain_id,
            account_number=account.account_number,
            sequence=account.sequence,
        )

    async def _resolve_fee(
        self,
        messages: list[Message],
        memo: str,
        fee: Optional[Fee],
        gas_options: Optional[GasOptions],
    ) -> Fee:
        if fee is not None:
            return fee
        options = gas_options or GasOptions.from_settings()
        return await options.compute_fee(self.ledger, messages, memo)

    async def _build_and_sign(
        self,
        messages: Iterable[Message],
        fee: Optional[Fee],
        memo: str,
        gas_options: Optional[GasOptions],
    ) -> tuple[SignDocument, SignedTransaction]:
        messages = list(messages)
        if not messages:
            raise EmptyTransaction("A transaction needs at least one message")
        context = await self.chain_context()
        resolved_fee = await self._resolve_fee(messages, memo, fee, gas_options)

        document = build(
            chain_context=context,
            fee=resolved_fee,
            messages=messages,
            memo=memo,
            signer_infos=[SignerInfo(self.signing_key.public_key(), context.sequence)],
        )
        return document, attach_signature(TxDraft(document), self.signing_key, document)

    async def create_and_sign(
        self,
        messages: Iterable[Message],
        fee: Optional[Fee] = None,
        memo: str = "",
        gas_options: Optional[GasOptions] = None,
    ) -> SignedTransaction:
        """Build and sign a transaction from fresh account state.

        Raises:
            EmptyTransaction: If no messages are supplied
            LedgerUnavailable: If account state cannot be fetched
        """
        _, tx = await self._build_and_sign(messages, fee, memo, gas_options)
        return tx

    async def send(
        self,
        messages: Iterable[Message],
        fee: Optional[Fee] = None,
        memo: str = "",
        gas_options: Optional[GasOptions] = None,
        mode: Optional[str] = None,
    ) -> BroadcastResult:
        """Sign and broadcast.

        The account sequence is re-read just before broadcast; if another
        transaction consumed it in the meantime nothing is submitted.

        Raises:
            SequenceStale: If the sequence moved after signing
            LedgerRejected: If the ledger rejects the transaction
            LedgerUnavailable: On transport failure
        """
        document, tx = await self._build_and_sign(messages, fee, memo, gas_options)
        await ensure_sequence_fresh(document, self.ledger, self.address)

        logger.info(f"Broadcasting from {self.address} ({len(tx.body.messages)} messages)")
        return await self.ledger.broadcast(tx, mode)

    def __repr__(self) -> str:
        return f"Wallet(address={self.address}, chain_id={self.chain_id})"
