"""Transaction construction and signing."""

from terrasign.tx.coins import Coin, DecCoin, Fee, coins
from terrasign.tx.document import ChainContext, SignDocument, SignerInfo, build
from terrasign.tx.messages import (
    Message,
    MsgBeginRedelegate,
    MsgDelegate,
    MsgExecuteContract,
    MsgSend,
    MsgSwap,
    MsgUndelegate,
    RawMessage,
)
from terrasign.tx.signer import (
    SignedTransaction,
    SigningState,
    TxDraft,
    accumulate_signature,
    attach_signature,
    ensure_sequence_fresh,
)

__all__ = [
    "Coin",
    "DecCoin",
    "Fee",
    "coins",
    "ChainContext",
    "SignDocument",
    "SignerInfo",
    "build",
    "Message",
    "MsgBeginRedelegate",
    "MsgDelegate",
    "MsgExecuteContract",
    "MsgSend",
    "MsgSwap",
    "MsgUndelegate",
    "RawMessage",
    "SignedTransaction",
    "SigningState",
    "TxDraft",
    "accumulate_signature",
    "attach_signature",
    "ensure_sequence_fresh",
]
