"""Ledger service: account lookup, fee estimation and broadcast."""

from terrasign.ledger.base import LedgerService
from terrasign.ledger.client import LCDClient
from terrasign.ledger.gas import GasOptions
from terrasign.ledger.models import AccountInfo, BroadcastResult, FeeEstimate, TxInfo

__all__ = [
    "LedgerService",
    "LCDClient",
    "GasOptions",
    "AccountInfo",
    "BroadcastResult",
    "FeeEstimate",
    "TxInfo",
]
