"""Response models for the ledger service."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AccountInfo(BaseModel):
    """Account number and sequence of an on-chain account."""

    model_config = ConfigDict(populate_by_name=True)

    address: str = Field(default="", description="Bech32 account address")
    account_number: int = Field(..., ge=0, description="Account number")
    sequence: int = Field(default=0, ge=0, description="Next expected sequence")
    public_key: Optional[Any] = Field(default=None, description="Public key known to the chain")


class BroadcastResult(BaseModel):
    """Ledger answer to a broadcast."""

    model_config = ConfigDict(populate_by_name=True)

    tx_hash: str = Field(alias="txhash", description="Transaction hash")
    code: int = Field(default=0, description="Non-zero means rejected")
    raw_log: str = Field(default="", description="Raw log, surfaced verbatim")
    height: int = Field(default=0, description="Block height (block mode only)")
    codespace: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.code == 0


class FeeEstimate(BaseModel):
    """Fee suggested by the ledger for a set of messages."""

    amount: list[dict] = Field(default_factory=list)
    gas: int = 0


class TxInfo(BaseModel):
    """A transaction as reported by the ledger after inclusion."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    tx_hash: str = Field(alias="txhash")
    height: int = 0
    code: int = 0
    raw_log: str = ""
    gas_wanted: int = 0
    gas_used: int = 0
    logs: Optional[list[dict]] = None
