"""Ledger service interface.

The signing core consumes the ledger only through two calls:
- account(address) -> AccountInfo (account number + sequence)
- broadcast(signed tx) -> BroadcastResult

Implementations raise LedgerUnavailable on transport failure and
LedgerRejected when a broadcast comes back with a non-zero code.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from terrasign.errors import LedgerUnavailable
from terrasign.ledger.models import AccountInfo, BroadcastResult, FeeEstimate

if TYPE_CHECKING:
    from terrasign.tx.coins import DecCoin
    from terrasign.tx.messages import Message
    from terrasign.tx.signer import SignedTransaction


class LedgerService(ABC):
    """Abstract base class for ledger service clients."""

    @abstractmethod
    async def account(self, address: str) -> AccountInfo:
        """Fetch account number and sequence.

        Args:
            address: Bech32 account address

        Returns:
            AccountInfo for the address
        """
        pass

    @abstractmethod
    async def broadcast(
        self, tx: "SignedTransaction", mode: Optional[str] = None
    ) -> BroadcastResult:
        """Submit a signed transaction.

        Returns:
            BroadcastResult with tx hash

        Raises:
            LedgerRejected: If the ledger returns a non-zero code
        """
        pass

    async def estimate_fee(
        self,
        tx: "SignedTransaction",
        gas_prices: list["DecCoin"],
        gas_adjustment: float,
    ) -> FeeEstimate:
        """Ask the ledger for a fee estimate. Optional capability.

        Raises:
            LedgerUnavailable: If this ledger cannot estimate fees
        """
        raise LedgerUnavailable(f"{self.__class__.__name__} does not estimate fees")

    async def health_check(self) -> bool:
        """Check if the ledger service is reachable."""
        return True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
