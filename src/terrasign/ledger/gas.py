"""Fee selection for outgoing transactions."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence, Union

from terrasign.config import get_settings
from terrasign.errors import GasPriceError
from terrasign.ledger.base import LedgerService
from terrasign.tx.coins import Coin, DecCoin, Fee, coins
from terrasign.tx.messages import Message
from terrasign.tx.signer import AuthInfo, SignedTransaction, TxBody

if TYPE_CHECKING:
    from terrasign.ledger.client import LCDClient

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 200000


@dataclass(frozen=True)
class GasOptions:
    """How a wallet chooses the fee of a transaction.

    Exactly one strategy applies:
    - fixed fee: ``fees`` set
    - fixed gas at a price: ``gas_price`` and ``gas`` set
    - estimate: ``gas_price`` set, ``gas`` left None, ledger simulates
    """

    fees: Optional[tuple[Coin, ...]] = None
    gas: Optional[int] = None
    gas_price: Optional[DecCoin] = None
    gas_adjustment: float = 1.0

    def __post_init__(self):
        if self.fees is None and self.gas_price is None:
            raise ValueError("GasOptions needs either fees or a gas price")
        if self.fees is not None and self.gas is None:
            raise ValueError("A fixed fee needs a gas limit")
        if self.gas_adjustment <= 0:
            raise ValueError("gas_adjustment must be positive")

    @classmethod
    def with_fees(cls, fees: Union[str, Coin, Sequence[Union[str, Coin]]], gas: int) -> "GasOptions":
        if isinstance(fees, (str, Coin)):
            fees = [fees]
        return cls(fees=coins(*fees), gas=gas)

    @classmethod
    def with_gas_price(cls, gas_price: Union[str, DecCoin], gas: int = DEFAULT_GAS_LIMIT) -> "GasOptions":
        if isinstance(gas_price, str):
            gas_price = DecCoin.parse(gas_price)
        return cls(gas=gas, gas_price=gas_price)

    @classmethod
    def with_estimate(cls, gas_price: Union[str, DecCoin], gas_adjustment: float = 1.4) -> "GasOptions":
        if isinstance(gas_price, str):
            gas_price = DecCoin.parse(gas_price)
        return cls(gas_price=gas_price, gas_adjustment=gas_adjustment)

    @classmethod
    async def with_fcd(cls, client: "LCDClient", denom: str, gas_adjustment: float = 1.4) -> "GasOptions":
        """Estimate strategy priced from the live FCD gas price of ``denom``.

        Raises:
            GasPriceError: If the FCD publishes no price for the denom
            LedgerUnavailable: If the FCD cannot be reached
        """
        prices = await client.gas_prices()
        if denom not in prices:
            raise GasPriceError(denom)
        logger.debug(f"FCD gas price for {denom}: {prices[denom]}")
        return cls.with_estimate(DecCoin(denom=denom, amount=prices[denom]), gas_adjustment)

    @classmethod
    def from_settings(cls) -> "GasOptions":
        settings = get_settings()
        return cls.with_estimate(settings.gas_price, settings.gas_adjustment)

    @property
    def needs_estimate(self) -> bool:
        return self.fees is None and self.gas is None

    async def compute_fee(
        self,
        ledger: LedgerService,
        messages: Sequence[Message],
        memo: str = "",
    ) -> Fee:
        """Resolve these options into a concrete fee.

        Raises:
            LedgerUnavailable: If an estimate was needed and the ledger failed
        """
        if self.fees is not None:
            return Fee(amount=self.fees, gas_limit=self.gas)

        if not self.needs_estimate:
            return Fee(amount=(self.gas_price.fee_for(self.gas),), gas_limit=self.gas)

        unsigned = SignedTransaction(
            body=TxBody(messages=tuple(messages), memo=memo),
            auth_info=AuthInfo(fee=Fee(amount=(), gas_limit=0), signer_infos=()),
            signatures=(),
        )
        estimate = await ledger.estimate_fee(unsigned, [self.gas_price], self.gas_adjustment)
        fee = Fee.from_amino({"amount": estimate.amount, "gas": estimate.gas})
        logger.debug(f"Estimated fee: gas={fee.gas_limit} amount={[str(c) for c in fee.amount]}")
        return fee
