"""Pytest configuration and fixtures."""

import os
from typing import Optional

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["CHAIN_ID"] = "columbus-5"
os.environ["BECH32_PREFIX"] = "terra"
os.environ["LCD_URL"] = "https://lcd.test"
os.environ["FCD_URL"] = "https://fcd.test"
os.environ["GAS_PRICE"] = "0.15uluna"
os.environ["GAS_ADJUSTMENT"] = "1.4"
os.environ["DEBUG"] = "true"
os.environ.pop("WALLET_SEED_PHRASE", None)
os.environ.pop("WALLET_PASSPHRASE", None)

from terrasign.config import get_settings
from terrasign.errors import LedgerRejected
from terrasign.ledger.base import LedgerService
from terrasign.ledger.models import AccountInfo, BroadcastResult, FeeEstimate
from terrasign.signing.factory import signing_key_from_mnemonic


# Mnemonics with published vectors from the Terra client libraries
NOTICE_MNEMONIC = (
    "notice oak worry limit wrap speak medal online prefer cluster roof addict "
    "wrist behave treat actual wasp year salad speed social layer crew genius"
)
WONDER_MNEMONIC = (
    "wonder caution square unveil april art add hover spend smile proud admit "
    "modify old copper throw crew happy nature luggage reopen exhibit ordinary napkin"
)
ISLAND_MNEMONIC = (
    "island relax shop such yellow opinion find know caught erode blue dolphin "
    "behind coach tattoo light focus snake common size analyst imitate employ walnut"
)
SELL_MNEMONIC = (
    "sell raven long age tooth still predict idea quit march gasp bamboo hurdle "
    "problem voyage east tiger divide machine brain hole tiger find smooth"
)
ABANDON_MNEMONIC = " ".join(["abandon"] * 11 + ["about"])

ISLAND_ADDRESS = "terra1n3g37dsdlv7ryqftlkef8mhgqj4ny7p8v78lg7"
SELL_ADDRESS = "terra1vr0e7kylhu9am44v0s3gwkccmz7k3naxysrwew"


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings from the environment for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def island_key():
    """secp256k1 key for ISLAND_MNEMONIC at m/44'/330'/0'/0/0."""
    return signing_key_from_mnemonic(ISLAND_MNEMONIC)


@pytest.fixture
def sell_key():
    return signing_key_from_mnemonic(SELL_MNEMONIC)


class FakeLedger(LedgerService):
    """In-memory ledger recording every call.

    ``sequences`` may hold a list per address; each account() call pops the
    next value so tests can simulate the sequence moving between reads.
    """

    def __init__(
        self,
        account_number: int = 43045,
        sequence: int = 3,
        sequences: Optional[dict[str, list[int]]] = None,
        reject_code: int = 0,
        estimate: Optional[FeeEstimate] = None,
    ):
        self.account_number = account_number
        self.sequence = sequence
        self.sequences = sequences or {}
        self.reject_code = reject_code
        self.estimate = estimate
        self.account_calls: list[str] = []
        self.broadcasts: list[tuple] = []
        self.estimates: list[tuple] = []

    async def account(self, address: str) -> AccountInfo:
        self.account_calls.append(address)
        queue = self.sequences.get(address)
        sequence = queue.pop(0) if queue else self.sequence
        return AccountInfo(
            address=address,
            account_number=self.account_number,
            sequence=sequence,
        )

    async def broadcast(self, tx, mode=None) -> BroadcastResult:
        self.broadcasts.append((tx, mode))
        tx_hash = "AB" * 32
        if self.reject_code:
            raise LedgerRejected(self.reject_code, tx_hash, "insufficient funds")
        return BroadcastResult(txhash=tx_hash, code=0, raw_log="[]")

    async def estimate_fee(self, tx, gas_prices, gas_adjustment) -> FeeEstimate:
        self.estimates.append((tx, gas_prices, gas_adjustment))
        if self.estimate is None:
            return await super().estimate_fee(tx, gas_prices, gas_adjustment)
        return self.estimate


@pytest.fixture
def fake_ledger() -> FakeLedger:
    return FakeLedger()
