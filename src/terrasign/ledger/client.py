"""LCD REST client for the ledger service.

Endpoints (legacy LCD):
- GET  /auth/accounts/{address}
- POST /txs
- POST /txs/estimate_fee
- GET  /bank/balances/{address}
- GET  /txs/{hash}
- FCD: GET /v1/txs/gas_prices
"""

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from terrasign import __version__
from terrasign.config import get_settings
from terrasign.errors import LedgerRejected, LedgerUnavailable
from terrasign.ledger.base import LedgerService
from terrasign.ledger.models import AccountInfo, BroadcastResult, FeeEstimate, TxInfo
from terrasign.tx.coins import Coin, DecCoin
from terrasign.tx.signer import SignedTransaction

logger = logging.getLogger(__name__)

USER_AGENT = f"terrasign/{__version__}"


class LCDClient(LedgerService):
    """Ledger service backed by a Terra LCD node.

    Usage:
        async with LCDClient("https://lcd.terra.dev") as lcd:
            account = await lcd.account("terra1...")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        fcd_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize LCD client.

        Args:
            base_url: LCD URL (defaults to settings.lcd_url)
            timeout: Request timeout in seconds (defaults to settings.request_timeout)
            fcd_url: FCD URL for gas prices (defaults to settings.fcd_url)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.lcd_url).rstrip("/")
        self.fcd_url = (fcd_url or settings.fcd_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.default_mode = settings.broadcast_mode
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT, "Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "LCDClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[dict] = None,
        json: Optional[Any] = None,
    ) -> Any:
        client = await self._get_client()
        logger.debug(f"{method} {url}")

        try:
            response = await client.request(method, url, params=params, json=json)
        except httpx.HTTPError as e:
            logger.error(f"LCD request failed for {url}: {e}")
            raise LedgerUnavailable(f"Request to {url} failed: {e}") from e

        if not response.is_success:
            logger.debug(f"URL={url} - {response.text}")
            raise LedgerUnavailable(
                f"LCD returned {response.status_code} for {url}: {response.text}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise LedgerUnavailable(f"Invalid JSON from {url}") from e

    async def account(self, address: str, height: Optional[int] = None) -> AccountInfo:
        """Fetch account number and sequence.

        Vesting and module accounts wrap the base account one or two levels
        deep; the innermost object carrying ``account_number`` is used.

        Raises:
            LedgerUnavailable: On transport failure or a reply without an account number
        """
        params = {"height": height} if height is not None else None
        data = await self._request("GET", f"{self.base_url}/auth/accounts/{address}", params=params)

        result = data.get("result", data) if isinstance(data, dict) else None
        value = _base_account(result.get("value", result)) if isinstance(result, dict) else None
        if value is None:
            logger.error(f"Account {address}: no account_number in LCD reply")
            raise LedgerUnavailable(f"LCD reply for {address} carries no account number")

        sequence = value.get("sequence")
        try:
            account = AccountInfo.model_validate({
                "address": value.get("address") or address,
                "account_number": value["account_number"],
                "sequence": 0 if sequence is None else sequence,
                "public_key": value.get("public_key"),
            })
        except ValidationError as e:
            raise LedgerUnavailable(f"Malformed account reply for {address}: {e}") from e
        logger.debug(
            f"Account {address}: number={account.account_number} sequence={account.sequence}"
        )
        return account

    async def broadcast(
        self, tx: SignedTransaction, mode: Optional[str] = None
    ) -> BroadcastResult:
        """Submit a signed transaction.

        Raises:
            LedgerUnavailable: On transport failure
            LedgerRejected: If the response carries a non-zero code
        """
        payload = tx.to_broadcast_payload(mode or self.default_mode)
        data = await self._request("POST", f"{self.base_url}/txs", json=payload)
        result = BroadcastResult.model_validate(data)

        if result.code != 0:
            logger.warning(f"Broadcast rejected: tx={result.tx_hash} code={result.code}")
            raise LedgerRejected(result.code, result.tx_hash, result.raw_log)

        logger.info(f"Broadcast accepted: tx={result.tx_hash}")
        return result

    async def estimate_fee(
        self,
        tx: SignedTransaction,
        gas_prices: list[DecCoin],
        gas_adjustment: float,
    ) -> FeeEstimate:
        """Ask the LCD to simulate ``tx`` and suggest a fee."""
        payload = {
            "tx": tx.to_amino_json(),
            "gas_prices": [price.to_amino() for price in gas_prices],
            "gas_adjustment": str(gas_adjustment),
        }
        data = await self._request("POST", f"{self.base_url}/txs/estimate_fee", json=payload)
        fee = data.get("result", data).get("fee", {})
        return FeeEstimate.model_validate({"amount": fee.get("amount", []), "gas": fee.get("gas", 0)})

    async def balances(self, address: str, height: Optional[int] = None) -> list[Coin]:
        """Fetch the bank balances of an account."""
        params = {"height": height} if height is not None else None
        data = await self._request("GET", f"{self.base_url}/bank/balances/{address}", params=params)
        return [Coin.from_amino(item) for item in data.get("result", [])]

    async def get_transaction(self, tx_hash: str) -> TxInfo:
        """Fetch an included transaction by hash."""
        data = await self._request("GET", f"{self.base_url}/txs/{tx_hash}")
        return TxInfo.model_validate(data)

    async def wait_for_transaction(
        self,
        tx_hash: str,
        retries: int = 5,
        delay: float = 3.0,
    ) -> TxInfo:
        """Poll until a transaction is included.

        Raises:
            LedgerUnavailable: If still not found after ``retries`` attempts
        """
        last_error: Optional[LedgerUnavailable] = None
        for attempt in range(retries):
            try:
                return await self.get_transaction(tx_hash)
            except LedgerUnavailable as e:
                if e.status_code is None or e.status_code >= 500:
                    raise
                last_error = e
                logger.debug(f"Transaction {tx_hash} not found yet (attempt {attempt + 1})")
                if attempt < retries - 1:
                    await asyncio.sleep(delay)

        raise LedgerUnavailable(
            f"Transaction {tx_hash} not found after {retries} attempts",
            status_code=last_error.status_code if last_error else None,
        )

    async def gas_prices(self) -> dict[str, Decimal]:
        """Fetch current gas prices per denom from the FCD."""
        data = await self._request("GET", f"{self.fcd_url}/v1/txs/gas_prices")
        if not isinstance(data, dict):
            raise LedgerUnavailable("FCD gas prices reply is not an object")
        try:
            return {denom: Decimal(str(price)) for denom, price in data.items()}
        except InvalidOperation as e:
            raise LedgerUnavailable(f"Malformed FCD gas price: {e}") from e

    async def health_check(self) -> bool:
        try:
            await self._request("GET", f"{self.base_url}/node_info")
        except LedgerUnavailable:
            return False
        return True

    def __repr__(self) -> str:
        return f"LCDClient(url={self.base_url})"


_ACCOUNT_WRAPPERS = ("BaseVestingAccount", "base_vesting_account", "BaseAccount", "base_account")


def _base_account(value: Any) -> Optional[dict]:
    """Return the innermost dict holding ``account_number``, or None."""
    while isinstance(value, dict):
        if "account_number" in value:
            return value
        inner = next((value[key] for key in _ACCOUNT_WRAPPERS if key in value), None)
        if inner is None:
            return None
        value = inner
    return None
