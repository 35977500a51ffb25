"""Coin and fee value types.

Amounts are integers in the base denomination (uluna, uusd, ...). They are
serialized as decimal strings on the wire.
"""

import re
from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Iterable, Union

_COIN_RE = re.compile(r"^\s*(\d+)\s*([a-zA-Z][a-zA-Z0-9/:._-]{2,127})\s*$")
_DEC_COIN_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-zA-Z][a-zA-Z0-9/:._-]{2,127})\s*$")

MAX_UINT64 = 2**64 - 1


def check_uint64(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > MAX_UINT64:
        raise ValueError(f"{name} must fit in an unsigned 64-bit integer, got {value}")


@dataclass(frozen=True)
class Coin:
    """An integral amount of one denomination."""

    denom: str
    amount: int

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise ValueError(f"Coin amount must be an integer, got {type(self.amount).__name__}")
        if self.amount < 0:
            raise ValueError(f"Coin amount must not be negative, got {self.amount}")
        if not self.denom:
            raise ValueError("Coin denom must not be empty")

    @classmethod
    def parse(cls, text: str) -> "Coin":
        """Parse '100000uluna'."""
        match = _COIN_RE.match(text)
        if match is None:
            raise ValueError(f"Invalid coin string: {text!r}")
        return cls(denom=match.group(2), amount=int(match.group(1)))

    def to_amino(self) -> dict:
        return {"amount": str(self.amount), "denom": self.denom}

    @classmethod
    def from_amino(cls, data: dict) -> "Coin":
        return cls(denom=data["denom"], amount=int(data["amount"]))

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


@dataclass(frozen=True)
class DecCoin:
    """A decimal amount, used for gas prices only."""

    denom: str
    amount: Decimal

    @classmethod
    def parse(cls, text: str) -> "DecCoin":
        """Parse '0.15uluna'."""
        match = _DEC_COIN_RE.match(text)
        if match is None:
            raise ValueError(f"Invalid decimal coin string: {text!r}")
        try:
            amount = Decimal(match.group(1))
        except InvalidOperation:
            raise ValueError(f"Invalid decimal coin string: {text!r}") from None
        return cls(denom=match.group(2), amount=amount)

    def to_amino(self) -> dict:
        return {"amount": format(self.amount, "f"), "denom": self.denom}

    def fee_for(self, gas: int) -> Coin:
        """Fee for ``gas`` units at this price, rounded up."""
        amount = (self.amount * gas).to_integral_value(rounding=ROUND_CEILING)
        return Coin(denom=self.denom, amount=int(amount))


def coins(*items: Union[Coin, str]) -> tuple[Coin, ...]:
    """Build a coin tuple from Coin objects or coin strings."""
    return tuple(item if isinstance(item, Coin) else Coin.parse(item) for item in items)


@dataclass(frozen=True)
class Fee:
    """Transaction fee: coins paid and the gas limit."""

    amount: tuple[Coin, ...]
    gas_limit: int

    def __post_init__(self):
        object.__setattr__(self, "amount", tuple(self.amount))
        check_uint64("gas_limit", self.gas_limit)

    @classmethod
    def create(cls, amount: Iterable[Union[Coin, str]], gas_limit: int) -> "Fee":
        return cls(amount=coins(*amount), gas_limit=gas_limit)

    def to_amino(self) -> dict:
        return {
            "amount": [coin.to_amino() for coin in self.amount],
            "gas": str(self.gas_limit),
        }

    @classmethod
    def from_amino(cls, data: dict) -> "Fee":
        return cls(
            amount=tuple(Coin.from_amino(c) for c in data.get("amount", [])),
            gas_limit=int(data["gas"]),
        )
