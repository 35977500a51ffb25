"""Chain message payloads.

Each message serializes to the legacy amino JSON form
``{"type": <amino type>, "value": {...}}``. The signing core treats the value
as opaque; canonical key ordering is applied by the document builder.
"""

import base64
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from terrasign.tx.coins import Coin


class Message(ABC):
    """Base class for transaction messages."""

    @property
    @abstractmethod
    def type_name(self) -> str:
        """Amino type name (e.g., 'bank/MsgSend')."""
        pass

    @abstractmethod
    def value(self) -> dict:
        """JSON-compatible message body."""
        pass

    def to_amino(self) -> dict:
        return {"type": self.type_name, "value": self.value()}


@dataclass(frozen=True)
class RawMessage(Message):
    """Any message type, given as an amino type name and a JSON body."""

    msg_type: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    @property
    def type_name(self) -> str:
        return self.msg_type

    def value(self) -> dict:
        return json.loads(json.dumps(self.payload))

    @classmethod
    def from_amino(cls, data: dict) -> "RawMessage":
        return cls(msg_type=data["type"], payload=data.get("value", {}))


@dataclass(frozen=True)
class MsgSend(Message):
    """bank/MsgSend: transfer coins between accounts."""

    from_address: str
    to_address: str
    amount: tuple[Coin, ...]

    def __post_init__(self):
        object.__setattr__(self, "amount", tuple(self.amount))

    @classmethod
    def create_single(cls, from_address: str, to_address: str, amount: Coin) -> "MsgSend":
        return cls(from_address, to_address, (amount,))

    @property
    def type_name(self) -> str:
        return "bank/MsgSend"

    def value(self) -> dict:
        return {
            "amount": [coin.to_amino() for coin in self.amount],
            "from_address": self.from_address,
            "to_address": self.to_address,
        }


@dataclass(frozen=True)
class MsgDelegate(Message):
    """staking/MsgDelegate: bond tokens to a validator."""

    delegator_address: str
    validator_address: str
    amount: Coin

    @property
    def type_name(self) -> str:
        return "staking/MsgDelegate"

    def value(self) -> dict:
        return {
            "amount": self.amount.to_amino(),
            "delegator_address": self.delegator_address,
            "validator_address": self.validator_address,
        }


@dataclass(frozen=True)
class MsgUndelegate(MsgDelegate):
    """staking/MsgUndelegate: start unbonding from a validator."""

    @property
    def type_name(self) -> str:
        return "staking/MsgUndelegate"


@dataclass(frozen=True)
class MsgBeginRedelegate(Message):
    """staking/MsgBeginRedelegate: move a delegation between validators."""

    delegator_address: str
    validator_src_address: str
    validator_dst_address: str
    amount: Coin

    @property
    def type_name(self) -> str:
        return "staking/MsgBeginRedelegate"

    def value(self) -> dict:
        return {
            "amount": self.amount.to_amino(),
            "delegator_address": self.delegator_address,
            "validator_dst_address": self.validator_dst_address,
            "validator_src_address": self.validator_src_address,
        }


@dataclass(frozen=True)
class MsgSwap(Message):
    """market/MsgSwap: swap a coin into another denomination."""

    trader: str
    offer_coin: Coin
    ask_denom: str

    @property
    def type_name(self) -> str:
        return "market/MsgSwap"

    def value(self) -> dict:
        return {
            "ask_denom": self.ask_denom,
            "offer_coin": self.offer_coin.to_amino(),
            "trader": self.trader,
        }


@dataclass(frozen=True)
class MsgExecuteContract(Message):
    """wasm/MsgExecuteContract: call a contract.

    ``execute_msg`` is the base64 of the compact JSON call body.
    """

    sender: str
    contract: str
    execute_msg: str
    coins: tuple[Coin, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "coins", tuple(self.coins))

    @classmethod
    def create(
        cls,
        sender: str,
        contract: str,
        execute_msg: Union[Mapping[str, Any], str],
        coins: tuple[Coin, ...] = (),
    ) -> "MsgExecuteContract":
        """Create from a JSON-compatible mapping (encoded here) or a base64 string."""
        if not isinstance(execute_msg, str):
            raw = json.dumps(execute_msg, separators=(",", ":"))
            execute_msg = base64.b64encode(raw.encode()).decode()
        return cls(sender, contract, execute_msg, coins)

    @property
    def type_name(self) -> str:
        return "wasm/MsgExecuteContract"

    def value(self) -> dict:
        return {
            "coins": [coin.to_amino() for coin in self.coins],
            "contract": self.contract,
            "execute_msg": self.execute_msg,
            "sender": self.sender,
        }
