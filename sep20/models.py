from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from sep20.codec import check_decimals, normalize_address, scale_value, to_hex


def _opt_hex(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return to_hex(value)


def _opt_address(value: Any) -> Optional[str]:
    if not value:
        return None
    return normalize_address(value)


def _receipt_ok(status: Any) -> bool:
    if isinstance(status, bool):
        return status
    if isinstance(status, int):
        return status == 1
    if isinstance(status, str):
        text = status.strip().lower()
        if text.startswith("0x"):
            try:
                return int(text, 16) == 1
            except ValueError:
                return False
        return text in ("1", "true")
    return False


@dataclass(frozen=True, eq=False)
class ContractMetadata:
    """Metadata of a contract that answered all four probe calls."""

    address: str
    name: str
    symbol: str
    total_supply: str
    decimals: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address))
        check_decimals(self.decimals)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContractMetadata):
            return NotImplemented
        return self.address == other.address

    def __hash__(self) -> int:
        return hash(self.address)

    def scaled_total_supply(self) -> str:
        return scale_value(self.total_supply, self.decimals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "name": self.name,
            "symbol": self.symbol,
            "total_supply": self.total_supply,
            "decimals": self.decimals,
        }


@dataclass(frozen=True)
class TransferRecord:
    contract_address: str
    from_address: str
    to_address: str
    value: str
    source_tx_hash: Optional[str] = None

    def involves(self, address: str) -> bool:
        addr = normalize_address(address)
        return addr in (self.from_address, self.to_address)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contract_address": self.contract_address,
            "from": self.from_address,
            "to": self.to_address,
            "value": self.value,
            "source_tx_hash": self.source_tx_hash,
        }


@dataclass(frozen=True)
class TransferInfo:
    transfer: TransferRecord
    contract: ContractMetadata

    def to_dict(self) -> Dict[str, Any]:
        return {"transfer": self.transfer.to_dict(), "contract": self.contract.to_dict()}


@dataclass(frozen=True)
class LogEntry:
    address: str
    topics: Tuple[str, ...] = ()
    data: str = "0x"
    transaction_hash: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address))
        object.__setattr__(self, "topics", tuple(to_hex(t) for t in self.topics))
        object.__setattr__(self, "data", to_hex(self.data or "0x"))
        if self.transaction_hash:
            object.__setattr__(self, "transaction_hash", to_hex(self.transaction_hash))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "LogEntry":
        """Build from a node log (web3 AttributeDict or plain JSON-RPC dict)."""
        tx_hash = raw.get("transactionHash", raw.get("transaction_hash"))
        return cls(
            address=raw.get("address"),
            topics=tuple(raw.get("topics") or ()),
            data=raw.get("data") or "0x",
            transaction_hash=_opt_hex(tx_hash),
        )


@dataclass(frozen=True)
class TransactionReceipt:
    transaction_hash: Optional[str]
    to: Optional[str]
    status: bool
    logs: Tuple[LogEntry, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "TransactionReceipt":
        tx_hash = raw.get("transactionHash", raw.get("transaction_hash"))
        return cls(
            transaction_hash=_opt_hex(tx_hash),
            to=_opt_address(raw.get("to")),
            status=_receipt_ok(raw.get("status")),
            logs=tuple(LogEntry.from_dict(lg) for lg in (raw.get("logs") or [])),
        )
