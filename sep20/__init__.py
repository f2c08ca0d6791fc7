"""SEP-20 token contract resolution and event decoding."""

from sep20.errors import (
    AnomalousTransaction,
    InvalidAddress,
    MalformedLog,
    MalformedTopic,
    ProbeIncomplete,
    Sep20Error,
    UnknownContract,
)
from sep20.models import (
    ContractMetadata,
    LogEntry,
    TransactionReceipt,
    TransferInfo,
    TransferRecord,
)
from sep20.registry import ContractRegistry

__all__ = [
    "AnomalousTransaction",
    "ContractMetadata",
    "ContractRegistry",
    "InvalidAddress",
    "LogEntry",
    "MalformedLog",
    "MalformedTopic",
    "ProbeIncomplete",
    "Sep20Error",
    "TransactionReceipt",
    "TransferInfo",
    "TransferRecord",
    "UnknownContract",
]
