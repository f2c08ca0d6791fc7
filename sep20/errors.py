from __future__ import annotations

from typing import Optional


class Sep20Error(Exception):
    """Base class for every error raised by the sep20 package."""


class InvalidAddress(Sep20Error, ValueError):
    pass


class ProbeIncomplete(Sep20Error):
    """One of the four metadata calls failed; the address is not a token."""

    def __init__(self, address: str, call: str, reason: str = "") -> None:
        self.address = address
        self.call = call
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"probe of {address} failed at {call}(){detail}")


class UnknownContract(Sep20Error, LookupError):
    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"contract {address} is not in the registry")


class MalformedTopic(Sep20Error, ValueError):
    pass


class MalformedLog(Sep20Error, ValueError):
    pass


class AnomalousTransaction(Sep20Error):
    """A receipt matched a known contract but does not look like a transfer.

    Handed to an anomaly handler rather than raised.
    """

    def __init__(self, tx_hash: Optional[str], contract_address: str, reason: str) -> None:
        self.tx_hash = tx_hash
        self.contract_address = contract_address
        self.reason = reason
        super().__init__(f"bad tx {tx_hash or '?'} on {contract_address}: {reason}")

    def to_dict(self) -> dict:
        return {
            "tx_hash": self.tx_hash,
            "contract_address": self.contract_address,
            "reason": self.reason,
        }
