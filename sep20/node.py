"""
Node client capability consumed by the probe, decoder and queries.

``NodeClient`` is the interface; ``Web3NodeClient`` backs it with a web3
HTTPProvider. Errors from the provider (timeouts, JSON-RPC errors, reverts)
propagate unchanged so callers can decide how to treat them.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Protocol, Sequence, Union

from eth_abi import decode as abi_decode
from web3 import Web3

from sep20.codec import hex_to_bytes, normalize_address
from sep20.models import LogEntry, TransactionReceipt

RETURN_TYPES = ("string", "uint256")

BlockRef = Union[int, str]


class NodeClient(Protocol):
    def call(self, params: Mapping[str, str], return_type: str) -> Any:
        ...

    def query_logs(
        self,
        address: str,
        topics: Sequence[Optional[str]],
        from_block: BlockRef,
        to_block: BlockRef,
    ) -> List[LogEntry]:
        ...


def _block_param(block: BlockRef) -> BlockRef:
    if isinstance(block, str) and block.lower().startswith("0x"):
        return int(block, 16)
    return block


class Web3NodeClient:
    """Read-only JSON-RPC client for SEP-20 calls and Transfer log queries."""

    def __init__(self, rpc_url: str = "", timeout: int = 15, w3: Any = None) -> None:
        if w3 is None:
            url = (rpc_url or "").strip()
            if not url:
                raise ValueError("rpc_url must be a non-empty string.")
            w3 = Web3(Web3.HTTPProvider(url, request_kwargs={"timeout": timeout}))
        self.rpc_url = rpc_url
        self.w3 = w3

    def call(self, params: Mapping[str, str], return_type: str) -> Any:
        if return_type not in RETURN_TYPES:
            raise ValueError(f"unsupported return type {return_type!r}")
        tx = {
            "to": Web3.to_checksum_address(normalize_address(params["to"])),
            "data": params["data"],
        }
        raw = self.w3.eth.call(tx)
        (value,) = abi_decode([return_type], hex_to_bytes(raw))
        return value

    def query_logs(
        self,
        address: str,
        topics: Sequence[Optional[str]],
        from_block: BlockRef = "0x0",
        to_block: BlockRef = "latest",
    ) -> List[LogEntry]:
        flt = {
            "address": Web3.to_checksum_address(normalize_address(address)),
            "topics": list(topics),
            "fromBlock": _block_param(from_block),
            "toBlock": _block_param(to_block),
        }
        return [LogEntry.from_dict(lg) for lg in self.w3.eth.get_logs(flt) or []]

    def get_receipt(self, tx_hash: str) -> TransactionReceipt:
        return TransactionReceipt.from_dict(self.w3.eth.get_transaction_receipt(tx_hash))
