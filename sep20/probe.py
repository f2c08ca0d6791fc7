# sep20/probe.py
"""
Contract probe: decide whether an address behaves as a SEP-20 token.

An address counts as a token only when symbol(), name(), totalSupply() and
decimals() all answer with decodable values. There is no partial metadata:
the first failing call ends the probe.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sep20 import runtime_state
from sep20.codec import normalize_address, parse_uint256, selector
from sep20.errors import ProbeIncomplete
from sep20.models import ContractMetadata
from sep20.node import NodeClient

logger = logging.getLogger("sep20.probe")

# (field, signature, return type)
PROBE_CALLS = (
    ("symbol", "symbol()", "string"),
    ("name", "name()", "string"),
    ("total_supply", "totalSupply()", "uint256"),
    ("decimals", "decimals()", "uint256"),
)


def _checked(value: Any, return_type: str, address: str, call: str) -> Any:
    if return_type == "string":
        if isinstance(value, bytes):
            try:
                value = value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ProbeIncomplete(address, call, f"undecodable string: {exc}") from exc
        if not isinstance(value, str):
            raise ProbeIncomplete(address, call, f"expected string, got {type(value).__name__}")
        return value.rstrip("\x00")
    try:
        return parse_uint256(value)
    except ValueError as exc:
        raise ProbeIncomplete(address, call, str(exc)) from exc


def probe_contract_strict(node: NodeClient, address: str) -> ContractMetadata:
    """Probe ``address`` and raise :class:`ProbeIncomplete` on any failure."""
    addr = normalize_address(address)
    found = {}
    for field_name, signature, return_type in PROBE_CALLS:
        call = signature[:-2]
        try:
            value = node.call({"to": addr, "data": selector(signature)}, return_type)
        except Exception as exc:
            raise ProbeIncomplete(addr, call, repr(exc)) from exc
        found[field_name] = _checked(value, return_type, addr, call)

    decimals = found["decimals"]
    if decimals > 255:
        raise ProbeIncomplete(addr, "decimals", f"value {decimals} does not fit uint8")

    return ContractMetadata(
        address=addr,
        name=found["name"],
        symbol=found["symbol"],
        total_supply=str(found["total_supply"]),
        decimals=decimals,
    )


def probe_contract(node: NodeClient, address: str) -> Optional[ContractMetadata]:
    """Return the contract's metadata, or ``None`` if it is not a token."""
    try:
        meta = probe_contract_strict(node, address)
    except ProbeIncomplete as exc:
        logger.debug("not a token: %s", exc)
        runtime_state.note_probe(False, str(exc))
        return None
    runtime_state.note_probe(True)
    logger.debug("probed %s -> %s (%s decimals)", meta.address, meta.symbol, meta.decimals)
    return meta
