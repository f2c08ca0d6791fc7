# -*- coding: utf-8 -*-
"""
sep20/config.py

Environment-driven configuration plus the loader for the static list of
well-known contracts used to seed the registry.

Usage:
    from sep20.config import load_config, load_contract_list
    config = load_config()
    addresses = load_contract_list(config.contracts_source)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, List, Optional

from utils.http import get_json_list

logger = logging.getLogger("sep20.config")

DEFAULT_RPC_URL = "https://smartbch.fountainhead.cash/mainnet"
DEFAULT_CONTRACTS = "contracts.json"


def get_str(key: str, default: Optional[str] = None) -> str:
    return os.getenv(key, default or "").strip()


def get_int(key: str, default: int = 0) -> int:
    try:
        return int(os.getenv(key, default))
    except (TypeError, ValueError):
        return default


def get_bool(key: str, default: bool = False) -> bool:
    val = os.getenv(key)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AppConfig:
    rpc_url: str = DEFAULT_RPC_URL
    contracts_source: str = DEFAULT_CONTRACTS
    seed_workers: int = 8
    request_timeout: int = 15
    strict_transfer_topic: bool = False
    history_from_block: str = "0x0"
    history_to_block: str = "latest"
    log_level: str = "INFO"


def load_config() -> AppConfig:
    """Build an AppConfig from the current environment."""
    return AppConfig(
        rpc_url=get_str("SEP20_RPC_URL") or get_str("RPC_URL") or DEFAULT_RPC_URL,
        contracts_source=get_str("SEP20_CONTRACTS", DEFAULT_CONTRACTS),
        seed_workers=max(1, get_int("SEP20_SEED_WORKERS", 8)),
        request_timeout=max(1, get_int("SEP20_REQUEST_TIMEOUT", 15)),
        strict_transfer_topic=get_bool("SEP20_STRICT_TRANSFER_TOPIC", False),
        history_from_block=get_str("SEP20_FROM_BLOCK", "0x0"),
        history_to_block=get_str("SEP20_TO_BLOCK", "latest"),
        log_level=get_str("LOG_LEVEL", "INFO").upper(),
    )


def _addresses_from(data: Any) -> List[str]:
    if isinstance(data, dict):
        data = data.get("contracts") or []
    if not isinstance(data, list):
        return []
    out: List[str] = []
    for item in data:
        if isinstance(item, str):
            out.append(item)
        elif isinstance(item, dict) and item.get("address"):
            out.append(str(item["address"]))
    return out


def load_contract_list(source: str) -> List[str]:
    """Addresses from a JSON file or http(s) URL; ``[]`` if it cannot be read.

    Accepted shapes: ``[{"address": ...}, ...]``, ``["0x..", ...]`` or
    ``{"contracts": [...]}``. Extra record fields are ignored.
    """
    if not source:
        return []
    if source.startswith(("http://", "https://")):
        data = get_json_list(source)
        if data is None:
            logger.warning("could not fetch contract list from %s", source)
            return []
        return _addresses_from(data)
    try:
        with open(source, "r", encoding="utf-8") as fp:
            data = json.load(fp)
    except (OSError, ValueError) as exc:
        logger.warning("could not read contract list %s: %s", source, exc)
        return []
    return _addresses_from(data)
