# -*- coding: utf-8 -*-
"""
sep20/codec.py

Pure helpers for the fixed token ABI: selector hashing, 32-byte word padding,
topic -> address extraction and exact fixed-point scaling of raw amounts.
Every hex value leaving this module is lower-case and 0x-prefixed.
"""

from __future__ import annotations

import re
from typing import Union

from web3 import Web3

from sep20.errors import InvalidAddress, MalformedTopic

UINT256_MAX = 2 ** 256 - 1
WORD_BYTES = 32
ADDRESS_BYTES = 20

_ADDRESS_RE = re.compile(r"^[0-9a-fA-F]{40}$")
_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")

HexLike = Union[str, bytes, bytearray]


def strip_hex_prefix(value: str) -> str:
    text = (value or "").strip()
    if text[:2] in ("0x", "0X"):
        return text[2:]
    return text


def hex_to_bytes(value: HexLike) -> bytes:
    """Decode a 0x-prefixed (or bare) hex string; bytes pass through."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    body = strip_hex_prefix(str(value))
    if len(body) % 2:
        body = "0" + body
    if not _HEX_RE.match(body):
        raise ValueError(f"not a hex string: {value!r}")
    return bytes.fromhex(body)


def to_hex(value: HexLike) -> str:
    """Render bytes/HexBytes/hex text as lower-case 0x-prefixed hex."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return "0x" + strip_hex_prefix(str(value)).lower()


def keccak_hex(text: str) -> str:
    return "0x" + bytes(Web3.keccak(text=text)).hex()


def selector(signature: str) -> str:
    """4-byte function selector, e.g. ``selector("symbol()") == "0x95d89b41"``."""
    return keccak_hex(signature)[:10]


def event_topic(signature: str) -> str:
    """Full 32-byte event signature hash (topic0)."""
    return keccak_hex(signature)


TRANSFER_SIGNATURE = "Transfer(address,address,uint256)"
TRANSFER_TOPIC = event_topic(TRANSFER_SIGNATURE)


def normalize_address(addr: HexLike) -> str:
    if isinstance(addr, (bytes, bytearray)):
        if len(addr) != ADDRESS_BYTES:
            raise InvalidAddress(f"address must be {ADDRESS_BYTES} bytes, got {len(addr)}")
        return "0x" + bytes(addr).hex()
    text = str(addr or "").strip().strip('"').strip("'")
    body = strip_hex_prefix(text)
    if not _ADDRESS_RE.match(body):
        raise InvalidAddress(f"invalid address: {addr!r}")
    return "0x" + body.lower()


def pad_address(addr: HexLike) -> str:
    """Left-pad a 20-byte address with 12 zero bytes into one ABI word."""
    return "0x" + normalize_address(addr)[2:].rjust(WORD_BYTES * 2, "0")


def address_from_topic(topic: HexLike) -> str:
    if not isinstance(topic, (bytes, bytearray)):
        body = strip_hex_prefix(str(topic))
        if len(body) != WORD_BYTES * 2:
            raise MalformedTopic(f"topic must be {WORD_BYTES * 2} hex chars, got {len(body)}")
    try:
        raw = hex_to_bytes(topic)
    except ValueError as exc:
        raise MalformedTopic(str(exc)) from exc
    if len(raw) != WORD_BYTES:
        raise MalformedTopic(f"topic must be {WORD_BYTES} bytes, got {len(raw)}")
    return "0x" + raw[WORD_BYTES - ADDRESS_BYTES:].hex()


def parse_uint256(raw: Union[int, HexLike]) -> int:
    if isinstance(raw, bool):
        raise ValueError("bool is not a uint256")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, (bytes, bytearray)):
        if not raw:
            raise ValueError("empty uint256 data")
        value = int.from_bytes(bytes(raw), "big")
    else:
        text = str(raw).strip()
        if text[:2] in ("0x", "0X"):
            body = text[2:]
            if not body or not _HEX_RE.match(body):
                raise ValueError(f"invalid hex uint256: {raw!r}")
            value = int(body, 16)
        elif text.isdigit():
            value = int(text)
        else:
            raise ValueError(f"invalid uint256: {raw!r}")
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"value out of uint256 range: {value}")
    return value


def check_decimals(decimals: int) -> int:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise ValueError(f"decimals must be an int, got {decimals!r}")
    if not 0 <= decimals <= 255:
        raise ValueError(f"decimals out of range 0..255: {decimals}")
    return decimals


def scale_value(raw: Union[int, HexLike], decimals: int) -> str:
    """Render ``raw / 10**decimals`` exactly, trimming trailing fractional zeros."""
    value = parse_uint256(raw)
    decimals = check_decimals(decimals)
    if decimals == 0:
        return str(value)
    whole, frac = divmod(value, 10 ** decimals)
    frac_text = str(frac).rjust(decimals, "0").rstrip("0")
    if not frac_text:
        return str(whole)
    return f"{whole}.{frac_text}"
