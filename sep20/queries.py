from __future__ import annotations

import logging
from typing import List, Optional

from sep20.codec import TRANSFER_TOPIC, normalize_address, pad_address, parse_uint256, scale_value, selector
from sep20.decoder import decode_log_batch
from sep20.errors import UnknownContract
from sep20.models import TransferRecord
from sep20.node import BlockRef, NodeClient
from sep20.registry import ContractRegistry

logger = logging.getLogger("sep20.queries")

BALANCE_OF = selector("balanceOf(address)")


def balance_call_data(owner: str) -> str:
    """``balanceOf(address)`` selector followed by the owner as one ABI word."""
    return BALANCE_OF + pad_address(owner)[2:]


def balance_of(node: NodeClient, contract_address: str, owner_address: str) -> int:
    """Raw (unscaled) token balance of ``owner_address``."""
    params = {"to": normalize_address(contract_address), "data": balance_call_data(owner_address)}
    return parse_uint256(node.call(params, "uint256"))


def scaled_balance_of(
    node: NodeClient,
    registry: ContractRegistry,
    contract_address: str,
    owner_address: str,
) -> Optional[str]:
    contract = registry.get_or_probe(contract_address)
    if contract is None:
        return None
    return scale_value(balance_of(node, contract.address, owner_address), contract.decimals)


def transfer_topics(address: Optional[str] = None) -> List[str]:
    topics = [TRANSFER_TOPIC]
    if address:
        topics.append(pad_address(address))
    return topics


def transfer_history(
    node: NodeClient,
    registry: ContractRegistry,
    contract_address: str,
    address: Optional[str] = None,
    from_block: BlockRef = "0x0",
    to_block: BlockRef = "latest",
) -> List[TransferRecord]:
    """Transfer events of a registered contract, optionally sent by ``address``.

    Only contracts already in ``registry`` are accepted; this never probes.
    """
    contract = registry.get(contract_address)
    if contract is None:
        raise UnknownContract(normalize_address(contract_address))

    topics = transfer_topics(address)
    logs = node.query_logs(contract.address, topics, from_block, to_block)
    logger.debug("%d Transfer logs for %s in [%s, %s]", len(logs), contract.address, from_block, to_block)
    return decode_log_batch(logs, contract, filter_address=address)
