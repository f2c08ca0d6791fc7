# -*- coding: utf-8 -*-
"""
sep20/decoder.py

Turn raw receipts and Transfer logs into TransferRecord / TransferInfo.

Layout of a Transfer log: topics[0] = event hash, topics[1] = from,
topics[2] = to (both padded to 32 bytes), data = uint256 amount.

topics[0] is not compared against the Transfer hash unless ``strict_topic``
is set. Any log with three or more topics on a known contract decodes as a
transfer.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from sep20 import runtime_state
from sep20.codec import TRANSFER_TOPIC, address_from_topic, normalize_address, scale_value
from sep20.errors import AnomalousTransaction, MalformedLog, MalformedTopic
from sep20.models import ContractMetadata, LogEntry, TransactionReceipt, TransferInfo, TransferRecord

logger = logging.getLogger("sep20.decoder")

AnomalyHandler = Callable[[AnomalousTransaction], None]

MIN_TRANSFER_TOPICS = 3


def report_anomaly(anomaly: AnomalousTransaction) -> None:
    """Default anomaly handler: warn and remember it in the runtime state."""
    logger.warning("BAD TX %s", anomaly)
    runtime_state.note_anomaly(anomaly)


def decode_log(log: LogEntry, contract: ContractMetadata) -> TransferRecord:
    if len(log.topics) < MIN_TRANSFER_TOPICS:
        raise MalformedLog(
            f"log needs {MIN_TRANSFER_TOPICS} topics, got {len(log.topics)}"
        )
    from_addr = address_from_topic(log.topics[1])
    to_addr = address_from_topic(log.topics[2])
    try:
        value = scale_value(log.data, contract.decimals)
    except ValueError as exc:
        raise MalformedLog(f"bad transfer amount {log.data!r}: {exc}") from exc
    return TransferRecord(
        contract_address=contract.address,
        from_address=from_addr,
        to_address=to_addr,
        value=value,
        source_tx_hash=log.transaction_hash,
    )


def decode_log_batch(
    logs: Iterable[LogEntry],
    contract: ContractMetadata,
    filter_address: Optional[str] = None,
) -> List[TransferRecord]:
    """Decode logs in order; malformed entries are logged and skipped."""
    wanted = normalize_address(filter_address) if filter_address else None
    out: List[TransferRecord] = []
    for idx, log in enumerate(logs):
        try:
            record = decode_log(log, contract)
        except (MalformedLog, MalformedTopic) as exc:
            logger.warning(
                "skipping log #%d of %s (tx %s): %s",
                idx, contract.address, log.transaction_hash, exc,
            )
            continue
        if wanted and not record.involves(wanted):
            continue
        out.append(record)
    return out


def decode_receipt(
    receipt: Union[TransactionReceipt, Mapping[str, Any]],
    registry: Any,
    on_anomaly: Optional[AnomalyHandler] = None,
    strict_topic: bool = False,
) -> Optional[TransferInfo]:
    """Decode the first log of a receipt sent to a SEP-20 contract.

    Returns ``None`` when the receipt is not addressed to a token contract.
    A token receipt that fails the shape checks is passed to ``on_anomaly``
    (default :func:`report_anomaly`) and also yields ``None``.
    """
    if not isinstance(receipt, TransactionReceipt):
        receipt = TransactionReceipt.from_dict(receipt)
    if not receipt.to:
        return None

    contract = registry.get_or_probe(receipt.to)
    if contract is None:
        return None

    handler = on_anomaly or report_anomaly

    def bad(reason: str) -> None:
        handler(AnomalousTransaction(receipt.transaction_hash, contract.address, reason))

    if not receipt.status:
        bad("status failed")
        return None
    if not receipt.logs:
        bad("no logs")
        return None

    first = receipt.logs[0]
    if len(first.topics) < MIN_TRANSFER_TOPICS:
        bad(f"first log has {len(first.topics)} topics")
        return None
    if strict_topic and first.topics[0] != TRANSFER_TOPIC:
        logger.debug("tx %s: first log is not a Transfer event", receipt.transaction_hash)
        return None

    try:
        record = decode_log(first, contract)
    except (MalformedLog, MalformedTopic) as exc:
        bad(str(exc))
        return None

    transfer = TransferRecord(
        contract_address=contract.address,
        from_address=record.from_address,
        to_address=record.to_address,
        value=record.value,
        source_tx_hash=receipt.transaction_hash or record.source_tx_hash,
    )
    return TransferInfo(transfer=transfer, contract=contract)
