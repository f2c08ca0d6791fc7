from __future__ import annotations

from fakes import ALICE, BOB, TOKEN, FakeNode, token_answers, transfer_log
from sep20 import runtime_state
from sep20.codec import TRANSFER_TOPIC, event_topic, pad_address
from sep20.decoder import decode_log_batch, decode_receipt
from sep20.models import LogEntry, TransactionReceipt
from sep20.registry import ContractRegistry

TX = "0x" + "ef" * 32
APPROVAL_TOPIC = event_topic("Approval(address,address,uint256)")


def _registry(node):
    return ContractRegistry(node)


def _receipt(status=True, logs=None, to=TOKEN):
    return TransactionReceipt(
        transaction_hash=TX,
        to=to,
        status=status,
        logs=tuple(logs if logs is not None else [transfer_log()]),
    )


def test_decode_receipt_scales_value(node):
    anomalies = []
    info = decode_receipt(_receipt(), _registry(node), on_anomaly=anomalies.append)

    assert anomalies == []
    assert info is not None
    assert info.contract.symbol == "USDT"
    assert info.transfer.value == "1"
    assert info.transfer.from_address == ALICE
    assert info.transfer.to_address == BOB
    assert info.transfer.contract_address == TOKEN
    assert info.transfer.source_tx_hash == TX


def test_failed_status_is_an_anomaly(node):
    anomalies = []
    info = decode_receipt(_receipt(status=False), _registry(node), on_anomaly=anomalies.append)

    assert info is None
    assert len(anomalies) == 1
    assert anomalies[0].contract_address == TOKEN
    assert anomalies[0].tx_hash == TX
    assert "status" in anomalies[0].reason


def test_shape_problems_are_anomalies(node):
    registry = _registry(node)
    short = LogEntry(address=TOKEN, topics=(APPROVAL_TOPIC, pad_address(ALICE)), data="0x01")
    bad_data = LogEntry(
        address=TOKEN,
        topics=(APPROVAL_TOPIC, pad_address(ALICE), pad_address(BOB)),
        data="0x",
    )
    anomalies = []
    for logs in ([], [short], [bad_data]):
        assert decode_receipt(_receipt(logs=logs), registry, on_anomaly=anomalies.append) is None
    assert [a.reason for a in anomalies][:2] == ["no logs", "first log has 2 topics"]
    assert len(anomalies) == 3


def test_default_handler_records_anomaly(node):
    assert decode_receipt(_receipt(status=False), _registry(node)) is None
    state = runtime_state.get_state()
    assert state["anomaly_count"] == 1
    assert state["recent_anomalies"][0]["tx_hash"] == TX


def test_non_token_receipts_are_silent():
    anomalies = []
    registry = _registry(FakeNode())
    assert decode_receipt(_receipt(), registry, on_anomaly=anomalies.append) is None
    assert decode_receipt(_receipt(to=None), registry, on_anomaly=anomalies.append) is None
    assert anomalies == []


def test_topic0_is_only_checked_in_strict_mode(node):
    approval = LogEntry(
        address=TOKEN,
        topics=(APPROVAL_TOPIC, pad_address(ALICE), pad_address(BOB)),
        data="0x" + format(5, "064x"),
    )
    registry = _registry(node)
    anomalies = []

    loose = decode_receipt(_receipt(logs=[approval]), registry, on_anomaly=anomalies.append)
    assert loose is not None and loose.transfer.value == "0.000005"

    strict = decode_receipt(
        _receipt(logs=[approval]), registry, on_anomaly=anomalies.append, strict_topic=True
    )
    assert strict is None
    assert anomalies == []


def test_decode_raw_web3_style_receipt():
    fake = FakeNode({TOKEN: token_answers(decimals=18)})
    log = transfer_log(amount=1500000000000000000)
    raw = {
        "transactionHash": bytes.fromhex("ef" * 32),
        "to": TOKEN.upper().replace("0X", "0x"),
        "status": "0x1",
        "logs": [
            {
                "address": TOKEN,
                "topics": [bytes.fromhex(t[2:]) for t in log.topics],
                "data": log.data,
                "transactionHash": TX,
            }
        ],
    }
    info = decode_receipt(raw, _registry(fake), on_anomaly=lambda a: None)
    assert info is not None
    assert info.transfer.value == "1.5"
    assert info.transfer.source_tx_hash == TX


def test_batch_preserves_order_and_skips_malformed(node):
    contract = _registry(node).get_or_probe(TOKEN)
    logs = [
        transfer_log(amount=1, tx_hash="0x01"),
        LogEntry(address=TOKEN, topics=(APPROVAL_TOPIC,), data="0x00", transaction_hash="0x02"),
        transfer_log(src=BOB, dst=ALICE, amount=2_500_000, tx_hash="0x03"),
        LogEntry(
            address=TOKEN,
            topics=(APPROVAL_TOPIC, "0x1234", pad_address(BOB)),
            data="0x00",
            transaction_hash="0x04",
        ),
    ]
    records = decode_log_batch(logs, contract)
    assert [r.source_tx_hash for r in records] == ["0x01", "0x03"]
    assert [r.value for r in records] == ["0.000001", "2.5"]


def test_batch_filter_address(node):
    contract = _registry(node).get_or_probe(TOKEN)
    carol = "0x" + "33" * 20
    logs = [transfer_log(), transfer_log(src=carol, dst=carol)]
    records = decode_log_batch(logs, contract, filter_address=BOB.upper().replace("0X", "0x"))
    assert len(records) == 1
    assert records[0].to_address == BOB


def test_log_entry_normalizes_case():
    log = LogEntry(
        address=TOKEN.upper().replace("0X", "0x"),
        topics=(TRANSFER_TOPIC.upper().replace("0X", "0x"), pad_address(ALICE), pad_address(BOB)),
        data="0x" + format(1_000_000, "064X"),
        transaction_hash=TX.upper().replace("0X", "0x"),
    )
    assert log.address == TOKEN
    assert log.topics[0] == TRANSFER_TOPIC
    assert log.transaction_hash == TX


def test_strict_mode_accepts_upper_case_transfer_hash(node):
    log = LogEntry(
        address=TOKEN,
        topics=(TRANSFER_TOPIC.upper().replace("0X", "0x"), pad_address(ALICE), pad_address(BOB)),
        data="0x" + format(1_000_000, "064x"),
    )
    info = decode_receipt(_receipt(logs=[log]), _registry(node), on_anomaly=lambda a: None, strict_topic=True)
    assert info is not None
    assert info.transfer.value == "1"
