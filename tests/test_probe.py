from __future__ import annotations

import pytest

from fakes import TOKEN, FakeNode, token_answers
from sep20 import runtime_state
from sep20.codec import selector
from sep20.errors import ProbeIncomplete
from sep20.probe import probe_contract, probe_contract_strict


def test_probe_returns_full_metadata(node):
    meta = probe_contract(node, TOKEN.upper().replace("0X", "0x"))
    assert meta is not None
    assert meta.address == TOKEN
    assert (meta.name, meta.symbol, meta.decimals) == ("Tether", "USDT", 6)
    assert meta.total_supply == str(5 * 10 ** 12)
    assert meta.scaled_total_supply() == "5000000"
    assert runtime_state.get_state()["probe_ok"] == 1


@pytest.mark.parametrize("signature", ["symbol()", "name()", "totalSupply()", "decimals()"])
def test_probe_is_all_or_nothing(signature):
    answers = token_answers()
    answers[selector(signature)] = TimeoutError("node too slow")
    assert probe_contract(FakeNode({TOKEN: answers}), TOKEN) is None
    assert runtime_state.get_state()["probe_failed"] == 1


def test_probe_stops_at_first_failure():
    answers = token_answers()
    del answers[selector("symbol()")]
    fake = FakeNode({TOKEN: answers})
    with pytest.raises(ProbeIncomplete) as info:
        probe_contract_strict(fake, TOKEN)
    assert info.value.call == "symbol"
    assert info.value.address == TOKEN
    assert len(fake.calls) == 1


def test_decimals_out_of_range_is_not_coerced():
    answers = token_answers(decimals=256)
    with pytest.raises(ProbeIncomplete) as info:
        probe_contract_strict(FakeNode({TOKEN: answers}), TOKEN)
    assert info.value.call == "decimals"
    assert probe_contract(FakeNode({TOKEN: answers}), TOKEN) is None


def test_wrongly_typed_answers_fail_the_probe():
    answers = token_answers()
    answers[selector("name()")] = 12345
    assert probe_contract(FakeNode({TOKEN: answers}), TOKEN) is None

    answers = token_answers()
    answers[selector("totalSupply()")] = "lots"
    assert probe_contract(FakeNode({TOKEN: answers}), TOKEN) is None


def test_probe_of_plain_account_is_none():
    assert probe_contract(FakeNode(), TOKEN) is None


def test_undecodable_string_fails_the_probe():
    answers = token_answers()
    answers[selector("symbol()")] = b"\xffUSD"
    fake = FakeNode({TOKEN: answers})
    with pytest.raises(ProbeIncomplete) as info:
        probe_contract_strict(fake, TOKEN)
    assert info.value.call == "symbol"
    assert probe_contract(fake, TOKEN) is None
