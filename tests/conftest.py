from __future__ import annotations

import pytest

from fakes import TOKEN, FakeNode, token_answers
from sep20 import runtime_state


@pytest.fixture(autouse=True)
def _clean_runtime_state():
    runtime_state.reset_state()
    yield
    runtime_state.reset_state()


@pytest.fixture
def node():
    return FakeNode({TOKEN: token_answers(name="Tether", symbol="USDT", supply=5 * 10 ** 12, decimals=6)})
