"""
Unit tests für executor/amounts.py

- Slippage-Grenze == Q * 95 // 100 (ganzzahlig, abgerundet)
- Deadline == jetzt + 300s
- Preflight ETH-Check
"""

from types import SimpleNamespace

import pytest
from web3 import Web3

from executor import amounts
from executor.amounts import (
    DEADLINE_SECONDS,
    check_eth_balance,
    deadline,
    format_units,
    min_amount_out,
)
from executor.errors import InsufficientFundsError


@pytest.mark.parametrize("quoted", [0, 1, 19, 20, 99, 100, 101, 12_345_678_901, 10**18 + 7, 2**256 - 1])
def test_min_amount_out_matches_95_percent_truncated(quoted):
    assert min_amount_out(quoted) == quoted * 95 // 100


def test_min_amount_out_truncates_instead_of_rounding():
    # 19 * 0.95 = 18.05 -> 18, 39 * 0.95 = 37.05 -> 37
    assert min_amount_out(19) == 18
    assert min_amount_out(39) == 37


def test_min_amount_out_custom_bps():
    assert min_amount_out(10_000, slippage_bps=100) == 9_900
    assert min_amount_out(10_000, slippage_bps=0) == 10_000


def test_min_amount_out_rejects_invalid_bps():
    with pytest.raises(ValueError):
        min_amount_out(100, slippage_bps=10_001)
    with pytest.raises(ValueError):
        min_amount_out(100, slippage_bps=-1)


def test_deadline_is_now_plus_300():
    assert DEADLINE_SECONDS == 300
    assert deadline(1_700_000_000) == 1_700_000_300
    # Sekundenbruchteile werden abgeschnitten
    assert deadline(1_700_000_000.9) == 1_700_000_300


def test_deadline_uses_current_time(monkeypatch):
    monkeypatch.setattr(amounts, "time", SimpleNamespace(time=lambda: 1_234_567_890.4))
    assert deadline() == 1_234_567_890 + 300


class TestCheckEthBalance:
    required = Web3.to_wei("0.002", "ether")

    def test_enough_balance_passes(self):
        check_eth_balance(Web3.to_wei("0.003", "ether"), self.required)

    def test_exact_threshold_passes(self):
        check_eth_balance(self.required, self.required)

    def test_below_threshold_raises(self):
        available = Web3.to_wei("0.0015", "ether")
        with pytest.raises(InsufficientFundsError) as exc_info:
            check_eth_balance(available, self.required)
        err = exc_info.value
        assert err.required == self.required
        assert err.available == available
        assert "Required: 0.002" in str(err)
        assert "Available: 0.0015" in str(err)


def test_format_units():
    assert format_units(1_500_000_000_000_000) == "0.0015"
    assert format_units(10 * 10**18) == "10"
    assert format_units(0) == "0"
    assert format_units(-5 * 10**14) == "-0.0005"
    assert format_units(1_234_567, decimals=6) == "1.234567"
