import itertools
from unittest.mock import MagicMock

import pytest
from web3 import Web3

from executor.transactions import TransactionSender

WALLET = "0x05B0C9Ff10E3D599Ca4386Bc316672C2b5643461"
ROUTER = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"
TOKEN = "0x22FA7fD918A4364de63Be573D8982Af47d9cB6BA"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
TOKEN_BALANCE = 990_000 * 10**18


def receipt_for(tx_hash, status=1, block=100):
    return {
        "status": status,
        "blockNumber": block,
        "gasUsed": 150_000,
        "transactionHash": tx_hash,
        "logs": [],
    }


@pytest.fixture
def w3():
    """Web3-Mock: jede gesendete TX bekommt einen eigenen Hash und Status 1."""
    counter = itertools.count(1)
    mock = MagicMock()
    mock.eth.get_transaction_count.return_value = 7
    mock.eth.gas_price = Web3.to_wei(5, "gwei")
    mock.eth.chain_id = 11155111
    mock.eth.get_balance.return_value = Web3.to_wei("0.003", "ether")
    mock.eth.send_raw_transaction.side_effect = lambda raw: bytes([next(counter)]) * 32
    mock.eth.wait_for_transaction_receipt.side_effect = lambda tx_hash, timeout=None: receipt_for(tx_hash)
    return mock


@pytest.fixture
def account():
    acct = MagicMock()
    acct.address = WALLET
    acct.sign_transaction.return_value = MagicMock(raw_transaction=b"\x02signed")
    return acct


@pytest.fixture
def sender(w3, account):
    return TransactionSender(w3, account)


@pytest.fixture
def router():
    mock = MagicMock()
    mock.address = ROUTER
    mock.functions.getAmountsOut.return_value.call.return_value = [
        Web3.to_wei("0.0005", "ether"),
        1_000_000 * 10**18,
    ]
    return mock


@pytest.fixture
def token():
    """Token mit 990k Balance und ohne Allowance für den Router."""
    mock = MagicMock()
    mock.address = TOKEN
    mock.functions.balanceOf.return_value.call.return_value = TOKEN_BALANCE
    mock.functions.allowance.return_value.call.return_value = 0
    return mock


@pytest.fixture
def cfg(tmp_path):
    return {
        "network": {
            "token_address": TOKEN,
            "weth_address": WETH,
            "router_address": ROUTER,
            "token_decimals": 18,
        },
        "two_step": {
            "swap_amount_eth": "0.0005",
            "liquidity_amount_eth": "0.0005",
            "required_eth": "0.002",
        },
        "bundled": {},
        "trade_log_dir": str(tmp_path / "trades"),
    }
