import pytest

from executor.errors import ConfigurationError
from wallets.wallet_manager import load_wallet

# anvil default[0]
ANVIL_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ANVIL_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def test_load_wallet_from_env(monkeypatch):
    monkeypatch.setenv("PRIVATE_KEY", ANVIL_KEY)

    assert load_wallet().address == ANVIL_ADDRESS


def test_load_wallet_without_0x_prefix(monkeypatch):
    monkeypatch.setenv("PRIVATE_KEY", ANVIL_KEY[2:] + "\n")

    assert load_wallet().address == ANVIL_ADDRESS


def test_load_wallet_missing(monkeypatch):
    monkeypatch.delenv("PRIVATE_KEY", raising=False)

    with pytest.raises(ConfigurationError, match="PRIVATE_KEY"):
        load_wallet()


def test_load_wallet_invalid_key_is_not_leaked(monkeypatch):
    monkeypatch.setenv("PRIVATE_KEY", "0xdeadbeef")

    with pytest.raises(ConfigurationError) as exc_info:
        load_wallet()
    assert "deadbeef" not in str(exc_info.value)
