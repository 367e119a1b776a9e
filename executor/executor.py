import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv
from web3 import Web3
from web3.contract import Contract
from web3.middleware import ExtraDataToPOAMiddleware

from executor.abis import ERC20_ABI, ROUTER_ABI
from executor.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"

# Goerli, Sepolia
POA_CHAIN_IDS = (5, 11155111)

_ADDRESS_KEYS = ("token_address", "weth_address", "router_address")


# --- Configuration loader ---
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Lädt config.yaml (Adressen, Beträge, Gas-Limits).
    Pfad: Argument > CONFIG_PATH > config.yaml im Repo-Root.
    """
    cfg_path = Path(path or os.getenv("CONFIG_PATH") or DEFAULT_CONFIG_PATH)
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigurationError(f"Config file not found: {cfg_path}") from None

    network = cfg.get("network")
    if not isinstance(network, dict):
        raise ConfigurationError(f"'network' section missing in {cfg_path}")
    for key in _ADDRESS_KEYS:
        network[key] = checksum(network.get(key), key)
    network.setdefault("token_decimals", 18)
    cfg.setdefault("two_step", {})
    cfg.setdefault("bundled", {})
    cfg.setdefault("trade_log_dir", "trades")
    return cfg


def checksum(address: Optional[str], name: str) -> str:
    if not address:
        raise ConfigurationError(f"Missing address: {name}")
    try:
        return Web3.to_checksum_address(address)
    except ValueError:
        raise ConfigurationError(f"Malformed address for {name}: {address}") from None


def to_wei(amount: Any) -> int:
    # YAML liefert Floats, über str gehen damit keine Rundungsfehler entstehen
    return Web3.to_wei(str(amount), "ether")


def load_env() -> Dict[str, Optional[str]]:
    """Liest RPC_URL und CONTRACT_ADDRESS aus .env / Umgebung."""
    load_dotenv()
    rpc_url = os.getenv("RPC_URL")
    if not rpc_url:
        raise ConfigurationError("RPC_URL not set in environment")
    return {
        "rpc_url": rpc_url,
        "contract_address": os.getenv("CONTRACT_ADDRESS"),
    }


# --- Web3 Setup mit optionaler PoA-Middleware für Testnets ---
def init_web3(rpc_url: str) -> Web3:
    w3 = Web3(Web3.HTTPProvider(rpc_url))
    if not w3.is_connected():
        logger.error(f"Failed to connect to RPC: {rpc_url}")
        raise ConnectionError(f"Failed to connect to RPC: {rpc_url}")
    if w3.eth.chain_id in POA_CHAIN_IDS:
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return w3


def init_contracts(w3: Web3, cfg: Dict[str, Any]) -> Tuple[Contract, Contract]:
    network = cfg["network"]
    router = w3.eth.contract(address=network["router_address"], abi=ROUTER_ABI)
    token = w3.eth.contract(address=network["token_address"], abi=ERC20_ABI)
    return router, token
