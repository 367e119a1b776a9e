import json
import logging
import os
import sys
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from web3 import Web3

from executor.amounts import (
    check_eth_balance,
    deadline,
    format_eth,
    format_units,
    min_amount_out,
)
from executor.errors import NoTokensReceivedError, describe_error
from executor.executor import init_contracts, init_web3, load_config, load_env, to_wei
from executor.transactions import TransactionSender
from wallets.wallet_manager import load_wallet

logger = logging.getLogger(__name__)

DEFAULT_SWAP_ETH = "0.0005"
DEFAULT_LIQUIDITY_ETH = "0.0005"
DEFAULT_REQUIRED_ETH = "0.002"  # Swap + Liquidity + Gas
GAS_LIMITS = {
    "swap": 200_000,
    "approve": 100_000,
    "add_liquidity": 250_000,
}


# --- Logger: jeder Lauf landet in trades/tradelog.json ---
def log_trade(log_dir: str, trade_data: Dict[str, Any]) -> None:
    log_file = os.path.join(log_dir, "tradelog.json")
    os.makedirs(log_dir, exist_ok=True)
    logs = []
    if os.path.exists(log_file):
        with open(log_file, "r") as f:
            try:
                logs = json.load(f)
            except json.JSONDecodeError:
                logger.warning(f"Corrupt trade log {log_file}, starting a new one")
    logs.append(trade_data)
    with open(log_file, "w") as f:
        json.dump(logs, f, indent=2)


# --- Swap ETH -> Token, dann Token + ETH als Liquidity ---
def swap_and_add_liquidity(
    sender: TransactionSender,
    router,
    token,
    weth_address: str,
    swap_amount: int,
    liquidity_amount: int,
    gas_limits: Optional[Dict[str, int]] = None,
    decimals: int = 18,
) -> Dict[str, Any]:
    gas = {**GAS_LIMITS, **(gas_limits or {})}
    wallet = sender.address
    router_address = router.address
    token_address = token.address

    logger.info(f"Swapping {format_eth(swap_amount)} ETH for tokens...")

    # Schritt 1: Quote + Swap
    path = [weth_address, token_address]
    amounts_out = router.functions.getAmountsOut(swap_amount, path).call()
    expected_tokens = amounts_out[1]
    min_tokens_out = min_amount_out(expected_tokens)
    logger.info(f"Expected tokens: {format_units(expected_tokens, decimals)}")
    logger.info(f"Min tokens (5% slippage): {format_units(min_tokens_out, decimals)}")

    swap_receipt = sender.send(
        router.functions.swapExactETHForTokens(min_tokens_out, path, wallet, deadline()),
        value=swap_amount,
        gas=gas["swap"],
        label="Swap",
    )

    # Schritt 2: Balance prüfen
    token_balance = token.functions.balanceOf(wallet).call()
    logger.info(f"Token balance after swap: {format_units(token_balance, decimals)}")
    if token_balance == 0:
        raise NoTokensReceivedError("No tokens received from swap")

    # Schritt 3: Approve, falls nötig (setzt Allowance auf genau die Balance)
    approval_hash = None
    current_allowance = token.functions.allowance(wallet, router_address).call()
    logger.info(f"Current allowance: {format_units(current_allowance, decimals)}")
    if current_allowance < token_balance:
        logger.info("Approving tokens for router...")
        approve_receipt = sender.send(
            token.functions.approve(router_address, token_balance),
            gas=gas["approve"],
            label="Approval",
        )
        approval_hash = Web3.to_hex(approve_receipt["transactionHash"])
    else:
        logger.info("Sufficient allowance already exists")

    # Schritt 4: addLiquidityETH
    min_token_amount = min_amount_out(token_balance)
    min_eth_amount = min_amount_out(liquidity_amount)
    logger.info(
        f"Adding liquidity: {format_units(token_balance, decimals)} tokens + "
        f"{format_eth(liquidity_amount)} ETH"
    )
    liquidity_receipt = sender.send(
        router.functions.addLiquidityETH(
            token_address,
            token_balance,
            min_token_amount,
            min_eth_amount,
            wallet,
            deadline(),
        ),
        value=liquidity_amount,
        gas=gas["add_liquidity"],
        label="Add liquidity",
    )
    liquidity_hash = Web3.to_hex(liquidity_receipt["transactionHash"])
    logger.info(f"Liquidity added successfully in block: {liquidity_receipt['blockNumber']}")

    final_token_balance = token.functions.balanceOf(wallet).call()
    final_eth_balance = sender.w3.eth.get_balance(wallet)
    logger.info("=== Final Balances ===")
    logger.info(f"Token balance: {format_units(final_token_balance, decimals)}")
    logger.info(f"ETH balance: {format_eth(final_eth_balance)}")

    return {
        "swap_hash": Web3.to_hex(swap_receipt["transactionHash"]),
        "approval_hash": approval_hash,
        "liquidity_hash": liquidity_hash,
        "tokens_received": token_balance,
        "liquidity_added": True,
    }


def execute(sender: TransactionSender, router, token, cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Preflight-Check, dann swap_and_add_liquidity. Schreibt den Tradelog."""
    network = cfg["network"]
    two_step = cfg.get("two_step", {})
    decimals = network.get("token_decimals", 18)
    wallet = sender.address

    eth_balance = sender.w3.eth.get_balance(wallet)
    token_balance = token.functions.balanceOf(wallet).call()
    logger.info("=== Initial Balances ===")
    logger.info(f"ETH balance: {format_eth(eth_balance)}")
    logger.info(f"Token balance: {format_units(token_balance, decimals)}")
    logger.info(f"Wallet address: {wallet}")

    # Kein einziger TX wenn zu wenig ETH da ist
    required_eth = to_wei(two_step.get("required_eth", DEFAULT_REQUIRED_ETH))
    check_eth_balance(eth_balance, required_eth)

    swap_amount = to_wei(two_step.get("swap_amount_eth", DEFAULT_SWAP_ETH))
    liquidity_amount = to_wei(two_step.get("liquidity_amount_eth", DEFAULT_LIQUIDITY_ETH))
    trade_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "mode": "two_step",
        "token": network["token_address"],
        "amount_in": format_eth(swap_amount),
        "liquidity_eth": format_eth(liquidity_amount),
    }

    start_time = time.time()
    try:
        result = swap_and_add_liquidity(
            sender,
            router,
            token,
            network["weth_address"],
            swap_amount,
            liquidity_amount,
            gas_limits=two_step.get("gas"),
            decimals=decimals,
        )
    except Exception as e:
        trade_data.update({"tx_hashes": list(sender.sent_hashes), "status": "FAILED", "error": str(e)})
        log_trade(cfg["trade_log_dir"], trade_data)
        raise
    elapsed_ms = int((time.time() - start_time) * 1000)

    logger.info("=== SUCCESS ===")
    logger.info(f"Total execution time: {elapsed_ms}ms")
    logger.info(f"Swap transaction: {result['swap_hash']}")
    logger.info(f"Liquidity transaction: {result['liquidity_hash']}")

    trade_data.update({
        "tokens_received": str(result["tokens_received"]),
        "execution_time_ms": elapsed_ms,
        "tx_hashes": list(sender.sent_hashes),
        "status": "SUCCESS",
    })
    log_trade(cfg["trade_log_dir"], trade_data)
    return result


def run(config_path: Optional[str] = None) -> Dict[str, Any]:
    env = load_env()
    cfg = load_config(config_path)
    account = load_wallet()
    w3 = init_web3(env["rpc_url"])
    router, token = init_contracts(w3, cfg)

    logger.info("🚀 Starting swap and add liquidity")
    logger.info(f"wallet: {account.address}")
    logger.info(f"provider: {env['rpc_url']}")
    logger.info(f"token contract: {cfg['network']['token_address']}")

    return execute(TransactionSender(w3, account), router, token, cfg)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    try:
        run()
    except Exception as e:
        logger.error(f"Main execution failed: {e}")
        hint = describe_error(e)
        if hint:
            logger.error(hint)
        sys.exit(1)


if __name__ == "__main__":
    main()
