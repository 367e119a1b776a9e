"""
Single-Transaction Variante: ein Call an den eigenen SwapAndAddLiquidity
Contract macht Swap und addLiquidityETH atomar. Danach wird das Event
SwapAndLiquidityAdded aus dem Receipt gelesen.
"""

import logging
import sys
import time
from typing import Any, Dict, Optional

from web3 import Web3
from web3.logs import DISCARD

from executor.abis import ERC20_ABI, SWAP_AND_LIQUIDITY_ABI
from executor.amounts import check_eth_balance, format_eth, format_units
from executor.errors import ConfigurationError, describe_error
from executor.executor import checksum, init_web3, load_config, load_env, to_wei
from executor.transactions import TransactionSender
from wallets.wallet_manager import load_wallet

logger = logging.getLogger(__name__)

SWAP_SLIPPAGE_BPS = 500  # 5%
LIQUIDITY_SLIPPAGE_BPS = 500  # 5%
DEFAULT_ETH_AMOUNT = "0.001"
DEFAULT_GAS_BUFFER = "0.01"
DEFAULT_GAS_LIMIT = 500_000


def parse_swap_event(contract, receipt) -> Optional[Dict[str, Any]]:
    events = contract.events.SwapAndLiquidityAdded().process_receipt(receipt, errors=DISCARD)
    if not events:
        return None
    return dict(events[0]["args"])


def log_token_info(token) -> None:
    # nur Info, ein Fehler hier bricht nichts ab
    try:
        symbol = token.functions.symbol().call()
        decimals = token.functions.decimals().call()
        logger.info(f"Token: {symbol} ({decimals} decimals)")
    except Exception as e:
        logger.warning(f"Could not fetch token info: {e}")


def execute_swap_and_add_liquidity(
    sender: TransactionSender,
    contract,
    token,
    eth_amount: int,
    gas_buffer: int,
    gas_limit: int = DEFAULT_GAS_LIMIT,
    decimals: int = 18,
) -> Dict[str, Any]:
    w3 = sender.w3
    wallet = sender.address
    half = eth_amount // 2

    logger.info("🚀 Starting single-transaction swap and add liquidity...")
    logger.info(f"Total ETH amount: {format_eth(eth_amount)}")
    logger.info(f"ETH for swap: {format_eth(half)}")
    logger.info(f"ETH for liquidity: {format_eth(half)}")

    expected_tokens = contract.functions.getExpectedTokenOutput(token.address, half).call()
    logger.info(f"Expected tokens from swap: {format_units(expected_tokens, decimals)}")

    initial_eth = w3.eth.get_balance(wallet)
    initial_tokens = token.functions.balanceOf(wallet).call()
    logger.info("=== Initial Balances ===")
    logger.info(f"ETH balance: {format_eth(initial_eth)}")
    logger.info(f"Token balance: {format_units(initial_tokens, decimals)}")

    check_eth_balance(initial_eth, eth_amount + gas_buffer)

    logger.info("=== Executing Transaction ===")
    start_time = time.time()
    receipt = sender.send(
        contract.functions.swapAndAddLiquidity(
            token.address, SWAP_SLIPPAGE_BPS, LIQUIDITY_SLIPPAGE_BPS
        ),
        value=eth_amount,
        gas=gas_limit,
        label="Swap+liquidity",
    )
    execution_time_ms = int((time.time() - start_time) * 1000)
    logger.info(f"⏱️  Total execution time: {execution_time_ms}ms")
    logger.info(f"⛽ Gas used: {receipt['gasUsed']}")

    event = parse_swap_event(contract, receipt)
    if event:
        logger.info("=== Transaction Details ===")
        logger.info(f"ETH swapped: {format_eth(event['ethSwapped'])}")
        logger.info(f"Tokens received: {format_units(event['tokensReceived'], decimals)}")
        logger.info(f"Liquidity tokens used: {format_units(event['liquidityTokens'], decimals)}")
        logger.info(f"Liquidity ETH used: {format_eth(event['liquidityETH'])}")
        logger.info(f"LP tokens minted: {format_units(event['liquidityMinted'], 18)}")
    else:
        logger.warning("SwapAndLiquidityAdded event not found in receipt")

    final_eth = w3.eth.get_balance(wallet)
    final_tokens = token.functions.balanceOf(wallet).call()
    logger.info("=== Final Balances ===")
    logger.info(f"ETH balance: {format_eth(final_eth)}")
    logger.info(f"Token balance: {format_units(final_tokens, decimals)}")
    logger.info("=== Balance Changes ===")
    logger.info(f"ETH change: {format_units(final_eth - initial_eth, 18)}")
    logger.info(f"Token change: {format_units(final_tokens - initial_tokens, decimals)}")

    return {
        "transaction_hash": Web3.to_hex(receipt["transactionHash"]),
        "block_number": receipt["blockNumber"],
        "gas_used": receipt["gasUsed"],
        "execution_time_ms": execution_time_ms,
        "event": event,
        "success": True,
    }


def run(config_path: Optional[str] = None) -> Dict[str, Any]:
    env = load_env()
    if not env["contract_address"]:
        raise ConfigurationError("CONTRACT_ADDRESS not set in environment")
    cfg = load_config(config_path)
    network = cfg["network"]
    bundled = cfg["bundled"]

    contract_address = checksum(env["contract_address"], "CONTRACT_ADDRESS")
    account = load_wallet()
    w3 = init_web3(env["rpc_url"])
    contract = w3.eth.contract(address=contract_address, abi=SWAP_AND_LIQUIDITY_ABI)
    token = w3.eth.contract(address=network["token_address"], abi=ERC20_ABI)

    logger.info("=== Configuration ===")
    logger.info(f"Wallet: {account.address}")
    logger.info(f"Contract: {contract_address}")
    logger.info(f"Token: {network['token_address']}")
    logger.info(f"RPC: {env['rpc_url']}")
    log_token_info(token)

    result = execute_swap_and_add_liquidity(
        TransactionSender(w3, account),
        contract,
        token,
        eth_amount=to_wei(bundled.get("eth_amount", DEFAULT_ETH_AMOUNT)),
        gas_buffer=to_wei(bundled.get("gas_buffer_eth", DEFAULT_GAS_BUFFER)),
        gas_limit=bundled.get("gas_limit", DEFAULT_GAS_LIMIT),
        decimals=network.get("token_decimals", 18),
    )

    logger.info("🎉 === SUCCESS ===")
    logger.info(f"Transaction: {result['transaction_hash']}")
    logger.info(f"Block: {result['block_number']}")
    logger.info(f"Gas Used: {result['gas_used']}")
    logger.info(f"Execution Time: {result['execution_time_ms']}ms")
    return result


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    try:
        run()
    except Exception as e:
        logger.error(f"💥 Main execution failed: {e}")
        hint = describe_error(e)
        if hint:
            logger.error(hint)
        sys.exit(1)


if __name__ == "__main__":
    main()
