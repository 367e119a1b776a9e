import time
from decimal import Decimal, localcontext
from typing import Optional

from web3 import Web3

from executor.errors import InsufficientFundsError

# Fest verdrahtet, nicht über config.yaml änderbar
SLIPPAGE_BPS = 500  # 5%
DEADLINE_SECONDS = 300
BPS_DENOMINATOR = 10_000


def min_amount_out(amount: int, slippage_bps: int = SLIPPAGE_BPS) -> int:
    """Untere Grenze für amount nach Abzug der Slippage (ganzzahlig, abgerundet).

    Mit 500 bps identisch zu amount * 95 // 100.
    """
    if slippage_bps < 0 or slippage_bps > BPS_DENOMINATOR:
        raise ValueError(f"slippage_bps out of range: {slippage_bps}")
    return amount * (BPS_DENOMINATOR - slippage_bps) // BPS_DENOMINATOR


def deadline(now: Optional[float] = None) -> int:
    if now is None:
        now = time.time()
    return int(now) + DEADLINE_SECONDS


def check_eth_balance(balance_wei: int, required_wei: int) -> None:
    if balance_wei < required_wei:
        raise InsufficientFundsError(
            f"Insufficient ETH balance. Required: {format_eth(required_wei)}, "
            f"Available: {format_eth(balance_wei)}",
            required=required_wei,
            available=balance_wei,
        )


def format_eth(amount_wei: int) -> str:
    return str(Web3.from_wei(amount_wei, "ether"))


def format_units(amount: int, decimals: int = 18) -> str:
    # uint256 hat bis zu 78 Stellen, Default-Präzision (28) reicht nicht
    with localcontext() as ctx:
        ctx.prec = 100
        value = Decimal(amount) / (Decimal(10) ** decimals)
        return f"{value.normalize():f}"
