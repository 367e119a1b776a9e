"""
Exceptions für den Swap + Liquidity Ablauf.
"""

from typing import Any, Dict, Optional

from web3.exceptions import ContractLogicError


class SwapLiquidityError(Exception):
    """Basis für alle Fehler dieses Bots."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(SwapLiquidityError):
    pass


class InsufficientFundsError(SwapLiquidityError):
    def __init__(self, message: str, required: int, available: int):
        super().__init__(message, {"required": required, "available": available})
        self.required = required
        self.available = available


class NoTokensReceivedError(SwapLiquidityError):
    pass


class TransactionRevertedError(SwapLiquidityError):
    def __init__(self, message: str, tx_hash: str, receipt: Any = None):
        super().__init__(message, {"tx_hash": tx_hash})
        self.tx_hash = tx_hash
        self.receipt = receipt


# --- Hinweise für bekannte Fehlerursachen ---
_HINTS = (
    ("insufficient funds", "💰 Insufficient ETH balance for transaction"),
    ("gas required exceeds", "⛽ Gas estimation failed - transaction would likely fail"),
    ("INSUFFICIENT_OUTPUT_AMOUNT", "📉 Slippage too high - try increasing slippage tolerance"),
    ("INSUFFICIENT_A_AMOUNT", "📉 Slippage too high - try increasing slippage tolerance"),
    ("INSUFFICIENT_B_AMOUNT", "📉 Slippage too high - try increasing slippage tolerance"),
    ("EXPIRED", "⏰ Transaction deadline expired"),
)


def describe_error(exc: BaseException) -> Optional[str]:
    """Liefert einen lesbaren Hinweis zu einem Fehler oder None."""
    if isinstance(exc, InsufficientFundsError):
        return _HINTS[0][1]
    text = str(exc)
    for needle, hint in _HINTS:
        if needle in text:
            return hint
    if isinstance(exc, TransactionRevertedError):
        return f"🔴 Transaction reverted: {exc.tx_hash}"
    # ContractLogicError trägt den Revert-Grund in der Message
    if isinstance(exc, ContractLogicError):
        return f"🔴 Contract revert: {exc.message or text}"
    return None
