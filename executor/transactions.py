import logging
from typing import Any, Dict, Optional

from eth_account.signers.local import LocalAccount
from web3 import Web3

from executor.errors import TransactionRevertedError

logger = logging.getLogger(__name__)

RECEIPT_TIMEOUT = 300  # Sekunden, danach TimeExhausted von web3


class TransactionSender:
    """Baut, signiert und sendet Contract-Calls einzeln nacheinander.

    Jede Transaktion wird bis zur ersten Bestätigung abgewartet, bevor die
    nächste gebaut wird. Es gibt also nie zwei offene TX gleichzeitig.
    """

    def __init__(self, w3: Web3, account: LocalAccount, receipt_timeout: int = RECEIPT_TIMEOUT):
        self.w3 = w3
        self.account = account
        self.receipt_timeout = receipt_timeout
        self.sent_hashes = []

    @property
    def address(self) -> str:
        return self.account.address

    def build(self, contract_fn, value: int = 0, gas: Optional[int] = None) -> Dict[str, Any]:
        params = {
            "from": self.address,
            "value": value,
            "nonce": self.w3.eth.get_transaction_count(self.address, "pending"),
            "gasPrice": self.w3.eth.gas_price,
            "chainId": self.w3.eth.chain_id,
        }
        if gas is not None:
            params["gas"] = gas
        return contract_fn.build_transaction(params)

    def send(self, contract_fn, value: int = 0, gas: Optional[int] = None, label: str = "TX"):
        """Sendet contract_fn und wartet auf den Receipt.

        Wirft TransactionRevertedError wenn status != 1.
        """
        tx = self.build(contract_fn, value=value, gas=gas)
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        tx_hash_hex = Web3.to_hex(tx_hash)
        self.sent_hashes.append(tx_hash_hex)
        logger.info(f"{label} transaction sent: {tx_hash_hex}")

        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        if receipt["status"] != 1:
            logger.error(f"{label} reverted in block {receipt['blockNumber']}: {tx_hash_hex}")
            raise TransactionRevertedError(
                f"{label} transaction reverted: {tx_hash_hex}",
                tx_hash=tx_hash_hex,
                receipt=receipt,
            )
        logger.info(f"{label} confirmed in block: {receipt['blockNumber']}")
        return receipt
