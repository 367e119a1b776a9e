import os

from eth_account import Account
from eth_account.signers.local import LocalAccount

from executor.errors import ConfigurationError

PRIVATE_KEY_ENV = "PRIVATE_KEY"


# Wallet aus privatem Schlüssel laden (hex, mit oder ohne 0x)
def load_wallet(env_var: str = PRIVATE_KEY_ENV) -> LocalAccount:
    private_key = os.getenv(env_var)
    if not private_key:
        raise ConfigurationError(f"Private key not found in environment variable {env_var}")
    try:
        return Account.from_key(private_key.strip())
    except Exception as e:
        # Schlüssel nie in die Message schreiben
        raise ConfigurationError(f"Invalid private key in {env_var}: {type(e).__name__}") from None
