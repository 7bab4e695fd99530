from pathlib import Path
import json
from loguru import logger
from solders.keypair import Keypair
from sibyl.configuration.configuration import OracleConfig
from sibyl.utilities.exceptions import WalletNotFoundException

def keypair_from_file(keypair_path: Path) -> Keypair:
    """Load a solana-cli style keypair file (JSON array of 64 secret key bytes)"""
    with open(keypair_path, 'r') as file:
        keypair_data = json.load(file)
    return Keypair.from_bytes(bytes(keypair_data))

def load_wallet(oracle_config: OracleConfig) -> Keypair:
    """
    Load the oracle authority wallet.

    SOLANA_PRIVATE_KEY (base58) takes precedence over the keypair file.

    Raises:
        WalletNotFoundException: if neither source yields a usable keypair
    """
    if oracle_config.wallet_private_key:
        try:
            return Keypair.from_base58_string(oracle_config.wallet_private_key)
        except ValueError as e:
            raise WalletNotFoundException(
                oracle_config.keypair_path, reason=f"SOLANA_PRIVATE_KEY is not a valid base58 secret key: {e}"
            ) from e

    keypair_path = Path(oracle_config.keypair_path)
    if keypair_path.exists():
        try:
            wallet = keypair_from_file(keypair_path)
            logger.debug(f"load_wallet: Loaded wallet {wallet.pubkey()} from {keypair_path}")
            return wallet
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Could not load wallet from file: {e}")

    raise WalletNotFoundException(keypair_path)
