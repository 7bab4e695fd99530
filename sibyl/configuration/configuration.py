from dataclasses import dataclass, replace
from typing import Optional, Mapping
from pathlib import Path
import os
from loguru import logger
import sibyl.configuration.constants as global_constants

@dataclass(frozen=True)
class NetworkConfig:
    """Configuration for a Solana cluster (devnet or mainnet-beta)"""
    name: str
    rpc_url: str
    explorer_cluster: Optional[str] = None  # solscan ?cluster= value, None for mainnet

    def explorer_tx_url(self, signature: str) -> str:
        url = global_constants.EXPLORER_TX_URL_MASK.format(signature=signature)
        if self.explorer_cluster:
            url = f"{url}?cluster={self.explorer_cluster}"
        return url

@dataclass(frozen=True)
class OracleConfig:
    """Everything a single agent run needs, resolved once and passed to every service"""
    network: NetworkConfig
    rpc_url: str
    program_id: str = global_constants.ORACLE_PROGRAM_ID
    deepseek_api_key: Optional[str] = None
    deepseek_base_url: str = global_constants.DEEPSEEK_BASE_URL
    deepseek_model: str = global_constants.DEFAULT_DEEPSEEK_MODEL
    wallet_private_key: Optional[str] = None
    keypair_path: Path = global_constants.DEFAULT_KEYPAIR_PATH
    log_dir: Path = global_constants.DEFAULT_LOG_DIR
    drafts_dir: Path = global_constants.DEFAULT_DRAFTS_DIR
    strict: bool = False

    def with_overrides(self, **overrides) -> 'OracleConfig':
        """Return a copy with the non-None overrides applied"""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

# Network configurations
SOLANA_DEVNET = NetworkConfig(
    name="devnet",
    rpc_url="https://api.devnet.solana.com",
    explorer_cluster="devnet",
)

SOLANA_MAINNET_BETA = NetworkConfig(
    name="mainnet-beta",
    rpc_url="https://api.mainnet-beta.solana.com",
)

NETWORKS = {network.name: network for network in (SOLANA_DEVNET, SOLANA_MAINNET_BETA)}

def get_network_config(name: str = SOLANA_DEVNET.name) -> NetworkConfig:
    """Get a network configuration by cluster name"""
    try:
        return NETWORKS[name]
    except KeyError:
        raise ValueError(f"Unknown Solana network: {name}. Expected one of {sorted(NETWORKS)}")

def load_oracle_config(
        network_name: str = SOLANA_DEVNET.name,
        env: Optional[Mapping[str, str]] = None,
        **overrides
    ) -> OracleConfig:
    """Build an OracleConfig from environment variables.

    SOLANA_RPC overrides the cluster's public endpoint. Empty variables count as unset.
    Keyword overrides (e.g. strict, log_dir) win over the environment.
    """
    env = os.environ if env is None else env

    def _get(key: str) -> Optional[str]:
        value = env.get(key)
        return value.strip() if value and value.strip() else None

    network = get_network_config(network_name)
    rpc_url = _get('SOLANA_RPC') or network.rpc_url
    keypair_path = _get('SOLANA_KEYPAIR_PATH')

    config = OracleConfig(
        network=network,
        rpc_url=rpc_url,
        program_id=_get('SIBYL_PROGRAM_ID') or global_constants.ORACLE_PROGRAM_ID,
        deepseek_api_key=_get('DEEPSEEK_API_KEY'),
        deepseek_base_url=_get('DEEPSEEK_BASE_URL') or global_constants.DEEPSEEK_BASE_URL,
        deepseek_model=_get('DEEPSEEK_MODEL') or global_constants.DEFAULT_DEEPSEEK_MODEL,
        wallet_private_key=_get('SOLANA_PRIVATE_KEY'),
        keypair_path=Path(keypair_path).expanduser() if keypair_path else global_constants.DEFAULT_KEYPAIR_PATH,
    ).with_overrides(**overrides)

    logger.debug(f"load_oracle_config: Using {config.network.name} at {config.rpc_url}")
    return config
