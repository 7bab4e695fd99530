# Standard Library
from dataclasses import dataclass
from typing import Optional

# Third Party
from loguru import logger
from openai import AsyncOpenAI
from solana.rpc.async_api import AsyncClient
from solders.keypair import Keypair

# Local
from ..ai.deepseek import DeepSeekRequestTool
from ..configuration.configuration import OracleConfig
from ..utilities.announcement import AnnouncementDrafter
from ..utilities.credentials import load_wallet
from ..utilities.oracle_program import OracleProgramClient
from ..utilities.prediction_log import PredictionLog
from ..utilities.prediction_recorder import PredictionRecorder
from ..utilities.run_orchestrator import RunOrchestrator

@dataclass
class ServiceContainer:
    """Container for Sibyl service initialization and management"""
    oracle_config: OracleConfig
    wallet: Keypair
    deepseek: DeepSeekRequestTool
    oracle_program: OracleProgramClient
    prediction_log: PredictionLog
    recorder: PredictionRecorder
    drafter: AnnouncementDrafter

    @classmethod
    def initialize(
        cls,
        oracle_config: OracleConfig,
        rpc_client: Optional[AsyncClient] = None,
        openai_client: Optional[AsyncOpenAI] = None,
    ) -> 'ServiceContainer':
        """
        Initialize all Sibyl services for one run

        Args:
            oracle_config: Resolved configuration, threaded into every service
            rpc_client: Optional Solana RPC client (defaults to one for oracle_config.rpc_url)
            openai_client: Optional completion client (defaults to DeepSeek when an API key is set)

        Raises:
            WalletNotFoundException: if no wallet can be loaded
        """
        wallet = load_wallet(oracle_config)

        deepseek = DeepSeekRequestTool(oracle_config=oracle_config, client=openai_client)
        oracle_program = OracleProgramClient(
            oracle_config=oracle_config,
            wallet=wallet,
            client=rpc_client,
        )
        prediction_log = PredictionLog(
            log_dir=oracle_config.log_dir,
            network_name=oracle_config.network.name,
        )
        recorder = PredictionRecorder(
            oracle_config=oracle_config,
            wallet=wallet,
            oracle_program=oracle_program,
            prediction_log=prediction_log,
        )
        drafter = AnnouncementDrafter(drafts_dir=oracle_config.drafts_dir)

        logger.info(f"All Sibyl services initialized for {oracle_config.network.name}")

        return cls(
            oracle_config=oracle_config,
            wallet=wallet,
            deepseek=deepseek,
            oracle_program=oracle_program,
            prediction_log=prediction_log,
            recorder=recorder,
            drafter=drafter,
        )

    @property
    def network_config(self):
        """Get the network configuration"""
        return self.oracle_config.network

    def orchestrator(self) -> RunOrchestrator:
        return RunOrchestrator(
            generator=self.deepseek,
            recorder=self.recorder,
            drafter=self.drafter,
        )

    async def close(self):
        """Close network clients"""
        await self.oracle_program.close()
