from typing import Protocol, Optional
from solders.pubkey import Pubkey
from sibyl.models.models import OracleState, Prediction

class OracleProgramClient(Protocol):
    """Protocol for OracleProgramClient"""

    @property
    def oracle_address(self) -> Pubkey:
        """The oracle PDA"""
        ...

    def prediction_address(self, prediction_id: int) -> Pubkey:
        """The prediction PDA for a given id"""
        ...

    async def fetch_oracle_state_nullable(self) -> Optional[OracleState]:
        """Fetch the oracle account, None if it does not exist"""
        ...

    async def fetch_oracle_state(self) -> OracleState:
        """Fetch the oracle account, raising OracleNotInitializedException if missing"""
        ...

    async def create_prediction(self, prediction_id: int, prediction: Prediction) -> str:
        """Submit create_prediction and return the transaction signature"""
        ...

    async def initialize(self) -> str:
        """Submit initialize and return the transaction signature"""
        ...

    async def close(self):
        ...
