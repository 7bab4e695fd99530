import secrets
from loguru import logger
from solders.keypair import Keypair
import sibyl.configuration.constants as global_constants
from sibyl.configuration.configuration import OracleConfig
from sibyl.models.models import Prediction, RecordResult, RecordStatus, LogEntry
from sibyl.protocols.oracle_program import OracleProgramClient
from sibyl.utilities.prediction_log import PredictionLog
from sibyl.utilities.exceptions import (
    InvalidConfidenceException,
    InvalidDeadlineException,
    InvalidStatementException,
    LedgerUnavailableException,
    LogOrderingException,
    OracleNotInitializedException,
)

def validate_prediction(prediction: Prediction) -> None:
    """Client-side mirror of the create_prediction checks.

    Raises:
        InvalidConfidenceException: confidence outside 0-100
        InvalidDeadlineException: hours not positive or larger than a u8
        InvalidStatementException: empty statement or longer than the account allows
    """
    if not global_constants.MIN_CONFIDENCE <= prediction.confidence <= global_constants.MAX_CONFIDENCE:
        raise InvalidConfidenceException(prediction.confidence)
    if not 0 < prediction.hours <= global_constants.MAX_DEADLINE_HOURS:
        raise InvalidDeadlineException(prediction.hours)
    if not prediction.statement or not prediction.statement.strip():
        raise InvalidStatementException("statement is empty")
    statement_bytes = len(prediction.statement.encode('utf-8'))
    if statement_bytes > global_constants.MAX_STATEMENT_BYTES:
        raise InvalidStatementException(
            f"statement is {statement_bytes} bytes, maximum is {global_constants.MAX_STATEMENT_BYTES}"
        )

def generate_local_tx_hash() -> str:
    """Synthetic identifier for records that never reached the ledger"""
    return f"{global_constants.LOCAL_TX_PREFIX}{secrets.token_hex(32)}"

class PredictionRecorder:
    """Records predictions on the sibyl_oracle program, or locally when the ledger is unavailable"""

    def __init__(
            self,
            oracle_config: OracleConfig,
            wallet: Keypair,
            oracle_program: OracleProgramClient,
            prediction_log: PredictionLog
        ):
        self.oracle_config = oracle_config
        self.network = oracle_config.network
        self.wallet = wallet
        self.wallet_address = str(wallet.pubkey())
        self.oracle_program = oracle_program
        self.prediction_log = prediction_log

    async def record(self, prediction: Prediction) -> RecordResult:
        """
        Record a prediction and append it to the prediction log.

        Validation failures and, in strict mode, ledger unavailability propagate
        without writing a log entry.
        """
        validate_prediction(prediction)

        try:
            result = await self._record_on_ledger(prediction)
        except (LedgerUnavailableException, OracleNotInitializedException) as e:
            if self.oracle_config.strict:
                raise
            logger.warning(f"PredictionRecorder.record: Ledger not usable ({e}), recording locally")
            result = self._record_locally()

        self.prediction_log.append(LogEntry.from_record(result, prediction))
        return result

    async def _record_on_ledger(self, prediction: Prediction) -> RecordResult:
        oracle_state = await self.oracle_program.fetch_oracle_state()
        next_id = oracle_state.prediction_count + 1

        last_logged_id = self.prediction_log.last_prediction_id()
        if next_id <= last_logged_id:
            raise LogOrderingException(next_id, last_logged_id)

        logger.debug(f"PredictionRecorder._record_on_ledger: Creating prediction {next_id} at {self.oracle_program.prediction_address(next_id)}")
        tx_hash = await self.oracle_program.create_prediction(next_id, prediction)
        return RecordResult(
            prediction_id=next_id,
            tx_hash=tx_hash,
            wallet=self.wallet_address,
            network=self.network,
            status=RecordStatus.CONFIRMED,
        )

    def _record_locally(self) -> RecordResult:
        return RecordResult(
            prediction_id=self.prediction_log.next_local_id(),
            tx_hash=generate_local_tx_hash(),
            wallet=self.wallet_address,
            network=self.network,
            status=RecordStatus.LOCAL,
        )
