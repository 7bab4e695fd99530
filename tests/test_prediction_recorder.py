import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from solders.keypair import Keypair

from sibyl.configuration.configuration import load_oracle_config
from sibyl.models.models import LogEntry, OracleState, Prediction, RecordStatus
from sibyl.utilities.exceptions import (
    InvalidConfidenceException,
    InvalidDeadlineException,
    InvalidStatementException,
    LedgerConfirmationException,
    LedgerUnavailableException,
    LogOrderingException,
    OracleNotInitializedException,
)
from sibyl.utilities.prediction_log import PredictionLog
from sibyl.utilities.prediction_recorder import PredictionRecorder, validate_prediction

PREDICTION = Prediction("SOL will test $200 in the next 24h", 65, 24)

def make_oracle_program(prediction_count=0, fetch_error=None, signature="5sig"):
    program = MagicMock()
    program.fetch_oracle_state = AsyncMock(
        return_value=OracleState(authority="auth", prediction_count=prediction_count, correct_predictions=0),
        side_effect=fetch_error,
    )
    program.create_prediction = AsyncMock(return_value=signature)
    return program

class TestValidatePrediction(unittest.TestCase):
    def test_accepts_boundaries(self):
        validate_prediction(Prediction("x", 0, 1))
        validate_prediction(Prediction("x", 100, 255))
        validate_prediction(Prediction("x" * 280, 50, 24))

    def test_rejects_invalid_confidence(self):
        for confidence in (101, -1, 300):
            with self.subTest(confidence=confidence):
                with self.assertRaises(InvalidConfidenceException):
                    validate_prediction(Prediction("x", confidence, 24))

    def test_rejects_invalid_deadline(self):
        for hours in (0, -24, 256):
            with self.subTest(hours=hours):
                with self.assertRaises(InvalidDeadlineException):
                    validate_prediction(Prediction("x", 60, hours))

    def test_rejects_invalid_statement(self):
        with self.assertRaises(InvalidStatementException):
            validate_prediction(Prediction("   ", 60, 24))
        with self.assertRaises(InvalidStatementException):
            validate_prediction(Prediction("x" * 281, 60, 24))

class TestPredictionRecorder(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.log_dir = Path(self.tmp.name)
        self.wallet = Keypair()
        self.config = load_oracle_config(env={}, log_dir=self.log_dir)
        self.prediction_log = PredictionLog(self.log_dir, self.config.network.name)

    def tearDown(self):
        self.tmp.cleanup()

    def make_recorder(self, oracle_program, strict=False):
        config = self.config.with_overrides(strict=strict)
        return PredictionRecorder(config, self.wallet, oracle_program, self.prediction_log)

    def read_log_lines(self):
        if not self.prediction_log.log_path.exists():
            return []
        return [json.loads(line) for line in self.prediction_log.log_path.read_text().splitlines()]

    async def test_records_on_ledger_with_next_id(self):
        program = make_oracle_program(prediction_count=7, signature="3xSig")
        recorder = self.make_recorder(program)

        result = await recorder.record(PREDICTION)

        self.assertEqual(result.prediction_id, 8)
        self.assertEqual(result.tx_hash, "3xSig")
        self.assertEqual(result.status, RecordStatus.CONFIRMED)
        self.assertEqual(result.wallet, str(self.wallet.pubkey()))
        program.create_prediction.assert_awaited_once_with(8, PREDICTION)

        lines = self.read_log_lines()
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0]['predictionId'], 8)
        self.assertEqual(lines[0]['txHash'], "3xSig")
        self.assertEqual(lines[0]['status'], "confirmed")
        self.assertEqual(
            set(lines[0]),
            {'timestamp', 'predictionId', 'statement', 'confidence', 'hours', 'txHash', 'wallet', 'status'}
        )

    async def test_unreachable_ledger_records_locally(self):
        program = make_oracle_program(fetch_error=LedgerUnavailableException("http://rpc", "refused"))
        recorder = self.make_recorder(program)

        result = await recorder.record(PREDICTION)

        self.assertEqual(result.status, RecordStatus.LOCAL)
        self.assertFalse(result.on_ledger)
        self.assertIsNone(result.explorer_url)
        self.assertTrue(result.tx_hash.startswith("local-"))
        self.assertEqual(result.prediction_id, 1)
        program.create_prediction.assert_not_awaited()
        self.assertEqual(len(self.read_log_lines()), 1)

    async def test_uninitialized_oracle_records_locally(self):
        program = make_oracle_program(fetch_error=OracleNotInitializedException("oraclePda"))

        result = await self.make_recorder(program).record(PREDICTION)

        self.assertEqual(result.status, RecordStatus.LOCAL)

    async def test_local_ids_strictly_increase(self):
        program = make_oracle_program(fetch_error=LedgerUnavailableException("http://rpc", "refused"))
        recorder = self.make_recorder(program)

        ids = [(await recorder.record(PREDICTION)).prediction_id for _ in range(3)]

        self.assertEqual(ids, [1, 2, 3])
        self.assertEqual([line['predictionId'] for line in self.read_log_lines()], [1, 2, 3])

    async def test_local_id_follows_previous_ledger_entry(self):
        ledger = self.make_recorder(make_oracle_program(prediction_count=41))
        await ledger.record(PREDICTION)

        offline = self.make_recorder(make_oracle_program(fetch_error=LedgerUnavailableException("http://rpc", "down")))
        result = await offline.record(PREDICTION)

        self.assertEqual(result.prediction_id, 43)

    async def test_ledger_id_behind_log_is_rejected(self):
        self.prediction_log.append(LogEntry(5, "old", 60, 24, "local-ab", "w", "local"))
        program = make_oracle_program(prediction_count=2)

        with self.assertRaises(LogOrderingException):
            await self.make_recorder(program).record(PREDICTION)

        program.create_prediction.assert_not_awaited()
        self.assertEqual(len(self.read_log_lines()), 1)

    async def test_strict_mode_propagates_ledger_failures(self):
        for error in (LedgerUnavailableException("http://rpc", "down"), OracleNotInitializedException("pda")):
            with self.subTest(error=type(error).__name__):
                recorder = self.make_recorder(make_oracle_program(fetch_error=error), strict=True)
                with self.assertRaises(type(error)):
                    await recorder.record(PREDICTION)
        self.assertEqual(self.read_log_lines(), [])

    async def test_invalid_confidence_writes_no_log_entry(self):
        program = make_oracle_program()

        with self.assertRaises(InvalidConfidenceException):
            await self.make_recorder(program).record(Prediction("x", 101, 24))

        program.fetch_oracle_state.assert_not_awaited()
        self.assertFalse(self.prediction_log.log_path.exists())

    async def test_invalid_deadline_writes_no_log_entry(self):
        program = make_oracle_program(fetch_error=LedgerUnavailableException("http://rpc", "down"))

        with self.assertRaises(InvalidDeadlineException):
            await self.make_recorder(program).record(Prediction("x", 60, 0))

        self.assertFalse(self.prediction_log.log_path.exists())

    async def test_program_rejection_writes_no_log_entry(self):
        program = make_oracle_program(prediction_count=0)
        program.create_prediction.side_effect = InvalidConfidenceException(101)

        with self.assertRaises(InvalidConfidenceException):
            await self.make_recorder(program).record(PREDICTION)

        self.assertEqual(self.read_log_lines(), [])

    async def test_unconfirmed_submission_is_not_recorded_locally(self):
        program = make_oracle_program(prediction_count=3)
        program.create_prediction.side_effect = LedgerConfirmationException('create_prediction', "5abc: timed out")

        with self.assertRaises(LedgerConfirmationException):
            await self.make_recorder(program).record(PREDICTION)

        self.assertEqual(self.read_log_lines(), [])
        self.assertEqual(self.prediction_log.next_local_id(), 1)

if __name__ == '__main__':
    unittest.main()
