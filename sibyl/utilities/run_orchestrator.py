from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional
from loguru import logger
from sibyl.models.models import GenerationResult, RecordResult
from sibyl.protocols.deepseek import DeepSeekRequestTool
from sibyl.utilities.announcement import AnnouncementDrafter
from sibyl.utilities.prediction_recorder import PredictionRecorder
from sibyl.utilities.exceptions import LogOrderingException, OracleNotInitializedException, RecordingException

class RunState(Enum):
    IDLE = "idle"
    GENERATING = "generating"
    RECORDING = "recording"
    DRAFTING = "drafting"
    DONE = "done"
    FAILED = "failed"

@dataclass
class RunOutcome:
    """Result of one agent run"""
    state: RunState
    generation: Optional[GenerationResult] = None
    record: Optional[RecordResult] = None
    draft_path: Optional[Path] = None
    error: Optional[Exception] = None

    @property
    def exit_code(self) -> int:
        return 0 if self.state == RunState.DONE else 1

class RunOrchestrator:
    """Runs generate -> record -> draft once, reporting progress to stdout"""

    def __init__(
            self,
            generator: DeepSeekRequestTool,
            recorder: PredictionRecorder,
            drafter: AnnouncementDrafter,
        ):
        self.generator = generator
        self.recorder = recorder
        self.drafter = drafter
        self.state = RunState.IDLE

    def _transition(self, state: RunState):
        logger.debug(f"RunOrchestrator: {self.state.value} -> {state.value}")
        self.state = state

    async def run(self) -> RunOutcome:
        print("Sibyl Oracle Agent")
        print(datetime.now(timezone.utc).isoformat())
        print("=" * 50 + "\n")
        print(f"Wallet: {self.recorder.wallet_address}")

        self._transition(RunState.GENERATING)
        print("Generating prediction...")
        generation = await self.generator.generate()
        prediction = generation.prediction
        if generation.is_fallback:
            print(f"Using fallback prediction ({generation.reason})")
        print(f"Prediction: {prediction.statement}")
        print(f"Confidence: {prediction.confidence}%")
        print(f"Deadline: {prediction.hours}h\n")

        self._transition(RunState.RECORDING)
        print(f"Recording on Solana {self.recorder.network.name}...")
        try:
            record = await self.recorder.record(prediction)
        except RecordingException as e:
            self._transition(RunState.FAILED)
            print(f"Transaction failed: {e}")
            if isinstance(e, OracleNotInitializedException):
                print("\nOracle not initialized. Run initialization first:")
                print("   sibyl init")
            elif isinstance(e, LogOrderingException):
                print("\nThe prediction log holds local-only records ahead of the ledger. Use a separate log directory:")
                print("   sibyl run --log-dir <new directory>")
            return RunOutcome(state=self.state, generation=generation, error=e)

        if record.on_ledger:
            print(f"TX: {record.tx_hash}")
            print(f"   Prediction ID: {record.prediction_id}")
            print(f"   {record.explorer_url}\n")
        else:
            print(f"Recorded locally (not on-chain): {record.tx_hash}")
            print(f"   Prediction ID: {record.prediction_id}\n")

        self._transition(RunState.DRAFTING)
        print("Announcement draft (manual posting required):")
        print("=" * 50)
        print(self.drafter.draft(record, prediction))
        print("=" * 50)
        try:
            draft_path = self.drafter.save_draft(record, prediction)
            print(f"Saved to {draft_path}")
        except OSError as e:
            # The prediction is already recorded; the printed draft stands in for the file
            logger.error(f"RunOrchestrator.run: Could not save draft: {e}")
            print(f"Could not save draft: {e}")
            draft_path = None

        self._transition(RunState.DONE)
        print("\nSibyl Oracle run complete!")
        return RunOutcome(state=self.state, generation=generation, record=record, draft_path=draft_path)
