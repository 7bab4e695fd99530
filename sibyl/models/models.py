from dataclasses import dataclass, field
from typing import Optional, Dict, Any, TYPE_CHECKING
from enum import Enum
from datetime import datetime as dt, timezone
import json

if TYPE_CHECKING:
    from sibyl.configuration.configuration import NetworkConfig

@dataclass(frozen=True)
class Prediction:
    """A single market forecast. Produced fresh per run and never mutated."""
    statement: str
    confidence: int
    hours: int

class GenerationSource(Enum):
    MODEL = "model"         # Parsed from a completion
    FALLBACK = "fallback"   # Drawn from the canned pool

@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a generation attempt, distinguishing real from substituted predictions"""
    prediction: Prediction
    source: GenerationSource
    reason: Optional[str] = None  # Why the fallback was used

    @classmethod
    def ok(cls, prediction: Prediction) -> 'GenerationResult':
        return cls(prediction=prediction, source=GenerationSource.MODEL)

    @classmethod
    def fallback(cls, prediction: Prediction, reason: str) -> 'GenerationResult':
        return cls(prediction=prediction, source=GenerationSource.FALLBACK, reason=reason)

    @property
    def is_fallback(self) -> bool:
        return self.source == GenerationSource.FALLBACK

@dataclass(frozen=True)
class OracleState:
    """Decoded sibyl_oracle Oracle account"""
    authority: str
    prediction_count: int
    correct_predictions: int

    @property
    def accuracy(self) -> int:
        """Accuracy percentage (0-100), computed the same way as the program"""
        if self.prediction_count == 0 or self.correct_predictions == 0:
            return 0
        return (self.correct_predictions * 100) // self.prediction_count

class RecordStatus(Enum):
    CONFIRMED = "confirmed"  # create_prediction landed on the ledger
    LOCAL = "local"          # logged only, tx_hash is synthetic

@dataclass(frozen=True)
class RecordResult:
    """Result of recording a prediction, on the ledger or locally"""
    prediction_id: int
    tx_hash: str
    wallet: str
    network: 'NetworkConfig'
    status: RecordStatus

    @property
    def on_ledger(self) -> bool:
        return self.status == RecordStatus.CONFIRMED

    @property
    def explorer_url(self) -> Optional[str]:
        """Explorer link for ledger records, None for local ones"""
        if not self.on_ledger:
            return None
        return self.network.explorer_tx_url(self.tx_hash)

@dataclass(frozen=True)
class LogEntry:
    """
    One line of the prediction log.
    Serialized with the camelCase keys used by the log file.
    """
    prediction_id: int
    statement: str
    confidence: int
    hours: int
    tx_hash: str
    wallet: str
    status: str
    timestamp: str = field(default_factory=lambda: dt.now(timezone.utc).isoformat())

    @classmethod
    def from_record(cls, record: RecordResult, prediction: Prediction) -> 'LogEntry':
        return cls(
            prediction_id=record.prediction_id,
            statement=prediction.statement,
            confidence=prediction.confidence,
            hours=prediction.hours,
            tx_hash=record.tx_hash,
            wallet=record.wallet,
            status=record.status.value,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'predictionId': self.prediction_id,
            'statement': self.statement,
            'confidence': self.confidence,
            'hours': self.hours,
            'txHash': self.tx_hash,
            'wallet': self.wallet,
            'status': self.status,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LogEntry':
        """Parse a logged entry. Entries written before status existed are treated as confirmed."""
        return cls(
            timestamp=data['timestamp'],
            prediction_id=int(data['predictionId']),
            statement=data['statement'],
            confidence=int(data['confidence']),
            hours=int(data['hours']),
            tx_hash=data['txHash'],
            wallet=data['wallet'],
            status=data.get('status', RecordStatus.CONFIRMED.value),
        )
