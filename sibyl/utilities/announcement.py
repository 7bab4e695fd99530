from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from loguru import logger
import sibyl.configuration.constants as global_constants
from sibyl.models.models import Prediction, RecordResult

LOCAL_STATUS_LINE = "Status: local test (not recorded on-chain)"

class AnnouncementDrafter:
    """Formats prediction announcements and saves them for manual posting"""

    def __init__(self, drafts_dir: Path):
        self.drafts_dir = Path(drafts_dir)

    @staticmethod
    def draft(record: RecordResult, prediction: Prediction) -> str:
        if record.on_ledger:
            reference_line = f"TX: {record.explorer_url}"
        else:
            reference_line = LOCAL_STATUS_LINE

        return (
            f"Sibyl Oracle Prediction #{record.prediction_id}\n"
            f"\n"
            f"\"{prediction.statement}\"\n"
            f"\n"
            f"Confidence: {prediction.confidence}%\n"
            f"Deadline: {prediction.hours}h\n"
            f"\n"
            f"{reference_line}\n"
            f"\n"
            f"{global_constants.DRAFT_HASHTAGS}"
        )

    def draft_path(self, record: RecordResult, created_at: Optional[datetime] = None) -> Path:
        created_at = created_at or datetime.now(timezone.utc)
        timestamp = created_at.strftime('%Y%m%dT%H%M%S%fZ')
        return self.drafts_dir / f"prediction-{record.prediction_id}-{timestamp}.txt"

    def save_draft(self, record: RecordResult, prediction: Prediction) -> Path:
        """Write the announcement to a new file. An existing draft is never overwritten."""
        text = self.draft(record, prediction)
        self.drafts_dir.mkdir(parents=True, exist_ok=True)
        path = self.draft_path(record)
        with open(path, 'x', encoding='utf-8') as file:
            file.write(text + "\n")
        logger.debug(f"AnnouncementDrafter.save_draft: Saved draft for prediction {record.prediction_id} to {path}")
        return path
