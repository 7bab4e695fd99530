from pathlib import Path
from typing import List, Optional
import json
from loguru import logger
from sibyl.models.models import LogEntry

class PredictionLog:
    """
    Append-only JSON-lines log of recorded predictions, one file per network.

    Alongside the log a small counter file holds the last assigned prediction id.
    Local ids are taken from max(counter, last logged id) + 1, so the log stays
    an audit trail and id assignment survives a truncated or hand-edited log.
    """

    def __init__(self, log_dir: Path, network_name: str):
        self.log_dir = Path(log_dir)
        self.network_name = network_name
        self.log_path = self.log_dir / f"predictions-{network_name}.log"
        self.counter_path = self.log_dir / f"prediction-counter-{network_name}.json"

    def entries(self) -> List[LogEntry]:
        """Read all entries, skipping blank or corrupt lines"""
        if not self.log_path.exists():
            return []

        entries = []
        with open(self.log_path, 'r', encoding='utf-8') as file:
            for line_number, line in enumerate(file, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(LogEntry.from_dict(json.loads(line)))
                except (ValueError, KeyError, TypeError) as e:
                    logger.warning(f"PredictionLog.entries: Skipping corrupt line {line_number} in {self.log_path}: {e}")
        return entries

    def last_entry(self) -> Optional[LogEntry]:
        entries = self.entries()
        return entries[-1] if entries else None

    def last_prediction_id(self) -> int:
        """Highest id in the log or the counter file, 0 when neither exists"""
        last_entry = self.last_entry()
        logged_id = last_entry.prediction_id if last_entry else 0
        return max(logged_id, self._read_counter())

    def next_local_id(self) -> int:
        return self.last_prediction_id() + 1

    def append(self, entry: LogEntry) -> None:
        """Append one entry and advance the persisted counter"""
        self.log_dir.mkdir(parents=True, exist_ok=True)
        with open(self.log_path, 'a', encoding='utf-8') as file:
            file.write(entry.to_json() + "\n")
        self._write_counter(max(entry.prediction_id, self._read_counter()))
        logger.debug(f"PredictionLog.append: Logged prediction {entry.prediction_id} to {self.log_path}")

    def _read_counter(self) -> int:
        if not self.counter_path.exists():
            return 0
        try:
            with open(self.counter_path, 'r', encoding='utf-8') as file:
                return int(json.load(file)['last_prediction_id'])
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"PredictionLog._read_counter: Ignoring unreadable counter {self.counter_path}: {e}")
            return 0

    def _write_counter(self, last_prediction_id: int) -> None:
        with open(self.counter_path, 'w', encoding='utf-8') as file:
            json.dump({'last_prediction_id': last_prediction_id}, file)
