"""Weekly JSON-lines files under the configured log directory."""
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict
from common.scripts import get_week_date_range
from .base import LogBackend


class FileBackend(LogBackend):
    """
    Appends each entry as one JSON line to wkNN_<monday>--<sunday>.json.
    """

    def __init__(self, log_dir: Path):
        self._log_dir = Path(log_dir)
        self._total_writes = 0
        self._failed_writes = 0

    @property
    def name(self) -> str:
        return "file"

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def write(self, log_entry: Dict[str, Any]) -> bool:
        try:
            file_path = self._log_dir / self.filename_for(date.today())
            file_path.parent.mkdir(parents=True, exist_ok=True)

            with file_path.open(mode="a", encoding="utf-8") as f:
                f.write(json.dumps(log_entry, ensure_ascii=False))
                f.write("\n")

            self._total_writes += 1
            return True
        except OSError as e:
            print(f"FileBackend write failed: {e}", file=sys.stderr)
            self._failed_writes += 1
            return False

    @staticmethod
    def filename_for(log_date: date) -> str:
        week_start, week_end, week_number = get_week_date_range(log_date)
        return f"wk{week_number:02d}_{week_start.isoformat()}--{week_end.isoformat()}.json"

    def get_metrics(self) -> Dict[str, Any]:
        return {
            "backend": self.name,
            "total_writes": self._total_writes,
            "failed_writes": self._failed_writes,
            "log_directory": str(self._log_dir),
        }


__all__ = ["FileBackend"]
