import json
import os

from .config import STATE_FILE


class ProcessStore:
    """Process id persisted between invocations as a small JSON file."""

    def __init__(self, path: str = STATE_FILE):
        self.path = path

    def load(self) -> str:
        if not os.path.exists(self.path):
            return ""
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        pid = data.get("process_id") if isinstance(data, dict) else None
        return pid if isinstance(pid, str) else ""

    def save(self, process_id: str) -> None:
        d = os.path.dirname(self.path)
        if d:
            os.makedirs(d, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"process_id": process_id or ""}, f)

    def clear(self) -> None:
        self.save("")
