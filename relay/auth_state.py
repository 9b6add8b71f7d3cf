"""
Directory-backed credential persistence for the transport session.
"""
import json
import os
from pathlib import Path
from typing import Any, Dict, Union

from .utils.logging import get_logger

logger = get_logger(__name__)

CREDS_FILE = "creds.json"


class CredentialStore:
    """Keeps session credentials in `<directory>/creds.json`.

    Updates are merged into what is already stored, so a transport may emit
    only the keys that changed.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.path = self.directory / CREDS_FILE

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning(f"⚠ Ignoring unreadable credentials at {self.path}: {e}", extra={"subsys": "auth"})
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, update: Dict[str, Any]) -> None:
        creds = self.load()
        creds.update(update)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(creds, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self.path)
        logger.debug(
            f"Saved credentials ({', '.join(sorted(update))})",
            extra={"subsys": "auth", "event": "creds_saved"},
        )

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info("Cleared stored credentials", extra={"subsys": "auth", "event": "creds_cleared"})
