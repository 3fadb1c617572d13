"""
State Storage - Saves the whole state tree as one keyed JSON document.

The storage:
- Writes one file per storage key under a data directory
- Loads by full replace; no partial merge, no migration
- Exports and imports the same document to any path
- Never raises to callers: failures are logged and reported as
  False / None, and the game keeps running in memory

Design decisions:
- Simple file-based storage, like a browser's local storage slot
- Validating a loaded document is the caller's job
"""

from __future__ import annotations
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

from ..config import IMPERIUM_STORAGE_KEY, default_data_dir
from ..engine_core.state import GameState

logger = logging.getLogger(__name__)


def default_export_name(today: date | None = None) -> str:
    """File name for an export, e.g. ti4-game-2026-10-19.json."""
    return f"ti4-game-{(today or date.today()).isoformat()}.json"


class StateStorage:
    """
    File-based storage for one saved game.

    Usage:
        storage = StateStorage(data_dir="~/.imperium/saves")
        storage.save_game(store.get())

        saved = storage.load_game()
        if saved:
            store.load(saved)
    """

    def __init__(
        self,
        data_dir: str | Path | None = None,
        storage_key: str = IMPERIUM_STORAGE_KEY,
    ):
        self.data_dir = Path(data_dir).expanduser() if data_dir else default_data_dir()
        self.storage_key = storage_key

    @property
    def path(self) -> Path:
        return self.data_dir / f"{self.storage_key}.json"

    def is_available(self) -> bool:
        """Check the data directory can be created and written to."""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            marker = self.data_dir / "__storage_test__"
            marker.write_text("__storage_test__", encoding="utf-8")
            marker.unlink()
            return True
        except OSError as e:
            logger.warning("Storage is not available: %s", e)
            return False

    def save_game(self, state: GameState) -> bool:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self._write(self.path, state.to_dict(), indent=None)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving game: %s", e)
            return False
        logger.debug("Game saved to %s", self.path)
        return True

    def load_game(self) -> GameState | None:
        if not self.path.exists():
            return None
        return self._read(self.path)

    def has_saved_game(self) -> bool:
        return self.path.exists()

    def clear_saved_game(self) -> bool:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Error clearing saved game: %s", e)
            return False
        return True

    def export_to_file(self, state: GameState, path: str | Path) -> bool:
        """Write the document, indented for humans."""
        target = Path(path).expanduser()
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            self._write(target, state.to_dict(), indent=2)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error exporting game: %s", e)
            return False
        return True

    def import_from_file(self, path: str | Path) -> GameState | None:
        return self._read(Path(path).expanduser())

    @staticmethod
    def _write(path: Path, document: dict[str, Any], indent: int | None):
        # Write then rename so a crash never leaves half a document behind
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=indent)
        tmp_path.replace(path)

    @staticmethod
    def _read(path: Path) -> GameState | None:
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = json.load(f)
            return GameState.from_dict(document)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.error("Error loading game from %s: %s", path, e)
            return None
