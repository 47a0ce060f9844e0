"""Snapshot file storage for the assessment state."""
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_STATE_PATH = str(Path.home() / ".cyber_fitness" / "state.json")


class StorageError(RuntimeError):
    """Raised when a saved snapshot exists but cannot be read."""


def save_snapshot(snapshot: dict, state_path: str = DEFAULT_STATE_PATH) -> None:
    """Write the snapshot as JSON, creating the parent directory if needed."""
    path = Path(state_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(snapshot, indent=2), encoding="utf-8")
    tmp.replace(path)
    logger.debug("Saved %d answers to %s", len(snapshot.get("answers", {})), state_path)


def load_snapshot(state_path: str = DEFAULT_STATE_PATH) -> dict | None:
    """Return the saved snapshot, or None if nothing has been saved yet."""
    path = Path(state_path)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Cannot read saved state {state_path}: {e}") from e
    if not isinstance(data, dict):
        raise StorageError(f"Saved state {state_path} is not a snapshot")
    return data


def clear_snapshot(state_path: str = DEFAULT_STATE_PATH) -> None:
    Path(state_path).unlink(missing_ok=True)
