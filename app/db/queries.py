import logging
import os
from pathlib import Path
from typing import Optional

from app.config import get_engine_params
from app.engine.state import EngineState, init_state, serialize_state, deserialize_state
from app.utils import serialize_json, deserialize_json

logger = logging.getLogger(__name__)

def get_snapshot_path(path: Optional[str] = None) -> Path:
    return Path(path or get_engine_params()['snapshot_path'])

def fetch_engine_state(path: Optional[str] = None) -> EngineState:
    """Load the engine snapshot, or a fresh state if none has been saved."""
    snapshot = get_snapshot_path(path)
    if not snapshot.exists():
        logger.info(f"No snapshot at {snapshot}; starting from empty state")
        return init_state()
    return deserialize_state(deserialize_json(snapshot.read_text(encoding='utf-8')))

def save_engine_state(state: EngineState, path: Optional[str] = None) -> None:
    """Write the snapshot atomically (temp file + rename)."""
    snapshot = get_snapshot_path(path)
    if snapshot.parent and not snapshot.parent.exists():
        snapshot.parent.mkdir(parents=True, exist_ok=True)
    tmp = snapshot.with_name(snapshot.name + '.tmp')
    tmp.write_text(serialize_json(serialize_state(state)), encoding='utf-8')
    os.replace(tmp, snapshot)
    logger.info(f"Saved engine state ({len(state['scenarios'])} scenarios) to {snapshot}")
