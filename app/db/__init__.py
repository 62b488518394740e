# app/db/__init__.py

from .queries import (
    get_snapshot_path,
    fetch_engine_state,
    save_engine_state,
)
