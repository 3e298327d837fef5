"""DuckDB storage module for saved value stream maps.

Example usage:
    from cell_vsm.storage import save_map, connect

    config_id = save_map(document)

    conn = connect()
    df = conn.execute("SELECT * FROM v_vsm_summary").df()
"""

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

from cell_vsm.storage.writer import ConfigurationNotFoundError, VsmStore

if TYPE_CHECKING:
    from cell_vsm.models import VsmDocument

DEFAULT_DB_PATH = Path("./cell_vsm.duckdb")


def save_map(
    document: "VsmDocument",
    db_path: Path | str | None = None,
) -> str:
    """Save a map document with its metrics snapshot.

    Args:
        document: Map to store
        db_path: Path to database file (default: ./cell_vsm.duckdb)

    Returns:
        id of the stored map
    """
    path = Path(db_path) if db_path else DEFAULT_DB_PATH
    store = VsmStore(path)
    try:
        return store.create(document)
    finally:
        store.close()


def get_db_path() -> Path:
    """Return the default database path."""
    return DEFAULT_DB_PATH


def connect(db_path: Path | str | None = None) -> duckdb.DuckDBPyConnection:
    """Get a DuckDB connection for queries.

    Args:
        db_path: Path to database file (default: ./cell_vsm.duckdb)

    Returns:
        DuckDB connection
    """
    path = Path(db_path) if db_path else DEFAULT_DB_PATH
    return duckdb.connect(str(path))


__all__ = [
    "save_map",
    "get_db_path",
    "connect",
    "DEFAULT_DB_PATH",
    "VsmStore",
    "ConfigurationNotFoundError",
]
