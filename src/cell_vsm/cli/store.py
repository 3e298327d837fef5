"""Save and list commands for the DuckDB map store."""

from typing import Optional

import pandas as pd

from cell_vsm.loader import ConfigLoader
from cell_vsm.storage import DEFAULT_DB_PATH, VsmStore


def save(
    map_name: str,
    config_dir: str = "config",
    db_path: Optional[str] = None,
) -> str:
    """Store a map config in the database with a metrics snapshot.

    Returns:
        id of the stored map
    """
    loader = ConfigLoader(config_dir)
    document = loader.load_map(map_name)
    path = db_path or loader.defaults.db_path or DEFAULT_DB_PATH

    with VsmStore(path, loader.defaults.station_defaults) as store:
        config_id = store.create(document)
        snap = store.snapshot(config_id)

    print(f"Saved {document.name!r} to {path}")
    print(f"  id:                 {config_id}")
    print(f"  throughput (UPH):   {snap['bottleneck_rate']:,.1f}")
    print(f"  process efficiency: {snap['process_efficiency']:.1f}%")
    return config_id


def list_saved(
    config_dir: str = "config",
    db_path: Optional[str] = None,
) -> pd.DataFrame:
    """Print the saved maps with their save-time snapshot values."""
    loader = ConfigLoader(config_dir)
    path = db_path or loader.defaults.db_path or DEFAULT_DB_PATH

    with VsmStore(path, loader.defaults.station_defaults) as store:
        df = store.list_maps()

    if df.empty:
        print("No saved value stream maps.")
    else:
        print(df.round(1).to_string(index=False))
    return df
