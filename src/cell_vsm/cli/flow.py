"""Flow command: run the WIP flow model for a value stream map."""

from pathlib import Path
from typing import Optional

import pandas as pd

from cell_vsm.engine import calculate_detailed_metrics
from cell_vsm.flow import simulate_wip_flow
from cell_vsm.loader import ConfigLoader


def flow(
    map_name: str,
    config_dir: str = "config",
    duration_sec: float = 600.0,
    sample_every_sec: float = 60.0,
    output: Optional[str] = None,
) -> pd.DataFrame:
    """Run the WIP flow model and print the queue trace.

    Args:
        map_name: Name of the map config (without .yaml extension)
        config_dir: Path to config directory
        duration_sec: Simulated span in seconds
        sample_every_sec: Interval between printed rows
        output: Optional CSV path for the full trace

    Returns:
        Flow trace DataFrame
    """
    loader = ConfigLoader(config_dir)
    document = loader.load_map(map_name)
    metrics = calculate_detailed_metrics(
        document.stations, document.config, loader.defaults.station_defaults
    )

    df = simulate_wip_flow(
        metrics, duration_sec=duration_sec, sample_every_sec=sample_every_sec
    )

    print(f"WIP flow for {document.name} ({duration_sec:g}s)")
    print(df.round(2).to_string(index=False))

    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(path, index=False)
        print(f"\nExported: {path} ({len(df)} rows)")

    return df
