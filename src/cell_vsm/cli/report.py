"""Report command: write a Markdown report for a value stream map."""

import re
from pathlib import Path
from typing import Optional

from cell_vsm.export import export_vsm_markdown
from cell_vsm.loader import ConfigLoader


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_") or "vsm"


def report(
    map_name: str,
    config_dir: str = "config",
    output_dir: str = "output",
    raw_material_uph: Optional[float] = None,
) -> Path:
    """Render a map's Markdown report to output_dir.

    Args:
        map_name: Name of the map config (without .yaml extension)
        config_dir: Path to config directory
        output_dir: Directory the report is written to
        raw_material_uph: Overrides the map's raw material rate when given

    Returns:
        Path to the written report
    """
    loader = ConfigLoader(config_dir)
    document = loader.load_map(map_name)
    raw_uph = raw_material_uph if raw_material_uph is not None else document.raw_material_uph

    markdown = export_vsm_markdown(
        document.name,
        document.description,
        document.stations,
        raw_material_uph=raw_uph,
        operation_names=document.operation_names,
        defaults=loader.defaults.station_defaults,
    )

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / f"vsm_{_slug(document.name)}.md"
    path.write_text(markdown, encoding="utf-8")

    print(f"Report written: {path}")
    return path
