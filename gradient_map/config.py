"""Configuration dataclasses and YAML loader for gradient map scenarios."""

from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Any, Optional
from pathlib import Path
import yaml

from .errors import ConfigurationError
from .model.grid import CellType


@dataclass
class WallSpec:
    wall_type: str  # "line", "rectangle" or "points"
    data: Dict[str, Any]
    cell_type: CellType = CellType.WALL


@dataclass
class FloorplanConfig:
    width: int
    height: int
    border: bool = True
    walls: List[WallSpec] = field(default_factory=list)
    cells: Optional[List[List[int]]] = None  # Explicit cell grid, overrides the rest


@dataclass
class SensorSpec:
    sensor_id: int
    x: int
    y: int
    value: Optional[float] = None


@dataclass
class FieldConfig:
    seed_value: float = 100.0  # initial value of unassigned cells
    max_steps: int = 500
    tolerance: float = 0.01    # stop once no cell moves more than this


@dataclass
class RenderConfig:
    block_size: int = 4         # pixels per cell
    legend: bool = True
    legend_start: float = 4000
    legend_end: float = 0
    legend_step: float = -500   # spacing of legend labels
    legend_scale: float = 100   # label = value / scale


@dataclass
class ScenarioConfig:
    floorplan: FloorplanConfig
    sensors: List[SensorSpec]
    field: FieldConfig
    render: RenderConfig

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = True
    snapshot_enabled: bool = True
    gif_enabled: bool = False
    quiet: bool = False
    cache_path: Optional[Path] = None
    out_dir: Path = field(default_factory=lambda: Path("./output"))


def _parse_cell_type(name: Any) -> CellType:
    """Accept either a cell type name ("wall") or its numeric code."""
    try:
        if isinstance(name, int):
            return CellType(name)
        return CellType[str(name).upper()]
    except (KeyError, ValueError):
        raise ConfigurationError(f"Unknown cell type: {name}") from None


def _parse_point(raw: Any, what: str) -> Tuple[int, int]:
    """Validate an [x, y] pair of integer cell coordinates."""
    if (not isinstance(raw, (list, tuple)) or len(raw) != 2
            or not all(isinstance(v, int) and not isinstance(v, bool) for v in raw)):
        raise ConfigurationError(f"{what} must be an [x, y] pair of integers, got {raw!r}")
    return (raw[0], raw[1])


def _parse_int(raw: Any, what: str) -> int:
    if not isinstance(raw, int) or isinstance(raw, bool):
        raise ConfigurationError(f"{what} must be an integer, got {raw!r}")
    return raw


def _parse_walls(walls_raw: List[Dict]) -> List[WallSpec]:
    """Parse wall specifications from raw YAML data."""
    walls = []
    for w in walls_raw:
        wall_type = w.get('type', 'line')
        if wall_type == 'line':
            data = {
                'start': _parse_point(w['start'], "Wall line start"),
                'end': _parse_point(w['end'], "Wall line end")
            }
        elif wall_type == 'rectangle':
            data = {
                'x': _parse_int(w['x'], "Wall rectangle x"),
                'y': _parse_int(w['y'], "Wall rectangle y"),
                'width': _parse_int(w['width'], "Wall rectangle width"),
                'height': _parse_int(w['height'], "Wall rectangle height")
            }
        elif wall_type == 'points':
            data = {'coords': [_parse_point(c, "Wall point") for c in w['coords']]}
        else:
            raise ConfigurationError(f"Unknown wall type: {wall_type}")
        walls.append(WallSpec(
            wall_type=wall_type,
            data=data,
            cell_type=_parse_cell_type(w.get('cell_type', 'wall'))
        ))
    return walls


def _parse_sensors(sensors_raw: List[Dict]) -> List[SensorSpec]:
    """Parse sensor specifications from raw YAML data."""
    return [
        SensorSpec(
            sensor_id=s['id'],
            x=s['x'],
            y=s['y'],
            value=s.get('value')
        )
        for s in sensors_raw
    ]


def parse_config(raw: Dict[str, Any]) -> ScenarioConfig:
    """Build a ScenarioConfig from an already decoded mapping."""
    try:
        fp_raw = raw['floorplan']
        cells = fp_raw.get('cells')
        if cells is not None:
            width, height = len(cells[0]), len(cells)
        else:
            width, height = fp_raw['width'], fp_raw['height']
        floorplan = FloorplanConfig(
            width=width,
            height=height,
            border=fp_raw.get('border', True),
            walls=_parse_walls(fp_raw.get('walls', [])),
            cells=cells
        )
        sensors = _parse_sensors(raw.get('sensors', []))
    except (KeyError, IndexError, TypeError) as e:
        raise ConfigurationError(f"Malformed scenario configuration: {e!r}") from e

    field_raw = raw.get('field', {})
    field_config = FieldConfig(
        seed_value=field_raw.get('seed', 100.0),
        max_steps=field_raw.get('max_steps', 500),
        tolerance=field_raw.get('tolerance', 0.01)
    )

    render_raw = raw.get('render', {})
    render = RenderConfig(
        block_size=render_raw.get('block_size', 4),
        legend=render_raw.get('legend', True),
        legend_start=render_raw.get('legend_start', 4000),
        legend_end=render_raw.get('legend_end', 0),
        legend_step=render_raw.get('legend_step', -500),
        legend_scale=render_raw.get('legend_scale', 100)
    )

    # Parse export config (optional)
    export_raw = raw.get('export', {})
    cache = raw.get('cache')

    return ScenarioConfig(
        floorplan=floorplan,
        sensors=sensors,
        field=field_config,
        render=render,
        csv_enabled=export_raw.get('csv', True),
        snapshot_enabled=export_raw.get('snapshot', True),
        gif_enabled=export_raw.get('gif', False),
        cache_path=Path(cache) if cache else None
    )


def load_config(config_path: Path) -> ScenarioConfig:
    """Load and validate YAML configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{config_path} does not contain a mapping")
    return parse_config(raw)
