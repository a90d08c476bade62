import sys
from pathlib import Path
from typing import Callable, Sequence

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
CODE_DIR = ROOT_DIR / "code"
if str(CODE_DIR) not in sys.path:
    sys.path.insert(0, str(CODE_DIR))

from region_extractor import extract_regions
from seam_config import BridgingConfig
from seam_grid import TileGrid
from seam_models import RegionMap


TWO_ROOMS = [
    ".....###.....",
    ".....###.....",
    ".....###.....",
    ".....###.....",
    ".....###.....",
]

# Four 3x3 rooms in a row separated by 2-tile walls.
FOUR_ROOMS_IN_A_ROW = [
    "...##...##...##...",
    "...##...##...##...",
    "...##...##...##...",
]


@pytest.fixture
def two_rooms_grid() -> TileGrid:
    return TileGrid.from_strings(TWO_ROOMS)


@pytest.fixture
def four_rooms_grid() -> TileGrid:
    return TileGrid.from_strings(FOUR_ROOMS_IN_A_ROW)


@pytest.fixture
def make_grid() -> Callable[[Sequence[str]], TileGrid]:
    def _make_grid(rows: Sequence[str]) -> TileGrid:
        return TileGrid.from_strings(rows)

    return _make_grid


@pytest.fixture
def make_region_map() -> Callable[..., RegionMap]:
    def _make_region_map(rows: Sequence[str], min_area_ratio: float = 0.0) -> RegionMap:
        return extract_regions(TileGrid.from_strings(rows), min_area_ratio)

    return _make_region_map


@pytest.fixture
def loose_config() -> BridgingConfig:
    """Config with nothing pruned away by area and no coverage target."""
    return BridgingConfig(coverage_threshold=0.0, min_area_ratio=0.0)
