from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure src/ is importable when running pytest from any CWD.
SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from brush_compiler.conversion.map_data import Brush, Entity, Face, MapDocument  # noqa: E402


def _pyramid() -> Brush:
    """Square pyramid: base [-1, 1]^2 at z=0, apex at (0, 0, 1)."""
    apex = (0.0, 0.0, 1.0)
    return Brush(faces=[
        Face(((-1, -1, 0), (-1, 1, 0), (1, -1, 0)), "BASE"),
        Face(((1, -1, 0), (1, 1, 0), apex), "SIDE"),
        Face(((-1, 1, 0), (-1, -1, 0), apex), "SIDE"),
        Face(((1, 1, 0), (-1, 1, 0), apex), "SIDE"),
        Face(((-1, -1, 0), (1, -1, 0), apex), "SIDE"),
    ])


@pytest.fixture
def unit_cube() -> Brush:
    return Brush.box((-0.5, -0.5, -0.5), (0.5, 0.5, 0.5))


@pytest.fixture
def pyramid() -> Brush:
    return _pyramid()


@pytest.fixture
def make_document():
    """Factory for a small map: worldspawn, a func_group, a door and a light."""
    def factory() -> MapDocument:
        world = Entity("worldspawn", {"classname": "worldspawn"}, [
            Brush.box((-64, -64, -16), (64, 64, 0), "GROUND1_6"),
            _pyramid(),
        ])
        group = Entity("func_group", {"classname": "func_group"}, [
            Brush.box((65535.5, -65536.5, 65535.5), (65536.5, -65535.5, 65536.5)),
        ])
        door = Entity("func_door", {"classname": "func_door"}, [
            Brush.box((32, 0, 0), (40, 64, 96), "DOOR02_1"),
        ])
        light = Entity("light", {"classname": "light", "origin": "0 0 64"})
        return MapDocument([world, group, door, light])

    return factory
