from __future__ import annotations

import pytest


class SquareMask:
    """Cross section provider returning a square, scaled by the partial type."""

    def __init__(self):
        self.calls = []

    def boundary(self, partial_type, placement_index, size, origin=(0.0, 0.0, 0.0)):
        self.calls.append((partial_type, placement_index, size))
        h = size / 2 * (partial_type + 1)
        pts = [(-h, -h), (-h, h), (h, h), (h, -h)]
        return [*pts, pts[0]]


@pytest.fixture
def square_mask():
    return SquareMask()


@pytest.fixture
def registry():
    from pyg4ometry import geant4

    return geant4.Registry()


@pytest.fixture
def make_record():
    from hgcalgeom import config

    def _make(**kwargs):
        cfg = {
            "parent_name": "parent",
            "module_material": "G4_AIR",
            "module_thickness": 1.0,
            "wafer_size": 10.0,
            "sensor_separation": 0.5,
            "tags": ["A"],
            "partial_types": [0],
            "placement_index": [0],
            "placement_index_tags": ["p"],
            "layer_names": ["cu", "kapton"],
            "layer_materials": ["materials:Copper", "materials:Kapton"],
            "layer_thickness": [0.4, 0.6],
            "layer_type": [0, 1],
        }
        cfg.update(kwargs)
        return config.from_dict(cfg)

    return _make
