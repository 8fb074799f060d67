from __future__ import annotations

import logging
from typing import NamedTuple

from pyg4ometry import geant4

from . import config as cfg
from . import materials
from .passive import PassivePartialBuilder, PassivePartialResult
from .wafer_mask import CrossSectionProvider

log = logging.getLogger(__name__)

LAYOUTS = {"grid", "none"}

# spacing between the mother volumes in the world, relative to the cross section size.
GRID_PITCH_FACTOR = 1.2

MATERIAL_COLORS = {
    "metal_copper": (0.72, 0.45, 0.2, 1),
    "metal_tungsten_copper": (0.5, 0.45, 0.4, 1),
    "metal_lead": (0.4, 0.4, 0.45, 1),
    "metal_steel": (0.6, 0.6, 0.6, 1),
    "metal_silicon": (0.3, 0.3, 0.8, 1),
    "kapton": (0.9, 0.6, 0.1, 1),
    "epoxy": (0.9, 0.9, 0.6, 0.5),
    "g10": (0.1, 0.6, 0.2, 1),
    "carbon_fibre": (0.1, 0.1, 0.1, 1),
}


class ModuleData(NamedTuple):
    world_lv: geant4.LogicalVolume
    """World LogicalVolume instance in which all mother volumes are placed."""
    registry: geant4.Registry
    """pyg4ometry registry instance."""

    module: cfg.PassivePartialConfig
    """Record of the passive module to construct."""


def construct(
    config: dict | None = None,
    mask: CrossSectionProvider | None = None,
    layout: str = "grid",
    parent_name: str | None = None,
) -> geant4.Registry:
    """Construct the passive module geometry and return the pyg4ometry Registry containing the world volume."""
    reg, _ = construct_with_result(config, mask, layout, parent_name)
    return reg


def construct_with_result(
    config: dict | None = None,
    mask: CrossSectionProvider | None = None,
    layout: str = "grid",
    parent_name: str | None = None,
) -> tuple[geant4.Registry, PassivePartialResult]:
    """Like :func:`construct`, but also return the construction diagnostics.

    Parameters
    ----------
    config
        runtime config. The module record is read from the key ``passive_partial`` (either inline or as
        path to a JSON/YAML file), the packaged default record is used otherwise.
    mask
        provider of the wafer outlines.
    layout
        ``grid`` places all mother volumes side by side in the world (one row per placement index),
        ``none`` only defines the logical volumes.
    parent_name
        override the name prefix of all volumes.
    """
    if layout not in LAYOUTS:
        msg = f"invalid layout {layout} specified"
        raise ValueError(msg)

    config = config if config is not None else {}
    module = cfg.load_config(config, parent_name=parent_name)

    reg = geant4.Registry()
    mats = materials.MaterialRegistry(reg)

    pitch = GRID_PITCH_FACTOR * module.cross_section_size
    n_cols = max(len(module.partials), 1)
    n_rows = max(len(module.placements), 1)

    # Create the world volume
    world_material = geant4.MaterialPredefined("G4_Galactic")
    world = geant4.solid.Box(
        "world", (n_cols + 1) * pitch, (n_rows + 1) * pitch, 2 * module.module_thickness + pitch, reg, "mm"
    )
    world_lv = geant4.LogicalVolume(world, world_material, "world", reg)
    reg.setWorld(world_lv)

    b = ModuleData(world_lv, reg, module)

    result = PassivePartialBuilder(module, reg, mats, mask).build()
    _assign_colors(result)

    if layout == "grid":
        _place_grid(b, result, pitch)

    log.info(
        "constructed %d mother volumes with %d layer placements (%d diagnostics)",
        len(result.mothers),
        len(result.placements),
        len(result.diagnostics),
    )
    return reg, result


def _place_grid(b: ModuleData, result: PassivePartialResult, pitch: float) -> None:
    n_cols = len(b.module.partials)
    n_rows = len(b.module.placements)
    mothers = iter(result.mothers.values())
    for col in range(n_cols):
        for row in range(n_rows):
            lv = next(mothers)
            x = (col - (n_cols - 1) / 2) * pitch
            y = (row - (n_rows - 1) / 2) * pitch
            geant4.PhysicalVolume([0, 0, 0], [x, y, 0], lv, lv.name, b.world_lv, b.registry)


def _assign_colors(result: PassivePartialResult) -> None:
    for lv in result.mothers.values():
        # the mother volume is usually filled with air, hide it.
        lv.pygeom_color_rgba = False
    for lv in result.layers.values():
        color = MATERIAL_COLORS.get(lv.material.name)
        lv.pygeom_color_rgba = color if color is not None else False
