"""Construct the passive part of partial silicon modules.

For every combination of partial wafer type and placement index, one mother volume is extruded from
the wafer outline, filled with the module material. The layers of the module (base plate, glue,
insulation, PCB, ...) are extruded from the same outline and stacked inside the mother along z, in
the order given by :attr:`.PassivePartialConfig.layer_order`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, NamedTuple

import pyg4ometry.geant4 as g4

from . import config as cfg
from . import extrusion, materials
from .wafer_mask import CrossSectionProvider, WaferMask, open_polygon

log = logging.getLogger(__name__)

THICKNESS_TOLERANCE = 1e-5  # mm

EXECUTED = 1
"""Status returned when the construction was executed."""


class Diagnostic(NamedTuple):
    severity: Literal["warning", "error"]
    message: str


class LayerPlacement(NamedTuple):
    mother: str
    """Name of the mother logical volume."""
    volume: str
    """Name of the placed layer logical volume."""
    layer_type: int
    copy_number: int
    z: float
    thickness: float


@dataclass
class PassivePartialResult:
    status: int = EXECUTED
    mothers: dict[str, g4.LogicalVolume] = field(default_factory=dict)
    """Mother logical volumes by name, in construction order."""
    layers: dict[str, g4.LogicalVolume] = field(default_factory=dict)
    placements: list[LayerPlacement] = field(default_factory=list)
    thickness: dict[str, float] = field(default_factory=dict)
    """Accumulated layer thickness per mother volume."""
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == "error" for d in self.diagnostics)


def validate_thickness(accumulated: float, nominal: float, name: str = "") -> Diagnostic | None:
    """Compare the summed layer thickness of a module to its nominal thickness.

    A too thick layer stack is an error, a too thin one only a warning. Differences below
    :data:`THICKNESS_TOLERANCE` are ignored.
    """
    if abs(accumulated - nominal) < THICKNESS_TOLERANCE:
        return None
    if accumulated > nominal:
        return Diagnostic(
            "error",
            f"Thickness of the partition {name} {nominal} is smaller than {accumulated}: "
            "thickness of all its components **** ERROR ****",
        )
    return Diagnostic(
        "warning",
        f"Thickness of the partition {name} {nominal} does not match with {accumulated} of the components",
    )


class PassivePartialBuilder:
    def __init__(
        self,
        config: cfg.PassivePartialConfig | None,
        registry: g4.Registry,
        mats: materials.MaterialRegistry | None = None,
        mask: CrossSectionProvider | None = None,
    ):
        """
        Create a builder for the passive module volumes.

        Parameters
        ----------
        config
            module record. A builder without configuration cannot construct anything, so ``None`` is
            rejected immediately.
        registry
            pyg4ometry registry to add all solids and volumes to. Volume names have to be unique in this
            registry, pyg4ometry raises on duplicates.
        mats
            material lookup, defaults to a new :class:`.MaterialRegistry` on ``registry``.
        mask
            provider for the wafer outlines, defaults to :class:`.WaferMask`.
        """
        if config is None:
            msg = "wrong initialization of PassivePartialBuilder, no configuration given"
            raise RuntimeError(msg)

        self.config = config
        self.registry = registry
        self.materials = mats if mats is not None else materials.MaterialRegistry(registry)
        self.mask = mask if mask is not None else WaferMask()

    def build(self) -> PassivePartialResult:
        """Construct the mother volumes and layer stacks of all variants."""
        c = self.config
        log.debug(
            "module %s made of %s T %f wafer 2r %f half separation %f",
            c.parent_name,
            c.module_material,
            c.module_thickness,
            c.wafer_size,
            c.sensor_separation,
        )
        result = PassivePartialResult()

        for partial, placement in c.variants():
            mother_name = c.mother_name(partial, placement)
            wxy = self.mask.boundary(partial.partial_type, placement.index, c.cross_section_size)
            polygon = open_polygon(wxy)

            solid = extrusion.extrude(mother_name, polygon, c.module_thickness / 2, self.registry)
            mother_lv = g4.LogicalVolume(
                solid, self.materials.resolve(c.module_material), mother_name, self.registry
            )
            result.mothers[mother_name] = mother_lv
            log.debug(
                "%s partial type %d placement index %d made of %s",
                mother_name,
                partial.partial_type,
                placement.index,
                c.module_material,
            )

            thick_tot = self._build_layers(mother_lv, polygon, result)
            result.thickness[mother_name] = thick_tot

            if len(c.layer_order) == 0:
                continue
            diag = validate_thickness(thick_tot, c.module_thickness, mother_name)
            if diag is None:
                continue
            if diag.severity == "error":
                log.error(diag.message)
            else:
                log.warning(diag.message)
            result.diagnostics.append(diag)

        return result

    def _build_layers(
        self,
        mother_lv: g4.LogicalVolume,
        polygon: list[tuple[float, float]],
        result: PassivePartialResult,
    ) -> float:
        """Stack all layers into the mother volume and return their total thickness."""
        c = self.config
        layer_lvs: dict[int, g4.LogicalVolume] = {}
        copy_numbers = dict.fromkeys(range(len(c.layers)), 1)

        z = -c.module_thickness / 2
        thick_tot = 0.0
        for i in c.layer_order:
            layer = c.layers[i]
            if i not in layer_lvs:
                layer_name = mother_lv.name + layer.name
                solid = extrusion.extrude(layer_name, polygon, layer.thickness / 2, self.registry)
                layer_lvs[i] = g4.LogicalVolume(
                    solid, self.materials.resolve(layer.material), layer_name, self.registry
                )
                result.layers[layer_name] = layer_lvs[i]

            lv = layer_lvs[i]
            z_pos = z + layer.thickness / 2
            g4.PhysicalVolume(
                [0, 0, 0],
                [0, 0, z_pos],
                lv,
                f"{lv.name}_{copy_numbers[i]}",
                mother_lv,
                self.registry,
                copyNumber=copy_numbers[i],
            )
            result.placements.append(
                LayerPlacement(mother_lv.name, lv.name, i, copy_numbers[i], z_pos, layer.thickness)
            )
            log.debug(
                "%s number %d positioned in %s at z=%f with no rotation",
                lv.name,
                copy_numbers[i],
                mother_lv.name,
                z_pos,
            )

            copy_numbers[i] += 1
            z += layer.thickness
            thick_tot += layer.thickness

        return thick_tot
