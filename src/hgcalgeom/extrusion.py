from __future__ import annotations

import logging

import pyg4ometry.geant4 as g4

log = logging.getLogger(__name__)


def extrusion_planes(half_thickness: float) -> list[list]:
    """z-slices of a straight prism centered at z=0, i.e. with no skew and unit scale."""
    return [
        [-half_thickness, [0.0, 0.0], 1.0],
        [half_thickness, [0.0, 0.0], 1.0],
    ]


def extrude(
    name: str,
    polygon: list[tuple[float, float]],
    half_thickness: float,
    registry: g4.Registry,
) -> g4.solid.ExtrudedSolid:
    """Extrude an open polygon between ``-half_thickness`` and ``+half_thickness``.

    The polygon needs at least three vertices, this is not checked here.
    """
    solid = g4.solid.ExtrudedSolid(
        name,
        [[x, y] for x, y in polygon],
        extrusion_planes(half_thickness),
        registry,
        "mm",
    )
    log.debug(
        "%s extruded polygon z (0) %f z (1) %f with %d edges",
        name,
        -half_thickness,
        half_thickness,
        len(polygon),
    )
    return solid
