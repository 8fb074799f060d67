"""Outlines of full and partial hexagonal wafers.

The outline of a wafer is fully determined by its partial type (which part of the hexagon is kept),
its placement index (orientation in the layer) and its flat-to-flat size. The corners of the full
hexagon are numbered counter-clockwise, starting from the bottom corner at placement index 0::

           3
       4       2
       5       1
           0

Placement indices 0-5 rotate the outline counter-clockwise in steps of 60 deg, indices 6-11 mirror it
at the y axis before rotating.
"""

from __future__ import annotations

import math
from typing import Protocol

import numpy as np

WAFER_FULL = 0
WAFER_FIVE = 1
WAFER_CHOP_TWO = 2
WAFER_CHOP_TWO_M = 3
WAFER_HALF = 4
WAFER_SEMI = 5
WAFER_SEMI2 = 6
WAFER_THREE = 7

PLACEMENT_COUNT = 12

# each partial type is a walk along the hexagon perimeter: ("c", k) is corner k, ("e", k, f) is the
# point at fraction f on the edge from corner k to corner k+1.
_PARTIAL_OUTLINES = {
    WAFER_FULL: [("c", 0), ("c", 1), ("c", 2), ("c", 3), ("c", 4), ("c", 5)],
    WAFER_FIVE: [("c", 1), ("c", 2), ("c", 3), ("c", 4), ("c", 5)],
    WAFER_CHOP_TWO: [("c", 2), ("c", 3), ("c", 4), ("c", 5), ("e", 5, 0.25), ("e", 1, 0.75)],
    WAFER_CHOP_TWO_M: [("c", 2), ("c", 3), ("c", 4), ("c", 5), ("e", 5, 0.5), ("e", 1, 0.5)],
    WAFER_HALF: [("c", 1), ("c", 2), ("c", 3), ("c", 4)],
    WAFER_SEMI: [("c", 1), ("c", 2), ("c", 3), ("c", 4), ("e", 4, 0.5)],
    WAFER_SEMI2: [("c", 2), ("c", 3), ("c", 4), ("e", 4, 0.5), ("e", 1, 0.5)],
    WAFER_THREE: [("c", 1), ("c", 3), ("c", 5)],
}

PARTIAL_TYPES = frozenset(_PARTIAL_OUTLINES)


class CrossSectionProvider(Protocol):
    def boundary(
        self,
        partial_type: int,
        placement_index: int,
        size: float,
        origin: tuple[float, float, float] = (0.0, 0.0, 0.0),
    ) -> list[tuple[float, float]]:
        """Return the closed outline (last vertex repeating the first) of a wafer."""
        ...


def hexagon_corners(size: float) -> np.ndarray:
    """Corners of a full hexagon with flat-to-flat ``size``, counter-clockwise from the bottom."""
    r = size / 2
    big_r = 2 * r / math.sqrt(3)
    phi = np.deg2rad(-90 + 60 * np.arange(6))
    return np.column_stack([big_r * np.cos(phi), big_r * np.sin(phi)])


def _placement_matrix(placement_index: int) -> np.ndarray:
    angle = np.deg2rad(60 * (placement_index % 6))
    rot = np.array([[np.cos(angle), -np.sin(angle)], [np.sin(angle), np.cos(angle)]])
    if placement_index >= 6:
        return rot @ np.array([[-1, 0], [0, 1]])
    return rot


def _signed_area(pts: np.ndarray) -> float:
    x, y = pts[:, 0], pts[:, 1]
    return 0.5 * float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


class WaferMask:
    """Default :class:`CrossSectionProvider` for hexagonal (partial) wafers.

    The returned outlines are ordered clockwise, as expected by extruded solids.
    """

    def boundary(
        self,
        partial_type: int,
        placement_index: int,
        size: float,
        origin: tuple[float, float, float] = (0.0, 0.0, 0.0),
    ) -> list[tuple[float, float]]:
        """Outline of a wafer.

        Parameters
        ----------
        partial_type
            one of the ``WAFER_*`` constants.
        placement_index
            orientation index from 0 to 11.
        size
            flat-to-flat size of the full hexagon.
        origin
            ``(offset, x, y)``: the outline is shrunk by ``offset`` on each side, and its center is
            moved to ``(x, y)``.
        """
        if partial_type not in _PARTIAL_OUTLINES:
            msg = f"unknown partial wafer type {partial_type}"
            raise ValueError(msg)
        if not 0 <= placement_index < PLACEMENT_COUNT:
            msg = f"invalid placement index {placement_index}"
            raise ValueError(msg)

        offset, xpos, ypos = origin
        corners = hexagon_corners(size - 2 * offset)

        pts = []
        for p in _PARTIAL_OUTLINES[partial_type]:
            if p[0] == "c":
                pts.append(corners[p[1]])
            else:
                _, k, f = p
                pts.append(corners[k] + f * (corners[(k + 1) % 6] - corners[k]))
        pts = np.array(pts) @ _placement_matrix(placement_index).T

        if _signed_area(pts) > 0:
            pts = pts[::-1]
        pts = pts + np.array([xpos, ypos])

        outline = [(float(x), float(y)) for x, y in pts]
        return [*outline, outline[0]]


def open_polygon(boundary: list[tuple[float, float]]) -> list[tuple[float, float]]:
    """Drop the closing vertex of an outline returned by a :class:`CrossSectionProvider`."""
    return list(boundary[:-1])
