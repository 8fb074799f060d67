"""Subpackage to provide all implemented materials of the passive module parts."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Callable

import pyg4ometry.geant4 as g4

log = logging.getLogger(__name__)


def cached_property(material: Callable):
    @wraps(material)
    def wrapper(self):
        attr = f"_{material.__name__}"
        if not hasattr(self, attr):
            setattr(self, attr, material(self))
        return getattr(self, attr)

    return property(wrapper)


class MaterialRegistry:
    # lower-case material names (as used in the geometry description) to property names.
    ALIASES = {
        "air": "air",
        "copper": "metal_copper",
        "cu": "metal_copper",
        "kapton": "kapton",
        "epoxy": "epoxy",
        "g10": "g10",
        "fr4": "g10",
        "hgc_g10-fr4": "g10",
        "pcb": "g10",
        "carbonfibre": "carbon_fibre",
        "carbon_fibre": "carbon_fibre",
        "carbonfiber": "carbon_fibre",
        "wcu": "metal_tungsten_copper",
        "lead": "metal_lead",
        "pb": "metal_lead",
        "steel": "metal_steel",
        "stainlesssteel": "metal_steel",
        "silicon": "metal_silicon",
        "si": "metal_silicon",
    }

    def __init__(self, g4_registry: g4.Registry):
        self.g4_registry = g4_registry

        self._elements = {}
        self._elements_cb = {}
        self._define_elements()

    def get_element(self, symbol: str) -> g4.Element:
        if (symbol in self._elements_cb) and (symbol not in self._elements):
            self._elements[symbol] = (self._elements_cb[symbol])()
        return self._elements[symbol]

    def _add_element(self, name: str, symbol: str, z: int, a: float) -> None:
        """Lazily define an element on the current registry."""
        assert symbol not in self._elements_cb
        self._elements_cb[symbol] = lambda: g4.ElementSimple(
            name=name, symbol=symbol, Z=z, A=a, registry=self.g4_registry
        )

    def _define_elements(self) -> None:
        """Lazily define all used elements."""
        self._add_element(name="Hydrogen", symbol="H", z=1, a=1.00794)
        self._add_element(name="Carbon", symbol="C", z=6, a=12.011)
        self._add_element(name="Nitrogen", symbol="N", z=7, a=14.01)
        self._add_element(name="Oxygen", symbol="O", z=8, a=16.00)
        self._add_element(name="Silicon", symbol="Si", z=14, a=28.09)
        self._add_element(name="Chromium", symbol="Cr", z=24, a=51.9961)
        self._add_element(name="Manganese", symbol="Mn", z=25, a=54.93805)
        self._add_element(name="Iron", symbol="Fe", z=26, a=55.845)
        self._add_element(name="Nickel", symbol="Ni", z=28, a=58.6934)
        self._add_element(name="Copper", symbol="Cu", z=29, a=63.55)
        self._add_element(name="Tungsten", symbol="W", z=74, a=183.84)
        self._add_element(name="Lead", symbol="Pb", z=82, a=207.2)

    def resolve(self, name: str) -> g4.Material:
        """Look up a material by the name used in the geometry description.

        A namespace prefix (``materials:Copper``) is ignored. The materials of this registry take
        precedence, then other materials already defined on the registry, then Geant4 predefined
        ``G4_*`` materials.
        """
        short_name = name.split(":")[-1]
        prop = self.ALIASES.get(short_name.lower())
        if prop is not None:
            return getattr(self, prop)

        # elements share the dict with the materials.
        for n in (name, short_name):
            m = self.g4_registry.materialDict.get(n)
            if m is not None and not isinstance(m, g4.Element):
                return m

        if short_name.startswith("G4_"):
            return g4.MaterialPredefined(short_name)

        msg = f"unknown material {name}"
        raise ValueError(msg)

    @cached_property
    def air(self) -> g4.Material:
        """Air, from the Geant4 NIST database."""
        return g4.MaterialPredefined("G4_AIR")

    @cached_property
    def metal_steel(self) -> g4.Material:
        """Stainless steel."""
        _metal_steel = g4.Material(
            name="metal_steel",
            density=7.9,
            number_of_components=5,
            registry=self.g4_registry,
        )
        _metal_steel.add_element_massfraction(self.get_element("Si"), massfraction=0.01)
        _metal_steel.add_element_massfraction(self.get_element("Cr"), massfraction=0.20)
        _metal_steel.add_element_massfraction(self.get_element("Mn"), massfraction=0.02)
        _metal_steel.add_element_massfraction(self.get_element("Fe"), massfraction=0.67)
        _metal_steel.add_element_massfraction(self.get_element("Ni"), massfraction=0.10)

        return _metal_steel

    @cached_property
    def metal_silicon(self) -> g4.Material:
        """Silicon."""
        _metal_silicon = g4.Material(
            name="metal_silicon",
            density=2.330,
            number_of_components=1,
            registry=self.g4_registry,
        )
        _metal_silicon.add_element_natoms(self.get_element("Si"), natoms=1)

        return _metal_silicon

    @cached_property
    def metal_copper(self) -> g4.Material:
        """Copper of the cooling plates."""
        _metal_copper = g4.Material(
            name="metal_copper",
            density=8.960,
            number_of_components=1,
            registry=self.g4_registry,
        )
        _metal_copper.add_element_natoms(self.get_element("Cu"), natoms=1)

        return _metal_copper

    @cached_property
    def metal_lead(self) -> g4.Material:
        """Lead absorber."""
        _metal_lead = g4.Material(
            name="metal_lead",
            density=11.35,
            number_of_components=1,
            registry=self.g4_registry,
        )
        _metal_lead.add_element_natoms(self.get_element("Pb"), natoms=1)

        return _metal_lead

    @cached_property
    def metal_tungsten_copper(self) -> g4.Material:
        """Tungsten-copper alloy (75/25) of the module base plates."""
        _wcu = g4.Material(
            name="metal_tungsten_copper",
            density=14.979,
            number_of_components=2,
            registry=self.g4_registry,
        )
        _wcu.add_element_massfraction(self.get_element("W"), massfraction=0.75)
        _wcu.add_element_massfraction(self.get_element("Cu"), massfraction=0.25)

        return _wcu

    @cached_property
    def kapton(self) -> g4.Material:
        """Kapton (polyimide) insulation foil."""
        _kapton = g4.Material(name="kapton", density=1.42, number_of_components=4, registry=self.g4_registry)
        _kapton.add_element_natoms(self.get_element("H"), natoms=10)
        _kapton.add_element_natoms(self.get_element("C"), natoms=22)
        _kapton.add_element_natoms(self.get_element("N"), natoms=2)
        _kapton.add_element_natoms(self.get_element("O"), natoms=5)

        return _kapton

    @cached_property
    def epoxy(self) -> g4.Material:
        """Epoxy glue between the module layers."""
        _epoxy = g4.Material(name="epoxy", density=1.3, number_of_components=3, registry=self.g4_registry)
        _epoxy.add_element_natoms(self.get_element("H"), natoms=12)
        _epoxy.add_element_natoms(self.get_element("C"), natoms=11)
        _epoxy.add_element_natoms(self.get_element("O"), natoms=3)

        return _epoxy

    @cached_property
    def g10(self) -> g4.Material:
        """G10/FR4 of the hexaboard PCB."""
        _g10 = g4.Material(name="g10", density=1.86, number_of_components=4, registry=self.g4_registry)
        _g10.add_element_massfraction(self.get_element("Si"), massfraction=0.281)
        _g10.add_element_massfraction(self.get_element("O"), massfraction=0.467)
        _g10.add_element_massfraction(self.get_element("C"), massfraction=0.220)
        _g10.add_element_massfraction(self.get_element("H"), massfraction=0.032)

        return _g10

    @cached_property
    def carbon_fibre(self) -> g4.Material:
        """Carbon fibre base plates."""
        _carbon_fibre = g4.Material(
            name="carbon_fibre",
            density=1.75,
            number_of_components=1,
            registry=self.g4_registry,
        )
        _carbon_fibre.add_element_natoms(self.get_element("C"), natoms=1)

        return _carbon_fibre
