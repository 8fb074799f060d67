"""Parameter record of the passive part of a partial silicon module.

The record is usually stored as positional parallel lists (one list per attribute), which is the
format used in the geometry description files. :func:`from_dict` bundles these lists into one record
per partial wafer type, per placement orientation and per layer type, and refuses inconsistent
input instead of failing later with an out-of-range access.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Mapping, Sequence
from dataclasses import dataclass
from importlib import resources

import pint
from dbetto import AttrsDict, TextDB
from pygeomtools.utils import load_dict_from_config

log = logging.getLogger(__name__)
u = pint.get_application_registry()

configs = TextDB(resources.files("hgcalgeom") / "configs")

# accepted spellings of the record keys, the camelCase variants are the ones of the XML algorithm
# arguments.
_KEY_ALIASES = {
    "parent_name": ("parent_name", "parentName", "ParentName"),
    "module_material": ("module_material", "ModuleMaterial"),
    "module_thickness": ("module_thickness", "ModuleThickness"),
    "wafer_size": ("wafer_size", "WaferSize"),
    "sensor_separation": ("sensor_separation", "SensorSeparation"),
    "tags": ("tags", "Tags"),
    "partial_types": ("partial_types", "PartialTypes"),
    "placement_index": ("placement_index", "PlacementIndex"),
    "placement_index_tags": ("placement_index_tags", "PlacementIndexTags"),
    "layer_names": ("layer_names", "LayerNames"),
    "layer_materials": ("layer_materials", "LayerMaterials"),
    "layer_thickness": ("layer_thickness", "LayerThickness"),
    "layer_type": ("layer_type", "LayerType"),
}


@dataclass(frozen=True)
class PartialVariant:
    """A partial wafer truncation type and the tag appended to volume names."""

    tag: str
    partial_type: int


@dataclass(frozen=True)
class PlacementVariant:
    """A placement orientation (rotation/mirroring index) and its volume name tag."""

    tag: str
    index: int


@dataclass(frozen=True)
class LayerType:
    """One entry of the layer catalogue."""

    name: str
    material: str
    thickness: float


@dataclass(frozen=True)
class PassivePartialConfig:
    parent_name: str
    """Name prefix of all constructed volumes."""
    module_material: str
    """Material filling the mother volumes."""
    module_thickness: float
    """Nominal thickness of the module (in mm)."""
    wafer_size: float
    """Flat-to-flat size of the wafer (in mm)."""
    sensor_separation: float
    """Separation between neighbouring sensors (in mm)."""
    partials: tuple[PartialVariant, ...]
    placements: tuple[PlacementVariant, ...]
    layers: tuple[LayerType, ...]
    """Catalogue of layer types."""
    layer_order: tuple[int, ...] = ()
    """Stacking order along z, as indices into :attr:`layers`. Repetitions are allowed."""

    @property
    def cross_section_size(self) -> float:
        return self.wafer_size + self.sensor_separation

    def variants(self) -> Generator[tuple[PartialVariant, PlacementVariant], None, None]:
        """Iterate over all (partial type, placement) combinations, partial type major."""
        for partial in self.partials:
            for placement in self.placements:
                yield partial, placement

    def mother_name(self, partial: PartialVariant, placement: PlacementVariant) -> str:
        return self.parent_name + placement.tag + partial.tag


def _get(cfg: Mapping, key: str, default=None, required: bool = True):
    for k in _KEY_ALIASES[key]:
        if k in cfg:
            return cfg[k]
    if required:
        msg = f"missing key {key} in passive module configuration"
        raise ValueError(msg)
    return default


def _length(value) -> float:
    """Convert a length to mm. Plain numbers are already in mm, strings like ``"1.4*mm"`` are parsed."""
    if not isinstance(value, str):
        return float(value)
    try:
        q = u.Quantity(value)
        if q.dimensionless:
            return float(q.magnitude)
        return float(q.to("mm").magnitude)
    except (pint.DimensionalityError, pint.UndefinedUnitError) as e:
        msg = f"invalid length {value!r}"
        raise ValueError(msg) from e


def _check_same_length(names: tuple[str, ...], *lists: Sequence) -> None:
    lengths = {len(lst) for lst in lists}
    if len(lengths) > 1:
        msg = f"parallel lists {', '.join(names)} have different lengths {[len(lst) for lst in lists]}"
        raise ValueError(msg)


def from_dict(cfg: Mapping, parent_name: str | None = None) -> PassivePartialConfig:
    """Build a :class:`PassivePartialConfig` from the parallel-list representation.

    Parameters
    ----------
    cfg
        mapping with the scalar keys ``parent_name``, ``module_material``, ``module_thickness``,
        ``wafer_size``, ``sensor_separation`` and the lists ``tags``, ``partial_types``,
        ``placement_index``, ``placement_index_tags``, ``layer_names``, ``layer_materials``,
        ``layer_thickness`` and ``layer_type``.
    parent_name
        overrides the parent name stored in the mapping.
    """
    tags = list(_get(cfg, "tags"))
    partial_types = list(_get(cfg, "partial_types"))
    placement_index = list(_get(cfg, "placement_index"))
    placement_tags = list(_get(cfg, "placement_index_tags"))
    layer_names = list(_get(cfg, "layer_names", [], required=False))
    layer_materials = list(_get(cfg, "layer_materials", [], required=False))
    layer_thickness = list(_get(cfg, "layer_thickness", [], required=False))
    layer_type = list(_get(cfg, "layer_type", [], required=False))

    _check_same_length(("tags", "partial_types"), tags, partial_types)
    _check_same_length(("placement_index", "placement_index_tags"), placement_index, placement_tags)
    _check_same_length(
        ("layer_names", "layer_materials", "layer_thickness"), layer_names, layer_materials, layer_thickness
    )

    for i in layer_type:
        if not 0 <= int(i) < len(layer_names):
            msg = f"layer type {i} is not in the layer catalogue of {len(layer_names)} entries"
            raise ValueError(msg)

    thick = _length(_get(cfg, "module_thickness"))
    if thick <= 0:
        msg = f"invalid module thickness {thick}"
        raise ValueError(msg)
    if any(_length(t) <= 0 for t in layer_thickness):
        msg = "layer thickness values must be positive"
        raise ValueError(msg)

    if parent_name is None:
        parent_name = str(_get(cfg, "parent_name"))

    return PassivePartialConfig(
        parent_name=parent_name,
        module_material=str(_get(cfg, "module_material")),
        module_thickness=thick,
        wafer_size=_length(_get(cfg, "wafer_size")),
        sensor_separation=_length(_get(cfg, "sensor_separation", 0.0, required=False)),
        partials=tuple(PartialVariant(str(t), int(p)) for t, p in zip(tags, partial_types)),
        placements=tuple(PlacementVariant(str(t), int(p)) for t, p in zip(placement_tags, placement_index)),
        layers=tuple(
            LayerType(str(n), str(m), _length(t))
            for n, m, t in zip(layer_names, layer_materials, layer_thickness)
        ),
        layer_order=tuple(int(i) for i in layer_type),
    )


def load_config(
    config: dict | None = None, key: str = "passive_partial", parent_name: str | None = None
) -> PassivePartialConfig:
    """Load the module record from a runtime config.

    ``config[key]`` can either be a dict holding the record or a path to a JSON/YAML file. If it is not
    present, the packaged default record is used.
    """
    config = config if config is not None else {}
    raw = load_dict_from_config(config, key, lambda: AttrsDict(configs.passive_partial))
    record = from_dict(raw, parent_name)
    log.debug(
        "loaded module %s: %d partial types, %d placements, %d layer types, %d blocks",
        record.parent_name,
        len(record.partials),
        len(record.placements),
        len(record.layers),
        len(record.layer_order),
    )
    return record
