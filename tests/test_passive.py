from __future__ import annotations

import logging

import pytest


def _build(record, registry, mask):
    from hgcalgeom.passive import PassivePartialBuilder

    return PassivePartialBuilder(record, registry, mask=mask).build()


def test_no_config(registry):
    from hgcalgeom.passive import PassivePartialBuilder

    with pytest.raises(RuntimeError, match="wrong initialization"):
        PassivePartialBuilder(None, registry)
    assert len(registry.solidDict) == 0


def test_stack_matching_thickness(make_record, registry, square_mask):
    from hgcalgeom.passive import EXECUTED

    record = make_record()
    result = _build(record, registry, square_mask)

    assert result.status == EXECUTED
    assert result.diagnostics == []
    assert list(result.mothers) == ["parentpA"]
    assert result.thickness["parentpA"] == pytest.approx(1.0)

    z = [p.z for p in result.placements]
    assert z == pytest.approx([-0.3, 0.2])
    assert [p.volume for p in result.placements] == ["parentpAcu", "parentpAkapton"]
    assert [p.copy_number for p in result.placements] == [1, 1]

    mother = registry.logicalVolumeDict["parentpA"]
    assert len(mother.daughterVolumes) == 2
    assert mother.material.name == "G4_AIR"
    assert registry.logicalVolumeDict["parentpAcu"].material.name == "metal_copper"
    assert registry.logicalVolumeDict["parentpAkapton"].material.name == "kapton"


def test_repeated_layer_type(make_record, registry, square_mask, caplog):
    record = make_record(
        layer_names=["cu"], layer_materials=["Copper"], layer_thickness=[0.3], layer_type=[0, 0]
    )

    with caplog.at_level(logging.WARNING, logger="hgcalgeom"):
        result = _build(record, registry, square_mask)

    # one volume, placed twice.
    assert list(result.layers) == ["parentpAcu"]
    assert [p.copy_number for p in result.placements] == [1, 2]
    assert [p.z for p in result.placements] == pytest.approx([-0.35, -0.05])
    assert registry.physicalVolumeDict["parentpAcu_1"].copyNumber == 1
    assert registry.physicalVolumeDict["parentpAcu_2"].copyNumber == 2

    assert result.thickness["parentpA"] == pytest.approx(0.6)
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].severity == "warning"
    assert not result.has_errors
    assert "does not match" in caplog.text


def test_copy_numbers_interleaved(make_record, registry, square_mask):
    record = make_record(
        layer_thickness=[0.1, 0.2],
        layer_type=[0, 1, 0, 1, 0],
        module_thickness=0.7,
    )
    result = _build(record, registry, square_mask)

    assert len(result.layers) == 2
    by_type = {0: [], 1: []}
    for p in result.placements:
        by_type[p.layer_type].append(p.copy_number)
    assert by_type == {0: [1, 2, 3], 1: [1, 2]}
    assert result.diagnostics == []

    # the sum of the placed layer thicknesses equals the accumulated thickness.
    assert sum(p.thickness for p in result.placements) == pytest.approx(result.thickness["parentpA"])
    # layers are touching each other.
    for prev, cur in zip(result.placements, result.placements[1:]):
        assert cur.z - cur.thickness / 2 == pytest.approx(prev.z + prev.thickness / 2)


def test_empty_stack(make_record, registry, square_mask):
    record = make_record(layer_type=[], module_thickness=5.0)
    result = _build(record, registry, square_mask)

    assert list(result.mothers) == ["parentpA"]
    assert result.placements == []
    assert result.layers == {}
    assert result.diagnostics == []
    assert len(registry.logicalVolumeDict["parentpA"].daughterVolumes) == 0


def test_overflow(make_record, registry, square_mask, caplog):
    record = make_record(layer_thickness=[0.5, 0.6])

    with caplog.at_level(logging.ERROR, logger="hgcalgeom"):
        result = _build(record, registry, square_mask)

    assert result.has_errors
    assert [d.severity for d in result.diagnostics] == ["error"]
    assert "**** ERROR ****" in caplog.text
    # the construction is not aborted.
    assert len(result.placements) == 2


def test_variants(make_record, registry, square_mask):
    record = make_record(
        tags=["A", "B"], partial_types=[1, 2], placement_index=[0], placement_index_tags=["p"]
    )
    result = _build(record, registry, square_mask)

    assert list(result.mothers) == ["parentpA", "parentpB"]
    assert square_mask.calls == [(1, 0, 10.5), (2, 0, 10.5)]
    for mother in result.mothers:
        assert {p.volume for p in result.placements if p.mother == mother} == {
            mother + "cu",
            mother + "kapton",
        }


def test_variant_order(make_record, registry, square_mask):
    record = make_record(
        tags=["A", "B"],
        partial_types=[0, 1],
        placement_index=[0, 3],
        placement_index_tags=["p", "q"],
        layer_type=[],
    )
    result = _build(record, registry, square_mask)

    assert list(result.mothers) == ["parentpA", "parentqA", "parentpB", "parentqB"]
    assert [c[:2] for c in square_mask.calls] == [(0, 0), (0, 3), (1, 0), (1, 3)]


def test_duplicate_variant_names(make_record, registry, square_mask):
    from pyg4ometry.exceptions import IdenticalNameError

    record = make_record(tags=["A", "A"], partial_types=[0, 1])
    with pytest.raises(IdenticalNameError):
        _build(record, registry, square_mask)

    # the volumes of the first variant stay registered.
    assert "parentpA" in registry.logicalVolumeDict
    assert "parentpAcu" in registry.logicalVolumeDict
    assert "parentpAkapton" in registry.logicalVolumeDict
    assert len(registry.logicalVolumeDict["parentpA"].daughterVolumes) == 2


def test_footprint(make_record, registry, square_mask):
    from hgcalgeom.extrusion import extrusion_planes

    record = make_record(partial_types=[1])
    _build(record, registry, square_mask)

    expected = square_mask.boundary(1, 0, 10.5)[:-1]
    for name in ("parentpA", "parentpAcu", "parentpAkapton"):
        solid = registry.solidDict[name]
        assert solid.pPolygon == [[x, y] for x, y in expected]

    assert registry.solidDict["parentpA"].pZslices == extrusion_planes(0.5)
    assert registry.solidDict["parentpAkapton"].pZslices == extrusion_planes(0.3)


def test_validate_thickness():
    from hgcalgeom.passive import THICKNESS_TOLERANCE, validate_thickness

    assert validate_thickness(1.0, 1.0) is None
    assert validate_thickness(1.0 + 0.5 * THICKNESS_TOLERANCE, 1.0) is None
    assert validate_thickness(1.0 - 0.5 * THICKNESS_TOLERANCE, 1.0) is None

    # exactly at the tolerance, a mismatch is reported.
    assert validate_thickness(1e-5, 0.0).severity == "error"
    assert validate_thickness(0.0, 1e-5).severity == "warning"

    assert validate_thickness(1.2, 1.0, "mod").severity == "error"
    diag = validate_thickness(0.6, 1.0, "mod")
    assert diag.severity == "warning"
    assert "mod" in diag.message
