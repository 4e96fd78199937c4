"""
Tests for the standard stair calculator (stair_calculator.py, registry.py).

Tests:
1.    Five-step stair: geometry, courses, blocks, mortar
2.    Slab totals agree with the per-surface plans
3.    Same input gives the same estimate
4.    Loose string fields are parsed ("90cm", "yes", comma lists)
5.    Choice fields accept camelCase spellings
6.    Unknown choice values are rejected, not defaulted
7.    Missing measurements are rejected
8.    Unit laid in an orientation it does not support is rejected
9.    Unknown slab size and unknown unit are rejected
10.   Uniform burial applied when asked for and possible
11.   Transport entries only when a carrier is given
12.   Registry lookup
"""

import dataclasses

import pytest

from stairworks.calculators.arm_stair_calculator import LShapeStairCalculator, UShapeStairCalculator
from stairworks.calculators.registry import get_calculator, has_calculator, list_calculators
from stairworks.calculators.stair_calculator import StandardStairCalculator
from stairworks.calculators.stair_geometry import (
    CuttingMode, SlabPlacement, StairInputError, StairSpecification, StepConfiguration,
)
from stairworks.calculators.unit_library import Orientation


def _spec(**overrides):
    """Five 18 cm steps, 100 cm wide, 90 x 60 slabs."""
    base = StairSpecification(
        total_height=90.0,
        total_width=100.0,
        step_tread=35.0,
        step_height=18.0,
        slab_thickness_top=2.0,
        slab_thickness_side=2.0,
        slab_thickness_front=2.0,
        overhang_front=2.0,
        overhang_side=1.0,
    )
    return dataclasses.replace(base, **overrides)


def _fields(**overrides):
    fields = {
        "total_height": "90",
        "total_width": "100cm",
        "step_tread": 35,
        "step_height": "18",
        "slab_thickness_top": "2",
        "slab_thickness_side": 2,
        "slab_thickness_front": 2,
        "overhang_front": "2",
        "overhang_side": "1",
    }
    fields.update(overrides)
    return fields


def _templates():
    return [
        {"name": "building steps with 4-inch blocks", "estimated_hours": 0.25, "unit": "pieces"},
        {"name": "mixing mortar", "estimated_hours": 0.5, "unit": "batch"},
    ]


def test_five_step_stair():
    result = StandardStairCalculator().estimate(_spec(), _templates())

    assert result["calculator"] == "standard_stair"
    assert result["step_count"] == 5
    assert result["actual_step_height"] == 18.0
    assert result["total_length"] == 163.0
    assert result["net_step_width"] == 94.0
    assert [s["height"] for s in result["step_dimensions"]] == [16.0, 34.0, 52.0, 70.0, 88.0]
    assert [c["block_count"] for c in result["courses"]] == [2, 3, 5, 6, 7]

    assert result["block_count"] == 98
    assert result["mortar_kg"] == 401.4
    assert result["recommended_burial_depth"] is None
    assert result["uniform_burial_applied"] is False

    blocks = result["materials"][0]
    assert (blocks["name"], blocks["amount"], blocks["unit"]) == ("4-inch Blocks", 98, "pieces")
    assert len(blocks["course_details"]) == 5
    assert result["materials"][1] == {"name": "Mortar", "amount": 401.4, "unit": "kg"}

    assert result["task_breakdown"][0] == {
        "task": "building steps with 4-inch blocks", "hours": 24.5, "amount": 98, "unit": "pieces",
    }
    assert result["task_breakdown"][-1] == {
        "task": "mixing mortar", "hours": 2.0, "amount": 4, "unit": "batch",
    }
    assert result["total_hours"] == 26.5


def test_slab_totals_match_surfaces():
    result = StandardStairCalculator().estimate(_spec(), [])
    surfaces = result["surfaces"]

    assert len(surfaces) == 10
    assert [s["surface"] for s in surfaces[:2]] == ["tread", "riser"]
    assert result["total_slabs"] == sum(s["new_slabs_needed"] for s in surfaces)
    assert result["total_slabs"] == result["tread_slabs"] + result["riser_slabs"]
    assert result["total_cuts"] == sum(s["total_cuts"] for s in surfaces)
    assert all(s["new_slabs_needed"] >= 0 and s["total_cuts"] >= 0 for s in surfaces)
    assert sum(result["slab_dimension_histogram"].values()) > 0

    slabs = [m for m in result["materials"] if m["name"] == "90x60 porcelain slabs"]
    assert slabs[0]["amount"] == result["total_slabs"]
    # No templates given: no labour
    assert result["task_breakdown"] == []
    assert result["total_hours"] == 0


def test_same_input_same_estimate():
    calculator = StandardStairCalculator()
    assert calculator.estimate(_spec(), _templates()) == calculator.estimate(_spec(), _templates())


def test_loose_fields_parsed():
    calculator = StandardStairCalculator(task_templates=_templates())
    result = calculator.calculate(_fields(
        build_back="no", unit_material_ids="blocks4, blocks7", block_orientation="flat",
    ))
    assert result["step_count"] == 5
    assert result["block_count"] == 98
    assert result["task_breakdown"][0]["amount"] == 98

    spec = calculator.spec_from_fields(_fields(build_back="yes", cutting_mode="TWO_CUTS"))
    assert spec.total_width == 100.0
    assert spec.build_back is True
    assert spec.cutting_mode.value == "two_cuts"
    assert spec.unit_material_ids == ("blocks4", "blocks7")


def test_choice_spellings():
    """Values, names and camelCase spellings map to the same choice; blanks keep the default."""
    calculator = StandardStairCalculator()
    spec = calculator.spec_from_fields(_fields(
        cutting_mode="twoCuts", step_configuration="stepsToFronts",
        placement="sideWays", brick_orientation="on_side", block_orientation="",
    ))
    assert spec.cutting_mode == CuttingMode.TWO_CUTS
    assert spec.step_configuration == StepConfiguration.STEPS_TO_FRONTS
    assert spec.placement == SlabPlacement.SIDE_WAYS
    assert spec.brick_orientation == Orientation.ON_SIDE
    assert spec.block_orientation == Orientation.FLAT


@pytest.mark.parametrize("field", ["cutting_mode", "step_configuration", "placement", "block_orientation"])
def test_unknown_choice_rejected(field):
    with pytest.raises(StairInputError) as excinfo:
        StandardStairCalculator().calculate(_fields(**{field: "bogus"}))
    assert "bogus" in str(excinfo.value)


def test_missing_measurements_rejected():
    fields = _fields()
    del fields["step_height"]
    fields["total_width"] = ""
    with pytest.raises(StairInputError) as excinfo:
        StandardStairCalculator().calculate(fields)
    assert "total_width" in str(excinfo.value)
    assert "step_height" in str(excinfo.value)


def test_unsupported_orientation_rejected():
    """Bricks can be laid flat or on side, never upright."""
    spec = _spec(unit_material_ids=("bricks",), brick_orientation=Orientation.UPRIGHT)
    with pytest.raises(StairInputError):
        StandardStairCalculator().estimate(spec, [])


def test_unknown_catalogue_entries_rejected():
    with pytest.raises(StairInputError):
        StandardStairCalculator().estimate(_spec(slab_size="120x120"), [])
    with pytest.raises(StairInputError):
        StandardStairCalculator().estimate(_spec(unit_material_ids=("granite",)), [])
    with pytest.raises(StairInputError):
        StandardStairCalculator().estimate(_spec(unit_material_ids=()), [])


def test_uniform_burial_applied():
    """Two 20 cm steps in 4-inch blocks share a 7 cm burial."""
    spec = _spec(total_height=40.0, step_height=20.0, unit_material_ids=("blocks4",))
    calculator = StandardStairCalculator()

    per_step = calculator.estimate(spec, [])
    assert per_step["recommended_burial_depth"] == 7.0
    assert per_step["uniform_burial_applied"] is False

    uniform = calculator.estimate(dataclasses.replace(spec, uniform_burial=True), [])
    assert uniform["uniform_burial_applied"] is True
    assert [c["buried_depth"] for c in uniform["courses"]] == [7.0, 7.0]
    assert [s["buried_depth"] for s in uniform["step_dimensions"]] == [7.0, 7.0]
    assert any("share a burial depth of 7 cm" in a for a in uniform["assumptions"])


def test_transport_only_with_carrier():
    calculator = StandardStairCalculator()
    without = calculator.estimate(_spec(), [])
    assert not any(t["task"].startswith("transport") for t in without["task_breakdown"])

    result = calculator.estimate(_spec(carrier_size_tonnes=0.125), [])
    tasks = {t["task"]: t for t in result["task_breakdown"]}
    assert tasks["transport 4-inch blocks"]["amount"] == 98
    assert tasks["transport 4-inch blocks"]["hours"] == pytest.approx(0.52)
    assert tasks["transport slabs"]["amount"] == result["total_slabs"]


def test_registry():
    assert has_calculator("standard_stair")
    assert list_calculators() == ["standard_stair", "l_shape_stair", "u_shape_stair"]
    assert isinstance(get_calculator("l_shape_stair"), LShapeStairCalculator)
    assert isinstance(get_calculator("u_shape_stair"), UShapeStairCalculator)
    assert isinstance(get_calculator("standard_stair"), StandardStairCalculator)
    with pytest.raises(ValueError):
        get_calculator("spiral_stair")
