"""
Tests for L-shaped and U-shaped stairs (arm_stairs.py, arm_stair_calculator.py).

Tests:
1.    L arm lengths shrink by one tread per step
2.    U arm A shrinks at both ends
3.    An arm too short for the flight is rejected
4.    L units per arm and mortar
5.    U units alternate per course for a bonded corner
6.    L slab widths: dominant arms, butt joint
7.    Top-dominant arm B swaps the tread widths
8.    Mitre: full-length treads, extra corner cuts
9.    Offcuts from arm A are reused on arm B of the same step
10.   U lays arm A then both B arms
11.   Loose fields, strict choices
12.   Calculator refuses a spec of the other shape
"""

import dataclasses

import pytest

from stairworks.calculators.arm_stair_calculator import LShapeStairCalculator, UShapeStairCalculator
from stairworks.calculators.arm_stairs import (
    Arm, ArmShape, ArmStairSpecification, CornerJoint,
    arm_step_blocks, build_arm_steps, mitre_corners,
)
from stairworks.calculators.course_composer import compose_courses
from stairworks.calculators.stair_geometry import StairInputError


def _l_spec(**overrides):
    """Three 18 cm steps, 35 cm treads, arms 200 and 150 cm, 4-inch blocks."""
    base = ArmStairSpecification(
        total_height=54.0,
        step_tread=35.0,
        step_height=18.0,
        arm_a_length=200.0,
        arm_b_length=150.0,
        slab_thickness_top=2.0,
        slab_thickness_front=2.0,
        overhang_front=2.0,
        unit_material_ids=("blocks4",),
    )
    return dataclasses.replace(base, **overrides)


def _u_spec(**overrides):
    """The same flight with a 300 cm back arm and two 150 cm side arms."""
    values = {"shape": ArmShape.U_SHAPE, "arm_a_length": 300.0}
    values.update(overrides)
    return _l_spec(**values)


def _fields(**overrides):
    fields = {
        "total_height": "54",
        "step_tread": "35",
        "step_height": 18,
        "arm_a_length": "200cm",
        "arm_b_length": "150",
        "slab_thickness_top": "2",
        "slab_thickness_front": 2,
        "overhang_front": "2",
        "unit_material_ids": "blocks4",
    }
    fields.update(overrides)
    return fields


def test_l_arm_lengths():
    geometry = build_arm_steps(_l_spec())

    assert geometry.step_count == 3
    assert [s.cumulative_height for s in geometry.steps] == [16.0, 34.0, 52.0]
    assert [(a.outer_a, a.outer_b) for a in geometry.arms] == [(200.0, 150.0), (167.0, 117.0), (134.0, 84.0)]
    assert [(a.inner_a, a.inner_b) for a in geometry.arms] == [(167.0, 117.0), (134.0, 84.0), (103.0, 53.0)]
    assert geometry.total_run == 97.0


def test_u_arm_a_shrinks_twice():
    geometry = build_arm_steps(_u_spec())
    assert [a.outer_a for a in geometry.arms] == [300.0, 234.0, 168.0]
    assert [a.outer_b for a in geometry.arms] == [150.0, 117.0, 84.0]
    assert geometry.arms[-1].inner_a == 106.0


@pytest.mark.parametrize("spec", [
    _l_spec(arm_b_length=90.0),
    _u_spec(arm_a_length=190.0),
    _l_spec(arm_a_length=0.0),
])
def test_short_arm_rejected(spec):
    with pytest.raises(StairInputError):
        build_arm_steps(spec)


def test_l_units_and_mortar():
    """Courses 2, 3, 5; each course runs the inner length of both arms."""
    result = LShapeStairCalculator().estimate(_l_spec(), [])

    assert [c["block_count"] for c in result["courses"]] == [2, 3, 5]
    details = result["materials"][0]["course_details"]
    assert [d["arm_blocks"] for d in details] == [
        {"a": 8, "b": 6}, {"a": 9, "b": 6}, {"a": 15, "b": 10},
    ]
    assert result["block_count"] == 54
    # 54 x 1.5 kg of joints, 0.261 m3 of fill 14 cm deep
    assert result["mortar_kg"] == 498.5
    assert result["total_length"] == 97.0


def test_u_units_bond_at_corners():
    spec = _u_spec()
    geometry = build_arm_steps(spec)
    configurations = compose_courses(spec, geometry.steps)

    first = arm_step_blocks(spec, geometry.arms[0], configurations[0])
    # Course 1: 300 and 150 - 21; course 2: 300 - 42 and 150
    assert first == {"a": 7 + 6, "b_left": 3 + 4, "b_right": 3 + 4}

    result = UShapeStairCalculator().estimate(spec, [])
    assert result["block_count"] == 27 + 35 + 38


def test_l_slab_widths():
    """Tread 36.5 cm deep on step 1; arm A runs through the corner."""
    result = LShapeStairCalculator().estimate(_l_spec(), [])
    surfaces = result["surfaces"]

    assert len(surfaces) == 12
    first_step = surfaces[:4]
    assert [(s["arm"], s["surface"]) for s in first_step] == [
        ("a", "tread"), ("a", "riser"), ("b", "tread"), ("b", "riser"),
    ]
    assert [s["required_width"] for s in first_step] == [200.0, 198.0, 113.3, 145.8]
    assert first_step[0]["required_depth"] == 36.5
    assert first_step[1]["required_depth"] == 16.0
    assert result["total_slabs"] == result["tread_slabs"] + result["riser_slabs"]


def test_top_dominant_arm_b():
    spec = _l_spec(top_dominant_arm=Arm.B)
    surfaces = LShapeStairCalculator().estimate(spec, [])["surfaces"]
    assert [surfaces[0]["required_width"], surfaces[2]["required_width"]] == [163.3, 150.0]


def test_mitre_corners():
    """Both treads run full length; the first tread gets one extra length cut."""
    butt = LShapeStairCalculator().estimate(_l_spec(), [])["surfaces"]
    mitre = LShapeStairCalculator().estimate(_l_spec(corner_joint=CornerJoint.MITRE), [])
    surfaces = mitre["surfaces"]

    assert [surfaces[0]["required_width"], surfaces[2]["required_width"]] == [200.0, 150.0]
    assert surfaces[0]["length_cuts"] == butt[0]["length_cuts"] + 1
    assert any("mitred" in a for a in mitre["assumptions"])

    u_spec = _u_spec(corner_joint=CornerJoint.MITRE)
    assert [mitre_corners(u_spec, arm) for arm in ("a", "b_left", "b_right")] == [2, 1, 1]


def test_offcuts_shared_between_arms():
    """Both step 1 arm A leftovers together clad the arm B tread."""
    surfaces = LShapeStairCalculator().estimate(_l_spec(), [])["surfaces"]
    tread_b = surfaces[2]

    assert tread_b["waste_used"]
    assert tread_b["new_slabs_needed"] == 0
    assert tread_b["waste_source"] == "Step 1 arm a and Step 1 arm a"


def test_u_lays_both_side_arms():
    result = UShapeStairCalculator().estimate(_u_spec(), [])
    surfaces = result["surfaces"]

    assert result["calculator"] == "u_shape_stair"
    assert len(surfaces) == 18
    assert [s["arm"] for s in surfaces[:6]] == ["a", "a", "b_left", "b_left", "b_right", "b_right"]
    assert [s["required_width"] for s in surfaces[:6]] == [300.0, 298.0, 113.3, 145.8, 113.3, 145.8]
    assert any("side arms" in a for a in result["assumptions"])


def test_loose_fields():
    calculator = LShapeStairCalculator()
    spec = calculator.spec_from_fields(_fields(corner_joint="Mitre", top_dominant_arm="B"))
    assert spec.shape == ArmShape.L_SHAPE
    assert spec.arm_a_length == 200.0
    assert spec.corner_joint == CornerJoint.MITRE
    assert spec.top_dominant_arm == Arm.B
    assert spec.front_dominant_arm == Arm.A

    assert calculator.calculate(_fields())["block_count"] == 54

    with pytest.raises(StairInputError):
        calculator.spec_from_fields(_fields(corner_joint="round"))
    fields = _fields()
    del fields["arm_b_length"]
    with pytest.raises(StairInputError) as excinfo:
        calculator.spec_from_fields(fields)
    assert "arm_b_length" in str(excinfo.value)


def test_shape_mismatch_rejected():
    with pytest.raises(StairInputError):
        LShapeStairCalculator().estimate(_u_spec(), [])
