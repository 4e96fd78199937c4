"""
Tests for block and mortar quantities (block_quantities.py).

Tests:
1.    First step: front and side walls
2.    Whole stair totals and per-step course details
3.    Back wall only above the first step
4.    Mortar: joints plus core fill
5.    Narrow stair has no core to fill
"""

import dataclasses

import pytest

from stairworks.calculators.block_quantities import (
    compute_block_quantities, core_fill_kg, step_blocks, units_across,
)
from stairworks.calculators.course_composer import compose_courses
from stairworks.calculators.stair_geometry import StairSpecification, build_steps


def _spec(**overrides):
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


def _quantities(spec):
    geometry = build_steps(spec)
    configs = compose_courses(spec, geometry.steps)
    return geometry, configs, compute_block_quantities(spec, geometry, configs)


def test_first_step_blocks():
    """54 cm front = 2 blocks x 2 courses; sides 2 courses x 4 blocks x 2 sides."""
    spec = _spec()
    geometry, configs, _ = _quantities(spec)
    assert units_across(54.0, 44.0) == 2
    assert step_blocks(spec, geometry, 0, configs[0]) == 20


def test_stair_totals():
    spec = _spec()
    _, _, quantities = _quantities(spec)

    assert len(quantities.materials) == 1
    blocks = quantities.materials[0]
    assert blocks.unit_material_id == "blocks4"
    assert blocks.name == "4-inch Blocks"
    assert blocks.amount == 98
    assert [d.blocks for d in blocks.course_details] == [20, 18, 22, 20, 18]
    assert [d.rows for d in blocks.course_details] == [2, 4, 5, 7, 8]
    assert blocks.course_details[0].buried_depth == pytest.approx(7.0)


def test_back_wall_above_first_step():
    """Back width 100 - 2 x 21 = 58 cm: 2 blocks per course from step 2 on."""
    spec = _spec(build_back=True)
    geometry, configs, _ = _quantities(spec)
    assert step_blocks(spec, geometry, 0, configs[0]) == 20
    assert step_blocks(spec, geometry, 1, configs[1]) == 18 + 2 * 3


def test_mortar():
    """98 blocks x 1.5 kg plus 0.158976 m³ of core at 1600 kg/m³."""
    spec = _spec()
    _, _, quantities = _quantities(spec)
    assert quantities.joint_mortar_kg == pytest.approx(147.0)
    assert quantities.core_fill_kg == pytest.approx(254.3616)
    assert quantities.mortar_kg == pytest.approx(401.3616)


def test_narrow_stair_no_core():
    spec = _spec(total_width=40.0)
    assert core_fill_kg(spec, build_steps(spec)) == 0.0
