"""
Block and mortar quantities for the masonry under the slabs.

Each step is a U of courses: a front wall across the step, optional side walls
running back over the rest of the stair, and an optional back wall. The inside
of the U is filled with mortar.

Counts use the unit chosen for that step by the course composer and a 1 cm
vertical joint between neighbouring units.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .course_composer import CourseConfiguration
from .stair_geometry import StairGeometry, StairSpecification, Step
from .tolerance import STANDARD_JOINT
from .unit_library import get_unit

logger = logging.getLogger(__name__)

SIDE_WALL_ALLOWANCE = 23.0      # Width taken from the front wall by each side wall
CORE_FRONT_ALLOWANCE = 21.0     # Depth of the front wall inside the tread
MORTAR_KG_PER_BLOCK = 0.5
STAIR_MORTAR_FACTOR = 3         # Stairs use about three times a plain wall's mortar
MORTAR_DENSITY_KG_M3 = 1600.0


@dataclass
class CourseDetail:
    step: int
    blocks: int
    rows: int
    material: str
    joint_thickness: float
    needs_cutting: bool
    buried_depth: float
    arm_blocks: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = {
            "step": self.step,
            "blocks": self.blocks,
            "rows": self.rows,
            "material": self.material,
            "joint_thickness": round(self.joint_thickness, 2),
            "needs_cutting": self.needs_cutting,
            "buried_depth": round(self.buried_depth, 2),
        }
        if self.arm_blocks:
            data["arm_blocks"] = dict(self.arm_blocks)
        return data


@dataclass
class UnitMaterialTotal:
    unit_material_id: str
    name: str
    amount: int = 0
    unit: str = "pieces"
    course_details: List[CourseDetail] = field(default_factory=list)


@dataclass
class MasonryQuantities:
    materials: List[UnitMaterialTotal]
    block_count: int
    joint_mortar_kg: float
    core_fill_kg: float

    @property
    def mortar_kg(self) -> float:
        return self.joint_mortar_kg + self.core_fill_kg


def units_across(span: float, unit_length: float) -> int:
    """Units in one course over span, each taking its length plus one joint."""
    if span <= 0:
        return 0
    return math.ceil(span / (unit_length + STANDARD_JOINT))


def step_blocks(spec: StairSpecification, geometry: StairGeometry, position: int,
                config: CourseConfiguration) -> int:
    """Front, side and back units for the step at position (0-based)."""
    unit = get_unit(config.unit_material_id)
    orientation = spec.orientation_for(unit)
    course_height = unit.course_height(orientation)
    steps = geometry.steps

    front_width = max(0.0, spec.total_width - SIDE_WALL_ALLOWANCE * spec.sides_built)
    front = units_across(front_width, unit.length) * config.block_count

    side = 0
    if spec.sides_built:
        previous = steps[position - 1].cumulative_height if position > 0 else 0.0
        rise = steps[position].cumulative_height - previous
        courses = math.ceil(rise / (course_height + STANDARD_JOINT))
        run = geometry.total_length - sum(s.tread_depth for s in steps[:position])
        side = courses * max(1, units_across(run, unit.length)) * spec.sides_built

    back = 0
    if spec.build_back and position > 0:
        back_width = spec.total_width - unit.course_width(orientation) * spec.sides_built
        back = units_across(back_width, unit.length) * config.block_count

    logger.debug("Step %d: %d front + %d side + %d back units of %s",
                 config.step, front, side, back, unit.id)
    return front + side + back


def core_fill_kg(spec: StairSpecification, geometry: StairGeometry) -> float:
    """Mortar filling the inside of every step's U."""
    hole_width = spec.total_width - 2 * SIDE_WALL_ALLOWANCE
    if hole_width <= 0:
        return 0.0
    volume_m3 = 0.0
    for step in geometry.steps:
        hole_depth = step.tread_depth - CORE_FRONT_ALLOWANCE
        if hole_depth <= 0 or step.cumulative_height <= 0:
            continue
        volume_m3 += hole_width * hole_depth * step.cumulative_height / 1000000.0
    return volume_m3 * MORTAR_DENSITY_KG_M3


def compute_block_quantities(spec: StairSpecification, geometry: StairGeometry,
                             configurations: List[CourseConfiguration]) -> MasonryQuantities:
    """Unit totals grouped per material (first use first) and mortar in kg."""
    counts = [
        step_blocks(spec, geometry, position, config)
        for position, config in enumerate(configurations)
    ]
    return tally_masonry(spec, geometry.steps, configurations, counts, core_fill_kg(spec, geometry))


def tally_masonry(spec, steps: List[Step], configurations: List[CourseConfiguration],
                  counts: List[int], fill_kg: float,
                  arm_counts: Optional[List[Dict[str, int]]] = None) -> MasonryQuantities:
    """
    Group per-step unit counts by material and add the joint mortar.
    counts[i] belongs to configurations[i]; arm_counts, when given, splits it per arm.
    """
    totals: Dict[str, UnitMaterialTotal] = {}

    for position, config in enumerate(configurations):
        unit = get_unit(config.unit_material_id)
        course_height = unit.course_height(spec.orientation_for(unit))
        blocks = counts[position]
        rows = math.ceil(steps[position].cumulative_height / (course_height + STANDARD_JOINT))

        total = totals.setdefault(unit.id, UnitMaterialTotal(unit_material_id=unit.id, name=unit.name))
        total.amount += blocks
        total.course_details.append(CourseDetail(
            step=config.step,
            blocks=blocks,
            rows=rows,
            material=unit.name,
            joint_thickness=config.joint_thickness,
            needs_cutting=config.needs_cutting,
            buried_depth=config.buried_depth,
            arm_blocks=dict(arm_counts[position]) if arm_counts else {},
        ))

    materials = [t for t in totals.values() if t.amount > 0]
    block_count = sum(t.amount for t in materials)
    return MasonryQuantities(
        materials=materials,
        block_count=block_count,
        joint_mortar_kg=block_count * MORTAR_KG_PER_BLOCK * STAIR_MORTAR_FACTOR,
        core_fill_kg=fill_kg,
    )
