"""
Stairs built along two or three walls — L-shaped and U-shaped flights.

An L-shaped stair has two arms meeting at one corner: arm A and arm B. A
U-shaped stair has arm A across the back and an arm B on each side, so arm A
meets a B arm at both of its ends. Every step climbs the same way as a
straight stair; only the lengths change, each step shortening the arms by the
tread it takes.

Input: ArmStairSpecification
Output: ArmStairGeometry, per-step unit counts and the slab widths of every arm.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .block_quantities import (
    MORTAR_DENSITY_KG_M3, MasonryQuantities, tally_masonry, units_across,
)
from .course_composer import CourseConfiguration
from .slab_cutting import SlabCuttingPlanner, SurfaceCutResult, SurfaceKind
from .stair_geometry import (
    CuttingMode, SlabPlacement, StairInputError, Step, StepConfiguration, UnitSelection,
    riser_depth, stack_steps,
)
from .unit_library import DEFAULT_SLAB_SIZE, DEFAULT_UNIT_IDS, Orientation, get_unit

logger = logging.getLogger(__name__)


class ArmShape(str, enum.Enum):
    L_SHAPE = "l_shape"
    U_SHAPE = "u_shape"


class CornerJoint(str, enum.Enum):
    BUTT_JOINT = "butt_joint"   # One arm's slab runs through the corner, the other stops against it
    MITRE = "mitre"             # Both run to the corner and are cut at 45 degrees


class Arm(str, enum.Enum):
    A = "a"
    B = "b"


# Arm A of a U loses a tread at both ends per step
ARM_A_SHRINK = {ArmShape.L_SHAPE: 1, ArmShape.U_SHAPE: 2}
B_ARMS = {ArmShape.L_SHAPE: ("b",), ArmShape.U_SHAPE: ("b_left", "b_right")}


@dataclass(frozen=True)
class ArmStairSpecification(UnitSelection):
    total_height: float
    step_tread: float
    step_height: float
    arm_a_length: float
    arm_b_length: float
    slab_thickness_top: float
    slab_thickness_front: float
    overhang_front: float
    shape: ArmShape = ArmShape.L_SHAPE
    corner_joint: CornerJoint = CornerJoint.BUTT_JOINT
    top_dominant_arm: Arm = Arm.A
    front_dominant_arm: Arm = Arm.A
    step_configuration: StepConfiguration = StepConfiguration.FRONTS_ON_TOP
    gap_between_slabs_mm: float = 2.0
    unit_material_ids: Tuple[str, ...] = tuple(DEFAULT_UNIT_IDS)
    cutting_mode: CuttingMode = CuttingMode.ONE_CUT
    slab_size: str = DEFAULT_SLAB_SIZE
    placement: SlabPlacement = SlabPlacement.LONG_WAY
    adhesive_thickness: float = 0.5
    block_orientation: Orientation = Orientation.FLAT
    brick_orientation: Orientation = Orientation.FLAT
    slab_type: str = "porcelain"
    uniform_burial: bool = False
    carrier_size_tonnes: Optional[float] = None
    transport_distance_m: float = 30.0

    @property
    def overhang_side(self) -> float:
        # Arms end against walls or each other; no exposed side ends
        return 0.0


@dataclass(frozen=True)
class ArmStep:
    index: int
    outer_a: float      # Arm A length at the front edge of this step
    outer_b: float
    inner_a: float      # Arm A length left once this step's tread is taken
    inner_b: float


@dataclass
class ArmStairGeometry:
    step_count: int
    actual_step_height: float
    total_run: float
    steps: List[Step] = field(default_factory=list)
    arms: List[ArmStep] = field(default_factory=list)


def build_arm_steps(spec: ArmStairSpecification) -> ArmStairGeometry:
    """
    Heights as for a straight stair, then the arm lengths step by step.
    Raises StairInputError when an arm runs out before the last step.
    """
    if spec.arm_a_length <= 0 or spec.arm_b_length <= 0:
        raise StairInputError("Both arm lengths must be greater than zero.")

    actual_step_height, steps = stack_steps(spec)
    shrink_a = ARM_A_SHRINK[spec.shape]

    arms = []
    consumed = 0.0
    for step in steps:
        outer_a = spec.arm_a_length - shrink_a * consumed
        outer_b = spec.arm_b_length - consumed
        consumed += step.tread_depth
        arms.append(ArmStep(
            index=step.index,
            outer_a=outer_a,
            outer_b=outer_b,
            inner_a=spec.arm_a_length - shrink_a * consumed,
            inner_b=spec.arm_b_length - consumed,
        ))

    last = arms[-1]
    for name, inner, length in (("A", last.inner_a, spec.arm_a_length),
                                ("B", last.inner_b, spec.arm_b_length)):
        if inner <= 0:
            raise StairInputError(
                "Arm %s (%.1f cm) is too short for %d steps; %.1f cm would be left."
                % (name, length, len(steps), inner)
            )

    logger.debug(
        "%s geometry: %d steps at %.2f cm, arms %.1f / %.1f cm",
        spec.shape.value, len(steps), actual_step_height, spec.arm_a_length, spec.arm_b_length,
    )
    return ArmStairGeometry(
        step_count=len(steps),
        actual_step_height=actual_step_height,
        total_run=consumed,
        steps=steps,
        arms=arms,
    )


# --- Masonry ---

def arm_step_blocks(spec: ArmStairSpecification, arm: ArmStep,
                    config: CourseConfiguration) -> Dict[str, int]:
    """
    Units per arm for one step.

    L: every course runs the inner length of each arm. U: courses alternate so
    the corners bond; odd courses run arm A full length and stop the B arms
    one wall width short, even courses the other way round.
    """
    unit = get_unit(config.unit_material_id)
    rows = config.block_count

    if spec.shape == ArmShape.L_SHAPE:
        return {
            "a": units_across(arm.inner_a, unit.length) * rows,
            "b": units_across(arm.inner_b, unit.length) * rows,
        }

    wall = unit.course_width(spec.orientation_for(unit))
    a = b = 0
    for row in range(1, rows + 1):
        if row % 2:
            a += units_across(arm.outer_a, unit.length)
            b += units_across(arm.outer_b - wall, unit.length)
        else:
            a += units_across(arm.outer_a - 2 * wall, unit.length)
            b += units_across(arm.outer_b, unit.length)
    counts = {"a": a}
    for name in B_ARMS[spec.shape]:
        counts[name] = b
    return counts


def arm_core_fill_kg(spec: ArmStairSpecification, geometry: ArmStairGeometry) -> float:
    """Mortar behind the walls: a strip one tread minus one wall deep along every arm."""
    unit = spec.units()[0]
    fill_depth = spec.step_tread - unit.course_width(spec.orientation_for(unit))
    if fill_depth <= 0:
        return 0.0

    b_arms = len(B_ARMS[spec.shape])
    volume_m3 = 0.0
    for step, arm in zip(geometry.steps, geometry.arms):
        height = step.cumulative_height
        # Strips overlap at each corner
        volume = (fill_depth * height * (arm.inner_a + b_arms * arm.inner_b)
                  - b_arms * fill_depth * fill_depth * height)
        if volume > 0:
            volume_m3 += volume / 1000000.0
    return volume_m3 * MORTAR_DENSITY_KG_M3


def compute_arm_quantities(spec: ArmStairSpecification, geometry: ArmStairGeometry,
                           configurations: List[CourseConfiguration]) -> MasonryQuantities:
    arm_counts = [
        arm_step_blocks(spec, arm, config)
        for arm, config in zip(geometry.arms, configurations)
    ]
    counts = [sum(c.values()) for c in arm_counts]
    return tally_masonry(spec, geometry.steps, configurations, counts,
                         arm_core_fill_kg(spec, geometry), arm_counts=arm_counts)


# --- Slabs ---

def arm_slab_widths(spec: ArmStairSpecification, arm: ArmStep,
                    top_depth: float) -> List[Tuple[str, float, float]]:
    """(arm, tread width, riser width) for each arm of one step, in laying order."""
    gap = spec.gap_cm
    mitre = spec.corner_joint == CornerJoint.MITRE

    if spec.shape == ArmShape.U_SHAPE:
        top_b = arm.outer_b if mitre else arm.outer_b - top_depth - gap
        front_a = arm.outer_a - spec.overhang_front
        front_b = arm.outer_b - spec.overhang_front - spec.slab_thickness_front - gap
        return [("a", arm.outer_a, front_a)] + [(name, top_b, front_b) for name in B_ARMS[spec.shape]]

    if mitre:
        top_a, top_b = arm.outer_a, arm.outer_b
    elif spec.top_dominant_arm == Arm.A:
        top_a, top_b = arm.outer_a, arm.outer_b - top_depth - gap
    else:
        top_a, top_b = arm.outer_a - top_depth - gap, arm.outer_b

    if spec.front_dominant_arm == Arm.A:
        front_a = arm.outer_a - spec.overhang_front
        front_b = arm.outer_b - spec.overhang_front - spec.slab_thickness_front - gap
    else:
        front_a = arm.outer_a - spec.overhang_front - spec.slab_thickness_front - gap
        front_b = arm.outer_b - spec.overhang_front
    return [("a", top_a, front_a), ("b", top_b, front_b)]


def mitre_corners(spec: ArmStairSpecification, arm_name: str) -> int:
    """Corners the tread slab of one arm is mitred at."""
    if spec.shape == ArmShape.U_SHAPE and arm_name == "a":
        return 2
    return 1


def plan_arm_surfaces(spec: ArmStairSpecification, geometry: ArmStairGeometry,
                      planner: SlabCuttingPlanner) -> List[SurfaceCutResult]:
    """
    Tread then riser of each arm, arm A first, bottom step first, all against
    the planner's one inventory. Mitred treads below the platform get one
    extra length cut per corner.
    """
    results = []
    mitre = spec.corner_joint == CornerJoint.MITRE
    for position, (step, arm) in enumerate(zip(geometry.steps, geometry.arms)):
        top_depth = step.tread_slab_depth
        front_depth = riser_depth(spec, geometry.steps, position)
        for name, top_width, front_width in arm_slab_widths(spec, arm, top_depth):
            top = planner.plan_surface(step.index, SurfaceKind.TREAD, top_width, top_depth, arm=name)
            if mitre and not step.is_last and top.pieces:
                top.add_cut("length", top_depth, mitre_corners(spec, name))
                top.needs_cutting = True
            results.append(top)
            results.append(planner.plan_surface(
                step.index, SurfaceKind.RISER, front_width, front_depth, arm=name,
            ))
    return results
