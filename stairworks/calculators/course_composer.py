"""
Course composer — how many courses of which unit build each step.

For every step the search walks the selected units in priority order and,
for each, block counts from 1 upwards. The first count that either
  - overshoots the target by no more than the burial limit (bury the stack), or
  - undershoots it by an amount the joints can absorb (0.5–3 cm each)
wins. If nothing qualifies the step is built from the first unit with a
nominal joint and flagged for cutting.

Optionally all steps share one burial depth (uniform_burial). The shared
depth is chosen once for the whole stair and then every step is composed
against target + depth with joint adjustment only.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from .stair_geometry import StairSpecification, Step
from .tolerance import (
    PREFERRED_BURIAL, STANDARD_JOINT, UNIFORM_BURIAL_DEPTHS,
    burial_acceptable, joint_in_tolerance, nearly_equal, needed_joint, stack_height,
)
from .unit_library import UnitMaterial

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CourseConfiguration:
    step: int
    unit_material_id: str
    block_count: int
    joint_thickness: float
    needs_cutting: bool
    buried_depth: float
    target_height: float


def _max_block_count(target_height: float, course_height: float) -> int:
    """Upper bound of the block-count search. One past the count that reaches the target."""
    return max(1, math.ceil(target_height / course_height)) + 1


def search_unit(step_index: int, target_height: float, unit: UnitMaterial,
                course_height: float, allow_burial: bool = True,
                buried_depth: float = 0.0) -> Optional[CourseConfiguration]:
    """
    First block count of one unit that meets target_height, or None.

    With allow_burial=False only joint adjustment is considered and the
    returned configuration carries the caller's buried_depth.
    """
    if course_height <= 0:
        logger.warning("Skipping %s: course height %.2f cm is not positive",
                       unit.id, course_height)
        return None

    for count in range(1, _max_block_count(target_height, course_height) + 1):
        height = stack_height(count, course_height)

        if nearly_equal(height, target_height):
            return CourseConfiguration(
                step=step_index,
                unit_material_id=unit.id,
                block_count=count,
                joint_thickness=STANDARD_JOINT,
                needs_cutting=False,
                buried_depth=buried_depth,
                target_height=target_height,
            )

        if height > target_height:
            # Stacks only grow from here, so burial is the last option for this unit
            excess = height - target_height
            if allow_burial and burial_acceptable(excess):
                return CourseConfiguration(
                    step=step_index,
                    unit_material_id=unit.id,
                    block_count=count,
                    joint_thickness=STANDARD_JOINT,
                    needs_cutting=False,
                    buried_depth=excess,
                    target_height=target_height,
                )
            return None

        joint = needed_joint(target_height, count, course_height)
        if joint_in_tolerance(joint):
            return CourseConfiguration(
                step=step_index,
                unit_material_id=unit.id,
                block_count=count,
                joint_thickness=joint,
                needs_cutting=False,
                buried_depth=buried_depth,
                target_height=target_height,
            )

    return None


def forced_cut_configuration(spec: StairSpecification, step_index: int,
                             target_height: float,
                             buried_depth: float = 0.0) -> CourseConfiguration:
    """Fallback: first selected unit, enough courses to reach the target, units cut to fit."""
    unit = spec.units()[0]
    course_height = unit.course_height(spec.orientation_for(unit))
    count = max(1, math.ceil(target_height / course_height)) if course_height > 0 else 1
    return CourseConfiguration(
        step=step_index,
        unit_material_id=unit.id,
        block_count=count,
        joint_thickness=STANDARD_JOINT,
        needs_cutting=True,
        buried_depth=buried_depth,
        target_height=target_height,
    )


def compose_step(spec: StairSpecification, step: Step,
                 fixed_burial: Optional[float] = None) -> CourseConfiguration:
    """First-fit configuration for one step; never fails."""
    units = spec.units()
    if fixed_burial is None:
        target = step.cumulative_height
        allow_burial = True
        buried = 0.0
    else:
        target = step.cumulative_height + fixed_burial
        allow_burial = False
        buried = fixed_burial

    for unit in units:
        course_height = unit.course_height(spec.orientation_for(unit))
        config = search_unit(step.index, target, unit, course_height,
                             allow_burial=allow_burial, buried_depth=buried)
        if config is not None:
            return config

    logger.warning(
        "Step %d: no unit fits %.1f cm within joint tolerance, courses need cutting",
        step.index, target,
    )
    return forced_cut_configuration(spec, step.index, target, buried_depth=buried)


def find_uniform_burial_depth(spec: StairSpecification, steps: List[Step]) -> Optional[float]:
    """
    One burial depth (2–8 cm) that lets every step be built with full units
    and in-tolerance joints. Closest to 5 cm wins; None if no depth works.
    """
    units = spec.units()
    best_depth = None
    best_diff = math.inf

    for depth in UNIFORM_BURIAL_DEPTHS:
        fits_all = True
        for step in steps:
            target = step.cumulative_height + depth
            if not any(
                search_unit(step.index, target, unit,
                            unit.course_height(spec.orientation_for(unit)),
                            allow_burial=False) is not None
                for unit in units
            ):
                fits_all = False
                break
        if fits_all:
            diff = abs(depth - PREFERRED_BURIAL)
            if diff < best_diff:
                best_depth = float(depth)
                best_diff = diff

    return best_depth


def compose_courses(spec: StairSpecification, steps: List[Step]) -> List[CourseConfiguration]:
    """
    One CourseConfiguration per step, in step order.

    Pure given spec and steps. With spec.uniform_burial the per-step result is
    replaced by a shared-burial composition, but only when the per-step pass
    needed burial or cutting somewhere and a shared depth exists. Those steps
    carry the shared burial and a joint adjusted within tolerance together;
    elsewhere a step is either buried at the standard joint or adjusted, never both.
    """
    configurations = [compose_step(spec, step) for step in steps]

    if spec.uniform_burial and needs_burial(configurations):
        depth = find_uniform_burial_depth(spec, steps)
        if depth is not None:
            logger.info("Using uniform burial depth of %.0f cm for all %d steps", depth, len(steps))
            configurations = [compose_step(spec, step, fixed_burial=depth) for step in steps]
        else:
            logger.info("No uniform burial depth fits every step, keeping per-step courses")

    return configurations


def needs_burial(configurations: List[CourseConfiguration]) -> bool:
    return any(c.buried_depth > 0 or c.needs_cutting for c in configurations)


def recommended_burial_depth(spec: StairSpecification, steps: List[Step],
                             configurations: List[CourseConfiguration]) -> Optional[float]:
    """Shared burial depth worth suggesting to the caller, or None when nothing is buried."""
    if not needs_burial(configurations):
        return None
    return find_uniform_burial_depth(spec, steps)
