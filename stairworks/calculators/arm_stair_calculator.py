"""
L-shaped and U-shaped stair calculators.

Same pipeline as the straight stair: courses per step, block and mortar
totals, slabs planned surface by surface against one offcut inventory, then
labour. Only the geometry, unit counts and slab widths differ (arm_stairs.py).
"""

import logging
from typing import Iterable, Optional

from .arm_stairs import (
    Arm, ArmShape, ArmStairSpecification, CornerJoint,
    build_arm_steps, compute_arm_quantities, plan_arm_surfaces,
)
from .course_composer import compose_courses, recommended_burial_depth
from .offcut_inventory import OffcutInventory
from .slab_cutting import SlabCuttingPlanner
from .stair_calculator import StandardStairCalculator
from .stair_geometry import StairInputError, riser_depth

logger = logging.getLogger(__name__)

ARM_REQUIRED_FIELDS = ("total_height", "step_tread", "step_height", "arm_a_length", "arm_b_length")


class ArmStairCalculator(StandardStairCalculator):
    """Steps running along two or three walls that meet at corners."""

    name = ""
    shape: ArmShape = ArmShape.L_SHAPE

    def spec_from_fields(self, fields: dict) -> ArmStairSpecification:
        """Loose fields dict -> ArmStairSpecification. Missing measurements raise StairInputError."""
        self.require(fields, ARM_REQUIRED_FIELDS)
        try:
            corner_joint = self.parse_choice(fields.get("corner_joint"), CornerJoint, CornerJoint.BUTT_JOINT)
            top_dominant = self.parse_choice(fields.get("top_dominant_arm"), Arm, Arm.A)
            front_dominant = self.parse_choice(fields.get("front_dominant_arm"), Arm, Arm.A)
        except ValueError as e:
            raise StairInputError(str(e)) from e

        return ArmStairSpecification(
            total_height=self.parse_number(fields.get("total_height")),
            step_tread=self.parse_number(fields.get("step_tread")),
            step_height=self.parse_number(fields.get("step_height")),
            arm_a_length=self.parse_number(fields.get("arm_a_length")),
            arm_b_length=self.parse_number(fields.get("arm_b_length")),
            slab_thickness_top=self.parse_number(fields.get("slab_thickness_top")),
            slab_thickness_front=self.parse_number(fields.get("slab_thickness_front")),
            overhang_front=self.parse_number(fields.get("overhang_front")),
            shape=self.shape,
            corner_joint=corner_joint,
            top_dominant_arm=top_dominant,
            front_dominant_arm=front_dominant,
            **self.common_options(fields)
        )

    def validate(self, spec: ArmStairSpecification) -> None:
        if spec.shape != self.shape:
            raise StairInputError(
                "%s cannot estimate a %s stair." % (self.name, ArmShape(spec.shape).value))
        super().validate(spec)

    def estimate(self, spec: ArmStairSpecification, task_templates: Optional[Iterable] = None) -> dict:
        """Run the whole pipeline for one stair. Raises StairInputError for unusable input."""
        self.validate(spec)
        geometry = build_arm_steps(spec)
        steps = geometry.steps

        configurations = compose_courses(spec, steps)
        recommended = recommended_burial_depth(spec, steps, configurations)
        uniform_applied = self._uniform_applied(spec, configurations, recommended)

        masonry = compute_arm_quantities(spec, geometry, configurations)

        inventory = OffcutInventory()
        planner = SlabCuttingPlanner(spec, inventory)
        surfaces = plan_arm_surfaces(spec, geometry, planner)
        totals = self._slab_totals(spec, surfaces)

        task_breakdown = self._labour(spec, masonry, totals, task_templates)
        materials = self._materials(spec, masonry, totals)
        assumptions = self._assumptions(spec, configurations, recommended, uniform_applied)
        if spec.corner_joint == CornerJoint.MITRE:
            assumptions.append("Tread slabs are mitred at the corners; the top platform is not.")
        if spec.shape == ArmShape.U_SHAPE:
            assumptions.append("Both side arms are the same length.")

        logger.info(
            "%s stair %.0f cm high, arms %.0f / %.0f cm: %d steps, %d blocks, %d slabs, %d cuts",
            spec.shape.value, spec.total_height, spec.arm_a_length, spec.arm_b_length,
            geometry.step_count, masonry.block_count, totals.total_new_slabs, totals.total_cuts,
        )

        return self.make_result(
            calculator=self.name,
            materials=materials,
            task_breakdown=task_breakdown,
            assumptions=assumptions,
            shape=spec.shape.value,
            corner_joint=spec.corner_joint.value,
            step_count=geometry.step_count,
            actual_step_height=round(geometry.actual_step_height, 2),
            total_length=round(geometry.total_run, 2),
            step_dimensions=[
                {
                    "step": step.index,
                    "height": round(step.cumulative_height, 2),
                    "tread": round(step.tread_depth, 2),
                    "tread_slab_depth": round(step.tread_slab_depth, 2),
                    "riser_depth": round(riser_depth(spec, steps, position), 2),
                    "is_first": step.is_first,
                    "is_last": step.is_last,
                    "buried_depth": round(configurations[position].buried_depth, 2),
                    "arm_a_length": round(arm.outer_a, 2),
                    "arm_b_length": round(arm.outer_b, 2),
                    "arm_a_inner": round(arm.inner_a, 2),
                    "arm_b_inner": round(arm.inner_b, 2),
                }
                for position, (step, arm) in enumerate(zip(steps, geometry.arms))
            ],
            **self._masonry_values(masonry, configurations, recommended, uniform_applied),
            **self._slab_values(surfaces, totals, inventory)
        )


class LShapeStairCalculator(ArmStairCalculator):
    """Two arms around one corner."""

    name = "l_shape_stair"
    shape = ArmShape.L_SHAPE


class UShapeStairCalculator(ArmStairCalculator):
    """Arm A across the back, an arm B down each side."""

    name = "u_shape_stair"
    shape = ArmShape.U_SHAPE
