"""
Standard stair calculator — masonry courses, cladding slabs, labour.

Pipeline for one stair:
  StairSpecification -> build_steps -> compose_courses -> block quantities
  -> SlabCuttingPlanner (tread, riser per step, one shared offcut inventory)
  -> QuantityAggregator -> TaskBreakdownBuilder -> result dict

Every run owns a fresh OffcutInventory; nothing is shared between runs.
"""

import logging
from typing import Iterable, Optional

from .base import BaseCalculator
from .block_quantities import compute_block_quantities
from .course_composer import compose_courses, recommended_burial_depth
from .offcut_inventory import OffcutInventory
from .quantity_aggregator import (
    DEFAULT_ADHESIVE_BAG_KG, DEFAULT_ADHESIVE_KG_PER_M2_PER_CM, QuantityAggregator,
)
from .slab_cutting import SlabCuttingPlanner
from .stair_geometry import (
    CuttingMode, SlabPlacement, StairInputError, StairSpecification, StepConfiguration,
    build_steps, riser_depth,
)
from .task_matcher import DEFAULT_MORTAR_BATCH_KG, TaskBreakdownBuilder, TaskCatalogue
from .tolerance import BED_JOINT, JOINT_MAX, JOINT_MIN, MAX_BURIAL
from .unit_library import DEFAULT_SLAB_SIZE, DEFAULT_UNIT_IDS, Orientation, get_unit

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("total_height", "total_width", "step_tread", "step_height")


class StandardStairCalculator(BaseCalculator):
    """Straight flight of block or brick steps clad with slabs."""

    name = "standard_stair"

    def __init__(self, adhesive_kg_per_m2_per_cm: float = DEFAULT_ADHESIVE_KG_PER_M2_PER_CM,
                 adhesive_bag_kg: float = DEFAULT_ADHESIVE_BAG_KG,
                 mortar_batch_kg: float = DEFAULT_MORTAR_BATCH_KG,
                 default_slab_type: str = "porcelain",
                 task_templates: Optional[Iterable] = None):
        self.adhesive_kg_per_m2_per_cm = adhesive_kg_per_m2_per_cm
        self.adhesive_bag_kg = adhesive_bag_kg
        self.mortar_batch_kg = mortar_batch_kg
        self.default_slab_type = default_slab_type
        self.task_templates = list(task_templates or [])

    def calculate(self, fields: dict) -> dict:
        spec = self.spec_from_fields(fields)
        templates = fields.get("task_templates")
        return self.estimate(spec, templates if templates is not None else self.task_templates)

    def spec_from_fields(self, fields: dict) -> StairSpecification:
        """Loose fields dict -> StairSpecification. Missing measurements raise StairInputError."""
        self.require(fields, REQUIRED_FIELDS)
        return StairSpecification(
            total_height=self.parse_number(fields.get("total_height")),
            total_width=self.parse_number(fields.get("total_width")),
            step_tread=self.parse_number(fields.get("step_tread")),
            step_height=self.parse_number(fields.get("step_height")),
            slab_thickness_top=self.parse_number(fields.get("slab_thickness_top")),
            slab_thickness_side=self.parse_number(fields.get("slab_thickness_side")),
            slab_thickness_front=self.parse_number(fields.get("slab_thickness_front")),
            overhang_front=self.parse_number(fields.get("overhang_front")),
            overhang_side=self.parse_number(fields.get("overhang_side")),
            build_left=self.parse_bool(fields.get("build_left"), default=True),
            build_right=self.parse_bool(fields.get("build_right"), default=True),
            build_back=self.parse_bool(fields.get("build_back"), default=False),
            **self.common_options(fields)
        )

    def require(self, fields: dict, names) -> None:
        missing = [f for f in names if self.parse_optional_number(fields.get(f)) is None]
        if missing:
            raise StairInputError("Missing required measurements: %s" % ", ".join(missing))

    def common_options(self, fields: dict) -> dict:
        """Options every stair shape accepts. Unknown choices raise StairInputError."""
        try:
            return dict(
                step_configuration=self.parse_choice(
                    fields.get("step_configuration"), StepConfiguration, StepConfiguration.FRONTS_ON_TOP),
                gap_between_slabs_mm=self.parse_number(fields.get("gap_between_slabs_mm"), default=2.0),
                unit_material_ids=tuple(self.parse_list(fields.get("unit_material_ids"), DEFAULT_UNIT_IDS)),
                cutting_mode=self.parse_choice(fields.get("cutting_mode"), CuttingMode, CuttingMode.ONE_CUT),
                slab_size=str(fields.get("slab_size") or DEFAULT_SLAB_SIZE),
                placement=self.parse_choice(fields.get("placement"), SlabPlacement, SlabPlacement.LONG_WAY),
                adhesive_thickness=self.parse_number(fields.get("adhesive_thickness"), default=0.5),
                block_orientation=self.parse_choice(
                    fields.get("block_orientation"), Orientation, Orientation.FLAT),
                brick_orientation=self.parse_choice(
                    fields.get("brick_orientation"), Orientation, Orientation.FLAT),
                slab_type=str(fields.get("slab_type") or self.default_slab_type),
                uniform_burial=self.parse_bool(fields.get("uniform_burial"), default=False),
                carrier_size_tonnes=self.parse_optional_number(fields.get("carrier_size_tonnes")),
                transport_distance_m=self.parse_number(fields.get("transport_distance_m"), default=30.0),
            )
        except ValueError as e:
            raise StairInputError(str(e)) from e

    def validate(self, spec) -> None:
        """Catalogue lookups and orientation pairings, before any geometry."""
        units = spec.units()
        for unit in units:
            try:
                unit.course_height(spec.orientation_for(unit))
            except ValueError as e:
                raise StairInputError(str(e)) from e
        spec.slab_footprint()

    def estimate(self, spec: StairSpecification, task_templates: Optional[Iterable] = None) -> dict:
        """Run the whole pipeline for one stair. Raises StairInputError for unusable input."""
        self.validate(spec)
        geometry = build_steps(spec)
        steps = geometry.steps

        # 1. Courses
        configurations = compose_courses(spec, steps)
        recommended = recommended_burial_depth(spec, steps, configurations)
        uniform_applied = self._uniform_applied(spec, configurations, recommended)

        # 2. Blocks and mortar
        masonry = compute_block_quantities(spec, geometry, configurations)

        # 3. Slabs: treads and risers in step order against one inventory
        inventory = OffcutInventory()
        planner = SlabCuttingPlanner(spec, inventory)
        surfaces = planner.plan_stair(steps)
        totals = self._slab_totals(spec, surfaces)

        # 4. Labour and materials
        task_breakdown = self._labour(spec, masonry, totals, task_templates)
        materials = self._materials(spec, masonry, totals)
        assumptions = self._assumptions(spec, configurations, recommended, uniform_applied)

        logger.info(
            "Stair %.0f x %.0f cm: %d steps, %d blocks, %d slabs, %d cuts, %.1f kg adhesive",
            spec.total_height, spec.total_width, geometry.step_count, masonry.block_count,
            totals.total_new_slabs, totals.total_cuts, totals.adhesive_kg,
        )

        return self.make_result(
            calculator=self.name,
            materials=materials,
            task_breakdown=task_breakdown,
            assumptions=assumptions,
            step_count=geometry.step_count,
            actual_step_height=round(geometry.actual_step_height, 2),
            total_length=round(geometry.total_length, 2),
            net_step_width=round(geometry.net_step_width, 2),
            step_dimensions=[
                {
                    "step": step.index,
                    "height": round(step.cumulative_height, 2),
                    "tread": round(step.tread_depth, 2),
                    "remaining_tread": round(step.remaining_tread, 2),
                    "tread_slab_depth": round(step.tread_slab_depth, 2),
                    "riser_depth": round(riser_depth(spec, steps, position), 2),
                    "is_first": step.is_first,
                    "is_last": step.is_last,
                    "buried_depth": round(configurations[position].buried_depth, 2),
                }
                for position, step in enumerate(steps)
            ],
            **self._masonry_values(masonry, configurations, recommended, uniform_applied),
            **self._slab_values(surfaces, totals, inventory)
        )

    # --- Shared by every stair shape ---

    def _uniform_applied(self, spec, configurations, recommended) -> bool:
        return bool(
            spec.uniform_burial and recommended is not None
            and all(c.buried_depth == recommended and not c.needs_cutting for c in configurations)
        )

    def _slab_totals(self, spec, surfaces) -> QuantityAggregator:
        return QuantityAggregator(
            adhesive_thickness=spec.adhesive_thickness,
            adhesive_kg_per_m2_per_cm=self.adhesive_kg_per_m2_per_cm,
            adhesive_bag_kg=self.adhesive_bag_kg,
        ).add_all(surfaces)

    def _labour(self, spec, masonry, totals, task_templates) -> list:
        unit_amounts = [(get_unit(m.unit_material_id), m.amount) for m in masonry.materials]
        builder = TaskBreakdownBuilder(
            TaskCatalogue(task_templates if task_templates is not None else self.task_templates),
            slab_type=spec.slab_type,
            mortar_batch_kg=self.mortar_batch_kg,
        )
        builder.add_building(unit_amounts)
        builder.add_cutting(totals.length_cuts(), totals.width_cuts())
        builder.add_installation(totals.histogram)
        builder.add_mixing_mortar(masonry.mortar_kg)
        if spec.carrier_size_tonnes is not None:
            builder.add_material_transport(unit_amounts, spec.carrier_size_tonnes,
                                           spec.transport_distance_m)
            builder.add_slab_transport(totals.total_new_slabs)
        return builder.build()

    def _materials(self, spec, masonry, totals) -> list:
        materials = []
        for material in masonry.materials:
            materials.append(self.make_material_item(
                material.name, material.amount, material.unit,
                unit_material_id=material.unit_material_id,
                course_details=[d.to_dict() for d in material.course_details],
            ))
        materials.append(self.make_material_item("Mortar", round(masonry.mortar_kg, 1), "kg"))
        if totals.total_new_slabs:
            materials.append(self.make_material_item(
                "%s %s slabs" % (spec.slab_size, spec.slab_type), totals.total_new_slabs, "pieces"))
        if totals.adhesive_bags:
            materials.append(self.make_material_item("Tile Adhesive", totals.adhesive_bags, "bags"))
        return materials

    def _masonry_values(self, masonry, configurations, recommended, uniform_applied) -> dict:
        return dict(
            courses=[
                {
                    "step": c.step,
                    "unit_material_id": c.unit_material_id,
                    "block_count": c.block_count,
                    "joint_thickness": round(c.joint_thickness, 2),
                    "needs_cutting": c.needs_cutting,
                    "buried_depth": round(c.buried_depth, 2),
                    "target_height": round(c.target_height, 2),
                }
                for c in configurations
            ],
            block_count=masonry.block_count,
            mortar_kg=round(masonry.mortar_kg, 1),
            recommended_burial_depth=recommended,
            uniform_burial_applied=uniform_applied,
        )

    def _slab_values(self, surfaces, totals, inventory) -> dict:
        summary = totals.summary()
        return dict(
            surfaces=[s.to_dict() for s in surfaces],
            total_slabs=summary["total_slabs"],
            tread_slabs=summary["tread_slabs"],
            riser_slabs=summary["riser_slabs"],
            total_cuts=summary["total_cuts"],
            top_area_m2=summary["top_area_m2"],
            front_area_m2=summary["front_area_m2"],
            total_adhesive_kg=summary["total_adhesive_kg"],
            adhesive_bags=summary["adhesive_bags"],
            slab_dimension_histogram=summary["slab_dimension_histogram"],
            cuts=summary["cuts"],
            remaining_offcuts=inventory.snapshot(),
        )

    def _assumptions(self, spec, configurations, recommended, uniform_applied) -> list:
        assumptions = [
            "Courses sit on a %.0f cm mortar bed; joints between courses %.1f-%.1f cm."
            % (BED_JOINT, JOINT_MIN, JOINT_MAX),
            "Heights are net of the %.1f cm top slab so the clad stair matches the measurements."
            % spec.slab_thickness_top,
        ]
        for c in configurations:
            if c.needs_cutting:
                assumptions.append(
                    "Step %d: no unit fits within joint tolerance; courses need cutting." % c.step)
        if uniform_applied:
            assumptions.append("All steps share a burial depth of %.0f cm." % recommended)
        elif recommended is not None:
            assumptions.append(
                "A uniform burial depth of %.0f cm would let every step use full units." % recommended)
        elif any(c.buried_depth > 0 for c in configurations):
            assumptions.append("Some steps are buried up to %.0f cm into the ground." % MAX_BURIAL)
        return assumptions
