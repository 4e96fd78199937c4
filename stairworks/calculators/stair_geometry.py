"""
Stair specification and derived step geometry.

Input: StairSpecification (validated numbers, cm unless the name says otherwise)
Output: StairGeometry — one Step per physical step, bottom to top.

Heights here are net of the top slab: the masonry is built short so that the
finished stair, once clad, matches the measured heights exactly.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .tolerance import round_half_up
from .unit_library import (
    DEFAULT_SLAB_SIZE, DEFAULT_UNIT_IDS, Orientation, UnitKind, UnitMaterial,
    get_slab_size, get_unit,
)

logger = logging.getLogger(__name__)

# Offset between the tread slab and the riser slab it sits on (frontsOnTop)
TREAD_OVER_RISER_CLEARANCE = 0.5


class StairInputError(ValueError):
    """Stair measurements that cannot describe a buildable stair."""


class StepConfiguration(str, enum.Enum):
    FRONTS_ON_TOP = "fronts_on_top"      # Tread slabs sit on top of the riser slabs
    STEPS_TO_FRONTS = "steps_to_fronts"  # Tread slabs butt against the riser slabs


class CuttingMode(str, enum.Enum):
    ONE_CUT = "one_cut"      # Full slabs + one cut piece at the end
    TWO_CUTS = "two_cuts"    # Full slabs + two equal cut pieces


class SlabPlacement(str, enum.Enum):
    LONG_WAY = "long_way"
    SIDE_WAYS = "side_ways"


class UnitSelection:
    """Unit, orientation, gap and slab lookups shared by every stair shape."""

    @property
    def gap_cm(self) -> float:
        return self.gap_between_slabs_mm / 10.0

    def orientation_for(self, unit: UnitMaterial) -> Orientation:
        if unit.kind == UnitKind.BRICK:
            return self.brick_orientation
        return self.block_orientation

    def units(self) -> List[UnitMaterial]:
        """Selected unit materials in priority order."""
        if not self.unit_material_ids:
            raise StairInputError("Select at least one unit material.")
        try:
            return [get_unit(unit_id) for unit_id in self.unit_material_ids]
        except ValueError as e:
            raise StairInputError(str(e)) from e

    def slab_footprint(self) -> Tuple[float, float]:
        """(slab_width, slab_length) as laid across the step."""
        try:
            slab = get_slab_size(self.slab_size)
        except ValueError as e:
            raise StairInputError(str(e)) from e
        return slab.footprint(self.placement == SlabPlacement.LONG_WAY)


@dataclass(frozen=True)
class StairSpecification(UnitSelection):
    total_height: float
    total_width: float
    step_tread: float
    step_height: float
    slab_thickness_top: float
    slab_thickness_side: float
    slab_thickness_front: float
    overhang_front: float
    overhang_side: float
    build_left: bool = True
    build_right: bool = True
    build_back: bool = False
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
    def sides_built(self) -> int:
        return int(self.build_left) + int(self.build_right)


@dataclass(frozen=True)
class Step:
    index: int                  # 1-based, bottom step first
    cumulative_height: float    # Ground to top of masonry, net of the top slab
    tread_depth: float          # Masonry tread, net of front overhang (and front slab on the last step)
    remaining_tread: float      # Tread net of front overhang only
    tread_slab_depth: float     # Depth of the slab laid on this tread
    is_first: bool
    is_last: bool


@dataclass
class StairGeometry:
    step_count: int
    actual_step_height: float
    total_length: float
    net_step_width: float
    steps: List[Step] = field(default_factory=list)


def tread_slab_depth(spec: StairSpecification, is_last: bool) -> float:
    """Depth of the tread slab. The top step has no riser above it to run under."""
    if spec.step_configuration == StepConfiguration.FRONTS_ON_TOP and not is_last:
        return spec.step_tread + spec.slab_thickness_front - TREAD_OVER_RISER_CLEARANCE
    return spec.step_tread - spec.gap_cm


def riser_depth(spec: StairSpecification, steps: List[Step], position: int) -> float:
    """
    Height of the riser slab for steps[position].

    Only the rise from the previous step is clad. With fronts on top the tread
    slab of the step below already covers part of it.
    """
    previous = steps[position - 1].cumulative_height if position > 0 else 0.0
    delta = steps[position].cumulative_height - previous
    if spec.step_configuration == StepConfiguration.FRONTS_ON_TOP and position > 0:
        delta -= spec.slab_thickness_top
    return max(0.0, delta)


def stack_steps(spec) -> Tuple[float, List[Step]]:
    """
    Step count and heights from total height and step height, with the tread
    of each step. Works for any stair shape; widths are the caller's concern.
    Returns (actual_step_height, steps).
    """
    if spec.total_height <= 0 or spec.step_height <= 0:
        raise StairInputError("Total height and step height must be greater than zero.")

    step_count = round_half_up(spec.total_height / spec.step_height)
    if step_count <= 0:
        raise StairInputError(
            "Step height %.1f cm is too large for total height %.1f cm; no steps fit."
            % (spec.step_height, spec.total_height)
        )

    remaining_tread = spec.step_tread - spec.overhang_front
    last_tread = remaining_tread - spec.slab_thickness_front
    if remaining_tread <= 0 or last_tread <= 0:
        raise StairInputError(
            "Step tread is not positive after front overhang and front slab (%.1f cm)." % last_tread
        )

    actual_step_height = spec.total_height / step_count
    if actual_step_height <= spec.slab_thickness_top:
        raise StairInputError(
            "Top slab (%.1f cm) is as thick as a whole step (%.1f cm)."
            % (spec.slab_thickness_top, actual_step_height)
        )

    steps = []
    for i in range(step_count):
        is_last = i == step_count - 1
        steps.append(Step(
            index=i + 1,
            cumulative_height=actual_step_height * (i + 1) - spec.slab_thickness_top,
            tread_depth=last_tread if is_last else remaining_tread,
            remaining_tread=remaining_tread,
            tread_slab_depth=tread_slab_depth(spec, is_last),
            is_first=i == 0,
            is_last=is_last,
        ))
    return actual_step_height, steps


def build_steps(spec: StairSpecification) -> StairGeometry:
    """
    Derive per-step geometry from overall measurements.
    Raises StairInputError for measurements that do not describe a stair.
    """
    actual_step_height, steps = stack_steps(spec)

    net_step_width = spec.total_width
    if spec.build_left:
        net_step_width -= spec.overhang_side + spec.slab_thickness_side
    if spec.build_right:
        net_step_width -= spec.overhang_side + spec.slab_thickness_side
    if net_step_width <= 0:
        raise StairInputError(
            "Step width is not positive after side overhangs and slabs (%.1f cm)." % net_step_width
        )

    total_length = sum(s.tread_depth for s in steps)

    logger.debug(
        "Stair geometry: %d steps at %.2f cm, length %.1f cm, net width %.1f cm",
        len(steps), actual_step_height, total_length, net_step_width,
    )

    return StairGeometry(
        step_count=len(steps),
        actual_step_height=actual_step_height,
        total_length=total_length,
        net_step_width=net_step_width,
        steps=steps,
    )
