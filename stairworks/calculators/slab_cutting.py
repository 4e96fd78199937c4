"""
Slab cutting planner — cladding slabs for each tread and riser.

Surfaces are planned strictly in order (step 1 tread, step 1 riser, step 2
tread, ...) against one shared OffcutInventory:

1. Try to clad the surface from offcuts: one piece that covers it, or two
   pieces side by side. Reused offcuts cost no new slabs.
2. Otherwise lay new slabs across the width with the configured gap and cut
   the last one (one cut) or the two end ones equally (two cuts). The
   unused length of each cut slab becomes an offcut for later surfaces.

Side overhangs only change the reported riser pieces (the first and last
piece are shortened by the overhang). They never change slab or cut counts,
except when the two overhangs consume the whole riser width; that riser is
dropped before any offcut is looked at.
"""

import enum
import logging
import math
from collections import namedtuple
from dataclasses import dataclass, field
from typing import List, Optional

from .offcut_inventory import OffcutInventory, WastePiece
from .stair_geometry import StairSpecification, Step, CuttingMode, riser_depth
from .tolerance import (
    CUT_THRESHOLD, is_reusable_remainder, is_useful_offcut, needs_cut,
)

logger = logging.getLogger(__name__)


class SurfaceKind(str, enum.Enum):
    TREAD = "tread"
    RISER = "riser"


# axis: "width" (cut across the step width) or "length" (cut to surface depth)
CutEvent = namedtuple("CutEvent", ["axis", "dimension", "count"])


@dataclass
class SlabPiece:
    width: float
    length: float
    count: int = 1
    from_offcut: bool = False

    @property
    def area_cm2(self) -> float:
        return self.width * self.length * self.count


@dataclass
class SurfaceCutResult:
    step: int
    surface: SurfaceKind
    required_width: float
    required_depth: float
    new_slabs_needed: int = 0
    width_cuts: int = 0
    length_cuts: int = 0
    needs_cutting: bool = False
    waste_used: bool = False
    waste_source: str = ""
    waste_rotated: bool = False
    pieces: List[SlabPiece] = field(default_factory=list)
    cut_events: List[CutEvent] = field(default_factory=list)
    offcuts_created: int = 0
    arm: str = ""

    @property
    def total_cuts(self) -> int:
        return self.width_cuts + self.length_cuts

    @property
    def dimension_description(self) -> str:
        """Human-readable piece list, e.g. '2x(90x35.0cm) + 1x(4.6x35.0cm)'. Display only."""
        parts = [
            "%dx(%sx%.1fcm)" % (p.count, _fmt(p.width), p.length)
            for p in self.pieces
        ]
        text = " + ".join(parts)
        if self.waste_used and text:
            label = "rotated waste" if self.waste_rotated else "waste"
            text += " [Using %s from %s]" % (label, self.waste_source)
        return text

    def add_cut(self, axis: str, dimension: float, count: int = 1) -> None:
        if count <= 0:
            return
        if axis == "width":
            self.width_cuts += count
        else:
            self.length_cuts += count
        self.cut_events.append(CutEvent(axis, dimension, count))

    def to_dict(self) -> dict:
        data = {
            "step": self.step,
            "surface": self.surface.value,
            "required_width": round(self.required_width, 2),
            "required_depth": round(self.required_depth, 2),
            "new_slabs_needed": self.new_slabs_needed,
            "width_cuts": self.width_cuts,
            "length_cuts": self.length_cuts,
            "total_cuts": self.total_cuts,
            "needs_cutting": self.needs_cutting,
            "waste_used": self.waste_used,
            "waste_source": self.waste_source,
            "dimension_description": self.dimension_description,
            "pieces": [
                {
                    "width": round(p.width, 2),
                    "length": round(p.length, 2),
                    "count": p.count,
                    "from_offcut": p.from_offcut,
                }
                for p in self.pieces
            ],
        }
        if self.arm:
            data["arm"] = self.arm
        return data


def _fmt(value: float) -> str:
    return "%g" % round(value, 1)


def _source_label(result: SurfaceCutResult) -> str:
    if result.arm:
        return "Step %d arm %s" % (result.step, result.arm)
    return "Step %d" % result.step


def slabs_across(required_width: float, slab_width: float, gap: float) -> int:
    """Slabs needed to span required_width: n slabs and n-1 gaps cover n*(w+gap) - gap."""
    return max(1, math.ceil((required_width + gap) / (slab_width + gap)))


class SlabCuttingPlanner:
    """
    Plans every surface of one stair against one offcut inventory.
    Create a new planner (and inventory) per stair.
    """

    def __init__(self, spec: StairSpecification, inventory: Optional[OffcutInventory] = None):
        self.spec = spec
        self.slab_width, self.slab_length = spec.slab_footprint()
        self.gap = spec.gap_cm
        self.cutting_mode = CuttingMode(spec.cutting_mode)
        self.side_overhang = spec.overhang_side
        self.inventory = inventory if inventory is not None else OffcutInventory()

    # --- Public entry points ---

    def plan_stair(self, steps: List[Step]) -> List[SurfaceCutResult]:
        """Tread then riser for each step, bottom step first."""
        results = []
        for position, step in enumerate(steps):
            results.append(self.plan_surface(
                step.index, SurfaceKind.TREAD, self.spec.total_width, step.tread_slab_depth,
            ))
            results.append(self.plan_surface(
                step.index, SurfaceKind.RISER, self.spec.total_width,
                riser_depth(self.spec, steps, position),
            ))
        return results

    def plan_surface(self, step_index: int, surface: SurfaceKind,
                     required_width: float, required_depth: float,
                     arm: str = "") -> SurfaceCutResult:
        result = SurfaceCutResult(
            step=step_index,
            arm=arm,
            surface=SurfaceKind(surface),
            required_width=required_width,
            required_depth=required_depth,
        )
        if required_width <= 0 or required_depth <= 0:
            logger.debug("Step %d %s: nothing to clad", step_index, surface)
            return result

        if not self._layout(result.surface, [required_width], required_depth):
            # Single riser piece eaten by the side overhangs: nothing to buy, cut or reuse
            logger.debug("Step %d riser: single piece under side overhangs, dropped", step_index)
            return result

        if not self._plan_from_offcuts(result):
            self._plan_new_slabs(result)

        logger.debug(
            "Step %d %s: %d new slabs, %d cuts%s",
            step_index, result.surface.value, result.new_slabs_needed, result.total_cuts,
            " (offcut from %s)" % result.waste_source if result.waste_used else "",
        )
        return result

    # --- Offcut reuse ---

    def _plan_from_offcuts(self, result: SurfaceCutResult) -> bool:
        width = result.required_width
        depth = result.required_depth

        candidates = self.inventory.find_usable(depth, width)
        if candidates:
            return self._cover_with_one(result, candidates[0], depth, width)

        partial = self.inventory.find_partial(depth)
        if not partial:
            return False

        first = partial[0]
        covered = first.covering(depth).along
        remaining = width - covered
        if remaining <= CUT_THRESHOLD:
            # Short of the width by no more than the cut tolerance
            return self._cover_with_one(result, first, depth, covered)

        seconds = [p for p in self.inventory.find_usable(depth, remaining) if p is not first]
        if not seconds:
            return False

        second = seconds[0]
        first_fit, _ = self.inventory.consume(first, depth, covered, parent_width=self.slab_width)
        second_fit, _ = self.inventory.consume(second, depth, remaining, parent_width=self.slab_width)
        self._charge_offcut_cuts(result, first_fit, depth, covered)
        self._charge_offcut_cuts(result, second_fit, depth, remaining)
        result.waste_used = True
        result.waste_source = "%s and %s" % (first.source, second.source)
        result.waste_rotated = first_fit.rotated or second_fit.rotated
        result.pieces = self._layout(result.surface, [covered, remaining], depth, from_offcut=True)
        return True

    def _cover_with_one(self, result: SurfaceCutResult, piece: WastePiece,
                        depth: float, along: float) -> bool:
        fit, _ = self.inventory.consume(piece, depth, along, parent_width=self.slab_width)
        self._charge_offcut_cuts(result, fit, depth, result.required_width)
        result.waste_used = True
        result.waste_source = piece.source
        result.waste_rotated = fit.rotated
        result.pieces = self._layout(result.surface, [result.required_width], depth, from_offcut=True)
        return True

    def _charge_offcut_cuts(self, result, fit, depth, width):
        if needs_cut(fit.across, depth):
            result.add_cut("length", depth)
        if needs_cut(fit.along, width):
            result.add_cut("width", width)

    # --- New slabs ---

    def _plan_new_slabs(self, result: SurfaceCutResult) -> None:
        width = result.required_width
        depth = result.required_depth
        slab_width = self.slab_width

        count = slabs_across(width, slab_width, self.gap)
        total_gaps = (count - 1) * self.gap
        coverage = count * slab_width + total_gaps

        if coverage - width <= CUT_THRESHOLD:
            self._lay_full_slabs(result, count)
            return

        if self.cutting_mode == CuttingMode.ONE_CUT:
            full = count - 1
            remainder = width - full * slab_width - total_gaps
            if remainder <= CUT_THRESHOLD:
                self._lay_full_slabs(result, count)
                return
            widths = [slab_width] * full + [remainder]
            cut_widths = [remainder]
        else:
            if count <= 1:
                widths = [width]
                cut_widths = [width]
            else:
                full = count - 2
                residual = width - full * slab_width - total_gaps
                piece_width = residual / 2.0
                if residual <= CUT_THRESHOLD or piece_width <= CUT_THRESHOLD:
                    self._lay_full_slabs(result, max(1, count - 1))
                    return
                widths = [piece_width] + [slab_width] * full + [piece_width]
                cut_widths = [piece_width, piece_width]

        result.needs_cutting = True
        result.new_slabs_needed = len(widths)
        result.pieces = self._layout(result.surface, widths, depth)
        for cut_width in cut_widths:
            result.add_cut("width", cut_width)
        if needs_cut(self.slab_length, depth):
            result.add_cut("length", depth, len(widths))

        for cut_width in cut_widths:
            if is_reusable_remainder(cut_width, slab_width):
                self._keep_offcut(result)

    def _lay_full_slabs(self, result: SurfaceCutResult, count: int) -> None:
        result.new_slabs_needed = count
        result.pieces = self._layout(result.surface, [self.slab_width] * count, result.required_depth)

    def _keep_offcut(self, result: SurfaceCutResult) -> None:
        leftover_length = self.slab_length - result.required_depth
        if leftover_length <= 0 or not is_useful_offcut(self.slab_width, leftover_length):
            return
        # width runs with the surface depth, length across the step
        self.inventory.replenish(WastePiece(
            width=leftover_length,
            length=self.slab_width,
            source=_source_label(result),
            rotatable=True,
        ))
        result.offcuts_created += 1

    # --- Reported pieces ---

    def _layout(self, surface: SurfaceKind, widths: List[float], depth: float,
                from_offcut: bool = False) -> List[SlabPiece]:
        """
        Pieces as fitted, left to right, grouped by equal width.
        Riser end pieces lose the side overhang; pieces that vanish are dropped.
        """
        shown = list(widths)
        if surface == SurfaceKind.RISER and self.side_overhang > 0 and shown:
            if len(shown) == 1:
                shown[0] -= 2 * self.side_overhang
            else:
                shown[0] -= self.side_overhang
                shown[-1] -= self.side_overhang

        pieces: List[SlabPiece] = []
        for w in shown:
            if w <= 0:
                continue
            if pieces and abs(pieces[-1].width - w) < 1e-9:
                pieces[-1].count += 1
            else:
                pieces.append(SlabPiece(width=w, length=depth, count=1, from_offcut=from_offcut))
        return pieces


def plan_surface(required_width: float, required_depth: float, spec: StairSpecification,
                 inventory: OffcutInventory, step_index: int = 1,
                 surface: SurfaceKind = SurfaceKind.TREAD) -> SurfaceCutResult:
    """Plan one surface against a caller-owned inventory."""
    planner = SlabCuttingPlanner(spec, inventory)
    return planner.plan_surface(step_index, surface, required_width, required_depth)
