"""
Quantity aggregator: running totals over every planned surface.

Feeds three consumers:
  - the result totals (new slabs, saw cuts, areas),
  - adhesive mass and bags (from the clad area),
  - the task matcher (slab dimension histogram and the bucketed cut log).
"""

import math
from collections import OrderedDict
from typing import Dict, Iterable, List

from .slab_cutting import SurfaceCutResult, SurfaceKind
from .tolerance import nearest_standard_cut_size, round_half_up

DEFAULT_ADHESIVE_KG_PER_M2_PER_CM = 12.0
DEFAULT_ADHESIVE_BAG_KG = 20.0


def adhesive_consumption(thickness_cm: float,
                         kg_per_m2_per_cm: float = DEFAULT_ADHESIVE_KG_PER_M2_PER_CM) -> float:
    """kg of adhesive per m² for a bed of the given thickness (0.5 cm -> 6 kg/m²)."""
    return thickness_cm * kg_per_m2_per_cm


def adhesive_bags(adhesive_kg: float, bag_kg: float = DEFAULT_ADHESIVE_BAG_KG) -> int:
    """Whole bags, at least one whenever any adhesive is needed."""
    if adhesive_kg <= 0:
        return 0
    return max(1, math.ceil(adhesive_kg / bag_kg))


def dimension_key(width: float, length: float) -> str:
    return "%dx%d" % (round_half_up(width), round_half_up(length))


class QuantityAggregator:
    """Pure accumulation. Feed surfaces in planning order with add()."""

    def __init__(self, adhesive_thickness: float = 0.5,
                 adhesive_kg_per_m2_per_cm: float = DEFAULT_ADHESIVE_KG_PER_M2_PER_CM,
                 adhesive_bag_kg: float = DEFAULT_ADHESIVE_BAG_KG):
        self.adhesive_thickness = adhesive_thickness
        self.adhesive_kg_per_m2_per_cm = adhesive_kg_per_m2_per_cm
        self.adhesive_bag_kg = adhesive_bag_kg

        self.tread_slabs = 0
        self.riser_slabs = 0
        self.width_cut_count = 0
        self.length_cut_count = 0
        self.top_area_cm2 = 0.0
        self.front_area_cm2 = 0.0
        self.surfaces_from_offcuts = 0
        self._histogram: "OrderedDict[str, int]" = OrderedDict()
        self._width_cut_log: Dict[int, int] = {}
        self._length_cut_log: Dict[int, int] = {}

    def add(self, result: SurfaceCutResult) -> None:
        if result.new_slabs_needed < 0:
            raise ValueError("Surface reported a negative slab count: %d" % result.new_slabs_needed)

        if result.surface == SurfaceKind.TREAD:
            self.tread_slabs += result.new_slabs_needed
        else:
            self.riser_slabs += result.new_slabs_needed
        if result.waste_used:
            self.surfaces_from_offcuts += 1

        self.width_cut_count += result.width_cuts
        self.length_cut_count += result.length_cuts
        for event in result.cut_events:
            log = self._width_cut_log if event.axis == "width" else self._length_cut_log
            size = nearest_standard_cut_size(event.dimension)
            log[size] = log.get(size, 0) + event.count

        for piece in result.pieces:
            if result.surface == SurfaceKind.TREAD:
                self.top_area_cm2 += piece.area_cm2
            else:
                self.front_area_cm2 += piece.area_cm2
            key = dimension_key(piece.width, piece.length)
            self._histogram[key] = self._histogram.get(key, 0) + piece.count

    def add_all(self, results: Iterable[SurfaceCutResult]) -> "QuantityAggregator":
        for result in results:
            self.add(result)
        return self

    # --- Totals ---

    @property
    def total_new_slabs(self) -> int:
        return self.tread_slabs + self.riser_slabs

    @property
    def total_cuts(self) -> int:
        return self.width_cut_count + self.length_cut_count

    @property
    def top_area_m2(self) -> float:
        return self.top_area_cm2 / 10000.0

    @property
    def front_area_m2(self) -> float:
        return self.front_area_cm2 / 10000.0

    @property
    def total_area_m2(self) -> float:
        return self.top_area_m2 + self.front_area_m2

    @property
    def adhesive_kg(self) -> float:
        rate = adhesive_consumption(self.adhesive_thickness, self.adhesive_kg_per_m2_per_cm)
        return self.total_area_m2 * rate

    @property
    def adhesive_bags(self) -> int:
        return adhesive_bags(self.adhesive_kg, self.adhesive_bag_kg)

    @property
    def histogram(self) -> Dict[str, int]:
        """'WxL' (rounded cm) -> piece count, in first-seen order."""
        return dict(self._histogram)

    def width_cuts(self) -> List[dict]:
        return [{"dimension": d, "count": c} for d, c in sorted(self._width_cut_log.items())]

    def length_cuts(self) -> List[dict]:
        return [{"dimension": d, "count": c} for d, c in sorted(self._length_cut_log.items())]

    def summary(self) -> dict:
        return {
            "total_slabs": self.total_new_slabs,
            "tread_slabs": self.tread_slabs,
            "riser_slabs": self.riser_slabs,
            "total_cuts": self.total_cuts,
            "width_cut_count": self.width_cut_count,
            "length_cut_count": self.length_cut_count,
            "surfaces_from_offcuts": self.surfaces_from_offcuts,
            "top_area_m2": round(self.top_area_m2, 4),
            "front_area_m2": round(self.front_area_m2, 4),
            "adhesive_kg_per_m2": round(
                adhesive_consumption(self.adhesive_thickness, self.adhesive_kg_per_m2_per_cm), 2),
            "top_adhesive_kg": round(self.top_area_m2 * adhesive_consumption(
                self.adhesive_thickness, self.adhesive_kg_per_m2_per_cm), 2),
            "front_adhesive_kg": round(self.front_area_m2 * adhesive_consumption(
                self.adhesive_thickness, self.adhesive_kg_per_m2_per_cm), 2),
            "total_adhesive_kg": round(self.adhesive_kg, 2),
            "adhesive_bags": self.adhesive_bags,
            "slab_dimension_histogram": self.histogram,
            "cuts": {
                "length_cuts": self.length_cuts(),
                "width_cuts": self.width_cuts(),
            },
        }
