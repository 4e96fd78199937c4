"""
Task matcher — turns stair quantities into labour entries.

The duration catalogue is external (database rows, or a list passed in by the
caller). Template names carry the matching key:
  - "building steps with 4-inch blocks"        exact name, per unit laid
  - "cutting 60cm porcelain slab"              exact name, per saw cut
  - "tile installation 90 x 60"                nearest (W, L), per slab piece
  - "mixing mortar"                            exact name, per batch

A bucket with no matching template is left out of the breakdown. A template
whose hours are unknown (null) contributes 0 hours.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .transport import material_transport, slab_transport

logger = logging.getLogger(__name__)

DIMENSION_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*x\s*(\d+(?:\.\d+)?)", re.IGNORECASE)

INSTALLATION_PREFIX = "tile installation"
DEFAULT_INSTALLATION_HOURS = 0.5
MIXING_MORTAR_TASK = "mixing mortar"
DEFAULT_MORTAR_BATCH_KG = 125.0


@dataclass(frozen=True)
class DurationTemplate:
    name: str
    hours: Optional[float] = None
    unit: str = "piece"

    @classmethod
    def from_any(cls, item) -> "DurationTemplate":
        """Accepts a dict, a pydantic model or an ORM row with name/estimated_hours/unit."""
        if isinstance(item, DurationTemplate):
            return item
        if isinstance(item, dict):
            get = item.get
        else:
            def get(key, default=None):
                return getattr(item, key, default)
        hours = get("estimated_hours")
        if hours is None:
            hours = get("hours")
        return cls(
            name=str(get("name") or ""),
            hours=float(hours) if hours is not None else None,
            unit=get("unit") or "piece",
        )


@dataclass(frozen=True)
class DimensionedTemplate:
    template: DurationTemplate
    width: float
    length: float

    def distance(self, width: float, length: float) -> float:
        return math.hypot(self.width - width, self.length - length)


def parse_dimensions(name: str):
    """(W, L) embedded in a template name as 'W x L', or None."""
    match = DIMENSION_PATTERN.search(name)
    if not match:
        return None
    return float(match.group(1)), float(match.group(2))


class TaskCatalogue:
    """Typed view over duration templates, in catalogue order."""

    def __init__(self, templates: Optional[Iterable] = None):
        self.templates: List[DurationTemplate] = [
            DurationTemplate.from_any(t) for t in (templates or [])
        ]
        self._by_name: Dict[str, DurationTemplate] = {}
        for template in self.templates:
            # First entry wins on duplicate names
            self._by_name.setdefault(template.name.strip().lower(), template)

        self.installation: List[DimensionedTemplate] = []
        for template in self.templates:
            if not template.name.strip().lower().startswith(INSTALLATION_PREFIX):
                continue
            dims = parse_dimensions(template.name)
            if dims is not None:
                self.installation.append(DimensionedTemplate(template, dims[0], dims[1]))

    def __len__(self) -> int:
        return len(self.templates)

    def find(self, name: str) -> Optional[DurationTemplate]:
        return self._by_name.get(name.strip().lower())

    def nearest_installation(self, width: float, length: float) -> Optional[DurationTemplate]:
        """Closest (W, L) by Euclidean distance. Earlier catalogue entries win ties."""
        best = None
        best_distance = math.inf
        for candidate in self.installation:
            distance = candidate.distance(width, length)
            if distance < best_distance:
                best = candidate
                best_distance = distance
        return best.template if best is not None else None


def cutting_task_name(size_cm: int, slab_type: str) -> str:
    return "cutting %dcm %s slab" % (size_cm, slab_type)


def task_entry(task: str, hours: float, amount: float, unit: str) -> dict:
    return {
        "task": task,
        "hours": round(hours, 4),
        "amount": amount,
        "unit": unit,
    }


def match_installation_tasks(histogram: Dict[str, int], catalogue: TaskCatalogue) -> List[dict]:
    """
    Group histogram buckets by their nearest installation template.
    Entries come out in the order their template was first matched.
    """
    groups: Dict[str, list] = {}
    for key, count in histogram.items():
        dims = parse_dimensions(key)
        if dims is None or count <= 0:
            continue
        template = catalogue.nearest_installation(*dims)
        if template is None:
            continue
        if template.name in groups:
            groups[template.name][1] += count
        else:
            groups[template.name] = [template, count]

    entries = []
    for name, (template, count) in groups.items():
        hours_each = template.hours if template.hours is not None else DEFAULT_INSTALLATION_HOURS
        entries.append(task_entry(name, count * hours_each, count, "pieces"))
    return entries


class TaskBreakdownBuilder:
    """Collects task entries in a fixed order: building, cutting, installation, mortar, transport."""

    def __init__(self, catalogue: TaskCatalogue, slab_type: str = "porcelain",
                 mortar_batch_kg: float = DEFAULT_MORTAR_BATCH_KG):
        self.catalogue = catalogue
        self.slab_type = slab_type
        self.mortar_batch_kg = mortar_batch_kg
        self.entries: List[dict] = []

    def _hours(self, template: DurationTemplate) -> float:
        return template.hours if template.hours is not None else 0.0

    def add_building(self, materials) -> "TaskBreakdownBuilder":
        """materials: iterable of (unit, amount)."""
        for unit, amount in materials:
            if amount <= 0 or not unit.building_task:
                continue
            template = self.catalogue.find(unit.building_task)
            if template is None:
                logger.debug("No duration template for %r", unit.building_task)
                continue
            self.entries.append(task_entry(
                template.name, amount * self._hours(template), amount, template.unit or "pieces",
            ))
        return self

    def add_cutting(self, length_cuts: List[dict], width_cuts: List[dict]) -> "TaskBreakdownBuilder":
        for cut in list(length_cuts) + list(width_cuts):
            template = self.catalogue.find(cutting_task_name(cut["dimension"], self.slab_type))
            if template is None:
                continue
            self.entries.append(task_entry(
                template.name, cut["count"] * self._hours(template), cut["count"],
                template.unit or "piece",
            ))
        return self

    def add_installation(self, histogram: Dict[str, int]) -> "TaskBreakdownBuilder":
        self.entries.extend(match_installation_tasks(histogram, self.catalogue))
        return self

    def add_mixing_mortar(self, mortar_kg: float) -> "TaskBreakdownBuilder":
        template = self.catalogue.find(MIXING_MORTAR_TASK)
        if template is None or mortar_kg <= 0:
            return self
        batches = math.ceil(mortar_kg / self.mortar_batch_kg)
        self.entries.append(task_entry(template.name, batches * self._hours(template), batches, "batch"))
        return self

    def add_material_transport(self, materials, carrier_size: float,
                               distance_m: float) -> "TaskBreakdownBuilder":
        """materials: iterable of (unit, amount)."""
        for unit, amount in materials:
            estimate = material_transport(amount, carrier_size, unit.transport_class, distance_m)
            if estimate.hours > 0:
                self.entries.append(task_entry(
                    "transport %s" % unit.name.lower(), estimate.hours, amount, "pieces",
                ))
        return self

    def add_slab_transport(self, slab_count: int) -> "TaskBreakdownBuilder":
        estimate = slab_transport(slab_count)
        if estimate.hours > 0:
            self.entries.append(task_entry("transport slabs", estimate.hours, slab_count, "pieces"))
        return self

    def build(self) -> List[dict]:
        return list(self.entries)
