"""
Unit library — course-unit materials and cladding slab sizes.

Pure data. All dimensions in centimetres.

A course unit is either a block or a brick. Which physical dimension ends up
vertical depends on how the unit is laid, so every lookup of a course height
goes through an explicit Orientation rather than the unit's id.
"""

import enum
from dataclasses import dataclass
from typing import Dict, List, Tuple


class UnitKind(str, enum.Enum):
    BLOCK = "block"
    BRICK = "brick"


class Orientation(str, enum.Enum):
    FLAT = "flat"          # Largest face down
    ON_SIDE = "on_side"    # Bricks only: width becomes the course height
    UPRIGHT = "upright"    # Blocks only: nominal height is the course height


# Allowed orientations per kind, and which dimension is vertical / across
# the wall for each. Values are attribute names on UnitMaterial.
_ORIENTATION_RULES = {
    UnitKind.BLOCK: {
        Orientation.FLAT: ("width", "height"),
        Orientation.UPRIGHT: ("height", "width"),
    },
    UnitKind.BRICK: {
        Orientation.FLAT: ("height", "width"),
        Orientation.ON_SIDE: ("width", "height"),
    },
}


@dataclass(frozen=True)
class UnitMaterial:
    id: str
    name: str
    kind: UnitKind
    height: float
    width: float
    length: float
    building_task: str = ""
    transport_class: str = "blocks"

    def allowed_orientations(self) -> List[Orientation]:
        return list(_ORIENTATION_RULES[self.kind].keys())

    def _rule(self, orientation: Orientation) -> Tuple[str, str]:
        rules = _ORIENTATION_RULES[self.kind]
        orientation = Orientation(orientation)
        if orientation not in rules:
            raise ValueError(
                f"{self.name} cannot be laid {orientation.value}. "
                f"Allowed: {[o.value for o in rules]}"
            )
        return rules[orientation]

    def course_height(self, orientation: Orientation) -> float:
        """Height one course of this unit adds to a wall, without mortar."""
        vertical, _ = self._rule(orientation)
        return getattr(self, vertical)

    def course_width(self, orientation: Orientation) -> float:
        """Thickness of the wall this unit builds (across the wall)."""
        _, across = self._rule(orientation)
        return getattr(self, across)


UNIT_LIBRARY: Dict[str, UnitMaterial] = {
    "blocks4": UnitMaterial(
        id="blocks4",
        name="4-inch Blocks",
        kind=UnitKind.BLOCK,
        height=21.0,
        width=10.0,
        length=44.0,
        building_task="building steps with 4-inch blocks",
        transport_class="blocks",
    ),
    "blocks7": UnitMaterial(
        id="blocks7",
        name="7-inch Blocks",
        kind=UnitKind.BLOCK,
        height=21.0,
        width=14.0,
        length=44.0,
        building_task="building steps with 7-inch blocks",
        transport_class="blocks",
    ),
    "bricks": UnitMaterial(
        id="bricks",
        name="Standard Bricks (9x6x21)",
        kind=UnitKind.BRICK,
        height=6.0,
        width=9.0,
        length=21.0,
        building_task="building steps with bricks",
        transport_class="bricks",
    ),
}

# Default unit selection when the caller does not pick one
DEFAULT_UNIT_IDS = ["blocks4", "blocks7"]


@dataclass(frozen=True)
class SlabSize:
    size: str
    width: float
    length: float

    def footprint(self, long_way: bool) -> Tuple[float, float]:
        """
        (slab_width, slab_length) as laid across the step.
        Long way puts the longer edge along the step width.
        """
        longer = max(self.width, self.length)
        shorter = min(self.width, self.length)
        if long_way:
            return longer, shorter
        return shorter, longer


SLAB_SIZES: Dict[str, SlabSize] = {
    "90x60": SlabSize("90x60", 90.0, 60.0),
    "60x60": SlabSize("60x60", 60.0, 60.0),
    "60x30": SlabSize("60x30", 60.0, 30.0),
    "30x30": SlabSize("30x30", 30.0, 30.0),
}

DEFAULT_SLAB_SIZE = "90x60"


def get_unit(unit_id: str) -> UnitMaterial:
    """Look up a unit material, or raise ValueError naming the valid ids."""
    if unit_id not in UNIT_LIBRARY:
        raise ValueError(
            f"Unknown unit material: {unit_id}. Available: {list(UNIT_LIBRARY.keys())}"
        )
    return UNIT_LIBRARY[unit_id]


def get_slab_size(size: str) -> SlabSize:
    if size not in SLAB_SIZES:
        raise ValueError(
            f"Unknown slab size: {size}. Available: {list(SLAB_SIZES.keys())}"
        )
    return SLAB_SIZES[size]
