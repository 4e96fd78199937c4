"""
Tolerance rules for masonry courses and slab cutting.

Every threshold the engine compares against lives here. All values in cm.
"""

import math

# Mortar joints
JOINT_MIN = 0.5          # Thinnest joint a bricklayer will accept
JOINT_MAX = 3.0          # Thickest joint before the course needs a cut unit
STANDARD_JOINT = 1.0     # Nominal joint between courses
BED_JOINT = 2.0          # Mortar bed under the first course

# Burial
MAX_BURIAL = 8.0
UNIFORM_BURIAL_DEPTHS = range(2, 9)   # Whole-cm depths tried for a shared burial
PREFERRED_BURIAL = 5.0

# Slab cutting
CUT_THRESHOLD = 0.1      # Differences at or below this are not worth a saw pass
USEFUL_OFFCUT_MIN = 1.0  # Offcuts thinner than this are gap trimmings

# Standard saw-task sizes cut events are bucketed into
STANDARD_CUT_SIZES = (30, 60, 90, 120)

_EPSILON = 1e-9


def joint_in_tolerance(joint: float) -> bool:
    return JOINT_MIN <= joint <= JOINT_MAX


def burial_acceptable(depth: float) -> bool:
    return 0 < depth <= MAX_BURIAL


def stack_height(block_count: int, course_height: float, joint: float = STANDARD_JOINT) -> float:
    """Height of a course stack including the bed joint and joints between courses."""
    return block_count * course_height + BED_JOINT + max(0, block_count - 1) * joint


def needed_joint(target_height: float, block_count: int, course_height: float) -> float:
    """Joint thickness that makes block_count courses exactly reach target_height."""
    if block_count <= 1:
        return 0.0
    return (target_height - block_count * course_height - BED_JOINT) / (block_count - 1)


def nearly_equal(a: float, b: float) -> bool:
    return abs(a - b) <= _EPSILON


def needs_cut(actual: float, required: float) -> bool:
    """A dimension needs a saw pass when it differs from the required one by more than 1 mm."""
    return abs(actual - required) > CUT_THRESHOLD


def is_reusable_remainder(remainder: float, parent_width: float) -> bool:
    """A cut leaves a reusable offcut only when it is neither a sliver nor the whole slab."""
    return CUT_THRESHOLD < remainder < parent_width


def is_useful_offcut(width: float, length: float) -> bool:
    return width > USEFUL_OFFCUT_MIN and length > USEFUL_OFFCUT_MIN


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (matches tape-measure rounding)."""
    return int(math.floor(value + 0.5))


def nearest_standard_cut_size(dimension: float) -> int:
    """Bucket a cut dimension into the closest standard size. Ties go to the smaller size."""
    closest = STANDARD_CUT_SIZES[0]
    min_diff = abs(closest - dimension)
    for size in STANDARD_CUT_SIZES:
        diff = abs(size - dimension)
        if diff < min_diff:
            min_diff = diff
            closest = size
    return closest
