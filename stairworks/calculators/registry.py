"""
Calculator registry — maps calculator names to calculator classes.
"""

from .arm_stair_calculator import LShapeStairCalculator, UShapeStairCalculator
from .base import BaseCalculator
from .stair_calculator import StandardStairCalculator

CALCULATOR_REGISTRY: dict[str, type] = {
    "standard_stair": StandardStairCalculator,
    "l_shape_stair": LShapeStairCalculator,
    "u_shape_stair": UShapeStairCalculator,
}


def get_calculator(name: str, **options) -> BaseCalculator:
    """Returns an instance of the calculator for a name, or raises ValueError."""
    if name not in CALCULATOR_REGISTRY:
        raise ValueError(
            f"No calculator registered for: {name}. "
            f"Available: {list(CALCULATOR_REGISTRY.keys())}"
        )
    return CALCULATOR_REGISTRY[name](**options)


def has_calculator(name: str) -> bool:
    """Check if a calculator exists for a name."""
    return name in CALCULATOR_REGISTRY


def list_calculators() -> list[str]:
    """List all registered calculator names."""
    return list(CALCULATOR_REGISTRY.keys())
