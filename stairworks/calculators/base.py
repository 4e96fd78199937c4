"""
Abstract base class for all calculators.

Input: a fields dict (API body or any loosely typed caller input)
Output: a result dict of plain JSON types only
"""

from abc import ABC, abstractmethod


class BaseCalculator(ABC):
    """All calculators inherit from this."""

    @abstractmethod
    def calculate(self, fields: dict) -> dict:
        """
        Takes the caller's fields.
        Returns a JSON-ready result dict.
        """
        pass

    # --- Helper methods for all calculators ---

    def parse_number(self, value, default: float = 0.0) -> float:
        """Parse a numeric value from user input. Handles strings like '90', '90.5', '90cm'."""
        if value is None:
            return default
        if isinstance(value, bool):
            return default
        try:
            return float(str(value).strip().rstrip("cm").strip())
        except (ValueError, TypeError):
            return default

    def parse_optional_number(self, value):
        """Like parse_number but keeps 'not given' as None."""
        if value is None or str(value).strip() == "":
            return None
        try:
            return float(str(value).strip().rstrip("cm").strip())
        except (ValueError, TypeError):
            return None

    def parse_bool(self, value, default: bool = False) -> bool:
        """Parse yes/no style input. 'yes', 'true', '1', 'on' are True."""
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("yes", "true", "1", "on", "y")

    def parse_choice(self, value, enum_cls, default):
        """
        Parse an enum value by value or name, case and underscores ignored,
        so 'two_cuts', 'TWO_CUTS' and 'twoCuts' all match. Empty means default.
        Raises ValueError for anything else.
        """
        if value is None:
            return default
        if isinstance(value, enum_cls):
            return value
        text = str(value).strip()
        if not text:
            return default
        key = _choice_key(text)
        for member in enum_cls:
            if key in (_choice_key(member.value), _choice_key(member.name)):
                return member
        raise ValueError(
            "Unknown %s %r. Allowed: %s"
            % (enum_cls.__name__, value, [m.value for m in enum_cls])
        )

    def parse_list(self, value, default=None) -> list:
        """Parse a list from a list, tuple or comma-separated string."""
        if value is None:
            return list(default or [])
        if isinstance(value, (list, tuple)):
            return [str(v).strip() for v in value if str(v).strip()]
        return [v.strip() for v in str(value).split(",") if v.strip()]

    def make_material_item(self, name: str, amount: float, unit: str, **extra) -> dict:
        """Build a material line for the result."""
        item = {
            "name": name,
            "amount": amount,
            "unit": unit,
        }
        item.update(extra)
        return item

    def make_result(self, calculator: str, materials: list, task_breakdown: list,
                    assumptions: list = None, **values) -> dict:
        """Build the result dict shared by all calculators."""
        result = {
            "calculator": calculator,
            "materials": materials,
            "task_breakdown": task_breakdown,
            "total_hours": round(sum(t.get("hours", 0) or 0 for t in task_breakdown), 2),
            "assumptions": assumptions or [],
        }
        result.update(values)
        return result


def _choice_key(text: str) -> str:
    return text.replace("_", "").replace("-", "").lower()
