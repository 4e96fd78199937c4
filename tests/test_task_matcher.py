"""
Tests for task matching and transport (task_matcher.py, transport.py).

Tests:
1.    Template names parsed for W x L, decimals included
2.    Templates from dicts and attribute objects, null hours kept as None
3.    Nearest installation template; ties go to the earlier entry
4.    Histogram grouped by matched template, default 0.5 h when hours are null
5.    No dimensioned installation template: entry omitted
6.    Breakdown: building, cutting, mixing mortar
7.    Missing templates are left out, null hours count 0
8.    Carrier capacity, closest size and speed
9.    Material and slab transport times
"""

from types import SimpleNamespace

import pytest

from stairworks.calculators.task_matcher import (
    DurationTemplate, TaskBreakdownBuilder, TaskCatalogue, cutting_task_name,
    match_installation_tasks, parse_dimensions,
)
from stairworks.calculators.transport import (
    carrier_speed, closest_carrier_size, material_capacity, material_transport, slab_transport,
)
from stairworks.calculators.unit_library import get_unit


def _templates():
    return [
        {"name": "building steps with 4-inch blocks", "estimated_hours": 0.25, "unit": "pieces"},
        {"name": "cutting 30cm porcelain slab", "estimated_hours": 0.1, "unit": "piece"},
        {"name": "cutting 60cm porcelain slab", "estimated_hours": None, "unit": "piece"},
        {"name": "Tile Installation 90 x 60", "estimated_hours": 0.5, "unit": "pieces"},
        {"name": "tile installation 30 x 30", "estimated_hours": 0.2, "unit": "pieces"},
        {"name": "mixing mortar", "estimated_hours": 0.5, "unit": "batch"},
    ]


def test_parse_dimensions():
    assert parse_dimensions("tile installation 90 x 60") == (90.0, 60.0)
    assert parse_dimensions("Tile Installation 60.5X30") == (60.5, 30.0)
    assert parse_dimensions("mixing mortar") is None


def test_templates_from_dicts_and_rows():
    row = SimpleNamespace(name="mixing mortar", estimated_hours=None, unit="batch")
    template = DurationTemplate.from_any(row)
    assert template == DurationTemplate("mixing mortar", None, "batch")
    assert DurationTemplate.from_any({"name": "x", "hours": 2}).hours == 2.0


def test_nearest_installation_template():
    catalogue = TaskCatalogue(_templates())
    assert catalogue.nearest_installation(90.0, 35.0).name == "Tile Installation 90 x 60"
    assert catalogue.nearest_installation(5.0, 35.0).name == "tile installation 30 x 30"

    tied = TaskCatalogue([
        {"name": "tile installation 60 x 30", "estimated_hours": 0.3},
        {"name": "tile installation 30 x 60", "estimated_hours": 0.4},
    ])
    assert tied.nearest_installation(45.0, 45.0).name == "tile installation 60 x 30"


def test_installation_grouping():
    """90x35 and 80x50 share the 90 x 60 template; null hours default to 0.5."""
    catalogue = TaskCatalogue([
        {"name": "tile installation 90 x 60", "estimated_hours": None},
        {"name": "tile installation 30 x 30", "estimated_hours": 0.2},
    ])
    entries = match_installation_tasks({"90x35": 2, "5x35": 1, "80x50": 3}, catalogue)
    assert entries == [
        {"task": "tile installation 90 x 60", "hours": 2.5, "amount": 5, "unit": "pieces"},
        {"task": "tile installation 30 x 30", "hours": 0.2, "amount": 1, "unit": "pieces"},
    ]


def test_installation_without_dimensions_omitted():
    catalogue = TaskCatalogue([{"name": "tile installation", "estimated_hours": 1.0}])
    assert match_installation_tasks({"90x35": 2}, catalogue) == []


def test_breakdown():
    builder = TaskBreakdownBuilder(TaskCatalogue(_templates()), slab_type="porcelain")
    builder.add_building([(get_unit("blocks4"), 98)])
    builder.add_cutting([{"dimension": 30, "count": 3}], [{"dimension": 30, "count": 1}])
    builder.add_mixing_mortar(401.4)
    tasks = builder.build()

    assert tasks[0] == {
        "task": "building steps with 4-inch blocks", "hours": 24.5, "amount": 98, "unit": "pieces",
    }
    assert [t["amount"] for t in tasks[1:3]] == [3, 1]
    assert tasks[1]["hours"] == pytest.approx(0.3)
    assert tasks[-1] == {"task": "mixing mortar", "hours": 2.0, "amount": 4, "unit": "batch"}


def test_missing_templates_and_null_hours():
    builder = TaskBreakdownBuilder(TaskCatalogue(_templates()), slab_type="granite")
    builder.add_building([(get_unit("bricks"), 500)])
    builder.add_cutting([{"dimension": 60, "count": 2}], [])
    assert builder.build() == []

    builder = TaskBreakdownBuilder(TaskCatalogue(_templates()), slab_type="porcelain")
    builder.add_cutting([{"dimension": 60, "count": 2}], [])
    assert builder.build() == [
        {"task": cutting_task_name(60, "porcelain"), "hours": 0.0, "amount": 2, "unit": "piece"},
    ]


def test_carrier_tables():
    assert material_capacity("blocks", 0.125) == 8
    assert material_capacity("bricks", 1) == 333
    assert material_capacity("slabs", 0.125) == 2.5
    assert closest_carrier_size(0.2) == 0.15
    assert material_capacity("blocks", 0.2) == 10
    assert carrier_speed(0.3) == 2500
    assert carrier_speed(0.2) == 4000
    with pytest.raises(ValueError):
        material_capacity("gravel", 1)


def test_transport_times():
    """98 blocks in a 0.125 t barrow: 13 trips of 60 m at 1500 m/h."""
    estimate = material_transport(98, 0.125, "blocks", 30.0)
    assert estimate.trips == 13
    assert estimate.hours == pytest.approx(13 * 60.0 / 1500.0)
    assert material_transport(0, 0.125, "blocks", 30.0) == (0, 0.0)

    slabs = slab_transport(9)
    assert slabs.trips == 5
    assert slabs.hours == pytest.approx(50.0 / 60.0)
