"""
Site transport times for stair materials.

Blocks and bricks travel by carrier (wheelbarrow, dumper, ...) whose size in
tonnes sets both its speed and how many units fit per trip. Slabs are carried
by hand, two per trip.
"""

import math
from collections import namedtuple

# Carrier size (t) -> speed (m/h)
CARRIER_SPEEDS = {
    0.1: 1500,
    0.125: 1500,
    0.15: 1500,
    0.3: 2500,
    0.5: 1000,
    1: 4000,
    3: 6000,
    5: 7000,
    10: 8000,
}
DEFAULT_CARRIER_SPEED = 4000

# Units per trip by carrier size (t)
MATERIAL_CAPACITY = {
    "blocks": {
        0.1: 6, 0.125: 8, 0.15: 10, 0.3: 20, 0.5: 33,
        1: 66, 3: 133, 5: 200, 10: 200,
    },
    "bricks": {
        0.1: 33, 0.125: 41, 0.15: 50, 0.3: 100, 0.5: 166,
        1: 333, 3: 666, 5: 1000, 10: 1000,
    },
    "slabs": {
        0.1: 2, 0.125: 2.5, 0.15: 3, 0.3: 6, 0.5: 10,
        1: 20, 3: 40, 5: 60, 10: 60,
    },
}

SLABS_PER_TRIP = 2
MINUTES_PER_SLAB_TRIP = 10

TransportEstimate = namedtuple("TransportEstimate", ["trips", "hours"])


def closest_carrier_size(carrier_size: float) -> float:
    """Nearest tabulated carrier size. Ties go to the smaller carrier."""
    return min(CARRIER_SPEEDS, key=lambda size: (abs(size - carrier_size), size))


def carrier_speed(carrier_size: float) -> float:
    return CARRIER_SPEEDS.get(carrier_size, DEFAULT_CARRIER_SPEED)


def material_capacity(material_type: str, carrier_size: float) -> float:
    """Units of material_type one trip of this carrier moves."""
    if material_type not in MATERIAL_CAPACITY:
        raise ValueError(
            f"Unknown transport material: {material_type}. "
            f"Available: {list(MATERIAL_CAPACITY.keys())}"
        )
    table = MATERIAL_CAPACITY[material_type]
    if carrier_size in table:
        return table[carrier_size]
    return table[closest_carrier_size(carrier_size)]


def material_transport(amount: float, carrier_size: float, material_type: str,
                       distance_m: float) -> TransportEstimate:
    """Round trips over distance_m at the carrier's speed."""
    if amount <= 0 or distance_m <= 0:
        return TransportEstimate(0, 0.0)
    trips = math.ceil(amount / material_capacity(material_type, carrier_size))
    hours = trips * (distance_m * 2) / carrier_speed(carrier_size)
    return TransportEstimate(trips, hours)


def slab_transport(slab_count: int) -> TransportEstimate:
    """Slabs go by hand: loading, walking and unloading take 10 minutes a trip."""
    if slab_count <= 0:
        return TransportEstimate(0, 0.0)
    trips = math.ceil(slab_count / SLABS_PER_TRIP)
    return TransportEstimate(trips, trips * MINUTES_PER_SLAB_TRIP / 60.0)
