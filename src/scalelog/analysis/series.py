"""
MeasurementPoint dataclass and conversion from stored Measurement rows.

MeasurementPoint is the in-memory representation used by the downsampler and
the chart layer. It is a plain Python dataclass: no SQLModel, no DB
dependencies, so analysis functions stay pure.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

# Fields averaged independently of weight; any of them may be missing
OPTIONAL_FIELDS = (
    "body_fat_percent",
    "body_water_percent",
    "muscle_mass_percent",
    "body_mass_index",
    "metabolic_rate",
)


@dataclass
class MeasurementPoint:
    """One reading on the chart's time axis. Weight is always present."""

    timestamp: datetime
    weight: float                                  # kg
    body_fat_percent: Optional[float] = None
    body_water_percent: Optional[float] = None
    muscle_mass_percent: Optional[float] = None
    body_mass_index: Optional[float] = None
    metabolic_rate: Optional[float] = None         # kcal/day


def measurements_to_points(measurements: Iterable) -> List[MeasurementPoint]:
    """
    Convert Measurement rows (or any object with the same attributes)
    into MeasurementPoint instances, keeping their order.
    """
    return [
        MeasurementPoint(
            timestamp=m.timestamp,
            weight=m.weight,
            body_fat_percent=m.body_fat_percent,
            body_water_percent=m.body_water_percent,
            muscle_mass_percent=m.muscle_mass_percent,
            body_mass_index=m.body_mass_index,
            metabolic_rate=m.metabolic_rate,
        )
        for m in measurements
    ]
