"""
Weight chart data: downsampled readings split into one series per metric.

The rendering surface (chart widget) is not part of this package; it gets a
WeightChart and draws each ChartSeries on the named y axis. Absent values are
left out of their series instead of being drawn as zero.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple, Union

from sqlmodel import Session

from scalelog.analysis.downsample import DownsampleMethod, downsample, target_line
from scalelog.analysis.series import MeasurementPoint, measurements_to_points
from scalelog.config import get_settings
from scalelog.db.store import list_measurements
from scalelog.models.profile import Profile

# (attribute, label, y axis); order is the legend order
SERIES_SPEC = [
    ("weight", "Gewicht", "weight"),
    ("body_fat_percent", "Fett%", "percent"),
    ("body_water_percent", "Wasser%", "percent"),
    ("muscle_mass_percent", "Muskel%", "percent"),
    ("body_mass_index", "BMI", "percent"),
    ("metabolic_rate", "Kalorien", "calories"),
]
TARGET_SERIES = ("target_weight", "Zielgewicht", "weight")


@dataclass
class ChartSeries:
    key: str
    label: str
    axis: str  # "weight" (kg), "percent" (%), "calories" (kcal)
    points: List[Tuple[datetime, float]] = field(default_factory=list)


@dataclass
class WeightChart:
    entries: List[MeasurementPoint]   # downsampled readings
    target: List[MeasurementPoint]    # 0 or 2 points
    series: List[ChartSeries]

    def get_series(self, key: str) -> ChartSeries:
        for s in self.series:
            if s.key == key:
                return s
        raise KeyError(key)


def build_weight_chart(
    points: List[MeasurementPoint],
    target_weight: Optional[float] = None,
    target_count: int = 13,
    method: Union[DownsampleMethod, str] = DownsampleMethod.simple,
) -> WeightChart:
    """
    Downsample `points`, overlay the target weight and split by metric.

    Raises:
        InvalidTargetCountError: if target_count <= 2 and a downsampling
            method other than none is used
    """
    entries = downsample(points, target_count, method)
    target = target_line(entries, target_weight)

    series = []
    for key, label, axis in SERIES_SPEC:
        values = [
            (p.timestamp, getattr(p, key))
            for p in entries
            if getattr(p, key) is not None
        ]
        series.append(ChartSeries(key=key, label=label, axis=axis, points=values))
        if key == "weight":
            t_key, t_label, t_axis = TARGET_SERIES
            series.append(ChartSeries(
                key=t_key,
                label=t_label,
                axis=t_axis,
                points=[(p.timestamp, p.weight) for p in target],
            ))

    return WeightChart(entries=entries, target=target, series=series)


def load_weight_chart(
    engine,
    profile: Profile,
    target_count: Optional[int] = None,
    method: Optional[Union[DownsampleMethod, str]] = None,
    target_weight: Optional[float] = None,
) -> WeightChart:
    """
    Build the chart for a stored profile.

    target_count and method default to the configured chart settings;
    target_weight defaults to the profile's target weight.
    """
    settings = get_settings()
    if target_count is None:
        target_count = settings.chart_target_points
    if method is None:
        method = settings.downsample_method
    if target_weight is None:
        target_weight = profile.target_weight

    with Session(engine) as session:
        points = measurements_to_points(list_measurements(session, profile.id))

    return build_weight_chart(
        points,
        target_weight=target_weight,
        target_count=target_count,
        method=method,
    )
