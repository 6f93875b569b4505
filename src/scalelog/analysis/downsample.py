"""
Downsampling of measurement series for charting.

A profile can have years of daily readings; the chart shows a fixed number
of points (13 by default). Two methods are available:

  simple: fixed-width time buckets. Each bucket collapses to one point
          labelled with the bucket's start time; weight and every present
          optional value are averaged and rounded to one decimal.
  lttb:   Largest-Triangle-Three-Buckets on the weight curve. Keeps original
          readings, picking the ones that preserve the visual shape.

Both methods return the input untouched when it already has at most
target_count points, and never return more than target_count points.
"""
from datetime import timedelta
from enum import Enum
from typing import List, Optional, Sequence, Union

from scalelog.analysis.series import OPTIONAL_FIELDS, MeasurementPoint
from scalelog.analysis.stats import mean_or_none


class DownsampleMethod(str, Enum):
    none = "none"
    simple = "simple"
    lttb = "lttb"


class InvalidTargetCountError(ValueError):
    """Raised when asked to downsample to fewer than 3 points."""


def downsample(
    points: List[MeasurementPoint],
    target_count: int,
    method: Union[DownsampleMethod, str] = DownsampleMethod.simple,
) -> List[MeasurementPoint]:
    """
    Reduce `points` to at most `target_count` points with the given method.

    DownsampleMethod.none returns the input list as-is.

    Raises:
        InvalidTargetCountError: if target_count <= 2 (simple and lttb only)
        ValueError: on an unknown method name
    """
    method = DownsampleMethod(method)
    if method is DownsampleMethod.none:
        return points
    if method is DownsampleMethod.lttb:
        return downsample_lttb(points, target_count)
    return downsample_simple(points, target_count)


def _check_target_count(target_count: int) -> None:
    # First and last bucket must be distinct from anything in between
    if target_count <= 2:
        raise InvalidTargetCountError(
            f"target_count must be greater than 2, got {target_count}"
        )


def bucket_size_seconds(span_seconds: int, target_count: int) -> int:
    """
    Width of one bucket for a series spanning `span_seconds`.

    At least one second, so a series whose readings all share one timestamp
    still gets non-zero buckets. Bucket boundaries sit half a width after the
    bucket label, which for very short spans would allow one bucket more than
    target_count; the width is widened until that can no longer happen.
    """
    size = max(1, span_seconds // (target_count - 1))
    while span_seconds - size // 2 >= (target_count - 1) * size:
        size += 1
    return size


def downsample_simple(
    points: List[MeasurementPoint], target_count: int
) -> List[MeasurementPoint]:
    """
    Fixed-width bucket average.

    Walks the series once. A bucket labelled `bucket_time` collects points
    until one reaches `bucket_time + half width`; that point closes the bucket
    (if it has members) and both label and boundary advance by one full width.
    An empty bucket does not advance, so after a gap in the readings labels
    catch up one bucket per closed bucket.

    Args:
        points: chronologically ordered readings
        target_count: maximum number of output points, must be > 2

    Returns:
        `points` itself if it has at most target_count entries, otherwise a
        new ascending list of at most target_count bucket averages.
    """
    _check_target_count(target_count)
    if len(points) <= target_count:
        return points

    start = points[0].timestamp
    end = points[-1].timestamp
    span = int((end - start).total_seconds())

    size = bucket_size_seconds(span, target_count)
    step = timedelta(seconds=size)

    buckets: List[MeasurementPoint] = []
    bucket_start = 0
    bucket_time = start
    boundary = start + timedelta(seconds=size // 2)

    for index, point in enumerate(points):
        if point.timestamp >= boundary and index > bucket_start:
            buckets.append(_collapse(points[bucket_start:index], bucket_time))
            bucket_time += step
            boundary += step
            bucket_start = index

    # The last bucket is never closed by a following point
    buckets.append(_collapse(points[bucket_start:], bucket_time))
    return buckets


def _collapse(members: Sequence[MeasurementPoint], bucket_time) -> MeasurementPoint:
    fields = {
        name: mean_or_none(getattr(m, name) for m in members)
        for name in OPTIONAL_FIELDS
    }
    return MeasurementPoint(
        timestamp=bucket_time,
        weight=mean_or_none(m.weight for m in members),
        **fields,
    )


def downsample_lttb(
    points: List[MeasurementPoint], target_count: int
) -> List[MeasurementPoint]:
    """
    Largest-Triangle-Three-Buckets on (seconds since first reading, weight).

    Always keeps the first and last reading; from each of the target_count - 2
    inner buckets keeps the reading forming the largest triangle with the
    previously kept reading and the average of the next bucket.

    Reference: Steinarsson S. "Downsampling Time Series for Visual
    Representation." University of Iceland, 2013.
    """
    _check_target_count(target_count)
    if len(points) <= target_count:
        return points

    origin = points[0].timestamp
    xs = [(p.timestamp - origin).total_seconds() for p in points]
    ys = [p.weight for p in points]
    n = len(points)
    every = (n - 2) / (target_count - 2)

    selected = [points[0]]
    a = 0
    for i in range(target_count - 2):
        # Average of the next bucket (just the last point for the final bucket)
        avg_start = int((i + 1) * every) + 1
        avg_end = min(int((i + 2) * every) + 1, n)
        avg_len = avg_end - avg_start
        avg_x = sum(xs[avg_start:avg_end]) / avg_len
        avg_y = sum(ys[avg_start:avg_end]) / avg_len

        range_start = int(i * every) + 1
        range_end = int((i + 1) * every) + 1

        max_area = -1.0
        chosen = range_start
        for j in range(range_start, range_end):
            area = abs(
                (xs[a] - avg_x) * (ys[j] - ys[a])
                - (xs[a] - xs[j]) * (avg_y - ys[a])
            ) * 0.5
            if area > max_area:
                max_area = area
                chosen = j

        selected.append(points[chosen])
        a = chosen

    selected.append(points[-1])
    return selected


def target_line(
    points: List[MeasurementPoint], target_weight: Optional[float]
) -> List[MeasurementPoint]:
    """
    Flat reference line for the target weight.

    Two points at the first and last timestamp of `points`, regardless of how
    the series was bucketed. Empty when there is no target or no data.
    """
    if target_weight is None or not points:
        return []
    return [
        MeasurementPoint(timestamp=points[0].timestamp, weight=target_weight),
        MeasurementPoint(timestamp=points[-1].timestamp, weight=target_weight),
    ]
