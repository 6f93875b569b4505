"""Small numeric helpers shared by the import pipeline and the downsampler."""
import math
from typing import Iterable, Optional


def round_half_up(value: float, digits: int = 1) -> float:
    """
    Round to `digits` decimals, ties toward positive infinity.

    Unlike round(), which rounds ties to even (round(0.25, 1) == 0.2),
    round_half_up(0.25, 1) == 0.3.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def mean_or_none(values: Iterable[Optional[float]], digits: int = 1) -> Optional[float]:
    """
    Mean of the present values, rounded half-up.

    None entries are skipped, not treated as zero. Returns None when no value
    is present (or the mean is NaN).
    """
    present = [v for v in values if v is not None]
    if not present:
        return None
    avg = sum(present) / len(present)
    if math.isnan(avg):
        return None
    return round_half_up(avg, digits)
