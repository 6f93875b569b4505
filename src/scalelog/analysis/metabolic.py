"""
Metabolic rate estimate from a scale reading.

Basal rate follows Katch-McArdle (370 + 21.6 * lean mass in kg), using the
scale's muscle mass percentage as the lean mass estimate. The basal rate is
then scaled by the physical activity factor for the profile's activity level.

Reference: McArdle WD, Katch FI, Katch VL. "Exercise Physiology: Energy,
Nutrition, and Human Performance."
"""
from typing import Callable

from scalelog.models.profile import ActivityLevel

ACTIVITY_FACTOR = {
    ActivityLevel.sedentary: 1.2,
    ActivityLevel.lightly_active: 1.375,
    ActivityLevel.moderately_active: 1.55,
    ActivityLevel.very_active: 1.725,
    ActivityLevel.extra_active: 1.9,
}

# (activity_level, weight_kg, muscle_mass_percent) -> kcal/day
MetabolicRateFn = Callable[[ActivityLevel, float, float], float]


def basal_metabolic_rate(weight_kg: float, muscle_mass_percent: float) -> float:
    """Katch-McArdle basal metabolic rate in kcal/day."""
    lean_mass_kg = weight_kg * muscle_mass_percent / 100.0
    return 370.0 + 21.6 * lean_mass_kg


def calculate_metabolic_rate(
    activity_level: ActivityLevel,
    weight_kg: float,
    muscle_mass_percent: float,
) -> float:
    """
    Total daily energy expenditure estimate in kcal/day (unrounded).

    Args:
        activity_level: the profile's activity level
        weight_kg: body weight in kilograms
        muscle_mass_percent: muscle mass as a percentage of body weight

    Returns:
        basal rate multiplied by the activity factor
    """
    factor = ACTIVITY_FACTOR[ActivityLevel(activity_level)]
    return basal_metabolic_rate(weight_kg, muscle_mass_percent) * factor
