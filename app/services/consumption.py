"""Energy consumption and cost estimates for an appliance.

Ratings are in kilowatts and rates in currency per kWh, so every figure is
in kWh (or currency) without unit conversion. Values are not rounded here;
rounding is left to whoever presents them.
"""

from dataclasses import dataclass
from typing import Optional

from app.core.config import settings

# Average number of weeks in a month
WEEKS_PER_MONTH = 4.33


@dataclass(frozen=True)
class ConsumptionEstimate:
    consumption_per_day: float
    consumption_per_week: float
    consumption_per_month: float
    monthly_cost: float

    def as_dict(self) -> dict:
        return {
            "consumption_per_day": self.consumption_per_day,
            "consumption_per_week": self.consumption_per_week,
            "consumption_per_month": self.consumption_per_month,
            "monthly_cost": self.monthly_cost,
        }


def effective_unit_rate(unit_rate: Optional[float]) -> float:
    """The appliance's own rate, or the configured default when it has none."""
    if unit_rate is None:
        return settings.DEFAULT_UNIT_RATE
    return float(unit_rate)


def estimate_consumption(
    rating: float,
    hourly_usage: float,
    quantity: int,
    day_frequency: int,
    unit_rate: Optional[float] = None,
) -> ConsumptionEstimate:
    per_day = float(rating) * float(hourly_usage) * quantity
    per_week = per_day * day_frequency
    per_month = per_week * WEEKS_PER_MONTH
    return ConsumptionEstimate(
        consumption_per_day=per_day,
        consumption_per_week=per_week,
        consumption_per_month=per_month,
        monthly_cost=per_month * effective_unit_rate(unit_rate),
    )
