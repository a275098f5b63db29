"""
Ride Price Estimator  (Strategy Pattern)
========================================

Formula
-------
Price = Distance_KM x Base_Fare_Per_KM x Traffic_Multiplier x Road_Type_Multiplier

* **Base_Fare_Per_KM** = 13 INR
* **Traffic_Multiplier**: light 1.0, moderate 1.2, heavy 1.5
* **Road_Type_Multiplier**: highway 1.0, city 1.3

Traffic and road type are not measured; the estimator applies a configured
policy (moderate / highway unless told otherwise).

All arithmetic is done in ``Decimal`` and rounded half-up to 2 places.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ridedraft.exceptions import ValidationError

from .distance import TWO_PLACES
from .enums import RoadType, TrafficLevel

BASE_FARE_PER_KM = Decimal("13")

TRAFFIC_MULTIPLIERS: dict[TrafficLevel, Decimal] = {
    TrafficLevel.LIGHT: Decimal("1.0"),
    TrafficLevel.MODERATE: Decimal("1.2"),
    TrafficLevel.HEAVY: Decimal("1.5"),
}

ROAD_TYPE_MULTIPLIERS: dict[RoadType, Decimal] = {
    RoadType.HIGHWAY: Decimal("1.0"),
    RoadType.CITY: Decimal("1.3"),
}


class InvalidDistanceError(ValidationError):
    """Raised for a negative, non-finite or non-numeric distance."""


# ── Strategy hierarchy ────────────────────────────────────────────────


class PricingStrategy(ABC):
    @abstractmethod
    def calculate(self, distance_km: Decimal, base_fare_per_km: Decimal) -> Decimal: ...


class PerKmPricing(PricingStrategy):
    def calculate(self, distance_km: Decimal, base_fare_per_km: Decimal) -> Decimal:
        return distance_km * base_fare_per_km


class ConditionPricing(PricingStrategy):
    """Per-km fare scaled by the traffic and road-type multipliers."""

    def __init__(
        self,
        traffic_level: TrafficLevel = TrafficLevel.MODERATE,
        road_type: RoadType = RoadType.HIGHWAY,
    ):
        self.traffic_multiplier = TRAFFIC_MULTIPLIERS[TrafficLevel(traffic_level)]
        self.road_type_multiplier = ROAD_TYPE_MULTIPLIERS[RoadType(road_type)]

    def calculate(self, distance_km: Decimal, base_fare_per_km: Decimal) -> Decimal:
        base = PerKmPricing().calculate(distance_km, base_fare_per_km)
        return base * self.traffic_multiplier * self.road_type_multiplier


# ── Estimator facade ──────────────────────────────────────────────────


class PriceEstimator:
    """High-level API used by the form controller."""

    def __init__(
        self,
        base_fare_per_km: Decimal | float | int = BASE_FARE_PER_KM,
        traffic_level: TrafficLevel = TrafficLevel.MODERATE,
        road_type: RoadType = RoadType.HIGHWAY,
    ):
        self.base_fare_per_km = Decimal(str(base_fare_per_km))
        self.traffic_level = TrafficLevel(traffic_level)
        self.road_type = RoadType(road_type)

    @staticmethod
    def validate_distance(distance_km: Decimal | float | int | str) -> Decimal:
        """Coerce *distance_km* to ``Decimal``; reject negative or non-finite values."""
        if isinstance(distance_km, bool):
            raise InvalidDistanceError(f"Invalid distance: {distance_km!r}")
        try:
            value = Decimal(str(distance_km))
        except (InvalidOperation, ValueError) as exc:
            raise InvalidDistanceError(f"Invalid distance: {distance_km!r}") from exc
        if not value.is_finite() or value < 0:
            raise InvalidDistanceError(f"Invalid distance: {distance_km!r}")
        return value

    def estimate(
        self,
        distance_km: Decimal | float | int | str,
        traffic_level: TrafficLevel | None = None,
        road_type: RoadType | None = None,
    ) -> Decimal:
        distance = self.validate_distance(distance_km)
        strategy = ConditionPricing(
            traffic_level or self.traffic_level,
            road_type or self.road_type,
        )
        raw = strategy.calculate(distance, self.base_fare_per_km)
        return raw.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
