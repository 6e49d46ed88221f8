"""Weather data models."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ForecastType(str, Enum):
    """Kind of weather report the user asked for."""
    CURRENT = "Current"
    FORECAST = "Forecast"

    @classmethod
    def resolve(cls, value: Optional[str]) -> "ForecastType":
        """Map a stored answer to a forecast type; anything unrecognized is CURRENT."""
        if value and value.strip().lower() == cls.FORECAST.value.lower():
            return cls.FORECAST
        return cls.CURRENT


@dataclass
class CurrentConditions:
    """Current conditions as reported by the weather provider."""
    temperature_celsius: int  # floored from the provider's float
    humidity_percent: int
    icon_id: str


@dataclass
class ForecastPoint(CurrentConditions):
    """A single timestamped forecast entry."""
    timestamp: Optional[datetime] = None


@dataclass
class ProviderError:
    """Diagnostic details of a failed weather provider request."""
    code: str  # TIMEOUT_ERROR, NETWORK_ERROR, HTTP_ERROR, PARSE_ERROR or UNKNOWN_ERROR
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class WeatherQueryResult:
    """
    Outcome of a weather provider request.

    Either a success carrying `current` (for CURRENT) or `forecast` points
    (for FORECAST), or a failure carrying a ProviderError.
    """
    city: str
    forecast_type: ForecastType
    current: Optional[CurrentConditions] = None
    forecast: List[ForecastPoint] = field(default_factory=list)
    error: Optional[ProviderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success_current(cls, city: str, conditions: CurrentConditions) -> "WeatherQueryResult":
        return cls(city=city, forecast_type=ForecastType.CURRENT, current=conditions)

    @classmethod
    def success_forecast(cls, city: str, points: List[ForecastPoint]) -> "WeatherQueryResult":
        return cls(city=city, forecast_type=ForecastType.FORECAST, forecast=list(points))

    @classmethod
    def failure(cls, city: str, forecast_type: ForecastType, error: ProviderError) -> "WeatherQueryResult":
        return cls(city=city, forecast_type=forecast_type, error=error)
