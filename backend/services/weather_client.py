"""Weather provider client for the OpenWeatherMap API."""
import math
import time
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import httpx

from models.weather import (
    CurrentConditions,
    ForecastPoint,
    ForecastType,
    ProviderError,
    WeatherQueryResult,
)
from config import OPENWEATHER_API_KEY, WEATHER_API_BASE_URL, WEATHER_API_TIMEOUT

logger = logging.getLogger(__name__)


class WeatherClientError(Exception):
    """Raised inside the client when a provider request fails; carries a ProviderError."""

    def __init__(self, error: ProviderError):
        self.error = error
        super().__init__(error.message)


class WeatherClient:
    """Client for current conditions and forecasts from OpenWeatherMap."""

    CURRENT_ENDPOINT = "weather"
    FORECAST_ENDPOINT = "forecast"

    # Raised by malformed payloads: missing fields, non-numeric or out-of-range values
    PARSE_EXCEPTIONS = (KeyError, IndexError, TypeError, ValueError, OverflowError)

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = WEATHER_API_BASE_URL,
        timeout: float = WEATHER_API_TIMEOUT
    ):
        """
        Initialize the weather client.

        Args:
            api_key: OpenWeatherMap API key (defaults to OPENWEATHER_API_KEY from environment)
            base_url: API base URL, without a trailing endpoint
            timeout: Request timeout in seconds; expiry is reported as a failure
        """
        self.api_key = api_key or OPENWEATHER_API_KEY
        if not self.api_key:
            raise ValueError("OPENWEATHER_API_KEY must be provided or set in environment")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        logger.info(f"WeatherClient initialized with base URL: {self.base_url}")

    def fetch(self, city: str, forecast_type: ForecastType) -> WeatherQueryResult:
        """Fetch the report matching forecast_type for a city."""
        if forecast_type == ForecastType.FORECAST:
            return self.fetch_forecast(city)
        return self.fetch_current(city)

    def fetch_current(self, city: str) -> WeatherQueryResult:
        """
        Fetch current conditions for a city.

        Args:
            city: City name as entered by the user

        Returns:
            WeatherQueryResult with `current` set, or a failure if anything went wrong
        """
        try:
            data = self._get(self.CURRENT_ENDPOINT, city)
            conditions = self._parse_conditions(data)
        except WeatherClientError as e:
            return WeatherQueryResult.failure(city, ForecastType.CURRENT, e.error)
        except Exception as e:
            return WeatherQueryResult.failure(
                city, ForecastType.CURRENT, self._parse_error(city, self.CURRENT_ENDPOINT, e)
            )

        logger.info(
            f"Current weather for {city}: temp={conditions.temperature_celsius}C, "
            f"humidity={conditions.humidity_percent}%"
        )
        return WeatherQueryResult.success_current(city, conditions)

    def fetch_forecast(self, city: str) -> WeatherQueryResult:
        """
        Fetch the multi-point forecast for a city.

        Args:
            city: City name as entered by the user

        Returns:
            WeatherQueryResult with ordered `forecast` points, or a failure
        """
        try:
            data = self._get(self.FORECAST_ENDPOINT, city)
            points = [self._parse_point(entry) for entry in data["list"]]
        except WeatherClientError as e:
            return WeatherQueryResult.failure(city, ForecastType.FORECAST, e.error)
        except Exception as e:
            return WeatherQueryResult.failure(
                city, ForecastType.FORECAST, self._parse_error(city, self.FORECAST_ENDPOINT, e)
            )

        logger.info(f"Forecast for {city}: {len(points)} points")
        return WeatherQueryResult.success_forecast(city, points)

    def _get(self, endpoint: str, city: str) -> Dict[str, Any]:
        """
        Issue a GET against an endpoint and decode the JSON body.

        Raises:
            WeatherClientError: On timeout, network error, non-200 status or invalid JSON
        """
        url = f"{self.base_url}/{endpoint}"
        params = {
            "q": city,
            "units": "metric",
            "APPID": self.api_key
        }
        start_time = time.time()

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(url, params=params)
        except httpx.TimeoutException as e:
            latency_ms = int((time.time() - start_time) * 1000)
            error = ProviderError(
                code="TIMEOUT_ERROR",
                message=f"Request timed out after {self.timeout}s",
                details={
                    "city": city,
                    "endpoint": endpoint,
                    "latency_ms": latency_ms,
                    "original_error": str(e)
                }
            )
            logger.error(
                f"Timeout error: endpoint={endpoint}, city={city}, latency={latency_ms}ms",
                extra={"error_code": error.code, "error_details": error.details}
            )
            raise WeatherClientError(error)
        except httpx.RequestError as e:
            latency_ms = int((time.time() - start_time) * 1000)
            error = ProviderError(
                code="NETWORK_ERROR",
                message=f"Network error: {str(e)}",
                details={
                    "city": city,
                    "endpoint": endpoint,
                    "latency_ms": latency_ms,
                    "original_error": str(e)
                }
            )
            logger.error(
                f"Network error: endpoint={endpoint}, city={city}, error={e}",
                extra={"error_code": error.code, "error_details": error.details}
            )
            raise WeatherClientError(error)

        latency_ms = int((time.time() - start_time) * 1000)

        if response.status_code != 200:
            error = ProviderError(
                code="HTTP_ERROR",
                message=f"API request failed with status {response.status_code}",
                details={
                    "city": city,
                    "endpoint": endpoint,
                    "status_code": response.status_code,
                    "latency_ms": latency_ms,
                    "body": response.text[:200]
                }
            )
            logger.error(
                f"HTTP error: endpoint={endpoint}, city={city}, status={response.status_code}",
                extra={"error_code": error.code, "error_details": error.details}
            )
            raise WeatherClientError(error)

        try:
            data = response.json()
        except ValueError as e:
            raise WeatherClientError(self._parse_error(city, endpoint, e))

        logger.debug(f"Fetched {endpoint} for {city} in {latency_ms}ms")
        return data

    @staticmethod
    def _parse_conditions(data: Dict[str, Any]) -> CurrentConditions:
        """Extract temperature, humidity and icon from a provider payload."""
        return CurrentConditions(
            temperature_celsius=math.floor(float(data["main"]["temp"])),
            humidity_percent=int(data["main"]["humidity"]),
            icon_id=str(data["weather"][0]["icon"])
        )

    @classmethod
    def _parse_point(cls, entry: Dict[str, Any]) -> ForecastPoint:
        conditions = cls._parse_conditions(entry)
        return ForecastPoint(
            temperature_celsius=conditions.temperature_celsius,
            humidity_percent=conditions.humidity_percent,
            icon_id=conditions.icon_id,
            timestamp=cls._parse_timestamp(entry)
        )

    @staticmethod
    def _parse_timestamp(entry: Dict[str, Any]) -> datetime:
        """
        Read a forecast entry's timestamp.

        Prefers `dt_txt` ("YYYY-MM-DD HH:MM:SS", UTC) and falls back to the
        unix `dt` field.
        """
        if entry.get("dt_txt"):
            return datetime.strptime(entry["dt_txt"], "%Y-%m-%d %H:%M:%S").replace(tzinfo=timezone.utc)
        return datetime.fromtimestamp(int(entry["dt"]), tz=timezone.utc)

    @classmethod
    def _parse_error(cls, city: str, endpoint: str, e: Exception) -> ProviderError:
        """Describe an exception raised while decoding or reading a response."""
        if isinstance(e, cls.PARSE_EXCEPTIONS):
            code, message = "PARSE_ERROR", f"Malformed response from weather API: {str(e)}"
        else:
            code, message = "UNKNOWN_ERROR", f"Unexpected error during weather lookup: {str(e)}"
        error = ProviderError(
            code=code,
            message=message,
            details={
                "city": city,
                "endpoint": endpoint,
                "error_type": type(e).__name__,
                "original_error": str(e)
            }
        )
        logger.error(
            f"Weather response error: code={code}, endpoint={endpoint}, city={city}, error={e}",
            extra={"error_code": error.code, "error_details": error.details}
        )
        return error
