"""HTTP client for the OpenWeatherMap One Call API."""

import logging
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import ValidationError

from disaster_risk.config import (
    OPENWEATHER_API_URL, OPENWEATHER_API_KEY, USER_AGENT, REQUEST_TIMEOUT_SECONDS
)
from disaster_risk.weather.models import CurrentWeatherPayload, OneCallPayload

logger = logging.getLogger(__name__)

WeatherPayload = Union[OneCallPayload, CurrentWeatherPayload]


class UnrecognizedWeatherPayload(ValueError):
    """Raised when a weather response matches none of the known shapes."""
    pass


def decode_weather_payload(data: Any) -> WeatherPayload:
    """Decode a raw weather response into one of the known payload shapes.

    Args:
        data: Parsed JSON body

    Returns:
        OneCallPayload when the body has a `current` block,
        CurrentWeatherPayload when it has a `main` block

    Raises:
        UnrecognizedWeatherPayload: If the body matches neither shape
    """
    if not isinstance(data, dict):
        raise UnrecognizedWeatherPayload(f"Expected a JSON object, got {type(data).__name__}")

    try:
        if "current" in data:
            return OneCallPayload.model_validate(data)
        if "main" in data:
            return CurrentWeatherPayload.model_validate(data)
    except ValidationError as e:
        raise UnrecognizedWeatherPayload(f"Invalid weather payload: {e}") from e

    raise UnrecognizedWeatherPayload(f"Unknown weather payload keys: {sorted(data)[:10]}")


class OpenWeatherClient:
    """Async client for fetching conditions from OpenWeatherMap."""

    def __init__(
        self,
        api_key: str = OPENWEATHER_API_KEY,
        base_url: str = OPENWEATHER_API_URL,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the weather client.

        Args:
            api_key: OpenWeatherMap API key
            base_url: One Call endpoint URL
            http_client: Preconfigured httpx client (creates default if None)
        """
        self.api_key = api_key
        self.base_url = base_url
        self.client = http_client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=REQUEST_TIMEOUT_SECONDS
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def get_onecall(self, lat: float, lon: float) -> WeatherPayload:
        """Fetch current conditions and hourly forecast for given coordinates.

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees

        Returns:
            Decoded weather payload

        Raises:
            ValueError: If coordinates are invalid
            httpx.HTTPError: If API request fails
            UnrecognizedWeatherPayload: If the response shape is unknown
        """
        if not (-90 <= lat <= 90) or not (-180 <= lon <= 180):
            raise ValueError(f"Invalid coordinates: lat={lat}, lon={lon}")

        params: Dict[str, Any] = {
            "lat": lat,
            "lon": lon,
            "appid": self.api_key,
            "units": "metric",
        }

        logger.info(f"Fetching weather for lat={lat}, lon={lon}")

        try:
            response = await self.client.get(self.base_url, params=params)
            response.raise_for_status()

            try:
                data = response.json()
            except ValueError as e:
                raise UnrecognizedWeatherPayload(f"Response body is not JSON: {e}") from e

            payload = decode_weather_payload(data)

            logger.info(f"Successfully fetched weather as {type(payload).__name__}")
            return payload

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error from OpenWeatherMap: {e.response.status_code} - {e.response.text}")
            raise
        except httpx.RequestError as e:
            logger.error(f"Request error to OpenWeatherMap: {e}")
            raise
        except UnrecognizedWeatherPayload as e:
            logger.error(f"Unrecognized OpenWeatherMap response: {e}")
            raise

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
