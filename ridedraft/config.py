"""Centralised application settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings

from ridedraft.domain.enums import RoadType, TrafficLevel


class Settings(BaseSettings):
    # Geocoding (Nominatim)
    geocoder_url: str = "https://nominatim.openstreetmap.org"
    geocoder_user_agent: str = "ridedraft/1.0"

    # Routing (OpenRouteService)
    routing_url: str = "https://api.openrouteservice.org"
    routing_profile: str = "driving-car"
    routing_api_key: str = ""

    # Ride / user backend
    backend_api_url: str = "http://localhost:5000/api"

    http_timeout_seconds: float = 10.0

    # Pricing
    base_fare_per_km: float = 13.0  # INR / km
    traffic_level: TrafficLevel = TrafficLevel.MODERATE
    road_type: RoadType = RoadType.HIGHWAY

    # Open drafts
    max_open_drafts: int = 10_000
    draft_idle_ttl_seconds: float = 1800.0

    # API
    geocode_rate_limit: str = "60/minute"  # Nominatim usage policy
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
