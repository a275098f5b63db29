"""FastAPI dependency injection helpers."""

from fastapi import Request

from ridedraft.config import settings
from ridedraft.domain.pricing import PriceEstimator
from ridedraft.infrastructure.backend_api import RideApiClient, UserApiClient
from ridedraft.infrastructure.geocoder import NominatimGeocoder
from ridedraft.infrastructure.router import OpenRouteServiceRouter
from ridedraft.services.registry import DraftRegistry
from ridedraft.services.ride_form import RideFormController


def build_form() -> RideFormController:
    """Wire a fresh form controller to the configured external services."""
    return RideFormController(
        geocoder=NominatimGeocoder(
            settings.geocoder_url,
            user_agent=settings.geocoder_user_agent,
            timeout=settings.http_timeout_seconds,
        ),
        router=OpenRouteServiceRouter(
            settings.routing_url,
            api_key=settings.routing_api_key,
            profile=settings.routing_profile,
            timeout=settings.http_timeout_seconds,
        ),
        ride_api=RideApiClient(
            settings.backend_api_url, timeout=settings.http_timeout_seconds
        ),
        estimator=PriceEstimator(
            settings.base_fare_per_km, settings.traffic_level, settings.road_type
        ),
    )


def get_draft_registry(request: Request) -> DraftRegistry:
    return request.app.state.drafts


def get_user_api() -> UserApiClient:
    return UserApiClient(settings.backend_api_url, timeout=settings.http_timeout_seconds)
