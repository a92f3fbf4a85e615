from functools import lru_cache

from fastapi import Request

from rental_pricing.config.settings import Settings
from rental_pricing.services.penalty import PenaltyService
from rental_pricing.services.pricing import PricingService
from rental_pricing.services.settings_store import PenaltySettingsStore


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def get_settings_store(request: Request) -> PenaltySettingsStore:
    return request.app.state.penalty_settings_store


def get_pricing_service() -> PricingService:
    return PricingService()


def get_penalty_service(request: Request) -> PenaltyService:
    return PenaltyService(get_settings_store(request))
