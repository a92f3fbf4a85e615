from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from rental_pricing.api.dependencies import get_settings
from rental_pricing.api.v1 import health, penalties, pricing
from rental_pricing.config.logging import setup_logging
from rental_pricing.monitoring.metrics import init_app_info, setup_instrumentator
from rental_pricing.services.settings_store import PenaltySettingsStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting pricing-core service")

    settings = get_settings()
    app.state.penalty_settings_store = PenaltySettingsStore(
        settings.default_penalty_settings
    )

    yield
    logger.info("Shutting down pricing-core service")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, serialize=settings.log_json)

    app = FastAPI(
        title="Pricing Core Service",
        description="Price rule evaluation and penalty calculation for rentals",
        version=settings.version,
        lifespan=lifespan,
    )

    instrumentator = setup_instrumentator()
    instrumentator.instrument(app).expose(app)

    init_app_info(settings.version, settings.service_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/api/v1", tags=["health"])
    app.include_router(pricing.router, prefix="/api/v1", tags=["pricing"])
    app.include_router(penalties.router, prefix="/api/v1", tags=["penalties"])

    return app


def main():
    import uvicorn

    uvicorn.run(
        "rental_pricing.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_config=None,
    )


app = create_app()


if __name__ == "__main__":
    main()
