from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from rental_pricing.api.dependencies import get_pricing_service
from rental_pricing.core.exceptions import (
    InvalidBookingPeriodException,
    NoApplicablePricelistException,
    invalid_booking_period_exception,
    no_applicable_pricelist_exception,
)
from rental_pricing.schemas import (
    PriceEvaluationRequest,
    PriceQuoteRequest,
    PriceQuoteResponse,
    PricingSnapshot,
    RuleSelectionRequest,
    RuleSelectionResponse,
)
from rental_pricing.services.pricing import PricingService

router = APIRouter()


@router.post("/pricing/evaluate", response_model=PricingSnapshot)
def evaluate_price_rules(
    request: PriceEvaluationRequest,
    pricing_service: PricingService = Depends(get_pricing_service),
):
    try:
        return pricing_service.evaluate(
            request.base_rates, request.rules, request.booking_context
        )
    except Exception as e:
        logger.exception(f"Error evaluating price rules: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/pricing/quote", response_model=PriceQuoteResponse)
def quote_booking(
    request: PriceQuoteRequest,
    pricing_service: PricingService = Depends(get_pricing_service),
):
    try:
        return pricing_service.quote(request)
    except InvalidBookingPeriodException:
        raise invalid_booking_period_exception()
    except NoApplicablePricelistException:
        raise no_applicable_pricelist_exception()
    except Exception as e:
        logger.exception(f"Error quoting booking: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/pricing/rules/select", response_model=RuleSelectionResponse)
def select_price_rules(
    request: RuleSelectionRequest,
    pricing_service: PricingService = Depends(get_pricing_service),
):
    rules = pricing_service.select_rules(
        request.rules, product_id=request.product_id, category_id=request.category_id
    )
    return RuleSelectionResponse(rules=rules, total=len(rules))
