from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from rental_pricing.api.dependencies import get_penalty_service
from rental_pricing.core.exceptions import (
    IncompleteReturnFactsException,
    incomplete_return_facts_exception,
)
from rental_pricing.schemas import (
    DamagePenaltyRequest,
    LatePenaltyRequest,
    PenaltyAssessment,
    PenaltyAssessmentRequest,
    PenaltyResult,
    PenaltySettings,
    PenaltySettingsUpdate,
)
from rental_pricing.services.penalty import PenaltyService

router = APIRouter()


@router.post("/penalties/damage", response_model=PenaltyResult)
def calculate_damage_penalty(
    request: DamagePenaltyRequest,
    penalty_service: PenaltyService = Depends(get_penalty_service),
):
    try:
        return penalty_service.damage_penalty(
            request.deposit, request.damage_level, request.settings
        )
    except Exception as e:
        logger.exception(f"Error calculating damage penalty: {e}")
        raise HTTPException(status_code=500, detail="Failed to calculate damage penalty")


@router.post("/penalties/late", response_model=PenaltyResult)
def calculate_late_penalty(
    request: LatePenaltyRequest,
    penalty_service: PenaltyService = Depends(get_penalty_service),
):
    try:
        return penalty_service.late_penalty(
            request.expected_return_date,
            request.actual_return_date,
            request.deposit,
            request.settings,
        )
    except Exception as e:
        logger.exception(f"Error calculating late penalty: {e}")
        raise HTTPException(status_code=500, detail="Failed to calculate late penalty")


@router.post("/penalties/assess", response_model=PenaltyAssessment)
def assess_return(
    request: PenaltyAssessmentRequest,
    penalty_service: PenaltyService = Depends(get_penalty_service),
):
    try:
        return penalty_service.assess(request)
    except IncompleteReturnFactsException:
        raise incomplete_return_facts_exception()


@router.get("/penalties/settings", response_model=PenaltySettings)
def get_penalty_settings(penalty_service: PenaltyService = Depends(get_penalty_service)):
    return penalty_service.get_settings()


@router.patch("/penalties/settings", response_model=PenaltySettings)
def update_penalty_settings(
    update: PenaltySettingsUpdate,
    penalty_service: PenaltyService = Depends(get_penalty_service),
):
    return penalty_service.update_settings(update)
