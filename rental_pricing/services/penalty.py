from datetime import datetime
from typing import Optional

from loguru import logger

from rental_pricing.core.exceptions import IncompleteReturnFactsException
from rental_pricing.core.penalty_calculator import PenaltyCalculator
from rental_pricing.monitoring.metrics import MetricsCollector
from rental_pricing.schemas import (
    PenaltyAssessment,
    PenaltyAssessmentRequest,
    PenaltyResult,
    PenaltySettings,
    PenaltySettingsUpdate,
)
from rental_pricing.services.settings_store import PenaltySettingsStore


class PenaltyService:
    def __init__(self, settings_store: PenaltySettingsStore, now: Optional[datetime] = None):
        self.settings_store = settings_store
        self._now = now

    def _calculator(self, settings: Optional[PenaltySettings]) -> PenaltyCalculator:
        return PenaltyCalculator(settings or self.settings_store.get(), now=self._now)

    def damage_penalty(
        self,
        deposit: float,
        damage_level: str,
        settings: Optional[PenaltySettings] = None,
    ) -> PenaltyResult:
        result = self._calculator(settings).calculate_damage_penalty(deposit, damage_level)
        MetricsCollector.record_penalty("damage", result.amount)
        logger.info(
            f"Damage penalty for level {damage_level} on deposit {deposit}: "
            f"{result.amount} ({result.reason})"
        )
        return result

    def late_penalty(
        self,
        expected_return_date: datetime,
        actual_return_date: datetime,
        deposit: float,
        settings: Optional[PenaltySettings] = None,
    ) -> PenaltyResult:
        result = self._calculator(settings).calculate_late_penalty(
            expected_return_date, actual_return_date, deposit
        )
        MetricsCollector.record_penalty("late", result.amount)
        logger.info(
            f"Late penalty: expected={expected_return_date}, actual={actual_return_date}, "
            f"days_late={result.days_late}, amount={result.amount}"
        )
        return result

    def assess(self, request: PenaltyAssessmentRequest) -> PenaltyAssessment:
        has_dates = (
            request.expected_return_date is not None
            and request.actual_return_date is not None
        )
        if request.damage_level is None and not has_dates:
            raise IncompleteReturnFactsException()

        # one settings read so both penalties use the same configuration
        settings = request.settings or self.settings_store.get()

        damage = None
        if request.damage_level is not None:
            damage = self.damage_penalty(request.deposit, request.damage_level, settings)

        late = None
        if has_dates:
            late = self.late_penalty(
                request.expected_return_date,
                request.actual_return_date,
                request.deposit,
                settings,
            )

        total = PenaltyCalculator.calculate_total_penalty(damage, late)
        logger.info(f"Return assessed: total penalty {total}")
        return PenaltyAssessment(damage_penalty=damage, late_penalty=late, total_penalty=total)

    def get_settings(self) -> PenaltySettings:
        return self.settings_store.get()

    def update_settings(self, update: PenaltySettingsUpdate) -> PenaltySettings:
        settings = self.settings_store.update(update)
        MetricsCollector.record_settings_update()
        return settings
