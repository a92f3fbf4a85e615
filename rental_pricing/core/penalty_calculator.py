import math
from datetime import datetime, timedelta
from typing import Optional

from rental_pricing.core.utils import ensure_utc, resolve_now, round_money
from rental_pricing.schemas import (
    DamageLevel,
    PenaltyResult,
    PenaltySettings,
    PenaltySettingsUpdate,
    PenaltyType,
)

# damage level -> (share of the standard damage penalty, reason)
_DAMAGE_POLICY = {
    DamageLevel.EXCELLENT.value: (0.0, "No damage detected"),
    DamageLevel.GOOD.value: (0.0, "Minor wear and tear - no penalty"),
    DamageLevel.FAIR.value: (0.5, "Moderate damage - 50% of standard penalty"),
    DamageLevel.DAMAGED.value: (1.0, "Significant damage - full penalty applied"),
}
_UNKNOWN_DAMAGE = (0.0, "Unknown damage level")

_ONE_DAY = timedelta(days=1)


class PenaltyCalculator:
    """Damage and late-return penalties driven by ``PenaltySettings``.

    Amounts are rounded to cents. Nothing here clamps negative inputs: a
    negative deposit yields a negative amount and it is up to the caller to
    reject it.
    """

    def __init__(self, settings: PenaltySettings, now: Optional[datetime] = None):
        self.settings = settings
        self._now = now

    def calculate_damage_penalty(self, deposit: float, damage_level: str) -> PenaltyResult:
        level = damage_level.value if isinstance(damage_level, DamageLevel) else damage_level
        share, reason = _DAMAGE_POLICY.get(level, _UNKNOWN_DAMAGE)
        amount = deposit * (self.settings.damage_penalty_rate / 100) * share

        # a fixed damage penalty replaces the level-based amount for every level
        if self.settings.damage_penalty_type == PenaltyType.FIXED:
            amount = self.settings.damage_penalty_rate

        return PenaltyResult(
            amount=round_money(amount),
            reason=reason,
            applied_at=resolve_now(self._now),
            damage_level=level,
        )

    def calculate_late_penalty(
        self,
        expected_return_date: datetime,
        actual_return_date: datetime,
        deposit: float,
    ) -> PenaltyResult:
        lateness = ensure_utc(actual_return_date) - ensure_utc(expected_return_date)
        days_late = math.ceil(lateness / _ONE_DAY)
        applied_at = resolve_now(self._now)

        if days_late <= 0:
            return PenaltyResult(
                amount=0,
                days_late=0,
                reason="Returned on time or early",
                applied_at=applied_at,
            )

        effective_days = min(days_late, self.settings.max_late_penalty_days)
        if self.settings.late_penalty_type == PenaltyType.PERCENTAGE:
            amount = deposit * (self.settings.late_penalty_rate / 100) * effective_days
        else:
            amount = self.settings.late_penalty_rate * effective_days

        return PenaltyResult(
            amount=round_money(amount),
            days_late=effective_days,
            reason=f"Late return by {effective_days} day(s)",
            applied_at=applied_at,
        )

    @staticmethod
    def calculate_total_penalty(
        damage_penalty: Optional[PenaltyResult],
        late_penalty: Optional[PenaltyResult],
    ) -> float:
        damage_amount = damage_penalty.amount if damage_penalty else 0
        late_amount = late_penalty.amount if late_penalty else 0
        return round_money(damage_amount + late_amount)


def apply_settings_update(
    settings: PenaltySettings, update: PenaltySettingsUpdate
) -> PenaltySettings:
    changes = update.model_dump(exclude_none=True)
    return settings.model_copy(update=changes)


def calculate_damage_penalty(
    deposit: float,
    damage_level: str,
    settings: PenaltySettings,
    now: Optional[datetime] = None,
) -> PenaltyResult:
    return PenaltyCalculator(settings, now=now).calculate_damage_penalty(deposit, damage_level)


def calculate_late_penalty(
    expected_return_date: datetime,
    actual_return_date: datetime,
    deposit: float,
    settings: PenaltySettings,
    now: Optional[datetime] = None,
) -> PenaltyResult:
    return PenaltyCalculator(settings, now=now).calculate_late_penalty(
        expected_return_date, actual_return_date, deposit
    )


calculate_total_penalty = PenaltyCalculator.calculate_total_penalty
