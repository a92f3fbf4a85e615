from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_EQUAL = "greater_than_equal"
    LESS_THAN_EQUAL = "less_than_equal"
    CONTAINS = "contains"
    IN = "in"


class EffectType(str, Enum):
    PERCENT_DISCOUNT = "percentDiscount"
    FLAT_DISCOUNT = "flatDiscount"
    SET_PRICE = "setPrice"
    SURCHARGE = "surcharge"
    TIERED_PRICE = "tieredPrice"


class ApplyTo(str, Enum):
    UNIT = "unit"
    TOTAL = "total"


class PenaltyType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DamageLevel(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    DAMAGED = "damaged"


# Pricing
class BaseRates(CamelModel):
    model_config = ConfigDict(frozen=True)

    hourly: float
    daily: float
    weekly: float


class Validity(CamelModel):
    start_date: datetime
    end_date: datetime


class Condition(CamelModel):
    field: str
    # kept as a plain string: unknown operators must evaluate to false, not fail parsing
    operator: str
    value: Any = None


class Effect(CamelModel):
    type: str
    value: Any = 0
    apply_to: str = ApplyTo.UNIT.value


class PriceRule(CamelModel):
    rule_id: str
    name: str
    product_id: Optional[str] = None
    category_id: Optional[str] = None
    priority: float = 0
    validity: Validity
    conditions: List[Condition] = Field(default_factory=list)
    effect: Effect
    enabled: bool = True


class BookingContext(CamelModel):
    """Booking facts rules are matched against.

    Fields other than the declared ones are kept as-is so custom rule
    conditions can reference them.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    duration_hours: float
    duration_days: float = 0
    unit_count: int = 1
    deposit_amount: Optional[float] = 0
    product_id: Optional[str] = None
    category_id: Optional[str] = None
    user_type: Optional[str] = None

    @classmethod
    def is_declared_field(cls, field: str) -> bool:
        return field in cls.model_fields or field in _CONTEXT_FIELDS_BY_ALIAS

    def lookup(self, field: str) -> Any:
        """Return the value of ``field`` by wire or attribute name, ``None`` if absent."""
        name = _CONTEXT_FIELDS_BY_ALIAS.get(field, field)
        if name in type(self).model_fields:
            return getattr(self, name)
        return (self.model_extra or {}).get(field)


_CONTEXT_FIELDS_BY_ALIAS = {to_camel(name): name for name in BookingContext.model_fields}


class AppliedRule(CamelModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str
    summary: str


class PricingSnapshot(CamelModel):
    model_config = ConfigDict(frozen=True)

    base_rates: BaseRates
    applied_rules: List[AppliedRule] = Field(default_factory=list)
    discount_amount: float = 0
    late_fee: float = 0
    deposit: float = 0
    total_price: float = 0


class Pricelist(CamelModel):
    pricelist_id: str
    name: str
    target_customer_types: List[str] = Field(default_factory=list)
    region: str
    base_rates: BaseRates
    currency: str = "INR"
    validity: Validity


# Penalties
class PenaltySettings(CamelModel):
    model_config = ConfigDict(frozen=True)

    damage_penalty_rate: float = 10
    damage_penalty_type: PenaltyType = PenaltyType.PERCENTAGE
    late_penalty_rate: float = 5
    late_penalty_type: PenaltyType = PenaltyType.PERCENTAGE
    max_late_penalty_days: int = 7


class PenaltySettingsUpdate(CamelModel):
    damage_penalty_rate: Optional[float] = Field(None, ge=0, le=100)
    damage_penalty_type: Optional[PenaltyType] = None
    late_penalty_rate: Optional[float] = Field(None, ge=0, le=100)
    late_penalty_type: Optional[PenaltyType] = None
    max_late_penalty_days: Optional[int] = Field(None, ge=1)


class PenaltyResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    amount: float
    reason: str
    applied_at: datetime
    days_late: Optional[int] = None
    damage_level: Optional[str] = None


# API
class HealthResponse(BaseModel):
    ok: bool = True


class PriceEvaluationRequest(CamelModel):
    base_rates: BaseRates
    rules: List[PriceRule] = Field(default_factory=list)
    booking_context: BookingContext


class PriceQuoteRequest(CamelModel):
    start_date: datetime
    end_date: datetime
    unit_count: int = Field(1, ge=1)
    product_id: str
    category_id: Optional[str] = None
    user_type: Optional[str] = None
    deposit_amount: float = 0
    region: Optional[str] = None
    base_rates: Optional[BaseRates] = None
    pricelists: List[Pricelist] = Field(default_factory=list)
    rules: List[PriceRule] = Field(default_factory=list)
    attributes: dict = Field(default_factory=dict, description="Extra context fields")


class PriceQuoteResponse(CamelModel):
    pricelist_id: Optional[str] = None
    duration_hours: int
    duration_days: int
    pricing: PricingSnapshot


class RuleSelectionRequest(CamelModel):
    rules: List[PriceRule] = Field(default_factory=list)
    product_id: Optional[str] = None
    category_id: Optional[str] = None


class RuleSelectionResponse(CamelModel):
    rules: List[PriceRule]
    total: int


class DamagePenaltyRequest(CamelModel):
    deposit: float
    damage_level: str
    settings: Optional[PenaltySettings] = None


class LatePenaltyRequest(CamelModel):
    expected_return_date: datetime
    actual_return_date: datetime
    deposit: float
    settings: Optional[PenaltySettings] = None


class PenaltyAssessmentRequest(CamelModel):
    deposit: float
    damage_level: Optional[str] = None
    expected_return_date: Optional[datetime] = None
    actual_return_date: Optional[datetime] = None
    settings: Optional[PenaltySettings] = None


class PenaltyAssessment(CamelModel):
    damage_penalty: Optional[PenaltyResult] = None
    late_penalty: Optional[PenaltyResult] = None
    total_penalty: float = 0
