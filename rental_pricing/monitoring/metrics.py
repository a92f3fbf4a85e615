from prometheus_client import Counter, Histogram, Info
from prometheus_fastapi_instrumentator import Instrumentator

# Business metrics - pricing
pricing_evaluations_total = Counter(
    "rental_system_pricing_evaluations_total",
    "Total number of price rule evaluations",
    ["service", "kind"],  # kind=evaluate/quote
)

pricing_rules_applied_total = Counter(
    "rental_system_pricing_rules_applied_total",
    "Total number of price rules applied to bookings",
    ["service"],
)

pricing_total_price = Histogram(
    "rental_system_pricing_total_price",
    "Total price of evaluated bookings",
    ["service"],
    buckets=[0, 100, 250, 500, 1000, 2500, 5000, 10000, 25000, 50000],
)

# Business metrics - penalties
penalties_assessed_total = Counter(
    "rental_system_penalties_assessed_total",
    "Total number of penalties calculated",
    ["service", "penalty_type"],  # penalty_type=damage/late
)

penalty_amount = Histogram(
    "rental_system_penalty_amount",
    "Penalty amounts calculated",
    ["service", "penalty_type"],
    buckets=[0, 50, 100, 250, 500, 1000, 2500, 5000],
)

penalty_settings_updates_total = Counter(
    "rental_system_penalty_settings_updates_total",
    "Total number of penalty settings updates",
    ["service"],
)

# Application info
app_info = Info("rental_system_app_info", "Application information")


def setup_instrumentator() -> Instrumentator:
    return Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        should_respect_env_var=False,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics", "/api/v1/health"],
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
    )


def init_app_info(version: str = "1.0.0", service: str = "pricing-core"):
    app_info.info({"version": version, "service": service, "component": "api"})


class MetricsCollector:
    SERVICE_NAME = "pricing-core"

    @staticmethod
    def record_price_evaluation(kind: str, applied_rules: int, total_price: float):
        pricing_evaluations_total.labels(service=MetricsCollector.SERVICE_NAME, kind=kind).inc()
        pricing_rules_applied_total.labels(service=MetricsCollector.SERVICE_NAME).inc(applied_rules)
        pricing_total_price.labels(service=MetricsCollector.SERVICE_NAME).observe(total_price)

    @staticmethod
    def record_penalty(penalty_type: str, amount: float):
        penalties_assessed_total.labels(
            service=MetricsCollector.SERVICE_NAME, penalty_type=penalty_type
        ).inc()
        penalty_amount.labels(
            service=MetricsCollector.SERVICE_NAME, penalty_type=penalty_type
        ).observe(amount)

    @staticmethod
    def record_settings_update():
        penalty_settings_updates_total.labels(service=MetricsCollector.SERVICE_NAME).inc()
