from fastapi import HTTPException


class PricingCoreException(Exception):
    pass


class InvalidBookingPeriodException(PricingCoreException):
    def __init__(self, start, end):
        super().__init__(f"Booking end {end} must be after start {start}")
        self.start = start
        self.end = end


class NoApplicablePricelistException(PricingCoreException):
    def __init__(self, customer_type, region=None):
        super().__init__(
            f"No active pricelist for customer type {customer_type!r}"
            + (f" in region {region!r}" if region else "")
        )
        self.customer_type = customer_type
        self.region = region


class IncompleteReturnFactsException(PricingCoreException):
    pass


def invalid_booking_period_exception():
    return HTTPException(status_code=400, detail="End date must be after start date")


def no_applicable_pricelist_exception():
    return HTTPException(status_code=404, detail="No applicable pricelist found")


def incomplete_return_facts_exception():
    return HTTPException(
        status_code=400,
        detail="Damage level or both return dates are required",
    )
