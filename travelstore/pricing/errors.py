"""Error kinds raised by the pricing core and its adapters."""

from typing import Optional


class PricingError(Exception):
    """Base exception for pricing, ledger and booking errors"""

    code = "pricing_error"
    status_code = 400

    def __init__(self, message: str = "", item_id: Optional[int] = None):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.item_id = item_id

    def for_item(self, item_id: Optional[int]) -> "PricingError":
        self.item_id = item_id
        return self


class InvalidPercent(PricingError):
    code = "invalid_percent"
    status_code = 422


class CouponAlreadyApplied(PricingError):
    code = "coupon_already_applied"
    status_code = 409


class NoCouponApplied(PricingError):
    code = "no_coupon_applied"
    status_code = 409


class CouponRemovalBlocked(PricingError):
    code = "coupon_removal_blocked"
    status_code = 409


class NoAdminDiscount(PricingError):
    code = "no_admin_discount"
    status_code = 409


class VisaCostRequired(PricingError):
    code = "visa_cost_required"
    status_code = 422


class DivisionGuardFailed(PricingError):
    code = "division_guard_failed"
    status_code = 500


class ItemLocked(PricingError):
    code = "item_locked"
    status_code = 423


class NoNewItems(PricingError):
    code = "no_new_items"
    status_code = 409


class StaleWrite(PricingError):
    code = "stale_write"
    status_code = 409


class ItemNotFound(PricingError):
    code = "item_not_found"
    status_code = 404


class PackageNotFound(PricingError):
    code = "package_not_found"
    status_code = 404


class CouponNotFound(PricingError):
    code = "coupon_not_found"
    status_code = 404


class CouponUsed(PricingError):
    code = "coupon_used"
    status_code = 409


class CouponExpired(PricingError):
    code = "coupon_expired"
    status_code = 410


class NotPercentageCoupon(PricingError):
    code = "not_percentage_coupon"
    status_code = 422
