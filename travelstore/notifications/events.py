from enum import Enum


class ItemChange(str, Enum):
    ADDED = "added"
    CONFIG_RESET = "config_reset"
    REMOVED = "removed"
    COUPON_APPLIED = "coupon_applied"
    COUPON_REMOVED = "coupon_removed"
    ADMIN_DISCOUNT_APPLIED = "admin_discount_applied"
    ADMIN_DISCOUNT_REMOVED = "admin_discount_removed"
    BOOKED = "booked"
