"""Central Enum definitions for core domain states.

These replace scattered string literals to ensure consistency across
DB models, schemas, and business logic.
"""
from __future__ import annotations
import enum


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    AGENT = "AGENT"
    OPERATOR = "OPERATOR"


class PlanType(str, enum.Enum):
    BASIC = "BASIC"
    PREMIUM = "PREMIUM"
    FEATURED = "FEATURED"
    LEFT_BAR = "LEFT_BAR"
    RIGHT_SIDE = "RIGHT_SIDE"
    BOTTOM_RAIL = "BOTTOM_RAIL"
    BANNER = "BANNER"
    HERO = "HERO"

    @property
    def field_prefix(self) -> str:
        """snake_case stem used for per-plan columns (``left_bar`` -> ``left_bar_plan_revenue``)."""
        return self.value.lower()


class PaymentStatus(str, enum.Enum):
    PAID = "PAID"
    PENDING = "PENDING"


# ------------------ Shop source tagging ------------------ #

class ShopSourceKind(str, enum.Enum):
    ADMIN = "ADMIN"   # created from the admin panel (paid signal: lastPaymentDate)
    AGENT = "AGENT"   # created by a field agent (paid signal: paymentStatus)


__all__ = [
    "UserRole",
    "PlanType",
    "PaymentStatus",
    "ShopSourceKind",
]
