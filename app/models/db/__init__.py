from .users import User
from .admin_shops import AdminShop
from .agent_shops import AgentShop
from .revenue_snapshots import RevenueSnapshot
from .enums import UserRole, PlanType, PaymentStatus, ShopSourceKind

__all__ = [
    "User",
    "AdminShop",
    "AgentShop",
    "RevenueSnapshot",
    "UserRole",
    "PlanType",
    "PaymentStatus",
    "ShopSourceKind",
]
