"""SQLAlchemy-backed shop sources.

Each source returns its shops as plain dicts in the source's own shape
(see ``shop_adapter``); adaptation happens afterwards. Read failures surface
as ``DataStoreUnavailable`` so the reporting boundary can answer with the
zero-filled payload.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.db import AdminShop, AgentShop
from app.models.db.enums import ShopSourceKind
from app.services.exceptions import DataStoreUnavailable
from app.utils import get_logger

logger = get_logger(__name__)


class ShopSource(Protocol):
    kind: ShopSourceKind

    def query(self, district: Optional[str] = None) -> list[dict[str, Any]]:
        ...


def _like_literal(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _district_clause(model, address_column, district: str):
    wanted = district.strip().upper()
    return or_(
        func.upper(model.district) == wanted,
        func.upper(model.city) == wanted,
        address_column.ilike(f"%{_like_literal(district.strip())}%", escape="\\"),
    )


class AdminShopSource:
    kind = ShopSourceKind.ADMIN

    def __init__(self, session: Session):
        self.session = session

    def query(self, district: Optional[str] = None) -> list[dict[str, Any]]:
        stmt = self.session.query(AdminShop)
        if district and district.strip().lower() != "all":
            stmt = stmt.filter(_district_clause(AdminShop, AdminShop.full_address, district))
        try:
            shops = stmt.order_by(AdminShop.id).all()
        except SQLAlchemyError as exc:
            logger.error("Admin shop read failed", district=district, error=str(exc), exc_info=True)
            raise DataStoreUnavailable("admin", exc) from exc
        logger.debug("Admin shops loaded", count=len(shops), district=district)
        return [
            {
                "id": s.id,
                "shopName": s.shop_name,
                "planType": s.plan_type,
                "planAmount": s.plan_amount,
                "lastPaymentDate": s.last_payment_date,
                "paymentExpiryDate": s.payment_expiry_date,
                "createdAt": s.created_at,
                "district": s.district,
                "city": s.city,
                "fullAddress": s.full_address,
                "area": s.area,
            }
            for s in shops
        ]


class AgentShopSource:
    kind = ShopSourceKind.AGENT

    def __init__(self, session: Session):
        self.session = session

    def query(self, district: Optional[str] = None) -> list[dict[str, Any]]:
        stmt = self.session.query(AgentShop)
        if district and district.strip().lower() != "all":
            stmt = stmt.filter(_district_clause(AgentShop, AgentShop.address, district))
        try:
            shops = stmt.order_by(AgentShop.id).all()
        except SQLAlchemyError as exc:
            logger.error("Agent shop read failed", district=district, error=str(exc), exc_info=True)
            raise DataStoreUnavailable("agent", exc) from exc
        logger.debug("Agent shops loaded", count=len(shops), district=district)
        return [
            {
                "id": s.id,
                "shopName": s.shop_name,
                "planType": s.plan_type,
                "planAmount": s.plan_amount,
                "paymentStatus": s.payment_status,
                "agentCommission": s.agent_commission,
                "lastPaymentDate": s.last_payment_date,
                "paymentExpiryDate": s.payment_expiry_date,
                "createdAt": s.created_at,
                "district": s.district,
                "city": s.city,
                "address": s.address,
                "area": s.area,
            }
            for s in shops
        ]


__all__ = ["ShopSource", "AdminShopSource", "AgentShopSource"]
