"""Shop record adapter.

Admin-created and agent-created shops arrive in two different shapes. Each
source gets its own adapter producing the same tagged ``ShopRecord`` so the
aggregator never branches on where a shop came from.

Source shapes (keys as stored by shop management):

* admin:  id, shopName, planType, planAmount, lastPaymentDate,
          paymentExpiryDate, createdAt, district, city, fullAddress, area
* agent:  id, shopName, planType, planAmount, paymentStatus, agentCommission,
          lastPaymentDate, paymentExpiryDate, createdAt, district, city,
          address, area
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Mapping, Optional

from app.config import LEGACY_PLAN_ALIASES
from app.models.db.enums import PaymentStatus, PlanType, ShopSourceKind
from app.services.exceptions import ShopRecordError
from app.utils import get_logger
from app.utils.time import ensure_utc, utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class ShopRecord:
    id: Any
    shop_name: str
    source: ShopSourceKind
    plan_type: PlanType
    plan_amount: Optional[float]
    is_paid: bool
    payment_expiry_date: Optional[datetime]
    effective_date: datetime
    district_raw: Optional[str] = None
    city_raw: Optional[str] = None
    address_raw: Optional[str] = None
    area_raw: Optional[str] = None
    agent_commission: Optional[float] = None


@dataclass
class AdaptedBatch:
    records: list[ShopRecord] = field(default_factory=list)
    skipped: int = 0


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------

def parse_plan_type(value: Any, record_id: Any = None) -> PlanType:
    if value is None or (isinstance(value, str) and not value.strip()):
        return PlanType.BASIC
    if isinstance(value, PlanType):
        return value
    label = str(value).strip().upper()
    label = LEGACY_PLAN_ALIASES.get(label, label)
    try:
        return PlanType(label)
    except ValueError as exc:
        raise ShopRecordError("Unknown plan type", record_id=record_id, field="planType", value=value) from exc


def parse_amount(value: Any, field_name: str, record_id: Any = None) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ShopRecordError("Amount must be numeric", record_id=record_id, field=field_name, value=value)
    try:
        amount = float(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError) as exc:
        raise ShopRecordError("Amount must be numeric", record_id=record_id, field=field_name, value=value) from exc
    if not math.isfinite(amount):
        raise ShopRecordError("Amount must be finite", record_id=record_id, field=field_name, value=value)
    return amount


def parse_timestamp(value: Any, field_name: str, record_id: Any = None) -> Optional[datetime]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return ensure_utc(datetime(value.year, value.month, value.day))
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return ensure_utc(datetime.fromisoformat(text))
        except ValueError as exc:
            raise ShopRecordError("Invalid date", record_id=record_id, field=field_name, value=value) from exc
    raise ShopRecordError("Invalid date", record_id=record_id, field=field_name, value=value)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _effective_date(raw: Mapping[str, Any], record_id: Any, now: datetime) -> datetime:
    paid_on = parse_timestamp(raw.get("lastPaymentDate"), "lastPaymentDate", record_id)
    if paid_on is not None:
        return paid_on
    created = parse_timestamp(raw.get("createdAt"), "createdAt", record_id)
    return created if created is not None else now


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------

def adapt_admin_shop(raw: Mapping[str, Any], *, now: Optional[datetime] = None) -> ShopRecord:
    """Admin shops count as paid once a payment date is recorded."""
    now = now or utc_now()
    record_id = raw.get("id")
    last_payment = parse_timestamp(raw.get("lastPaymentDate"), "lastPaymentDate", record_id)
    return ShopRecord(
        id=record_id,
        shop_name=str(raw.get("shopName") or ""),
        source=ShopSourceKind.ADMIN,
        plan_type=parse_plan_type(raw.get("planType"), record_id),
        plan_amount=parse_amount(raw.get("planAmount"), "planAmount", record_id),
        is_paid=last_payment is not None,
        payment_expiry_date=parse_timestamp(raw.get("paymentExpiryDate"), "paymentExpiryDate", record_id),
        effective_date=_effective_date(raw, record_id, now),
        district_raw=_text(raw.get("district")),
        city_raw=_text(raw.get("city")),
        address_raw=_text(raw.get("fullAddress")),
        area_raw=_text(raw.get("area")),
        agent_commission=None,
    )


def adapt_agent_shop(raw: Mapping[str, Any], *, now: Optional[datetime] = None) -> ShopRecord:
    """Agent shops carry an explicit payment status and a stored commission."""
    now = now or utc_now()
    record_id = raw.get("id")
    status_raw = raw.get("paymentStatus") or PaymentStatus.PENDING.value
    return ShopRecord(
        id=record_id,
        shop_name=str(raw.get("shopName") or ""),
        source=ShopSourceKind.AGENT,
        plan_type=parse_plan_type(raw.get("planType"), record_id),
        plan_amount=parse_amount(raw.get("planAmount"), "planAmount", record_id),
        is_paid=str(status_raw).strip().upper() == PaymentStatus.PAID.value,
        payment_expiry_date=parse_timestamp(raw.get("paymentExpiryDate"), "paymentExpiryDate", record_id),
        effective_date=_effective_date(raw, record_id, now),
        district_raw=_text(raw.get("district")),
        city_raw=_text(raw.get("city")),
        address_raw=_text(raw.get("address")),
        area_raw=_text(raw.get("area")),
        agent_commission=parse_amount(raw.get("agentCommission"), "agentCommission", record_id),
    )


ADAPTERS: dict[ShopSourceKind, Callable[..., ShopRecord]] = {
    ShopSourceKind.ADMIN: adapt_admin_shop,
    ShopSourceKind.AGENT: adapt_agent_shop,
}


def adapt_many(
    raws: Iterable[Mapping[str, Any]],
    kind: ShopSourceKind,
    *,
    now: Optional[datetime] = None,
) -> AdaptedBatch:
    """Adapt a whole source list; malformed records are logged and skipped."""
    now = now or utc_now()
    adapter = ADAPTERS[kind]
    batch = AdaptedBatch()
    for raw in raws:
        try:
            batch.records.append(adapter(raw, now=now))
        except ShopRecordError as exc:
            batch.skipped += 1
            logger.warning(
                "Skipping malformed shop record",
                source=kind.value,
                record_id=exc.record_id,
                field=exc.field,
                error=str(exc),
            )
    return batch


__all__ = [
    "ShopRecord",
    "AdaptedBatch",
    "adapt_admin_shop",
    "adapt_agent_shop",
    "adapt_many",
    "parse_plan_type",
    "parse_amount",
    "parse_timestamp",
]
