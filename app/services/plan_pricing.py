"""Plan pricing table.

Immutable lookup of default amount per plan, injected into the aggregator
rather than read from module globals.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from app.config import PLAN_PRICING
from app.models.db.enums import PlanType


class PlanPricingTable:
    """Read-only plan -> default amount map."""

    def __init__(self, prices: Mapping[PlanType | str, float | int]):
        normalized: dict[PlanType, float] = {}
        for plan, amount in prices.items():
            normalized[PlanType(plan)] = float(amount)
        missing = [p.value for p in PlanType if p not in normalized]
        if missing:
            raise ValueError(f"Pricing table missing plans: {missing}")
        self._prices = MappingProxyType(normalized)

    def default_for(self, plan_type: Optional[PlanType]) -> float:
        return self._prices[plan_type or PlanType.BASIC]

    def effective_amount(self, plan_type: Optional[PlanType], stored_amount: Optional[float]) -> float:
        """Stored amount when positive, else the plan default (missing plan -> BASIC)."""
        if stored_amount is not None and stored_amount > 0:
            return float(stored_amount)
        return self.default_for(plan_type)

    def as_dict(self) -> dict[str, float]:
        return {plan.value: amount for plan, amount in self._prices.items()}

    def __getitem__(self, plan_type: PlanType) -> float:
        return self._prices[plan_type]

    def __repr__(self) -> str:  # pragma: no cover
        return f"PlanPricingTable({self.as_dict()!r})"


def default_pricing_table() -> PlanPricingTable:
    return PlanPricingTable(PLAN_PRICING)


__all__ = ["PlanPricingTable", "default_pricing_table"]
