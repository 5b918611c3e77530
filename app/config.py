"""Core application configuration & tunable revenue rules.

All business rules that may evolve (plan prices, district targets, period
lookbacks, reporting limits) are centralized here so they can be adjusted
without diving into service logic. Values are module constants; a few are
read from environment variables so deployments can override them (tests
monkeypatch the dicts directly).
"""
from __future__ import annotations

import os


def _env_flag(name: str, default: bool) -> bool:
	raw = os.getenv(name)
	if raw is None or not raw.strip():
		return default
	return raw.strip().lower() in {"1", "true", "yes", "on"}


# ------------------------------ Plan Pricing ------------------------------ #
# Default amount per plan (currency-agnostic integer units). Used only when a
# shop's stored amount is missing or zero.
PLAN_PRICING: dict[str, int] = {
	"BASIC": 100,
	"PREMIUM": 2999,
	"FEATURED": 2388,
	"LEFT_BAR": 100,
	"RIGHT_SIDE": 300,
	"BOTTOM_RAIL": 200,
	"BANNER": 4788,
	"HERO": 500,
}

# Older records used a different label for the right-side slot.
LEGACY_PLAN_ALIASES: dict[str, str] = {
	"RIGHT_BAR": "RIGHT_SIDE",
}

# -------------------------------- Districts ------------------------------- #
DISTRICT_SETTINGS: dict[str, int | str] = {
	"target_shops": int(os.getenv("DISTRICT_TARGET_SHOPS", "1000000")),  # 10 lakh
	"min_name_length": 2,
	"progress_decimals": 2,
	"default_state": "Unknown",
}

# -------------------------------- Periods --------------------------------- #
# Lookback per named token; windows start at 00:00 UTC of the resulting day.
PERIOD_SETTINGS: dict[str, dict[str, int]] = {
	"today": {"days": 0},
	"week": {"days": 7},
	"month": {"months": 1},
	"year": {"months": 12},
}

# ------------------------------- Reporting -------------------------------- #
REPORTING_SETTINGS: dict[str, int | str | bool] = {
	"revenue_history_limit": 1000,
	"overall_district_key": "ALL",
	"persist_snapshots": _env_flag("PERSIST_REVENUE_SNAPSHOTS", True),
}

__all__ = [
	"PLAN_PRICING",
	"LEGACY_PLAN_ALIASES",
	"DISTRICT_SETTINGS",
	"PERIOD_SETTINGS",
	"REPORTING_SETTINGS",
]
