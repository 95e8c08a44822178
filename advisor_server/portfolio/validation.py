"""Input validation for portfolio and holding requests."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from advisor_server.engine.models import ASSET_TYPES

SYMBOL_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9.\-]{0,14}$")
MAX_NAME_LENGTH = 100


@dataclass
class ValidationIssue:
    field: str
    message: str
    code: str = "invalid_value"


def _as_number(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_symbol(symbol: str) -> str:
    return str(symbol or "").strip().upper()


def validate_portfolio_input(name: str, description: str | None = None) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    clean = str(name or "").strip()
    if not clean:
        issues.append(ValidationIssue(field="name", code="missing_value", message="Portfolio name is required."))
    elif len(clean) > MAX_NAME_LENGTH:
        issues.append(
            ValidationIssue(field="name", code="too_long", message=f"Portfolio name must be at most {MAX_NAME_LENGTH} characters.")
        )
    if description is not None and len(str(description)) > 1000:
        issues.append(ValidationIssue(field="description", code="too_long", message="Description is too long."))
    return issues


def validate_holding_input(
    symbol: str,
    name: str,
    asset_type: str,
    quantity: object,
    purchase_price: object,
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not SYMBOL_PATTERN.match(normalize_symbol(symbol)):
        issues.append(
            ValidationIssue(field="symbol", code="invalid_symbol", message="Symbol must be 1-15 chars: A-Z, 0-9, dot, hyphen.")
        )
    if not str(name or "").strip():
        issues.append(ValidationIssue(field="name", code="missing_value", message="Holding name is required."))
    if asset_type not in ASSET_TYPES:
        issues.append(
            ValidationIssue(field="asset_type", code="invalid_asset_type", message=f"asset_type must be one of {list(ASSET_TYPES)}.")
        )
    qty = _as_number(quantity)
    if qty is None or qty < 0:
        issues.append(
            ValidationIssue(field="quantity", code="invalid_quantity", message="Quantity must be a non-negative number.")
        )
    price = _as_number(purchase_price)
    if price is None or price <= 0:
        issues.append(
            ValidationIssue(field="purchase_price", code="invalid_purchase_price", message="purchase_price must be a positive number.")
        )
    return issues
