"""Asset class invariants.

A creation request carries two optional fields whose legality depends on the
asset class. ``validate_asset_terms`` collapses them into one of two variants
so the rest of the engine never inspects optional fields again:

- ``Fungible(quantity)``: quantity is a finite number > 0 with at most six
  decimal places, no token id.
- ``Unique(token_id)``: token id is present, no quantity (effective quantity 1).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from chainfolio.core.errors import ValidationError
from chainfolio.models.asset import AssetClass
from chainfolio.repositories.base import UNIT_QUANTITY


@dataclass(frozen=True)
class Fungible:
    quantity: Decimal

    @property
    def asset_class(self) -> AssetClass:
        return AssetClass.FUNGIBLE

    @property
    def token_id(self) -> None:
        return None

    @property
    def effective_quantity(self) -> Decimal:
        return self.quantity


@dataclass(frozen=True)
class Unique:
    token_id: str

    @property
    def asset_class(self) -> AssetClass:
        return AssetClass.UNIQUE

    @property
    def quantity(self) -> None:
        return None

    @property
    def effective_quantity(self) -> Decimal:
        return UNIT_QUANTITY


AssetTerms = Union[Fungible, Unique]

# holdings.quantity is Numeric(20, 6)
QUANTITY_DECIMALS = 6


def _to_positive_decimal(quantity: object) -> Optional[Decimal]:
    """Return the quantity as a Decimal if it is a finite number > 0, else None."""
    if isinstance(quantity, bool):
        return None
    if isinstance(quantity, float) and not math.isfinite(quantity):
        return None
    if not isinstance(quantity, (int, float, Decimal)):
        return None
    try:
        value = Decimal(str(quantity))
    except InvalidOperation:
        return None
    if not value.is_finite() or value <= 0:
        return None
    return value


def validate_quantity(asset_class: AssetClass, quantity: object) -> Optional[Decimal]:
    if asset_class is AssetClass.UNIQUE:
        if quantity is not None:
            raise ValidationError("Quantity should not be provided for unique assets", rule="quantity_forbidden")
        return None

    value = _to_positive_decimal(quantity)
    if value is None:
        raise ValidationError("A positive quantity must be provided for fungible assets", rule="quantity_required")
    if value.normalize().as_tuple().exponent < -QUANTITY_DECIMALS:
        raise ValidationError(
            f"Quantity must have at most {QUANTITY_DECIMALS} decimal places", rule="quantity_precision"
        )
    return value


def validate_token_id(asset_class: AssetClass, token_id: Optional[str]) -> Optional[str]:
    if asset_class is AssetClass.UNIQUE:
        if not token_id:
            raise ValidationError("Token ID is required for unique assets", rule="token_id_required")
        return token_id

    if token_id:
        raise ValidationError("Token ID should not be provided for fungible assets", rule="token_id_forbidden")
    return None


def validate_asset_terms(
    asset_class: AssetClass,
    token_id: Optional[str] = None,
    quantity: object = None,
) -> AssetTerms:
    """Accept or reject a (class, token_id, quantity) combination. No side effects."""
    try:
        asset_class = AssetClass(asset_class)
    except ValueError:
        raise ValidationError(f"Unknown asset class: {asset_class!r}", rule="asset_class") from None

    checked_quantity = validate_quantity(asset_class, quantity)
    checked_token_id = validate_token_id(asset_class, token_id)

    if asset_class is AssetClass.UNIQUE:
        return Unique(token_id=checked_token_id)
    return Fungible(quantity=checked_quantity)
