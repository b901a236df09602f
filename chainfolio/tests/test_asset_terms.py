"""Asset class invariant tests"""

from decimal import Decimal

import pytest

from chainfolio.core.errors import ValidationError
from chainfolio.models import AssetClass
from chainfolio.services.asset_terms import Fungible, Unique, validate_asset_terms


class TestFungibleTerms:
    """Quantity-bearing assets"""

    def test_accepts_positive_quantity(self):
        terms = validate_asset_terms(AssetClass.FUNGIBLE, quantity=10.5)
        assert terms == Fungible(quantity=Decimal("10.5"))
        assert terms.token_id is None
        assert terms.effective_quantity == Decimal("10.5")

    def test_accepts_class_as_string(self):
        terms = validate_asset_terms("fungible", quantity=3)
        assert isinstance(terms, Fungible)

    @pytest.mark.parametrize("quantity", [None, 0, -5, float("nan"), float("inf"), True, "10"])
    def test_rejects_missing_or_invalid_quantity(self, quantity):
        with pytest.raises(ValidationError) as exc_info:
            validate_asset_terms(AssetClass.FUNGIBLE, quantity=quantity)
        assert exc_info.value.rule == "quantity_required"

    @pytest.mark.parametrize("quantity", [1e-7, 1.2345678, Decimal("0.0000001")])
    def test_rejects_quantity_finer_than_storage(self, quantity):
        """More than six decimals would be rounded by the column"""
        with pytest.raises(ValidationError) as exc_info:
            validate_asset_terms(AssetClass.FUNGIBLE, quantity=quantity)
        assert exc_info.value.rule == "quantity_precision"

    @pytest.mark.parametrize("quantity", [0.000001, Decimal("1.2345670"), 1000])
    def test_accepts_six_decimals(self, quantity):
        terms = validate_asset_terms(AssetClass.FUNGIBLE, quantity=quantity)
        assert terms.quantity > 0

    def test_rejects_token_id(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_asset_terms(AssetClass.FUNGIBLE, token_id="7804", quantity=1)
        assert exc_info.value.rule == "token_id_forbidden"

    def test_quantity_rule_checked_before_token_rule(self):
        """Both fields wrong: the quantity violation is reported"""
        with pytest.raises(ValidationError) as exc_info:
            validate_asset_terms(AssetClass.FUNGIBLE, token_id="7804")
        assert exc_info.value.rule == "quantity_required"


class TestUniqueTerms:
    """One-of-a-kind assets"""

    def test_accepts_token_id(self):
        terms = validate_asset_terms(AssetClass.UNIQUE, token_id="7804")
        assert terms == Unique(token_id="7804")
        assert terms.quantity is None
        assert terms.effective_quantity == Decimal(1)

    @pytest.mark.parametrize("token_id", [None, ""])
    def test_requires_token_id(self, token_id):
        with pytest.raises(ValidationError) as exc_info:
            validate_asset_terms(AssetClass.UNIQUE, token_id=token_id)
        assert exc_info.value.rule == "token_id_required"

    def test_rejects_quantity(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_asset_terms(AssetClass.UNIQUE, token_id="7804", quantity=1)
        assert exc_info.value.rule == "quantity_forbidden"


class TestUnknownClass:
    def test_rejects_unknown_class(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_asset_terms("ERC-1155", quantity=1)
        assert exc_info.value.rule == "asset_class"
