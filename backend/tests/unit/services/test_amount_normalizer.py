"""Unit tests for AmountNormalizer."""

from decimal import Decimal

import pytest

from app.services.amount_normalizer import AmountNormalizer
from common.core.app_error import AppException, Errors


class TestAmountNormalizer:
    """Conversion of user-facing amounts to minor units."""

    @pytest.mark.parametrize(
        ("amount", "expected"),
        [
            (5, 500),
            (1, 100),
            (19.99, 1999),
            (0.1 + 0.2 + 0.7, 100),
            (1.005, 101),
            (2.675, 268),
            (Decimal("12.345"), 1235),
            (Decimal("999999.99"), 99999999),
        ],
    )
    def test_normalize_valid_amounts(self, amount: int | float | Decimal, expected: int) -> None:
        assert AmountNormalizer().normalize(amount) == expected

    @pytest.mark.parametrize("amount", [0, 0.99, -5, Decimal("0.999"), 1_000_000, float("nan"), float("inf"), float("-inf")])
    def test_normalize_rejects_out_of_range(self, amount: int | float | Decimal) -> None:
        with pytest.raises(AppException) as exc_info:
            AmountNormalizer().normalize(amount)
        assert Errors.Payment.INVALID_AMOUNT.is_(exc_info.value)
        assert exc_info.value.http_status == 400

    @pytest.mark.parametrize("amount", [None, True, False, "5", "5.00", [5], {"value": 5}])
    def test_normalize_rejects_non_numbers(self, amount: object) -> None:
        with pytest.raises(AppException) as exc_info:
            AmountNormalizer().normalize(amount)
        assert Errors.Payment.INVALID_AMOUNT.is_(exc_info.value)

    def test_custom_bounds_and_factor(self) -> None:
        normalizer = AmountNormalizer(min_amount=Decimal("0.5"), max_amount=Decimal("10"), minor_unit_factor=1000)

        assert normalizer.normalize(0.5) == 500
        assert normalizer.normalize(Decimal("1.2345")) == 1235
        with pytest.raises(AppException):
            normalizer.normalize(10.01)

    def test_invalid_construction(self) -> None:
        with pytest.raises(ValueError):
            AmountNormalizer(minor_unit_factor=0)
        with pytest.raises(ValueError):
            AmountNormalizer(min_amount=Decimal("5"), max_amount=Decimal("1"))
