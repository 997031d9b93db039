"""Convert user-facing deposit amounts to integer minor units."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from common.core.app_error import Errors


class AmountNormalizer:
    """Validates a client-supplied amount and converts it to minor units (cents for USD).

    Floats go through ``repr`` so ``19.99`` is treated as the decimal the client typed,
    not its binary approximation; rounding is half-up on that exact decimal value.
    """

    def __init__(
        self,
        min_amount: Decimal = Decimal("1.00"),
        max_amount: Decimal = Decimal("999999.99"),
        minor_unit_factor: int = 100,
    ) -> None:
        if minor_unit_factor <= 0:
            raise ValueError("minor_unit_factor must be positive")
        if min_amount > max_amount:
            raise ValueError("min_amount must not exceed max_amount")
        self.min_amount = min_amount
        self.max_amount = max_amount
        self.minor_unit_factor = minor_unit_factor

    def normalize(self, amount: Any) -> int:
        value = self._to_decimal(amount)
        if value < self.min_amount or value > self.max_amount:
            raise Errors.Payment.INVALID_AMOUNT.create(details={"amount": str(value), "min": str(self.min_amount), "max": str(self.max_amount)})

        minor = (value * self.minor_unit_factor).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        return int(minor)

    @staticmethod
    def _to_decimal(amount: Any) -> Decimal:
        # bool is an int subclass; a JSON true is not an amount
        if isinstance(amount, bool) or not isinstance(amount, int | float | Decimal):
            raise Errors.Payment.INVALID_AMOUNT.create(details={"amount_type": type(amount).__name__})

        try:
            value = Decimal(amount) if isinstance(amount, int | Decimal) else Decimal(repr(amount))
        except InvalidOperation as e:
            raise Errors.Payment.INVALID_AMOUNT.create(cause=e) from e

        if not value.is_finite():
            raise Errors.Payment.INVALID_AMOUNT.create(details={"amount": str(value)})
        return value
