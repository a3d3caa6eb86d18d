"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They validate on construction so an invalid one can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from fabricshop.domain.exceptions import ValidationError

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency, backed by Decimal."""

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __truediv__(self, divisor: int) -> Money:
        """Split evenly, rounded to cents (used for averages)."""
        if not isinstance(divisor, int) or divisor <= 0:
            raise ValidationError(f"Can only divide Money by a positive int, got {divisor!r}")
        return Money(
            (self.amount / divisor).quantize(_CENTS, rounding=ROUND_HALF_UP),
            self.currency,
        )

    def apply_rate(self, rate: Decimal) -> Money:
        """Return ``self * rate`` rounded half-up to cents (e.g. tax)."""
        return Money(
            (self.amount * rate).quantize(_CENTS, rounding=ROUND_HALF_UP),
            self.currency,
        )

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"${self.amount:.2f}"

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = "USD") -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = "USD") -> Money:
        return Money(Decimal("0.00"), currency)


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity (an order line can never be for zero)."""

    value: int

    def __post_init__(self) -> None:
        # bool is an int subclass; True is not a quantity
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ShippingAddress:
    """Where an order ships to.  Every field is required."""

    name: str
    company_name: str
    address: str
    city: str
    state: str
    zip_code: str
    country: str
    phone_number: str

    def __post_init__(self) -> None:
        missing = [
            f.name for f in fields(self)
            if not isinstance(getattr(self, f.name), str) or not getattr(self, f.name).strip()
        ]
        if missing:
            raise ValidationError(
                f"Shipping address is missing: {', '.join(missing)}"
            )

    def to_dict(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, raw: dict) -> ShippingAddress:
        known = {f.name for f in fields(cls)}
        return cls(**{key: raw.get(key, "") for key in known})


@dataclass(frozen=True)
class Customizations:
    """Per-line customization.  ``logo_id`` is an opaque logo reference."""

    size: str | None = None
    color: str | None = None
    logo_id: str | None = None
    fabric: str | None = None
    style: str | None = None

    def to_dict(self) -> dict[str, str]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @classmethod
    def from_dict(cls, raw: dict | None) -> Customizations:
        raw = raw or {}
        unknown = set(raw) - {f.name for f in fields(cls)}
        if unknown:
            raise ValidationError(
                f"Unknown customization attribute(s): {', '.join(sorted(unknown))}"
            )
        return cls(**raw)


@dataclass(frozen=True)
class PaymentDetails:
    """Opaque reference to the processor-side payment."""

    method: str | None = None
    transaction_id: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {"method": self.method, "transaction_id": self.transaction_id}

    @classmethod
    def from_dict(cls, raw: dict | None) -> PaymentDetails | None:
        if not raw:
            return None
        return cls(method=raw.get("method"), transaction_id=raw.get("transaction_id"))
