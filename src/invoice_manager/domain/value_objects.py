from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


class DocumentKind(str, Enum):
    INVOICE = "invoice"
    RECEIPT = "receipt"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"
    CHECK = "check"


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a number to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def percent_to_fraction(percent: Decimal | int | float | str) -> Decimal:
    """Convert a 0-100 percentage (20) to a fractional rate (0.2)."""
    return to_decimal(percent) / HUNDRED


def fraction_to_percent(rate: Decimal | int | float | str) -> Decimal:
    """Convert a fractional rate (0.2) to a 0-100 percentage (20)."""
    return to_decimal(rate) * HUNDRED


def round_money(amount: Decimal | int | float | str) -> Decimal:
    """Round an amount to cents for display.

    Only presentation code calls this; stored and aggregated amounts keep
    full precision.
    """
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def decimal_to_str(value: Decimal) -> str:
    """Render a Decimal without exponent notation or trailing zeros."""
    normalized = value.normalize()
    if normalized == 0:
        return "0"
    return format(normalized, "f")


__all__ = [
    "DocumentKind",
    "InvoiceStatus",
    "PaymentMethod",
    "decimal_to_str",
    "fraction_to_percent",
    "percent_to_fraction",
    "round_money",
    "to_decimal",
]
