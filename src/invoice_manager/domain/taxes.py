"""Tax lines applied to document line items."""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from uuid import UUID, uuid4

from invoice_manager.domain.value_objects import to_decimal


def compute_tax_amount(
    base: Decimal | int | float | str, rate: Decimal | int | float | str
) -> Decimal:
    """Return the tax charged on ``base`` at fractional ``rate``.

    The result is not rounded. A rate above 1 is computed as given.
    """
    return to_decimal(base) * to_decimal(rate)


@dataclass(frozen=True, slots=True)
class TaxLine:
    """One named tax on one line item.

    ``tax_rate`` is a fraction (0.2 for 20%). ``tax_amount`` is derived by
    the line item calculator and is overwritten on every recalculation.
    """

    tax_name: str
    tax_rate: Decimal
    tax_amount: Decimal = Decimal("0")
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tax_rate", to_decimal(self.tax_rate))
        object.__setattr__(self, "tax_amount", to_decimal(self.tax_amount))

    def applied_to(self, base: Decimal) -> "TaxLine":
        return replace(self, tax_amount=compute_tax_amount(base, self.tax_rate))
