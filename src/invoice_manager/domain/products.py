from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from invoice_manager.domain.value_objects import to_decimal


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class ProductTax:
    tax_name: str
    tax_rate: Decimal
    is_default: bool = False
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        self.tax_rate = to_decimal(self.tax_rate)


@dataclass
class Product:
    name: str
    default_price: Decimal = Decimal("0")
    description: str | None = None
    taxes: list[ProductTax] = field(default_factory=list)
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        self.default_price = to_decimal(self.default_price)

    @property
    def default_tax(self) -> ProductTax | None:
        """The tax flagged as default, else the first tax, else None."""
        for tax in self.taxes:
            if tax.is_default:
                return tax
        return self.taxes[0] if self.taxes else None

    @property
    def default_tax_names(self) -> list[str]:
        return [tax.tax_name for tax in self.taxes if tax.is_default]

    def touch(self) -> None:
        self.updated_at = _utc_now()


__all__ = [
    "Product",
    "ProductTax",
]
