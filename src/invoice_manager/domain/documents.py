"""Invoice and receipt domain models."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from invoice_manager.domain.taxes import TaxLine
from invoice_manager.domain.value_objects import (
    DocumentKind,
    InvoiceStatus,
    PaymentMethod,
    to_decimal,
)
from invoice_manager.exceptions import ValidationError


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class LineItem:
    """One row of a document.

    ``product_name`` and ``unit_price`` are snapshots taken when the item was
    written, so the row survives deletion of the referenced product.
    """

    product_name: str
    quantity: Decimal
    unit_price: Decimal
    taxes: list[TaxLine] = field(default_factory=list)
    id: UUID = field(default_factory=uuid4)
    product_id: UUID | None = None
    description: str | None = None
    line_total: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        self.quantity = to_decimal(self.quantity)
        self.unit_price = to_decimal(self.unit_price)
        self.line_total = to_decimal(self.line_total)

    @property
    def item_subtotal(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def tax_amount(self) -> Decimal:
        return sum((tax.tax_amount for tax in self.taxes), Decimal("0"))


@dataclass
class Document:
    """An invoice (B2B) or a receipt (B2C).

    Invoices carry client details, a due date and a status; receipts carry a
    payment method. Fields that do not apply to the document's kind are
    cleared on construction.
    """

    kind: DocumentKind
    document_number: str
    issuer_name: str
    issue_date: date
    items: list[LineItem] = field(default_factory=list)
    id: UUID = field(default_factory=uuid4)
    issuer_address: str | None = None
    issuer_tax_id: str | None = None
    client_name: str | None = None
    client_address: str | None = None
    client_tax_id: str | None = None
    due_date: date | None = None
    status: InvoiceStatus | None = None
    payment_method: PaymentMethod | None = None
    notes: str | None = None
    subtotal: Decimal = Decimal("0")
    total_tax: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        self.kind = DocumentKind(self.kind)
        self.subtotal = to_decimal(self.subtotal)
        self.total_tax = to_decimal(self.total_tax)
        self.total = to_decimal(self.total)
        if self.kind == DocumentKind.INVOICE:
            self.status = InvoiceStatus(self.status or InvoiceStatus.DRAFT)
            self.payment_method = None
        else:
            self.payment_method = PaymentMethod(
                self.payment_method or PaymentMethod.CASH
            )
            self.status = None
            self.issuer_tax_id = None
            self.client_name = None
            self.client_address = None
            self.client_tax_id = None
            self.due_date = None

    @property
    def is_invoice(self) -> bool:
        return self.kind == DocumentKind.INVOICE

    @property
    def item_count(self) -> int:
        return len(self.items)

    def mark_status(self, status: InvoiceStatus) -> None:
        if not self.is_invoice:
            raise ValidationError(
                "Only invoices carry a status",
                context={"kind": self.kind.value},
            )
        self.status = InvoiceStatus(status)
        self.updated_at = _utc_now()


__all__ = [
    "Document",
    "LineItem",
]
