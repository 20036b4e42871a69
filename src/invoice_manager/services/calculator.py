"""Line item and document total calculation.

Every figure here is a pure function of quantity, unit price and tax rate.
Previously stored derived values (tax amounts, line totals, document totals)
are never read, so recalculating a computed document reproduces it exactly.
Amounts keep full Decimal precision; rounding belongs to presentation.
"""

from collections.abc import Sequence
from dataclasses import replace
from decimal import Decimal

from invoice_manager.domain.documents import Document, LineItem
from invoice_manager.domain.taxes import TaxLine
from invoice_manager.exceptions import (
    EmptyDocumentError,
    InvalidLineItemError,
    InvalidTaxLineError,
)
from invoice_manager.logging_config import get_logger
from invoice_manager.services.interfaces import DocumentTotals

logger = get_logger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")


def _validate_tax_line(tax: TaxLine) -> None:
    if not tax.tax_name or not tax.tax_name.strip():
        raise InvalidTaxLineError(tax.tax_name, "tax name is required")
    if not tax.tax_rate.is_finite():
        raise InvalidTaxLineError(
            tax.tax_name, "rate must be a finite number", rate=str(tax.tax_rate)
        )
    if tax.tax_rate < ZERO:
        raise InvalidTaxLineError(
            tax.tax_name, "rate must not be negative", rate=str(tax.tax_rate)
        )
    if tax.tax_rate > ONE:
        # Most likely a percentage passed where a fraction was expected
        logger.warning(
            "tax_rate_above_one",
            tax_name=tax.tax_name,
            tax_rate=str(tax.tax_rate),
        )


def calculate_line_item(item: LineItem) -> LineItem:
    """Return a copy of ``item`` with tax amounts and line total computed.

    Raises:
        InvalidLineItemError: quantity is not positive or unit price is negative
        InvalidTaxLineError: a tax line has an empty name or a negative rate
    """
    if not item.quantity.is_finite() or item.quantity <= ZERO:
        raise InvalidLineItemError(
            "quantity", str(item.quantity), "must be greater than zero"
        )
    if not item.unit_price.is_finite() or item.unit_price < ZERO:
        raise InvalidLineItemError(
            "unit_price", str(item.unit_price), "must not be negative"
        )

    item_subtotal = item.quantity * item.unit_price
    taxes: list[TaxLine] = []
    for tax in item.taxes:
        _validate_tax_line(tax)
        taxes.append(tax.applied_to(item_subtotal))

    line_total = item_subtotal + sum((tax.tax_amount for tax in taxes), ZERO)
    return replace(item, taxes=taxes, line_total=line_total)


def aggregate_document(items: Sequence[LineItem]) -> DocumentTotals:
    """Sum computed line items into document totals.

    Raises:
        EmptyDocumentError: ``items`` is empty
    """
    if not items:
        raise EmptyDocumentError("document")

    subtotal = sum((item.item_subtotal for item in items), ZERO)
    total_tax = sum((item.tax_amount for item in items), ZERO)
    return DocumentTotals(subtotal=subtotal, total_tax=total_tax)


def calculate_document(document: Document) -> Document:
    """Recalculate every item of ``document`` and its totals."""
    if not document.items:
        raise EmptyDocumentError(document.kind.value)

    items = [calculate_line_item(item) for item in document.items]
    totals = aggregate_document(items)
    return replace(
        document,
        items=items,
        subtotal=totals.subtotal,
        total_tax=totals.total_tax,
        total=totals.total,
    )


__all__ = [
    "aggregate_document",
    "calculate_document",
    "calculate_line_item",
]
