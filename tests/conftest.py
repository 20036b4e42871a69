from collections.abc import Callable
from datetime import date
from decimal import Decimal

import pytest

from invoice_manager.domain.documents import Document, LineItem
from invoice_manager.domain.taxes import TaxLine
from invoice_manager.domain.value_objects import DocumentKind, PaymentMethod
from invoice_manager.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteDocumentRepository,
    SQLiteProductRepository,
)
from invoice_manager.services.documents import DocumentServiceImpl
from invoice_manager.services.products import ProductServiceImpl


@pytest.fixture
def db() -> SQLiteDatabase:
    """Create an in-memory SQLite database for testing."""
    database = SQLiteDatabase(":memory:")
    database.initialize()
    return database


@pytest.fixture
def product_repo(db: SQLiteDatabase) -> SQLiteProductRepository:
    return SQLiteProductRepository(db)


@pytest.fixture
def invoice_repo(db: SQLiteDatabase) -> SQLiteDocumentRepository:
    return SQLiteDocumentRepository(db, DocumentKind.INVOICE)


@pytest.fixture
def receipt_repo(db: SQLiteDatabase) -> SQLiteDocumentRepository:
    return SQLiteDocumentRepository(db, DocumentKind.RECEIPT)


@pytest.fixture
def invoice_service(
    invoice_repo: SQLiteDocumentRepository, product_repo: SQLiteProductRepository
) -> DocumentServiceImpl:
    return DocumentServiceImpl(invoice_repo, product_repo, prefix="INV")


@pytest.fixture
def receipt_service(
    receipt_repo: SQLiteDocumentRepository, product_repo: SQLiteProductRepository
) -> DocumentServiceImpl:
    return DocumentServiceImpl(receipt_repo, product_repo, prefix="RCP")


@pytest.fixture
def product_service(product_repo: SQLiteProductRepository) -> ProductServiceImpl:
    return ProductServiceImpl(product_repo)


def _make_item(
    quantity: str = "2",
    unit_price: str = "100",
    taxes: list[tuple[str, str]] | None = None,
    product_name: str = "Consulting",
) -> LineItem:
    """Build an uncalculated line item; taxes are (name, fractional rate)."""
    if taxes is None:
        taxes = [("VAT", "0.20")]
    return LineItem(
        product_name=product_name,
        quantity=Decimal(quantity),
        unit_price=Decimal(unit_price),
        taxes=[TaxLine(tax_name=name, tax_rate=Decimal(rate)) for name, rate in taxes],
    )


@pytest.fixture
def make_item() -> Callable[..., LineItem]:
    return _make_item


@pytest.fixture
def make_invoice() -> Callable[..., Document]:
    def _make(
        number: str = "INV-001",
        items: list[LineItem] | None = None,
        client_name: str = "Acme Corp",
        issue_date: date = date(2025, 3, 14),
    ) -> Document:
        return Document(
            kind=DocumentKind.INVOICE,
            document_number=number,
            issuer_name="Your Business Name LLC",
            issuer_address="123 Business Ave, New York, NY 10001",
            client_name=client_name,
            client_address="456 Corporate Blvd, Los Angeles, CA 90210",
            issue_date=issue_date,
            due_date=date(2025, 4, 13),
            items=[_make_item()] if items is None else items,
        )

    return _make


@pytest.fixture
def make_receipt() -> Callable[..., Document]:
    def _make(
        number: str = "RCP-001",
        items: list[LineItem] | None = None,
        issue_date: date = date(2025, 3, 14),
        payment_method: PaymentMethod = PaymentMethod.CARD,
    ) -> Document:
        return Document(
            kind=DocumentKind.RECEIPT,
            document_number=number,
            issuer_name="Your Business Name LLC",
            issue_date=issue_date,
            payment_method=payment_method,
            items=[_make_item()] if items is None else items,
        )

    return _make
