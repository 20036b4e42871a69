"""Tests for demo data generation and database seeding."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from invoice_manager.domain.value_objects import DocumentKind
from invoice_manager.repositories.sqlite import SQLiteDatabase
from invoice_manager.services.demo_data import (
    COMPANIES,
    ISSUER_NAME,
    DemoDataGenerator,
    SeedService,
)
from invoice_manager.services.documents import DocumentServiceImpl
from invoice_manager.services.products import ProductServiceImpl

TODAY = date(2025, 6, 30)


@pytest.fixture
def seed_service(
    product_service: ProductServiceImpl,
    invoice_service: DocumentServiceImpl,
    receipt_service: DocumentServiceImpl,
) -> SeedService:
    return SeedService(
        product_service,
        invoice_service,
        receipt_service,
        generator=DemoDataGenerator(seed=42, today=TODAY),
    )


class TestDemoDataGenerator:
    def test_products_have_one_default_tax(self) -> None:
        generator = DemoDataGenerator(seed=1, today=TODAY)

        for product in generator.products(20):
            assert 1 <= len(product.taxes) <= 3
            assert len(product.default_tax_names) == 1
            assert Decimal("500") <= product.default_price <= Decimal("5000")
            assert all(Decimal("0") < t.tax_rate < Decimal("1") for t in product.taxes)

    def test_same_seed_same_data(self) -> None:
        first = DemoDataGenerator(seed=7, today=TODAY).products(5)
        second = DemoDataGenerator(seed=7, today=TODAY).products(5)

        assert [(p.name, p.default_price) for p in first] == [
            (p.name, p.default_price) for p in second
        ]

    def test_invoice_shape(self) -> None:
        generator = DemoDataGenerator(seed=3, today=TODAY)
        products = generator.products(4)

        invoice = generator.invoice("INV-001", products)

        assert invoice.kind == DocumentKind.INVOICE
        assert invoice.issuer_name == ISSUER_NAME
        assert invoice.client_name in COMPANIES
        assert TODAY - timedelta(days=180) <= invoice.issue_date <= TODAY
        assert invoice.due_date > invoice.issue_date
        assert 1 <= len(invoice.items) <= 5
        product_ids = {p.id for p in products}
        assert all(item.product_id in product_ids for item in invoice.items)

    def test_receipt_shape(self) -> None:
        generator = DemoDataGenerator(seed=3, today=TODAY)

        receipt = generator.receipt("RCP-001", generator.products(2))

        assert receipt.kind == DocumentKind.RECEIPT
        assert receipt.client_name is None
        assert receipt.payment_method is not None
        assert 1 <= len(receipt.items) <= 4
        assert all(item.quantity <= Decimal("5") for item in receipt.items)


class TestSeedService:
    def test_seed_creates_requested_counts(
        self,
        db: SQLiteDatabase,
        seed_service: SeedService,
        invoice_service: DocumentServiceImpl,
    ) -> None:
        result = seed_service.seed(products=5, invoices=4, receipts=3)

        assert (result.products, result.invoices, result.receipts) == (5, 4, 3)
        assert db.count_rows("products") == 5
        assert db.count_rows("invoices") == 4
        assert db.count_rows("receipts") == 3
        assert [d.document_number for d in invoice_service.list()] == [
            "INV-001",
            "INV-002",
            "INV-003",
            "INV-004",
        ]

    def test_seeded_documents_are_calculated(
        self, seed_service: SeedService, receipt_service: DocumentServiceImpl
    ) -> None:
        seed_service.seed(products=3, invoices=0, receipts=5)

        for receipt in receipt_service.list():
            assert receipt.total == receipt.subtotal + receipt.total_tax
            assert receipt.total > 0

    def test_seed_replaces_existing_data(
        self, db: SQLiteDatabase, seed_service: SeedService
    ) -> None:
        seed_service.seed(products=5, invoices=4, receipts=3)
        seed_service.seed(products=2, invoices=1, receipts=1)

        assert db.count_rows("products") == 2
        assert db.count_rows("invoices") == 1
        assert db.count_rows("receipts") == 1

    def test_wipe(self, db: SQLiteDatabase, seed_service: SeedService) -> None:
        seed_service.seed(products=3, invoices=2, receipts=2)

        result = seed_service.wipe()

        assert (result.products, result.invoices, result.receipts) == (3, 2, 2)
        for table in ("products", "product_taxes", "invoice_items", "receipt_item_taxes"):
            assert db.count_rows(table) == 0

    def test_documents_need_products(self, seed_service: SeedService) -> None:
        with pytest.raises(ValueError):
            seed_service.seed(products=0, invoices=1, receipts=0)

    def test_products_only(self, db: SQLiteDatabase, seed_service: SeedService) -> None:
        seed_service.seed(products=4, invoices=0, receipts=0)

        assert db.count_rows("products") == 4
        assert db.count_rows("invoices") == 0
