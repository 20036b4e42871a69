"""Synthetic demo data and the service that loads it.

Demo documents are created through the public product and document services,
so they pass the same validation, calculation and transaction path as any
other client's documents.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from invoice_manager.domain.documents import Document, LineItem
from invoice_manager.domain.products import Product, ProductTax
from invoice_manager.domain.taxes import TaxLine
from invoice_manager.domain.value_objects import (
    DocumentKind,
    InvoiceStatus,
    PaymentMethod,
    percent_to_fraction,
)
from invoice_manager.logging_config import get_logger
from invoice_manager.services.interfaces import DocumentService, ProductService

logger = get_logger(__name__)

PRODUCT_CATEGORIES: dict[str, list[str]] = {
    "Software Development": [
        "Custom Web Application Development",
        "Mobile App Development (iOS/Android)",
        "E-commerce Platform Setup",
        "API Development & Integration",
        "Database Design & Optimization",
        "Cloud Migration Services",
        "DevOps & CI/CD Setup",
        "Software Maintenance & Support",
        "Code Review & Audit",
        "Technical Consulting",
    ],
    "Digital Marketing": [
        "SEO Optimization Package",
        "Google Ads Campaign Management",
        "Social Media Marketing",
        "Content Creation & Strategy",
        "Email Marketing Automation",
        "Brand Identity Design",
        "Website Analytics Setup",
        "Conversion Rate Optimization",
    ],
    "Business Consulting": [
        "Business Strategy Consultation",
        "Market Research & Analysis",
        "Financial Planning & Forecasting",
        "Process Optimization",
        "Risk Assessment",
        "Compliance Audit",
        "Training & Development",
        "Project Management",
    ],
    "Creative Services": [
        "Logo & Brand Design",
        "Website UI/UX Design",
        "Print Design Services",
        "Video Production",
        "Photography Services",
        "Copywriting & Content",
        "Animation Services",
        "Packaging Design",
    ],
}

COMPANIES = [
    "TechCorp Solutions",
    "Digital Dynamics LLC",
    "Innovation Partners",
    "Global Systems Inc",
    "NextGen Technologies",
    "Smart Business Solutions",
    "Creative Minds Agency",
    "Data Driven Co",
    "Cloud First Enterprises",
    "Agile Development Group",
    "Enterprise Solutions Ltd",
    "Future Tech Ventures",
]

ADDRESSES = [
    "123 Business Ave, New York, NY 10001",
    "456 Corporate Blvd, Los Angeles, CA 90210",
    "789 Enterprise St, Chicago, IL 60601",
    "321 Innovation Dr, Austin, TX 78701",
    "654 Technology Ln, Seattle, WA 98101",
    "987 Commerce Way, Miami, FL 33101",
    "147 Industry Rd, Boston, MA 02101",
    "258 Professional Ct, Denver, CO 80201",
]

# (name, percentage)
TAX_TABLE: list[tuple[str, Decimal]] = [
    ("VAT", Decimal("20")),
    ("Sales Tax", Decimal("8.5")),
    ("GST", Decimal("15")),
    ("Service Tax", Decimal("12")),
    ("State Tax", Decimal("6.5")),
    ("City Tax", Decimal("2.5")),
]

ISSUER_NAME = "Your Business Name LLC"

INVOICE_NOTES = [
    "Payment terms: Net 30 days",
    "Thank you for your business!",
    "Please remit payment by due date",
    None,
]

RECEIPT_NOTES = [
    "Thank you for your purchase!",
    "Warranty included",
    "Customer satisfaction guaranteed",
    None,
]


@dataclass
class SeedResult:
    products: int
    invoices: int
    receipts: int


class DemoDataGenerator:
    """Builds unsaved products and documents from fixed name pools.

    Pass ``seed`` for a reproducible sequence.
    """

    def __init__(self, seed: int | None = None, today: date | None = None) -> None:
        self._rng = random.Random(seed)
        self._today = today or date.today()

    def _money(self, low: int, high: int) -> Decimal:
        return Decimal(self._rng.randint(low * 100, high * 100)) / 100

    def _quantity(self, low: int, high: int) -> Decimal:
        return Decimal(self._rng.randint(low * 10, high * 10)) / 10

    def _days_back(self, days: int) -> date:
        return self._today - timedelta(days=self._rng.randint(0, days))

    def product(self) -> Product:
        category = self._rng.choice(list(PRODUCT_CATEGORIES))
        name = self._rng.choice(PRODUCT_CATEGORIES[category])
        chosen = self._rng.sample(TAX_TABLE, k=self._rng.randint(1, 3))
        return Product(
            name=name,
            default_price=self._money(500, 5000),
            description=f"Professional {name.lower()} service ({category})",
            taxes=[
                ProductTax(
                    tax_name=tax_name,
                    tax_rate=percent_to_fraction(percent),
                    is_default=index == 0,
                )
                for index, (tax_name, percent) in enumerate(chosen)
            ],
        )

    def products(self, count: int) -> list[Product]:
        return [self.product() for _ in range(count)]

    def line_item(self, product: Product, max_quantity: int) -> LineItem:
        taxes = self._rng.sample(
            product.taxes, k=min(len(product.taxes), self._rng.randint(1, 2))
        )
        return LineItem(
            product_name=product.name,
            quantity=self._quantity(1, max_quantity),
            unit_price=product.default_price,
            taxes=[TaxLine(tax_name=t.tax_name, tax_rate=t.tax_rate) for t in taxes],
            product_id=product.id,
            description=product.description,
        )

    def invoice(self, document_number: str, products: list[Product]) -> Document:
        issue_date = self._days_back(180)
        return Document(
            kind=DocumentKind.INVOICE,
            document_number=document_number,
            issuer_name=ISSUER_NAME,
            issuer_address=self._rng.choice(ADDRESSES),
            issuer_tax_id=f"TAX-{self._rng.randint(100000, 999999)}",
            client_name=self._rng.choice(COMPANIES),
            client_address=self._rng.choice(ADDRESSES),
            client_tax_id=f"CLI-{self._rng.randint(100000, 999999)}",
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=self._rng.randint(15, 60)),
            status=self._rng.choice(list(InvoiceStatus)),
            notes=self._rng.choice(INVOICE_NOTES),
            items=[
                self.line_item(self._rng.choice(products), max_quantity=10)
                for _ in range(self._rng.randint(1, 5))
            ],
        )

    def receipt(self, document_number: str, products: list[Product]) -> Document:
        return Document(
            kind=DocumentKind.RECEIPT,
            document_number=document_number,
            issuer_name=ISSUER_NAME,
            issuer_address=self._rng.choice(ADDRESSES),
            issue_date=self._days_back(90),
            payment_method=self._rng.choice(list(PaymentMethod)),
            notes=self._rng.choice(RECEIPT_NOTES),
            items=[
                self.line_item(self._rng.choice(products), max_quantity=5)
                for _ in range(self._rng.randint(1, 4))
            ],
        )


class SeedService:
    """Wipes the database and reloads it with demo data."""

    def __init__(
        self,
        product_service: ProductService,
        invoice_service: DocumentService,
        receipt_service: DocumentService,
        generator: DemoDataGenerator | None = None,
    ) -> None:
        self._product_service = product_service
        self._invoice_service = invoice_service
        self._receipt_service = receipt_service
        self._generator = generator or DemoDataGenerator()

    def wipe(self) -> SeedResult:
        """Delete every document and product. Returns the deleted counts."""
        invoices = self._invoice_service.list()
        receipts = self._receipt_service.list()
        products = self._product_service.list_products()
        for invoice in invoices:
            self._invoice_service.delete(invoice.id)
        for receipt in receipts:
            self._receipt_service.delete(receipt.id)
        for product in products:
            self._product_service.delete_product(product.id)

        result = SeedResult(
            products=len(products), invoices=len(invoices), receipts=len(receipts)
        )
        logger.info(
            "database_wiped",
            products=result.products,
            invoices=result.invoices,
            receipts=result.receipts,
        )
        return result

    def seed(
        self, products: int = 15, invoices: int = 12, receipts: int = 15
    ) -> SeedResult:
        """Wipe, then create ``products`` products and the requested documents."""
        if products < 1 and (invoices > 0 or receipts > 0):
            raise ValueError("Documents need at least one product to reference")

        self.wipe()

        created_products = [
            self._product_service.create_product(
                name=draft.name,
                default_price=draft.default_price,
                description=draft.description,
                taxes=draft.taxes,
            )
            for draft in self._generator.products(products)
        ]

        for _ in range(invoices):
            self._invoice_service.create(
                self._generator.invoice(
                    self._invoice_service.next_number(), created_products
                )
            )
        for _ in range(receipts):
            self._receipt_service.create(
                self._generator.receipt(
                    self._receipt_service.next_number(), created_products
                )
            )

        result = SeedResult(
            products=len(created_products), invoices=invoices, receipts=receipts
        )
        logger.info(
            "database_seeded",
            products=result.products,
            invoices=result.invoices,
            receipts=result.receipts,
        )
        return result


__all__ = ["DemoDataGenerator", "SeedResult", "SeedService"]
