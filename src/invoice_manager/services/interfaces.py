from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID

from invoice_manager.domain.documents import Document, LineItem
from invoice_manager.domain.products import Product, ProductTax
from invoice_manager.domain.value_objects import DocumentKind, InvoiceStatus


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    total_tax: Decimal

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.total_tax


@dataclass
class RevenueSummary:
    start_date: date | None
    end_date: date | None
    invoice_revenue: Decimal = Decimal("0")
    receipt_revenue: Decimal = Decimal("0")
    total_tax: Decimal = Decimal("0")
    invoice_count: int = 0
    receipt_count: int = 0
    revenue_by_month: dict[str, Decimal] = field(default_factory=dict)
    invoice_status_counts: dict[str, int] = field(default_factory=dict)

    @property
    def total_revenue(self) -> Decimal:
        return self.invoice_revenue + self.receipt_revenue

    @property
    def net_revenue(self) -> Decimal:
        return self.total_revenue - self.total_tax

    @property
    def document_count(self) -> int:
        return self.invoice_count + self.receipt_count


class DocumentService(ABC):
    kind: DocumentKind

    @abstractmethod
    def create(self, document: Document) -> Document:
        pass

    @abstractmethod
    def update(self, document_id: UUID, document: Document) -> Document:
        pass

    @abstractmethod
    def delete(self, document_id: UUID) -> None:
        pass

    @abstractmethod
    def get_by_id(self, document_id: UUID) -> Document | None:
        pass

    @abstractmethod
    def list(self) -> list[Document]:
        pass

    @abstractmethod
    def next_number(self) -> str:
        pass

    @abstractmethod
    def set_status(self, document_id: UUID, status: InvoiceStatus) -> Document:
        pass


class ProductService(ABC):
    @abstractmethod
    def create_product(
        self,
        name: str,
        default_price: Decimal = Decimal("0"),
        description: str | None = None,
        taxes: list[ProductTax] | None = None,
    ) -> Product:
        pass

    @abstractmethod
    def update_product(
        self,
        product_id: UUID,
        name: str,
        default_price: Decimal = Decimal("0"),
        description: str | None = None,
        taxes: list[ProductTax] | None = None,
    ) -> Product:
        pass

    @abstractmethod
    def delete_product(self, product_id: UUID) -> None:
        pass

    @abstractmethod
    def get_product(self, product_id: UUID) -> Product | None:
        pass

    @abstractmethod
    def list_products(self) -> list[Product]:
        pass

    @abstractmethod
    def prefill_line_item(
        self, product_id: UUID, quantity: Decimal = Decimal("1")
    ) -> LineItem:
        pass


class AnalyticsService(ABC):
    @abstractmethod
    def summary(
        self, start_date: date | None = None, end_date: date | None = None
    ) -> RevenueSummary:
        pass
