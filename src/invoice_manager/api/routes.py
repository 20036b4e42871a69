"""API routes for Invoice Manager."""

from datetime import date
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from invoice_manager import __version__
from invoice_manager.api.schemas import (
    AnalyticsResponse,
    HealthResponse,
    InvoiceCreate,
    InvoiceResponse,
    InvoiceStatusUpdate,
    LineItemCreate,
    LineItemResponse,
    NextNumberResponse,
    ProductCreate,
    ProductResponse,
    ProductTaxResponse,
    ReceiptCreate,
    ReceiptResponse,
    TaxLineResponse,
)
from invoice_manager.container import Container, get_container
from invoice_manager.domain.documents import Document, LineItem
from invoice_manager.domain.products import Product, ProductTax
from invoice_manager.domain.taxes import TaxLine
from invoice_manager.domain.value_objects import (
    DocumentKind,
    InvoiceStatus,
    PaymentMethod,
    decimal_to_str,
    fraction_to_percent,
    percent_to_fraction,
)
from invoice_manager.exceptions import DocumentNotFoundError, ProductNotFoundError
from invoice_manager.exports import MEDIA_TYPES, ExportFormat, render
from invoice_manager.services.calculator import calculate_line_item
from invoice_manager.services.exports import to_export_model

# Create routers
health_router = APIRouter(tags=["health"])
product_router = APIRouter(prefix="/products", tags=["products"])
invoice_router = APIRouter(prefix="/invoices", tags=["invoices"])
receipt_router = APIRouter(prefix="/receipts", tags=["receipts"])
analytics_router = APIRouter(prefix="/analytics", tags=["analytics"])


def get_app_container() -> Container:
    """FastAPI dependency for the service container.

    Tests override this through ``app.dependency_overrides``.
    """
    return get_container()


ContainerDep = Annotated[Container, Depends(get_app_container)]


# Conversion helpers
def _item_from_request(item: LineItemCreate) -> LineItem:
    return LineItem(
        product_id=item.product_id,
        product_name=item.product_name,
        description=item.description,
        quantity=item.quantity,
        unit_price=item.unit_price,
        taxes=[
            TaxLine(tax_name=tax.tax_name, tax_rate=percent_to_fraction(tax.tax_rate))
            for tax in item.taxes
        ],
    )


def _invoice_from_request(request: InvoiceCreate) -> Document:
    return Document(
        kind=DocumentKind.INVOICE,
        document_number=request.invoice_number,
        issuer_name=request.issuer_name,
        issuer_address=request.issuer_address,
        issuer_tax_id=request.issuer_tax_id,
        client_name=request.client_name,
        client_address=request.client_address,
        client_tax_id=request.client_tax_id,
        issue_date=request.issue_date,
        due_date=request.due_date,
        status=InvoiceStatus(request.status),
        notes=request.notes,
        items=[_item_from_request(item) for item in request.items],
    )


def _receipt_from_request(request: ReceiptCreate, container: Container) -> Document:
    payment_method = request.payment_method or container.settings.default_payment_method
    return Document(
        kind=DocumentKind.RECEIPT,
        document_number=request.receipt_number,
        issuer_name=request.issuer_name,
        issuer_address=request.issuer_address,
        issue_date=request.issue_date,
        payment_method=PaymentMethod(payment_method),
        notes=request.notes,
        items=[_item_from_request(item) for item in request.items],
    )


def _product_taxes_from_request(request: ProductCreate) -> list[ProductTax]:
    return [
        ProductTax(
            tax_name=tax.tax_name,
            tax_rate=percent_to_fraction(tax.tax_rate),
            is_default=tax.is_default,
        )
        for tax in request.taxes
    ]


def _percent(rate: Decimal) -> str:
    return decimal_to_str(fraction_to_percent(rate))


def _item_to_response(item: LineItem) -> LineItemResponse:
    return LineItemResponse(
        id=item.id,
        product_id=item.product_id,
        product_name=item.product_name,
        description=item.description,
        quantity=decimal_to_str(item.quantity),
        unit_price=decimal_to_str(item.unit_price),
        subtotal=decimal_to_str(item.item_subtotal),
        tax_amount=decimal_to_str(item.tax_amount),
        line_total=decimal_to_str(item.line_total),
        taxes=[
            TaxLineResponse(
                id=tax.id,
                tax_name=tax.tax_name,
                tax_rate=_percent(tax.tax_rate),
                tax_amount=decimal_to_str(tax.tax_amount),
            )
            for tax in item.taxes
        ],
    )


def _invoice_to_response(invoice: Document) -> InvoiceResponse:
    return InvoiceResponse(
        id=invoice.id,
        invoice_number=invoice.document_number,
        issuer_name=invoice.issuer_name,
        issuer_address=invoice.issuer_address,
        issuer_tax_id=invoice.issuer_tax_id,
        client_name=invoice.client_name,
        client_address=invoice.client_address,
        client_tax_id=invoice.client_tax_id,
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        status=invoice.status.value if invoice.status else InvoiceStatus.DRAFT.value,
        notes=invoice.notes,
        subtotal=decimal_to_str(invoice.subtotal),
        total_tax=decimal_to_str(invoice.total_tax),
        total=decimal_to_str(invoice.total),
        items=[_item_to_response(item) for item in invoice.items],
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
    )


def _receipt_to_response(receipt: Document) -> ReceiptResponse:
    return ReceiptResponse(
        id=receipt.id,
        receipt_number=receipt.document_number,
        issuer_name=receipt.issuer_name,
        issuer_address=receipt.issuer_address,
        issue_date=receipt.issue_date,
        payment_method=receipt.payment_method.value
        if receipt.payment_method
        else PaymentMethod.CASH.value,
        notes=receipt.notes,
        subtotal=decimal_to_str(receipt.subtotal),
        total_tax=decimal_to_str(receipt.total_tax),
        total=decimal_to_str(receipt.total),
        items=[_item_to_response(item) for item in receipt.items],
        created_at=receipt.created_at,
        updated_at=receipt.updated_at,
    )


def _product_to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        description=product.description,
        default_price=decimal_to_str(product.default_price),
        taxes=[
            ProductTaxResponse(
                id=tax.id,
                tax_name=tax.tax_name,
                tax_rate=_percent(tax.tax_rate),
                is_default=tax.is_default,
            )
            for tax in product.taxes
        ],
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _export_response(document: Document, export_format: ExportFormat) -> Response:
    record = to_export_model(document)
    return Response(
        content=render(record, export_format),
        media_type=MEDIA_TYPES[export_format],
        headers={
            "Content-Disposition": (
                f'attachment; filename="{record.filename(export_format)}"'
            )
        },
    )


# Health
@health_router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


# Products
@product_router.post(
    "", response_model=ProductResponse, status_code=status.HTTP_201_CREATED
)
def create_product(request: ProductCreate, container: ContainerDep) -> ProductResponse:
    product = container.product_service.create_product(
        name=request.name,
        default_price=request.default_price,
        description=request.description,
        taxes=_product_taxes_from_request(request),
    )
    return _product_to_response(product)


@product_router.get("", response_model=list[ProductResponse])
def list_products(container: ContainerDep) -> list[ProductResponse]:
    return [_product_to_response(p) for p in container.product_service.list_products()]


@product_router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: UUID, container: ContainerDep) -> ProductResponse:
    product = container.product_service.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return _product_to_response(product)


@product_router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: UUID, request: ProductCreate, container: ContainerDep
) -> ProductResponse:
    product = container.product_service.update_product(
        product_id,
        name=request.name,
        default_price=request.default_price,
        description=request.description,
        taxes=_product_taxes_from_request(request),
    )
    return _product_to_response(product)


@product_router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: UUID, container: ContainerDep) -> Response:
    container.product_service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@product_router.get("/{product_id}/line-item", response_model=LineItemResponse)
def prefill_line_item(
    product_id: UUID,
    container: ContainerDep,
    quantity: Annotated[Decimal, Query()] = Decimal("1"),
) -> LineItemResponse:
    """Suggested line item for a product, with amounts calculated."""
    item = container.product_service.prefill_line_item(product_id, quantity)
    return _item_to_response(calculate_line_item(item))


# Invoices
@invoice_router.get("/next-number", response_model=NextNumberResponse)
def next_invoice_number(container: ContainerDep) -> NextNumberResponse:
    return NextNumberResponse(next_number=container.invoice_service.next_number())


@invoice_router.post(
    "", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED
)
def create_invoice(request: InvoiceCreate, container: ContainerDep) -> InvoiceResponse:
    invoice = container.invoice_service.create(_invoice_from_request(request))
    return _invoice_to_response(invoice)


@invoice_router.get("", response_model=list[InvoiceResponse])
def list_invoices(container: ContainerDep) -> list[InvoiceResponse]:
    return [_invoice_to_response(i) for i in container.invoice_service.list()]


@invoice_router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: UUID, container: ContainerDep) -> InvoiceResponse:
    invoice = container.invoice_service.get_by_id(invoice_id)
    if invoice is None:
        raise DocumentNotFoundError(DocumentKind.INVOICE.value, invoice_id)
    return _invoice_to_response(invoice)


@invoice_router.put("/{invoice_id}", response_model=InvoiceResponse)
def update_invoice(
    invoice_id: UUID, request: InvoiceCreate, container: ContainerDep
) -> InvoiceResponse:
    invoice = container.invoice_service.update(
        invoice_id, _invoice_from_request(request)
    )
    return _invoice_to_response(invoice)


@invoice_router.patch("/{invoice_id}/status", response_model=InvoiceResponse)
def update_invoice_status(
    invoice_id: UUID, request: InvoiceStatusUpdate, container: ContainerDep
) -> InvoiceResponse:
    invoice = container.invoice_service.set_status(
        invoice_id, InvoiceStatus(request.status)
    )
    return _invoice_to_response(invoice)


@invoice_router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(invoice_id: UUID, container: ContainerDep) -> Response:
    container.invoice_service.delete(invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@invoice_router.get("/{invoice_id}/export/{export_format}")
def export_invoice(
    invoice_id: UUID, export_format: ExportFormat, container: ContainerDep
) -> Response:
    invoice = container.invoice_service.get_by_id(invoice_id)
    if invoice is None:
        raise DocumentNotFoundError(DocumentKind.INVOICE.value, invoice_id)
    return _export_response(invoice, export_format)


# Receipts
@receipt_router.get("/next-number", response_model=NextNumberResponse)
def next_receipt_number(container: ContainerDep) -> NextNumberResponse:
    return NextNumberResponse(next_number=container.receipt_service.next_number())


@receipt_router.post(
    "", response_model=ReceiptResponse, status_code=status.HTTP_201_CREATED
)
def create_receipt(request: ReceiptCreate, container: ContainerDep) -> ReceiptResponse:
    receipt = container.receipt_service.create(
        _receipt_from_request(request, container)
    )
    return _receipt_to_response(receipt)


@receipt_router.get("", response_model=list[ReceiptResponse])
def list_receipts(container: ContainerDep) -> list[ReceiptResponse]:
    return [_receipt_to_response(r) for r in container.receipt_service.list()]


@receipt_router.get("/{receipt_id}", response_model=ReceiptResponse)
def get_receipt(receipt_id: UUID, container: ContainerDep) -> ReceiptResponse:
    receipt = container.receipt_service.get_by_id(receipt_id)
    if receipt is None:
        raise DocumentNotFoundError(DocumentKind.RECEIPT.value, receipt_id)
    return _receipt_to_response(receipt)


@receipt_router.put("/{receipt_id}", response_model=ReceiptResponse)
def update_receipt(
    receipt_id: UUID, request: ReceiptCreate, container: ContainerDep
) -> ReceiptResponse:
    receipt = container.receipt_service.update(
        receipt_id, _receipt_from_request(request, container)
    )
    return _receipt_to_response(receipt)


@receipt_router.delete("/{receipt_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_receipt(receipt_id: UUID, container: ContainerDep) -> Response:
    container.receipt_service.delete(receipt_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@receipt_router.get("/{receipt_id}/export/{export_format}")
def export_receipt(
    receipt_id: UUID, export_format: ExportFormat, container: ContainerDep
) -> Response:
    receipt = container.receipt_service.get_by_id(receipt_id)
    if receipt is None:
        raise DocumentNotFoundError(DocumentKind.RECEIPT.value, receipt_id)
    return _export_response(receipt, export_format)


# Analytics
@analytics_router.get("/summary", response_model=AnalyticsResponse)
def analytics_summary(
    container: ContainerDep,
    start_date: Annotated[date | None, Query()] = None,
    end_date: Annotated[date | None, Query()] = None,
) -> AnalyticsResponse:
    summary = container.analytics_service.summary(start_date, end_date)
    return AnalyticsResponse(
        start_date=summary.start_date,
        end_date=summary.end_date,
        total_revenue=decimal_to_str(summary.total_revenue),
        invoice_revenue=decimal_to_str(summary.invoice_revenue),
        receipt_revenue=decimal_to_str(summary.receipt_revenue),
        total_tax=decimal_to_str(summary.total_tax),
        net_revenue=decimal_to_str(summary.net_revenue),
        invoice_count=summary.invoice_count,
        receipt_count=summary.receipt_count,
        revenue_by_month={
            month: decimal_to_str(amount)
            for month, amount in summary.revenue_by_month.items()
        },
        invoice_status_counts=summary.invoice_status_counts,
    )
