"""Pydantic v2 schemas for API request/response models.

Tax rates cross the API as percentages (20 for 20%); money and quantities
are returned as strings so no precision is lost in JSON.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str
    version: str


# Product Schemas
class ProductTaxCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    tax_name: str = Field(..., max_length=100)
    tax_rate: Decimal = Field(..., description="Rate as a percentage, e.g. 20 for 20%")
    is_default: bool = False


class ProductCreate(BaseModel):
    """Schema for creating or replacing a product."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., max_length=255)
    description: str | None = None
    default_price: Decimal = Decimal("0")
    taxes: list[ProductTaxCreate] = Field(default_factory=list)


class ProductTaxResponse(BaseModel):
    id: UUID
    tax_name: str
    tax_rate: str
    is_default: bool


class ProductResponse(BaseModel):
    id: UUID
    name: str
    description: str | None
    default_price: str
    taxes: list[ProductTaxResponse]
    created_at: datetime
    updated_at: datetime


# Line item schemas
class TaxLineCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    tax_name: str = Field(..., max_length=100)
    tax_rate: Decimal = Field(..., description="Rate as a percentage, e.g. 20 for 20%")


class LineItemCreate(BaseModel):
    """A line item as submitted; any derived amounts are recomputed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    product_id: UUID | None = None
    product_name: str = Field(..., max_length=255)
    description: str | None = None
    quantity: Decimal
    unit_price: Decimal
    taxes: list[TaxLineCreate] = Field(default_factory=list)


class TaxLineResponse(BaseModel):
    id: UUID
    tax_name: str
    tax_rate: str
    tax_amount: str


class LineItemResponse(BaseModel):
    id: UUID
    product_id: UUID | None
    product_name: str
    description: str | None
    quantity: str
    unit_price: str
    subtotal: str
    tax_amount: str
    line_total: str
    taxes: list[TaxLineResponse]


# Invoice Schemas
class InvoiceCreate(BaseModel):
    """Schema for creating or replacing an invoice."""

    model_config = ConfigDict(str_strip_whitespace=True)

    invoice_number: str = Field(..., max_length=50)
    issuer_name: str = Field(..., max_length=255)
    issuer_address: str | None = None
    issuer_tax_id: str | None = None
    client_name: str = Field(..., max_length=255)
    client_address: str | None = None
    client_tax_id: str | None = None
    issue_date: date
    due_date: date | None = None
    status: str = Field(default="draft", pattern=r"^(draft|sent|paid|overdue)$")
    notes: str | None = None
    items: list[LineItemCreate] = Field(default_factory=list)


class InvoiceStatusUpdate(BaseModel):
    status: str = Field(..., pattern=r"^(draft|sent|paid|overdue)$")


class InvoiceResponse(BaseModel):
    id: UUID
    invoice_number: str
    issuer_name: str
    issuer_address: str | None
    issuer_tax_id: str | None
    client_name: str | None
    client_address: str | None
    client_tax_id: str | None
    issue_date: date
    due_date: date | None
    status: str
    notes: str | None
    subtotal: str
    total_tax: str
    total: str
    items: list[LineItemResponse]
    created_at: datetime
    updated_at: datetime


# Receipt Schemas
class ReceiptCreate(BaseModel):
    """Schema for creating or replacing a receipt."""

    model_config = ConfigDict(str_strip_whitespace=True)

    receipt_number: str = Field(..., max_length=50)
    issuer_name: str = Field(..., max_length=255)
    issuer_address: str | None = None
    issue_date: date
    payment_method: str | None = Field(
        default=None, pattern=r"^(cash|card|transfer|check)$"
    )
    notes: str | None = None
    items: list[LineItemCreate] = Field(default_factory=list)


class ReceiptResponse(BaseModel):
    id: UUID
    receipt_number: str
    issuer_name: str
    issuer_address: str | None
    issue_date: date
    payment_method: str
    notes: str | None
    subtotal: str
    total_tax: str
    total: str
    items: list[LineItemResponse]
    created_at: datetime
    updated_at: datetime


class NextNumberResponse(BaseModel):
    next_number: str


# Analytics Schemas
class AnalyticsResponse(BaseModel):
    start_date: date | None
    end_date: date | None
    total_revenue: str
    invoice_revenue: str
    receipt_revenue: str
    total_tax: str
    net_revenue: str
    invoice_count: int
    receipt_count: int
    revenue_by_month: dict[str, str]
    invoice_status_counts: dict[str, int]
