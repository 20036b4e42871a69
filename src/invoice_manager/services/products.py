"""Product catalog service."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from invoice_manager.domain.documents import LineItem
from invoice_manager.domain.products import Product, ProductTax
from invoice_manager.domain.taxes import TaxLine
from invoice_manager.domain.value_objects import to_decimal
from invoice_manager.exceptions import (
    InvalidLineItemError,
    InvalidTaxLineError,
    MissingFieldError,
    MultipleDefaultTaxesError,
    ProductNotFoundError,
)
from invoice_manager.logging_config import get_logger
from invoice_manager.repositories.interfaces import ProductRepository
from invoice_manager.services.interfaces import ProductService

logger = get_logger(__name__)


class ProductServiceImpl(ProductService):
    """Catalog management with write-time validation of product taxes.

    A product may carry any number of taxes but at most one of them may be
    flagged as the default.
    """

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def create_product(
        self,
        name: str,
        default_price: Decimal = Decimal("0"),
        description: str | None = None,
        taxes: list[ProductTax] | None = None,
    ) -> Product:
        product = Product(
            name=name.strip() if name else name,
            default_price=to_decimal(default_price),
            description=description,
            taxes=list(taxes or []),
        )
        self._validate(product)
        self._product_repo.add(product)
        logger.info(
            "product_created",
            product_id=product.id,
            name=product.name,
            tax_count=len(product.taxes),
        )
        return product

    def update_product(
        self,
        product_id: UUID,
        name: str,
        default_price: Decimal = Decimal("0"),
        description: str | None = None,
        taxes: list[ProductTax] | None = None,
    ) -> Product:
        product = self._product_repo.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        product.name = name.strip() if name else name
        product.default_price = to_decimal(default_price)
        product.description = description
        product.taxes = list(taxes or [])
        self._validate(product)
        product.touch()
        self._product_repo.update(product)
        logger.info(
            "product_updated",
            product_id=product.id,
            name=product.name,
            tax_count=len(product.taxes),
        )
        return product

    def delete_product(self, product_id: UUID) -> None:
        if self._product_repo.get(product_id) is None:
            raise ProductNotFoundError(product_id)
        self._product_repo.delete(product_id)
        logger.info("product_deleted", product_id=product_id)

    def get_product(self, product_id: UUID) -> Product | None:
        return self._product_repo.get(product_id)

    def list_products(self) -> list[Product]:
        return list(self._product_repo.list_all())

    def prefill_line_item(
        self, product_id: UUID, quantity: Decimal = Decimal("1")
    ) -> LineItem:
        """Build an uncalculated line item from a catalog product.

        The item snapshots the product's name, description and price and
        carries the product's default tax as its only tax line.
        """
        product = self._product_repo.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        default_tax = product.default_tax
        taxes = (
            [TaxLine(tax_name=default_tax.tax_name, tax_rate=default_tax.tax_rate)]
            if default_tax
            else []
        )
        return LineItem(
            product_name=product.name,
            quantity=to_decimal(quantity),
            unit_price=product.default_price,
            taxes=taxes,
            product_id=product.id,
            description=product.description,
        )

    def _validate(self, product: Product) -> None:
        if not product.name or not product.name.strip():
            raise MissingFieldError("name")
        if not product.default_price.is_finite() or product.default_price < 0:
            raise InvalidLineItemError(
                "default_price", str(product.default_price), "must not be negative"
            )
        for tax in product.taxes:
            if not tax.tax_name or not tax.tax_name.strip():
                raise InvalidTaxLineError(tax.tax_name, "tax name is required")
            if not tax.tax_rate.is_finite() or tax.tax_rate < 0:
                raise InvalidTaxLineError(
                    tax.tax_name, "rate must not be negative", rate=str(tax.tax_rate)
                )
        defaults = product.default_tax_names
        if len(defaults) > 1:
            raise MultipleDefaultTaxesError(product.name, defaults)


__all__ = ["ProductServiceImpl"]
