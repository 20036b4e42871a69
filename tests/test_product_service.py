"""Tests for the product catalog service."""

from decimal import Decimal
from uuid import uuid4

import pytest

from invoice_manager.domain.products import ProductTax
from invoice_manager.exceptions import (
    InvalidLineItemError,
    InvalidTaxLineError,
    MissingFieldError,
    MultipleDefaultTaxesError,
    ProductNotFoundError,
)
from invoice_manager.services.calculator import calculate_line_item
from invoice_manager.services.products import ProductServiceImpl


def vat(is_default: bool = False) -> ProductTax:
    return ProductTax(tax_name="VAT", tax_rate=Decimal("0.2"), is_default=is_default)


def city_tax(is_default: bool = False) -> ProductTax:
    return ProductTax(
        tax_name="City Tax", tax_rate=Decimal("0.025"), is_default=is_default
    )


class TestCreateProduct:
    def test_create_product(self, product_service: ProductServiceImpl) -> None:
        product = product_service.create_product(
            "  Web Development ",
            default_price=Decimal("1500"),
            taxes=[vat(is_default=True), city_tax()],
        )

        loaded = product_service.get_product(product.id)
        assert loaded.name == "Web Development"
        assert loaded.default_tax.tax_name == "VAT"

    def test_requires_name(self, product_service: ProductServiceImpl) -> None:
        with pytest.raises(MissingFieldError):
            product_service.create_product("   ")

    def test_rejects_negative_price(self, product_service: ProductServiceImpl) -> None:
        with pytest.raises(InvalidLineItemError):
            product_service.create_product("Widget", default_price=Decimal("-1"))

    def test_rejects_negative_tax_rate(
        self, product_service: ProductServiceImpl
    ) -> None:
        with pytest.raises(InvalidTaxLineError):
            product_service.create_product(
                "Widget", taxes=[ProductTax(tax_name="VAT", tax_rate=Decimal("-0.1"))]
            )

    def test_rejects_two_default_taxes(
        self, product_service: ProductServiceImpl
    ) -> None:
        with pytest.raises(MultipleDefaultTaxesError) as exc_info:
            product_service.create_product(
                "Widget", taxes=[vat(is_default=True), city_tax(is_default=True)]
            )

        assert exc_info.value.context["tax_names"] == ["VAT", "City Tax"]
        assert product_service.list_products() == []


class TestUpdateProduct:
    def test_update_product(self, product_service: ProductServiceImpl) -> None:
        product = product_service.create_product("Widget", taxes=[vat()])

        updated = product_service.update_product(
            product.id, "Gadget", default_price=Decimal("9.99"), taxes=[city_tax()]
        )

        loaded = product_service.get_product(product.id)
        assert loaded.name == "Gadget"
        assert loaded.default_price == Decimal("9.99")
        assert [t.tax_name for t in loaded.taxes] == ["City Tax"]
        assert updated.updated_at >= product.created_at

    def test_update_missing(self, product_service: ProductServiceImpl) -> None:
        with pytest.raises(ProductNotFoundError):
            product_service.update_product(uuid4(), "Widget")

    def test_update_rejects_two_default_taxes(
        self, product_service: ProductServiceImpl
    ) -> None:
        product = product_service.create_product("Widget", taxes=[vat(True)])

        with pytest.raises(MultipleDefaultTaxesError):
            product_service.update_product(
                product.id, "Widget", taxes=[vat(True), city_tax(True)]
            )

        assert len(product_service.get_product(product.id).taxes) == 1


class TestDeleteProduct:
    def test_delete_product(self, product_service: ProductServiceImpl) -> None:
        product = product_service.create_product("Widget")

        product_service.delete_product(product.id)

        assert product_service.get_product(product.id) is None

    def test_delete_missing(self, product_service: ProductServiceImpl) -> None:
        with pytest.raises(ProductNotFoundError):
            product_service.delete_product(uuid4())


class TestPrefillLineItem:
    def test_uses_default_tax(self, product_service: ProductServiceImpl) -> None:
        product = product_service.create_product(
            "Consulting",
            default_price=Decimal("100"),
            description="Hourly",
            taxes=[city_tax(), vat(is_default=True)],
        )

        item = product_service.prefill_line_item(product.id, Decimal("2"))

        assert item.product_id == product.id
        assert item.product_name == "Consulting"
        assert item.description == "Hourly"
        assert item.unit_price == Decimal("100")
        assert [(t.tax_name, t.tax_rate) for t in item.taxes] == [
            ("VAT", Decimal("0.2"))
        ]
        assert calculate_line_item(item).line_total == Decimal("240")

    def test_falls_back_to_first_tax(self, product_service: ProductServiceImpl) -> None:
        product = product_service.create_product(
            "Consulting", taxes=[city_tax(), vat()]
        )

        item = product_service.prefill_line_item(product.id)

        assert item.quantity == Decimal("1")
        assert [t.tax_name for t in item.taxes] == ["City Tax"]

    def test_product_without_taxes(self, product_service: ProductServiceImpl) -> None:
        product = product_service.create_product("Consulting")

        assert product_service.prefill_line_item(product.id).taxes == []

    def test_missing_product(self, product_service: ProductServiceImpl) -> None:
        with pytest.raises(ProductNotFoundError):
            product_service.prefill_line_item(uuid4())
