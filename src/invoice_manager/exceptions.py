"""Domain exception hierarchy for Invoice Manager.

All domain-specific exceptions inherit from InvoiceManagerError.
This allows catching all application errors with a single base class
while preserving specificity for individual error types.
"""

from typing import Any
from uuid import UUID


class InvoiceManagerError(Exception):
    """Base exception for all Invoice Manager errors.

    Includes an error_code and status_code for API responses, extra
    context, and whether the caller may retry the operation.
    """

    error_code: str = "INVM_ERROR"
    status_code: int = 500
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        if status_code:
            self.status_code = status_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "retryable": self.retryable,
            "context": self.context,
        }


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(InvoiceManagerError):
    """Base exception for malformed or out-of-range input."""

    error_code = "VALIDATION_ERROR"
    status_code = 422


class MissingFieldError(ValidationError):
    """Raised when a required string field is empty."""

    error_code = "MISSING_FIELD"

    def __init__(self, field_name: str) -> None:
        super().__init__(
            f"Required field is empty: {field_name}",
            context={"field": field_name},
        )


class InvalidLineItemError(ValidationError):
    """Raised when a line item's quantity or unit price is out of range."""

    error_code = "INVALID_LINE_ITEM"

    def __init__(self, field_name: str, value: str, reason: str) -> None:
        super().__init__(
            f"Invalid {field_name} '{value}': {reason}",
            context={"field": field_name, "value": value, "reason": reason},
        )


class InvalidTaxLineError(ValidationError):
    """Raised when a tax line has an empty name or a negative rate."""

    error_code = "INVALID_TAX_LINE"

    def __init__(self, tax_name: str, reason: str, rate: str | None = None) -> None:
        context: dict[str, Any] = {"tax_name": tax_name, "reason": reason}
        if rate is not None:
            context["rate"] = rate
        super().__init__(f"Invalid tax line '{tax_name}': {reason}", context=context)


class EmptyDocumentError(ValidationError):
    """Raised when a document has no line items."""

    error_code = "EMPTY_DOCUMENT"

    def __init__(self, kind: str) -> None:
        super().__init__(
            f"A {kind} requires at least one line item",
            context={"kind": kind},
        )


class UnknownProductError(ValidationError):
    """Raised when a line item references a product that is not in the catalog."""

    error_code = "UNKNOWN_PRODUCT"

    def __init__(self, product_id: UUID | str, product_name: str) -> None:
        super().__init__(
            f"Line item '{product_name}' references an unknown product: {product_id}",
            context={"product_id": str(product_id), "product_name": product_name},
        )


class MultipleDefaultTaxesError(ValidationError):
    """Raised when more than one tax of a product is flagged as default."""

    error_code = "MULTIPLE_DEFAULT_TAXES"

    def __init__(self, product_name: str, tax_names: list[str]) -> None:
        super().__init__(
            f"Product '{product_name}' has more than one default tax: "
            f"{', '.join(tax_names)}",
            context={"product_name": product_name, "tax_names": tax_names},
        )


# =============================================================================
# Not Found Errors
# =============================================================================


class NotFoundError(InvoiceManagerError):
    """Base exception for operations targeting a missing record."""

    error_code = "NOT_FOUND"
    status_code = 404


class DocumentNotFoundError(NotFoundError):
    """Raised when an invoice or receipt cannot be found."""

    error_code = "DOCUMENT_NOT_FOUND"

    def __init__(self, kind: str, document_id: UUID | str) -> None:
        super().__init__(
            f"{kind.capitalize()} not found: {document_id}",
            context={"kind": kind, "document_id": str(document_id)},
        )


class ProductNotFoundError(NotFoundError):
    """Raised when a product cannot be found."""

    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: UUID | str) -> None:
        super().__init__(
            f"Product not found: {product_id}",
            context={"product_id": str(product_id)},
        )


# =============================================================================
# Conflict Errors
# =============================================================================


class ConflictError(InvoiceManagerError):
    """Base exception for uniqueness violations.

    Conflicts are retryable: the caller should pick a new value and retry.
    """

    error_code = "CONFLICT"
    status_code = 409
    retryable = True


class DuplicateDocumentNumberError(ConflictError):
    """Raised when a document number is already in use for its kind."""

    error_code = "DUPLICATE_DOCUMENT_NUMBER"

    def __init__(self, kind: str, document_number: str) -> None:
        super().__init__(
            f"{kind.capitalize()} number already exists: {document_number}",
            context={"kind": kind, "document_number": document_number},
        )


# =============================================================================
# Persistence Errors
# =============================================================================


class PersistenceError(InvoiceManagerError):
    """Raised when a storage transaction fails and is rolled back."""

    error_code = "PERSISTENCE_ERROR"
    status_code = 500

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Storage operation '{operation}' failed: {reason}",
            context={"operation": operation, "reason": reason},
        )
