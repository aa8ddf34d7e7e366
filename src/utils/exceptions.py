"""
Custom exceptions for the storefront application.
"""
from typing import Dict, Optional


class StorefrontError(Exception):
    """Base exception for storefront operations"""

    pass


class CatalogError(StorefrontError):
    """Base exception for product catalog failures"""

    pass


class CatalogUnavailable(CatalogError):
    """Raised when the catalog cannot be reached after all attempts"""

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)


class CatalogInvalidResponse(CatalogError):
    """Raised when the catalog answers with a malformed payload"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class EmptyCartError(StorefrontError):
    """Raised when an order is attempted with no line items"""

    def __init__(self):
        super().__init__("Cannot create an order from an empty cart")


class ValidationError(StorefrontError):
    """Raised when validation fails, carrying per-field messages"""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__(
            "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        )


class InvalidCredentials(StorefrontError):
    """Raised when the demo login fails"""

    def __init__(self):
        super().__init__("Invalid credentials")


class PersistenceError(StorefrontError):
    """Raised when the persisted state cannot be read or written"""

    pass
