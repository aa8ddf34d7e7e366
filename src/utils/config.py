"""
Configuration management for the storefront application.
Loads settings from environment variables.
"""
import os
from decimal import Decimal


class Config:
    """Application configuration"""

    # Catalog settings
    CATALOG_BASE_URL: str = os.getenv("CATALOG_BASE_URL", "https://fakestoreapi.com")
    CATALOG_TIMEOUT_SECONDS: float = float(os.getenv("CATALOG_TIMEOUT_SECONDS", "10"))
    CATALOG_MAX_ATTEMPTS: int = int(os.getenv("CATALOG_MAX_ATTEMPTS", "3"))
    CATALOG_BACKOFF_SECONDS: float = float(os.getenv("CATALOG_BACKOFF_SECONDS", "1.0"))
    CATALOG_FRESHNESS_SECONDS: int = int(
        os.getenv("CATALOG_FRESHNESS_SECONDS", str(60 * 60))
    )  # 1 hour default

    # Logging
    LOG_FILE: str = os.getenv("STOREFRONT_LOG_FILE", "")

    # Local persistence
    DB_PATH: str = os.getenv("STOREFRONT_DB_PATH", "data/storefront.sqlite")
    STATE_KEY: str = "root"
    STATE_VERSION: int = 1

    # Pricing
    FREE_SHIPPING_THRESHOLD: Decimal = Decimal("50.00")
    SHIPPING_FEE: Decimal = Decimal("5.99")
    TAX_RATE: Decimal = Decimal("0.08")

    # Paging
    USERS_PER_PAGE: int = 5
    PRODUCTS_PER_PAGE: int = 10

    # Demo admin credential, not a security boundary
    DEMO_USERNAME: str = "admin"
    DEMO_PASSWORD: str = "admin123"
