"""
Common Error Constants

Centralized error messages shared by the catalog client and storage backends.
"""

# Catalog errors
ERROR_CATALOG_UNAVAILABLE = "Catalog service unavailable"
ERROR_CATALOG_HTTP = "Catalog request failed with HTTP status"
ERROR_CATALOG_INVALID_JSON = "Catalog returned invalid JSON"
ERROR_PRODUCT_NOT_FOUND = "Product not found"

# Storage errors
ERROR_REDIS_NOT_CONFIGURED = "UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set"


class CatalogError(RuntimeError):
    """Raised by the catalog client when a payload cannot be fetched."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
