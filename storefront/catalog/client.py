"""Catalog Client - async HTTP access to the read-only product catalog API."""

from typing import Any
from urllib.parse import quote

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from storefront.config import DEFAULT_API_URL, DEFAULT_HTTP_TIMEOUT_SECONDS
from storefront.errors import (
    ERROR_CATALOG_HTTP,
    ERROR_CATALOG_INVALID_JSON,
    ERROR_CATALOG_UNAVAILABLE,
    ERROR_PRODUCT_NOT_FOUND,
    CatalogError,
)
from storefront.logging import get_logger, sanitize_id_for_logging

logger = get_logger(__name__)


class CatalogClient:
    """
    Fetches JSON payloads from a Fake-Store style catalog API.

    Endpoints:
    - GET /products (optionally ?limit=N)
    - GET /products/{id}
    - GET /products/categories
    - GET /products/category/{category}

    Transport failures (connect errors, timeouts) are retried; HTTP error
    statuses are not. Every failure surfaces as CatalogError.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        max_attempts: int = 3,
        retry_wait: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_wait = retry_wait
        self._transport = transport

        # HTTP client (lazy init)
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        logger.warning(
            "Catalog request %s failed (%s), retrying (attempt %d)",
            retry_state.args[0],
            type(retry_state.outcome.exception()).__name__,
            retry_state.attempt_number + 1,
        )

    async def _send(self, path: str, params: dict[str, Any] | None) -> httpx.Response:
        client = await self._get_http_client()
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.retry_wait, max=4),
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        return await retrying(client.get, path, params=params)

    async def request_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET path and decode the JSON body.

        Returns:
            Decoded payload, or None for an empty body

        Raises:
            CatalogError: On transport failure, HTTP error status or invalid JSON
        """
        try:
            response = await self._send(path, params)
        except httpx.TransportError as e:
            logger.error("Catalog request %s failed: %s", path, e)
            raise CatalogError(f"{ERROR_CATALOG_UNAVAILABLE}: {e}") from e

        if response.is_error:
            logger.warning("Catalog request %s returned %s", path, response.status_code)
            raise CatalogError(
                f"{ERROR_CATALOG_HTTP} {response.status_code}",
                status_code=response.status_code,
            )

        if not response.content.strip():
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.error("Catalog request %s returned invalid JSON", path)
            raise CatalogError(ERROR_CATALOG_INVALID_JSON, status_code=response.status_code) from e

    # ==================== ENDPOINTS ====================

    async def get_products(self) -> Any:
        return await self.request_json("/products")

    async def get_limited_products(self, limit: int = 20) -> Any:
        return await self.request_json("/products", params={"limit": limit})

    async def get_product(self, product_id: int | str) -> Any:
        """Get a single product; an empty response means the id does not exist."""
        payload = await self.request_json(f"/products/{quote(str(product_id), safe='')}")
        if payload is None:
            logger.info("Product %s not found", sanitize_id_for_logging(product_id))
            raise CatalogError(ERROR_PRODUCT_NOT_FOUND, status_code=404)
        return payload

    async def get_categories(self) -> Any:
        return await self.request_json("/products/categories")

    async def get_products_by_category(self, category: str) -> Any:
        return await self.request_json(f"/products/category/{quote(category, safe='')}")
