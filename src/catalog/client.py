"""
Read-only client for the public product catalog REST API.

Every request is a GET retried with exponential backoff; payloads are checked
for shape before they are turned into Product records.
"""
from __future__ import annotations

import asyncio
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, List, Optional
from urllib.parse import quote

import httpx

from db.models import Product, Rating
from utils.config import Config
from utils.exceptions import CatalogInvalidResponse, CatalogUnavailable
from utils.logger import get_logger

_logger = get_logger(__name__)


def parse_product(data: Any) -> Product:
    """Build a Product from one JSON object, or raise CatalogInvalidResponse."""
    if not isinstance(data, dict):
        raise CatalogInvalidResponse("Invalid product data: expected an object")

    pid = data.get("id")
    if not isinstance(pid, int) or isinstance(pid, bool):
        raise CatalogInvalidResponse("Invalid product data: id must be a number")

    title = data.get("title")
    if not isinstance(title, str):
        raise CatalogInvalidResponse(f"Invalid product {pid}: title must be a string")

    raw_price = data.get("price")
    if isinstance(raw_price, bool) or not isinstance(raw_price, (int, float, str)):
        raise CatalogInvalidResponse(f"Invalid product {pid}: price must be a number")
    try:
        price = Decimal(str(raw_price))
    except InvalidOperation:
        raise CatalogInvalidResponse(f"Invalid product {pid}: price must be a number")
    if not price.is_finite() or price < 0:
        raise CatalogInvalidResponse(f"Invalid product {pid}: bad price {raw_price}")

    category = data.get("category", "")
    if not isinstance(category, str):
        raise CatalogInvalidResponse(f"Invalid product {pid}: category must be a string")

    rating_data = data.get("rating") or {}
    if not isinstance(rating_data, dict):
        raise CatalogInvalidResponse(f"Invalid product {pid}: rating must be an object")
    try:
        rating = Rating(
            rate=round(float(rating_data.get("rate", 0)), 1),
            count=max(int(rating_data.get("count", 0)), 0),
        )
    except (TypeError, ValueError):
        raise CatalogInvalidResponse(f"Invalid product {pid}: malformed rating")

    return Product(
        id=pid,
        title=title,
        price=price,
        description=str(data.get("description") or ""),
        category=category,
        image=str(data.get("image") or ""),
        rating=rating,
    )


class CatalogClient:
    """
    Async client for ``{base_url}/products``.

    Caches the last successful full listing for ``freshness_seconds``; that
    cache is a convenience, callers can always pass ``force=True``.
    """

    def __init__(
        self,
        base_url: str = Config.CATALOG_BASE_URL,
        *,
        max_attempts: int = Config.CATALOG_MAX_ATTEMPTS,
        backoff_seconds: float = Config.CATALOG_BACKOFF_SECONDS,
        freshness_seconds: float = Config.CATALOG_FRESHNESS_SECONDS,
        timeout: float = Config.CATALOG_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        self.freshness_seconds = freshness_seconds
        self._sleep = sleep
        self._clock = clock
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

        self._products: List[Product] = []
        self._last_fetched: Optional[float] = None

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ---------------------------
    # Transport
    # ---------------------------

    async def _get(self, path: str, allow_not_found: bool = False) -> httpx.Response:
        """
        GET ``path`` with retries.

        Any transport error or non-2xx status is retried, sleeping
        ``backoff * 2**n`` between attempts. With ``allow_not_found`` a 404 is
        returned straight away instead.
        """
        last_status: Optional[int] = None
        last_message = ""
        for attempt in range(self.max_attempts):
            try:
                response = await self._http.get(path)
            except httpx.HTTPError as e:
                last_status = None
                last_message = f"{type(e).__name__}: {e}"
            else:
                if response.status_code == 404 and allow_not_found:
                    return response
                if response.is_success:
                    return response
                last_status = response.status_code
                last_message = f"HTTP error! status: {response.status_code}"

            _logger.warning(
                f"GET {path} failed (attempt {attempt + 1}/{self.max_attempts}): "
                f"{last_message}"
            )
            if attempt < self.max_attempts - 1:
                await self._sleep(self.backoff_seconds * (2**attempt))

        raise CatalogUnavailable(
            f"Catalog unavailable after {self.max_attempts} attempts: {last_message}",
            status=last_status,
        )

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise CatalogInvalidResponse(f"Invalid JSON from catalog: {e}") from e

    async def _get_list(self, path: str) -> List[Any]:
        data = self._json(await self._get(path))
        if not isinstance(data, list):
            raise CatalogInvalidResponse("Invalid response format: expected array")
        return data

    # ---------------------------
    # Products
    # ---------------------------

    def is_fresh(self) -> bool:
        if self._last_fetched is None:
            return False
        return self._clock() - self._last_fetched < self.freshness_seconds

    @property
    def cached_products(self) -> List[Product]:
        return list(self._products)

    async def list_products(self, force: bool = False) -> List[Product]:
        if not force and self.is_fresh():
            _logger.debug("Serving product list from cache.")
            return list(self._products)

        products = [parse_product(p) for p in await self._get_list("/products")]
        self._products = products
        self._last_fetched = self._clock()
        _logger.info(f"Fetched {len(products)} products from catalog.")
        return list(products)

    async def get_product(self, product_id: int) -> Optional[Product]:
        """Return the product, or None when the catalog does not know the id."""
        response = await self._get(f"/products/{int(product_id)}", allow_not_found=True)
        if response.status_code == 404 or not response.content.strip():
            return None
        data = self._json(response)
        if data is None:
            return None
        product = parse_product(data)
        self._remember(product)
        return product

    async def list_categories(self) -> List[str]:
        categories = await self._get_list("/products/categories")
        if not all(isinstance(c, str) for c in categories):
            raise CatalogInvalidResponse("Invalid category list: expected strings")
        return categories

    async def list_products_by_category(self, category: str) -> List[Product]:
        path = f"/products/category/{quote(category)}"
        return [parse_product(p) for p in await self._get_list(path)]

    def _remember(self, product: Product) -> None:
        for i, cached in enumerate(self._products):
            if cached.id == product.id:
                self._products[i] = product
                return
        self._products.append(product)


def search_products(
    products: List[Product], query: str, category: Optional[str] = None
) -> List[Product]:
    """
    Case-insensitive search over title, description and category.

    Empty query matches everything; ``category`` narrows to an exact category.
    """
    phrase = (query or "").strip().lower()
    words = [w for w in phrase.split() if w]

    def matches(p: Product) -> bool:
        if category and p.category != category:
            return False
        if not phrase:
            return True
        haystack = f"{p.title} {p.description} {p.category}".lower()
        return phrase in haystack or all(w in haystack for w in words)

    return [p for p in products if matches(p)]

