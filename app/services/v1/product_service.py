"""
Inventory (products) for the admin registry page.

The clinic API serves products under /api/v1/products; older deployments
only have /api/products. Every call tries v1 first and retries the legacy
path exactly once if v1 fails for any reason.
"""

from typing import Any, Optional
from app.client import ClinicApiClient
from app.schemas import Product, ProductOutcome, ProductWrite
from common import RemoteApiError, get_app_logger
from .appointment_service import describe_error
from .notifier import Notifier
from .payloads import parse_list

logger = get_app_logger(__name__)

PRODUCTS_PATH = "/api/v1/products"
LEGACY_PRODUCTS_PATH = "/api/products"

ALL_CATEGORIES = "all"


def matches_product_search(product: Product, search_term: str) -> bool:
    term = search_term.strip()
    if not term:
        return True
    needle = term.casefold()
    return (
        needle in product.name.casefold()
        or needle in (product.description or "").casefold()
        or needle in (product.supplier or "").casefold()
        or term in (product.barcode or "")
    )


def filter_products(
    products: list[Product],
    search_term: str = "",
    category: Optional[str] = None,
) -> list[Product]:
    """Category is an exact match ("all" or None for every category)."""
    return [
        p
        for p in products
        if (not category or category == ALL_CATEGORIES or p.category == category)
        and matches_product_search(p, search_term)
    ]


class ProductService:
    def __init__(self, api: ClinicApiClient):
        self.api = api

    async def _with_fallback(
        self, method: str, suffix: str = "", body: Any = None
    ) -> Any:
        call = getattr(self.api, method)
        args = () if method in ("get", "delete") else (body,)
        try:
            return await call(f"{PRODUCTS_PATH}{suffix}", *args)
        except RemoteApiError as e:
            logger.info(
                "Products v1 call failed, retrying legacy path",
                method=method.upper(),
                path=f"{PRODUCTS_PATH}{suffix}",
                status_code=e.status_code,
            )
        return await call(f"{LEGACY_PRODUCTS_PATH}{suffix}", *args)

    async def fetch_products(self) -> list[Product]:
        """
        Raises:
            RemoteApiError: both the v1 and the legacy path failed
        """
        payload = await self._with_fallback("get")
        return parse_list(Product, payload, source=PRODUCTS_PATH)

    async def reload(self, notifier: Notifier) -> list[Product]:
        try:
            return await self.fetch_products()
        except RemoteApiError as e:
            notifier.error(
                "Could not load products",
                describe_error(e, "The products could not be loaded"),
                status_code=e.status_code,
            )
            return []

    async def list_products(
        self, search_term: str = "", category: Optional[str] = None
    ) -> ProductOutcome:
        notifier = Notifier("list_products")
        products = await self.reload(notifier)
        return ProductOutcome(
            success=not notifier.has_errors,
            notifications=notifier.notifications,
            products=filter_products(products, search_term, category),
        )

    async def create(self, product: ProductWrite) -> ProductOutcome:
        return await self._save(product, None)

    async def update(self, product_id: int, product: ProductWrite) -> ProductOutcome:
        return await self._save(product, product_id)

    async def _save(
        self, product: ProductWrite, product_id: Optional[int]
    ) -> ProductOutcome:
        creating = product_id is None
        notifier = Notifier("create_product" if creating else "update_product")
        suffix = "" if creating else f"/{product_id}"

        try:
            await self._with_fallback("post" if creating else "put", suffix, product)
        except RemoteApiError as e:
            notifier.error(
                "Could not create the product" if creating else "Could not update the product",
                describe_error(e, "The product could not be saved"),
                status_code=e.status_code,
                product_id=product_id,
            )
            return ProductOutcome(
                success=False,
                notifications=notifier.notifications,
                status_code=e.gateway_status,
            )

        notifier.success("Product created" if creating else "Product updated")
        return ProductOutcome(
            success=True,
            notifications=notifier.notifications,
            products=await self.reload(notifier),
            status_code=201 if creating else 200,
        )

    async def delete(self, product_id: int) -> ProductOutcome:
        notifier = Notifier("delete_product")
        try:
            await self._with_fallback("delete", f"/{product_id}")
        except RemoteApiError as e:
            notifier.error(
                "Could not delete the product",
                describe_error(e, "The product could not be deleted"),
                status_code=e.status_code,
                product_id=product_id,
            )
            return ProductOutcome(
                success=False,
                notifications=notifier.notifications,
                status_code=e.gateway_status,
            )

        notifier.success("Product deleted")
        return ProductOutcome(
            success=True,
            notifications=notifier.notifications,
            products=await self.reload(notifier),
        )

    async def toggle_active(self, product_id: int) -> ProductOutcome:
        """Flip is_active on the product as currently stored upstream."""
        notifier = Notifier("toggle_product")
        error_title = "Could not change the product status"

        try:
            products = await self.fetch_products()
        except RemoteApiError as e:
            notifier.error(
                error_title,
                describe_error(e, "The products could not be loaded"),
                status_code=e.status_code,
            )
            return ProductOutcome(
                success=False,
                notifications=notifier.notifications,
                status_code=e.gateway_status,
            )

        product = next((p for p in products if p.id == product_id), None)
        if product is None:
            notifier.error(error_title, f"Product {product_id} was not found")
            return ProductOutcome(
                success=False,
                notifications=notifier.notifications,
                products=products,
                status_code=404,
            )

        activate = not product.is_active
        try:
            await self._with_fallback("put", f"/{product_id}", {"is_active": activate})
        except RemoteApiError as e:
            notifier.error(
                error_title,
                describe_error(e, "The status could not be changed"),
                status_code=e.status_code,
                product_id=product_id,
            )
            return ProductOutcome(
                success=False,
                notifications=notifier.notifications,
                status_code=e.gateway_status,
            )

        notifier.success("Product activated" if activate else "Product deactivated")
        return ProductOutcome(
            success=True,
            notifications=notifier.notifications,
            products=await self.reload(notifier),
        )


__all__ = [
    "ProductService",
    "PRODUCTS_PATH",
    "LEGACY_PRODUCTS_PATH",
    "filter_products",
    "matches_product_search",
]
