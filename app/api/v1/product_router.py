from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from app.schemas import ProductOutcome, ProductWrite
from app.services.v1 import ProductService
from .deps import get_product_service
from .outcomes import unwrap_outcome

product_router = APIRouter(
    prefix="/v1/products",
    tags=["Inventory"],
)

_RESPONSES = {
    404: {"description": "Product not found"},
    502: {"description": "Both the v1 and the legacy products endpoint failed"},
}


@product_router.get(
    "",
    response_model=ProductOutcome,
    summary="List products",
    description="""
    Reads /api/v1/products, falling back to /api/products. A failed load still
    answers 200 with an empty list and an error notification.
    """,
)
async def list_products(
    search: str = Query("", description="Name, description, supplier or barcode"),
    category: Optional[str] = Query(None, description='Exact category, or "all"'),
    service: ProductService = Depends(get_product_service),
):
    return await service.list_products(search, category)


@product_router.post(
    "",
    response_model=ProductOutcome,
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
    responses=_RESPONSES,
)
async def create_product(
    product: ProductWrite,
    response: Response,
    service: ProductService = Depends(get_product_service),
):
    return unwrap_outcome(await service.create(product), response)


@product_router.put(
    "/{product_id}",
    response_model=ProductOutcome,
    summary="Update product",
    responses=_RESPONSES,
)
async def update_product(
    product_id: int,
    product: ProductWrite,
    response: Response,
    service: ProductService = Depends(get_product_service),
):
    return unwrap_outcome(await service.update(product_id, product), response)


@product_router.delete(
    "/{product_id}",
    response_model=ProductOutcome,
    summary="Delete product",
    responses=_RESPONSES,
)
async def delete_product(
    product_id: int,
    response: Response,
    service: ProductService = Depends(get_product_service),
):
    return unwrap_outcome(await service.delete(product_id), response)


@product_router.post(
    "/{product_id}/toggle-active",
    response_model=ProductOutcome,
    summary="Activate or deactivate product",
    responses=_RESPONSES,
)
async def toggle_product(
    product_id: int,
    response: Response,
    service: ProductService = Depends(get_product_service),
):
    return unwrap_outcome(await service.toggle_active(product_id), response)


__all__ = ["product_router"]
