"""Products API router"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from decimal import Decimal
import uuid

from app.core.cache import RedisCache, get_cache
from app.core.database import get_db
from app.core.security import require_admin
from app.models.product import ProductCategory
from app.models.user import User
from app.schemas.base import ApiResponse, Page
from app.services.product_service import ProductService
from app.services.storage import StorageService, get_storage_service
from app.utils.pagination import PaginationParams, get_pagination_params
from .schemas import ProductCreate, ProductResponse, ProductUpdate

router = APIRouter()

@router.get("", response_model=ApiResponse[Page[ProductResponse]])
async def get_products(
    category: Optional[ProductCategory] = Query(None),
    is_featured: Optional[bool] = Query(None),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    params: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db)
):
    """Get products with filters and pagination"""
    page = await ProductService(db).list_products(
        params,
        category=category,
        is_featured=is_featured,
        min_price=min_price,
        max_price=max_price,
    )
    page["items"] = [ProductResponse.model_validate(p) for p in page["items"]]
    return ApiResponse(data=page)

@router.get("/featured", response_model=ApiResponse[List[ProductResponse]])
async def get_featured_products(
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache)
):
    """Get featured products (cached)"""
    products = await ProductService(db, cache).get_featured_products()
    return ApiResponse(data=products)

@router.get("/recommendations", response_model=ApiResponse[List[ProductResponse]])
async def get_recommended_products(
    limit: int = Query(4, ge=1, le=20),
    db: AsyncSession = Depends(get_db)
):
    products = await ProductService(db).get_recommended_products(limit)
    return ApiResponse(data=[ProductResponse.model_validate(p) for p in products])

@router.get("/category/{category}", response_model=ApiResponse[List[ProductResponse]])
async def get_products_by_category(
    category: ProductCategory,
    db: AsyncSession = Depends(get_db)
):
    products = await ProductService(db).get_products_by_category(category)
    return ApiResponse(data=[ProductResponse.model_validate(p) for p in products])

@router.get("/{product_id}", response_model=ApiResponse[ProductResponse])
async def get_product_by_id(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    product = await ProductService(db).get_product(product_id)
    return ApiResponse(data=ProductResponse.model_validate(product))

# Admin routes

@router.post("", response_model=ApiResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(
    request: ProductCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
    storage: StorageService = Depends(get_storage_service)
):
    product = await ProductService(db, cache, storage).create_product(**request.model_dump())
    return ApiResponse(message="Product created successfully", data=ProductResponse.model_validate(product))

@router.patch("/{product_id}", response_model=ApiResponse[ProductResponse])
async def update_product(
    product_id: uuid.UUID,
    request: ProductUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
    storage: StorageService = Depends(get_storage_service)
):
    product = await ProductService(db, cache, storage).update_product(
        product_id, request.model_dump(exclude_unset=True)
    )
    return ApiResponse(message="Product updated successfully", data=ProductResponse.model_validate(product))

@router.patch("/{product_id}/featured", response_model=ApiResponse[ProductResponse])
async def toggle_featured_product(
    product_id: uuid.UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache)
):
    product = await ProductService(db, cache).toggle_featured(product_id)
    return ApiResponse(data=ProductResponse.model_validate(product))

@router.delete("/{product_id}", response_model=ApiResponse[None])
async def delete_product(
    product_id: uuid.UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
    storage: StorageService = Depends(get_storage_service)
):
    await ProductService(db, cache, storage).delete_product(product_id)
    return ApiResponse(message="Product deleted successfully")
