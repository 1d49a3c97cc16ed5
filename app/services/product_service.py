"""
Product catalog service
"""

from decimal import Decimal
from typing import Optional, Dict, Any, List
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func

from app.core.cache import RedisCache
from app.core.config import settings
from app.core.exceptions import NotFoundException, ValidationException
from app.models.cart import CartItem
from app.models.order import OrderItem
from app.models.product import Product, ProductCategory
from app.services.storage import StorageService
from app.utils.pagination import PaginationParams, paginate
from app.utils.validators import normalize_text, sanitize_html

logger = logging.getLogger(__name__)

FEATURED_PRODUCTS_CACHE_KEY = "featured_products"

UPDATABLE_FIELDS = ("name", "description", "price", "category", "stock", "is_featured")


class ProductService:
    """Catalog reads and admin writes

    The featured product list is cached and dropped whenever a write could
    change it.
    """

    def __init__(
        self,
        db: AsyncSession,
        cache: Optional[RedisCache] = None,
        storage: Optional[StorageService] = None
    ):
        self.db = db
        self.cache = cache
        self.storage = storage

    async def list_products(
        self,
        params: PaginationParams,
        category: Optional[ProductCategory] = None,
        is_featured: Optional[bool] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None
    ) -> Dict[str, Any]:
        if min_price is not None and max_price is not None and min_price > max_price:
            raise ValidationException("min_price cannot exceed max_price")

        query = select(Product).order_by(Product.created_at.desc())
        if category is not None:
            query = query.where(Product.category == category)
        if is_featured is not None:
            query = query.where(Product.is_featured.is_(is_featured))
        if min_price is not None:
            query = query.where(Product.price >= min_price)
        if max_price is not None:
            query = query.where(Product.price <= max_price)
        return await paginate(self.db, query, params)

    async def get_product(self, product_id: uuid.UUID) -> Product:
        product = await self.db.get(Product, product_id)
        if product is None:
            raise NotFoundException("Product not found")
        return product

    async def get_products_by_category(self, category: ProductCategory) -> List[Product]:
        result = await self.db.execute(
            select(Product)
            .where(Product.category == category)
            .order_by(Product.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_featured_products(self) -> List[Dict[str, Any]]:
        """Featured products, served from cache when warm"""
        if self.cache:
            cached = await self.cache.get(FEATURED_PRODUCTS_CACHE_KEY)
            if cached is not None:
                return cached

        result = await self.db.execute(
            select(Product)
            .where(Product.is_featured.is_(True))
            .order_by(Product.created_at.desc())
        )
        featured = [product.to_dict() for product in result.scalars().all()]

        if self.cache:
            await self.cache.set(
                FEATURED_PRODUCTS_CACHE_KEY,
                featured,
                expire=settings.FEATURED_PRODUCTS_CACHE_TTL
            )
        return featured

    async def invalidate_featured_cache(self) -> None:
        if self.cache:
            await self.cache.delete(FEATURED_PRODUCTS_CACHE_KEY)

    async def get_recommended_products(self, limit: int = 4) -> List[Product]:
        """Random sample of the catalog"""
        result = await self.db.execute(
            select(Product).order_by(func.random()).limit(limit)
        )
        return list(result.scalars().all())

    async def create_product(
        self,
        name: str,
        description: str,
        price: Decimal,
        category: ProductCategory,
        stock: int = 0,
        image: Optional[str] = None,
        is_featured: bool = False
    ) -> Product:
        """
        Create a product, uploading its image when one is given

        Args:
            image: Base64 data URI or URL handed to the image host
        """
        product = Product(
            name=normalize_text(name),
            description=sanitize_html(description),
            price=price,
            category=category,
            stock=stock,
            is_featured=is_featured,
        )
        if image:
            uploaded = await self._require_storage().upload_image(image)
            product.image = uploaded["url"]
            product.image_public_id = uploaded["public_id"]

        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        logger.info(f"Created product {product.id}")

        if product.is_featured:
            await self.invalidate_featured_cache()
        return product

    async def update_product(self, product_id: uuid.UUID, changes: Dict[str, Any]) -> Product:
        """
        Apply partial changes; a new image replaces and deletes the old upload
        """
        product = await self.get_product(product_id)
        was_featured = product.is_featured

        for field in UPDATABLE_FIELDS:
            if field in changes and changes[field] is not None:
                value = changes[field]
                if field == "name":
                    value = normalize_text(value)
                elif field == "description":
                    value = sanitize_html(value)
                setattr(product, field, value)

        image_changed = False
        if changes.get("image"):
            storage = self._require_storage()
            uploaded = await storage.upload_image(changes["image"])
            await storage.delete_image(product.image_public_id)
            product.image = uploaded["url"]
            product.image_public_id = uploaded["public_id"]
            image_changed = True

        await self.db.commit()
        await self.db.refresh(product)

        if image_changed or was_featured or product.is_featured:
            await self.invalidate_featured_cache()
        return product

    async def toggle_featured(self, product_id: uuid.UUID) -> Product:
        product = await self.get_product(product_id)
        product.is_featured = not product.is_featured
        await self.db.commit()
        await self.db.refresh(product)
        await self.invalidate_featured_cache()
        return product

    async def delete_product(self, product_id: uuid.UUID) -> None:
        product = await self.get_product(product_id)
        was_featured = product.is_featured

        if product.image_public_id:
            await self._require_storage().delete_image(product.image_public_id)

        # Order items keep their snapshot without the reference
        await self.db.execute(
            update(OrderItem).where(OrderItem.product_id == product_id).values(product_id=None)
        )
        await self.db.execute(delete(CartItem).where(CartItem.product_id == product_id))
        await self.db.execute(delete(Product).where(Product.id == product_id))
        await self.db.commit()
        logger.info(f"Deleted product {product_id}")

        if was_featured:
            await self.invalidate_featured_cache()

    def _require_storage(self) -> StorageService:
        if self.storage is None:
            self.storage = StorageService()
        return self.storage
