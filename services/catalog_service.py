"""
Read-only catalog queries: products and categories.

Filtering goes through a typed ProductFilters record and an explicit query
builder; only active products and categories are ever returned.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, List, Tuple, Dict, Any

from sqlalchemy import or_, func

from models.category import Category
from models.db_storage import DBStorage
from models.product import Product
from utils.errors import NotFoundError

logger = logging.getLogger(__name__)

MAX_LIMIT = 100

# Sorting allowlist: API field -> SQLAlchemy column
SORT_FIELDS = {
    "name": Product.name,
    "price": Product.price,
    "createdAt": Product.created_at,
}


@dataclass
class ProductFilters:
    category_id: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    is_featured: Optional[bool] = None
    page: int = 1
    limit: int = 20
    sort_by: str = "createdAt"
    sort_order: str = "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def build_product_query(session, filters: ProductFilters):
    """Translate filters into a Query over active products (unordered, unpaged)."""
    query = session.query(Product).filter(Product.is_active.is_(True))

    if filters.category_id:
        query = query.filter(Product.category_id == filters.category_id)

    if filters.search:
        # Case-insensitive literal substring search across name, description and brand
        term = filters.search.strip().lower()
        query = query.filter(
            or_(
                func.lower(Product.name).contains(term, autoescape=True),
                func.lower(Product.description).contains(term, autoescape=True),
                func.lower(Product.brand).contains(term, autoescape=True),
            )
        )

    if filters.min_price is not None:
        query = query.filter(Product.price >= filters.min_price)

    if filters.max_price is not None:
        query = query.filter(Product.price <= filters.max_price)

    if filters.is_featured is not None:
        query = query.filter(Product.is_featured.is_(filters.is_featured))

    return query


def order_clause(filters: ProductFilters):
    col = SORT_FIELDS.get(filters.sort_by)
    if col is None:
        raise ValueError(f"Unsupported sort field: {filters.sort_by}")
    return col.asc() if filters.sort_order == "asc" else col.desc()


class CatalogService:
    def __init__(self, storage: DBStorage):
        self.storage = storage

    def list_products(self, filters: ProductFilters) -> Tuple[List[Product], Dict[str, Any]]:
        session = self.storage.get_session()
        query = build_product_query(session, filters)

        total = query.count()
        rows = (
            query.order_by(order_clause(filters), Product.id)
            .offset(filters.offset)
            .limit(filters.limit)
            .all()
        )
        logger.info("Fetched %d products", len(rows))

        pagination = {
            "page": filters.page,
            "limit": filters.limit,
            "total": total,
            "totalPages": math.ceil(total / filters.limit),
        }
        return rows, pagination

    def get_product(self, product_id: str) -> Product:
        product = self.storage.get(Product, product_id)
        if not product or not product.is_active:
            raise NotFoundError("Product not found")
        return product

    def get_product_by_slug(self, slug: str) -> Product:
        # products have no slug column of their own; the sku doubles as one
        session = self.storage.get_session()
        product = (
            session.query(Product)
            .filter(Product.sku == slug, Product.is_active.is_(True))
            .first()
        )
        if not product:
            raise NotFoundError("Product not found")
        return product

    def featured_products(self, limit: int = 10) -> List[Product]:
        session = self.storage.get_session()
        return (
            session.query(Product)
            .filter(Product.is_active.is_(True), Product.is_featured.is_(True))
            .order_by(Product.created_at.desc())
            .limit(limit)
            .all()
        )

    def list_categories(self) -> List[Category]:
        session = self.storage.get_session()
        return (
            session.query(Category)
            .filter(Category.is_active.is_(True))
            .order_by(Category.name.asc())
            .all()
        )

    def get_category_by_slug(self, slug: str) -> Category:
        session = self.storage.get_session()
        category = session.query(Category).filter(Category.slug == slug).first()
        if not category or not category.is_active:
            raise NotFoundError("Category not found")
        return category
