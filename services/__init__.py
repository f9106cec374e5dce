"""Service layer: constructed once by the app factory and injected."""
from services.auth_service import AuthService
from services.catalog_service import CatalogService, ProductFilters, build_product_query

__all__ = ["AuthService", "CatalogService", "ProductFilters", "build_product_query"]
