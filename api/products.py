from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app

from models.schemas.product import (
    ProductQuerySchema,
    FeaturedQuerySchema,
    ProductIdSchema,
    SlugSchema,
    ProductOutSchema,
    ProductDetailSchema,
    CategoryOutSchema,
)
from services.catalog_service import CatalogService

bp = Blueprint("products", __name__)

# Schemas
product_query_schema = ProductQuerySchema()
featured_query_schema = FeaturedQuerySchema()
product_id_schema = ProductIdSchema()
slug_schema = SlugSchema()
products_out_schema = ProductOutSchema(many=True)
product_detail_schema = ProductDetailSchema()
category_out_schema = CategoryOutSchema()
categories_out_schema = CategoryOutSchema(many=True)


def catalog() -> CatalogService:
    return current_app.extensions["catalog_service"]


@bp.get("")
def list_products():
    """
    List products with pagination, sorting, filtering, and search
    ---
    tags:
      - Products
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
        maximum: 100
      - in: query
        name: sortBy
        type: string
        enum: [name, price, createdAt]
        default: createdAt
      - in: query
        name: sortOrder
        type: string
        enum: [asc, desc]
        default: desc
      - in: query
        name: categoryId
        type: string
        format: uuid
      - in: query
        name: search
        type: string
        description: "Case-insensitive substring search on name, description and brand"
      - in: query
        name: minPrice
        type: number
      - in: query
        name: maxPrice
        type: number
      - in: query
        name: isFeatured
        type: boolean
    responses:
      200:
        description: List of products with pagination
      400:
        description: Validation error
    """
    filters = product_query_schema.load(request.args.to_dict())
    rows, pagination = catalog().list_products(filters)
    return jsonify(
        {
            "success": True,
            "data": products_out_schema.dump(rows),
            "pagination": pagination,
        }
    )


@bp.get("/featured")
def featured_products():
    """
    Featured products, newest first
    ---
    tags:
      - Products
    parameters:
      - in: query
        name: limit
        type: integer
        default: 10
    responses:
      200:
        description: List of featured products
    """
    params = featured_query_schema.load(request.args.to_dict())
    rows = catalog().featured_products(params["limit"])
    return jsonify({"success": True, "data": products_out_schema.dump(rows)})


@bp.get("/<product_id>")
def get_product(product_id: str):
    """
    Get a single product by id, with its reviews
    ---
    tags:
      - Products
    parameters:
      - in: path
        name: product_id
        type: string
        format: uuid
        required: true
    responses:
      200:
        description: Product found
      400:
        description: Not a UUID
      404:
        description: Not found
    """
    product_id_schema.load({"id": product_id})
    product = catalog().get_product(product_id)
    return jsonify({"success": True, "data": product_detail_schema.dump(product)})


@bp.get("/slug/<slug>")
def get_product_by_slug(slug: str):
    """
    Get a single product by slug (its SKU)
    ---
    tags:
      - Products
    parameters:
      - in: path
        name: slug
        type: string
        required: true
    responses:
      200:
        description: Product found
      404:
        description: Not found
    """
    data = slug_schema.load({"slug": slug.strip()})
    product = catalog().get_product_by_slug(data["slug"])
    return jsonify({"success": True, "data": product_detail_schema.dump(product)})


@bp.get("/categories/all")
def list_categories():
    """
    List active categories with their active product counts
    ---
    tags: [Categories]
    responses:
      200: { description: OK }
    """
    rows = catalog().list_categories()
    return jsonify({"success": True, "data": categories_out_schema.dump(rows)})


@bp.get("/categories/<slug>")
def get_category(slug: str):
    """
    Get a category by slug
    ---
    tags: [Categories]
    parameters:
      - in: path
        name: slug
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    data = slug_schema.load({"slug": slug.strip()})
    category = catalog().get_category_by_slug(data["slug"])
    return jsonify({"success": True, "data": category_out_schema.dump(category)})
