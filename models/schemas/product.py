from marshmallow import Schema, fields, validate, validates_schema, pre_load, post_load, ValidationError, EXCLUDE

from models.schemas.common import slug_validators, strip_blank, validate_uuid
from services.catalog_service import ProductFilters, SORT_FIELDS, MAX_LIMIT

QUERY_FIELDS = (
    "categoryId",
    "search",
    "minPrice",
    "maxPrice",
    "isFeatured",
    "page",
    "limit",
    "sortBy",
    "sortOrder",
)


class ProductQuerySchema(Schema):
    """Query string of GET /products, loaded into a ProductFilters."""

    class Meta:
        unknown = EXCLUDE

    category_id = fields.String(data_key="categoryId", validate=validate_uuid("Category ID"))
    search = fields.String(
        validate=validate.Length(min=1, max=100, error="Search query must be between 1 and 100 characters")
    )
    min_price = fields.Float(
        data_key="minPrice",
        validate=validate.Range(min=0, error="Minimum price must be a positive number"),
        error_messages={"invalid": "Minimum price must be a positive number"},
    )
    max_price = fields.Float(
        data_key="maxPrice",
        validate=validate.Range(min=0, error="Maximum price must be a positive number"),
        error_messages={"invalid": "Maximum price must be a positive number"},
    )
    is_featured = fields.Boolean(
        data_key="isFeatured",
        truthy={"true", "1"},
        falsy={"false", "0"},
        error_messages={"invalid": "isFeatured must be a boolean value (true or false)"},
    )
    page = fields.Integer(
        load_default=1,
        validate=validate.Range(min=1, error="Page must be a positive integer"),
        error_messages={"invalid": "Page must be a positive integer"},
    )
    limit = fields.Integer(
        load_default=20,
        validate=validate.Range(min=1, max=MAX_LIMIT, error=f"Limit must be between 1 and {MAX_LIMIT}"),
        error_messages={"invalid": f"Limit must be between 1 and {MAX_LIMIT}"},
    )
    sort_by = fields.String(
        data_key="sortBy",
        load_default="createdAt",
        validate=validate.OneOf(
            list(SORT_FIELDS), error="Sort field must be one of: " + ", ".join(SORT_FIELDS)
        ),
    )
    sort_order = fields.String(
        data_key="sortOrder",
        load_default="desc",
        validate=validate.OneOf(["asc", "desc"], error="Sort order must be either asc or desc"),
    )

    @pre_load
    def drop_blank(self, data, **kwargs):
        return strip_blank(dict(data), QUERY_FIELDS)

    @validates_schema
    def check_price_range(self, data, **kwargs):
        lo, hi = data.get("min_price"), data.get("max_price")
        if lo is not None and hi is not None and lo > hi:
            raise ValidationError("Minimum price cannot exceed maximum price", "minPrice")

    @post_load
    def to_filters(self, data, **kwargs):
        return ProductFilters(**data)


class FeaturedQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    limit = fields.Integer(
        load_default=10,
        validate=validate.Range(min=1, max=MAX_LIMIT, error=f"Limit must be between 1 and {MAX_LIMIT}"),
        error_messages={"invalid": f"Limit must be between 1 and {MAX_LIMIT}"},
    )


class ProductIdSchema(Schema):
    id = fields.String(
        required=True,
        validate=validate_uuid("Product ID"),
        error_messages={"required": "Product ID is required"},
    )


class SlugSchema(Schema):
    slug = fields.String(required=True, validate=slug_validators)


class CategorySummarySchema(Schema):
    id = fields.String()
    name = fields.String()
    slug = fields.String()


class ReviewerSchema(Schema):
    id = fields.String()
    first_name = fields.String(data_key="firstName")
    last_name = fields.String(data_key="lastName")


class ReviewOutSchema(Schema):
    id = fields.String()
    rating = fields.Integer()
    comment = fields.String(allow_none=True)
    created_at = fields.DateTime(data_key="createdAt")
    user = fields.Nested(ReviewerSchema)


class ProductOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    description = fields.String(allow_none=True)
    brand = fields.String(allow_none=True)
    sku = fields.String()
    price = fields.Decimal(as_string=True)
    stock = fields.Integer()
    images = fields.List(fields.String(), allow_none=True)
    is_active = fields.Boolean(data_key="isActive")
    is_featured = fields.Boolean(data_key="isFeatured")
    category_id = fields.String(data_key="categoryId")
    category = fields.Nested(CategorySummarySchema)
    average_rating = fields.Float(data_key="averageRating")
    review_count = fields.Integer(data_key="reviewCount")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class ProductDetailSchema(ProductOutSchema):
    reviews = fields.List(fields.Nested(ReviewOutSchema))


class CategoryOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    description = fields.String(allow_none=True)
    slug = fields.String()
    image = fields.String(allow_none=True)
    product_count = fields.Integer(attribute="active_product_count", data_key="productCount")
