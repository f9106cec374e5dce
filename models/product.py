from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Numeric,
    Text,
    Boolean,
    JSON,
    CheckConstraint,
    Index,
    select,
    func,
)
from sqlalchemy.orm import relationship, column_property

from models.base_model import BaseModel, Base, ActiveFlagMixin
from models.category import Category


class Product(ActiveFlagMixin, BaseModel, Base):
    __tablename__ = "products"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    brand = Column(String(128), nullable=True)
    # the public "slug" lookup matches on sku
    sku = Column(String(100), nullable=False, unique=True, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    images = Column(JSON, nullable=True, default=list)
    is_featured = Column(Boolean, nullable=False, default=False)

    category_id = Column(String(36), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)

    category = relationship("Category", back_populates="products", lazy="joined")
    reviews = relationship(
        "Review",
        back_populates="product",
        order_by="Review.created_at.desc()",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_nonnegative"),
        CheckConstraint("stock >= 0", name="ck_products_stock_nonnegative"),
        Index("ix_products_name", "name"),
    )

    @property
    def review_count(self) -> int:
        return len(self.reviews)

    @property
    def average_rating(self) -> float:
        if not self.reviews:
            return 0.0
        return round(sum(r.rating for r in self.reviews) / len(self.reviews), 1)


Category.active_product_count = column_property(
    select(func.count(Product.id))
    .where(Product.category_id == Category.id, Product.is_active.is_(True))
    .correlate_except(Product)
    .scalar_subquery()
)
