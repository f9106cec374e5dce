from sqlalchemy.orm import relationship
from sqlalchemy import Column, String, Text

from models.base_model import BaseModel, Base, ActiveFlagMixin


class Category(ActiveFlagMixin, BaseModel, Base):
    __tablename__ = "categories"

    name = Column(String(64), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    image = Column(String(512), nullable=True)

    products = relationship("Product", back_populates="category")

    # active_product_count is attached in models/product.py, once Product exists
