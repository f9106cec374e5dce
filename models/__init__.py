"""SQLAlchemy models and the DBStorage that persists them."""
from models.base_model import Base
from models.user import User, UserRole
from models.cart import Cart
from models.refresh_token import RefreshToken
from models.category import Category
from models.product import Product
from models.review import Review
from models.db_storage import DBStorage, RecordNotFoundError

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Cart",
    "RefreshToken",
    "Category",
    "Product",
    "Review",
    "DBStorage",
    "RecordNotFoundError",
]
