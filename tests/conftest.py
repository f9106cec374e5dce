from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from api import create_app
from models.category import Category
from models.product import Product
from models.review import Review
from tests.helpers import PASSWORD


@pytest.fixture
def app():
    # every app gets its own in-memory SQLite database
    app = create_app("testing")
    yield app
    app.extensions["storage"].drop_all()
    app.extensions["storage"].dispose()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def storage(app):
    storage = app.extensions["storage"]
    yield storage
    storage.close()


@pytest.fixture
def auth_service(app):
    return app.extensions["auth_service"]


@pytest.fixture
def catalog_service(app):
    return app.extensions["catalog_service"]


@pytest.fixture
def tokens(app):
    return app.extensions["token_issuer"]


@pytest.fixture
def registered(auth_service):
    """A signed-up customer: the signup result plus the plaintext password."""
    result = auth_service.signup("a@x.com", PASSWORD, "Ada", "Byron", phone="+1 555 123 4567")
    return {**result, "password": PASSWORD}


@pytest.fixture
def catalog(storage, auth_service):
    """
    Two active categories (one empty) and an inactive one; four products of
    which one is inactive; reviews on the first product.
    """
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)

    shoes = Category(name="Shoes", slug="shoes", description="Footwear")
    bags = Category(name="Bags", slug="bags")
    hidden = Category(name="Archive", slug="archive", is_active=False)
    for c in (shoes, bags, hidden):
        storage.new(c)

    runner = Product(
        name="Trail Runner", description="Light running shoe", brand="Nimbus",
        sku="trail-runner", price=Decimal("89.99"), stock=5, images=["a.jpg"],
        is_featured=True, category_id=shoes.id, created_at=base,
    )
    boot = Product(
        name="Winter Boot", description="Warm leather boot", brand="Frost",
        sku="winter-boot", price=Decimal("149.00"), stock=2,
        is_featured=False, category_id=shoes.id, created_at=base + timedelta(days=1),
    )
    sandal = Product(
        name="Beach Sandal", description="Cheap and cheerful", brand="Nimbus",
        sku="beach-sandal", price=Decimal("19.50"), stock=10,
        is_featured=True, category_id=shoes.id, created_at=base + timedelta(days=2),
    )
    retired = Product(
        name="Retired Runner", description="No longer sold", brand="Nimbus",
        sku="retired-runner", price=Decimal("10.00"), stock=0, is_active=False,
        category_id=shoes.id, created_at=base + timedelta(days=3),
    )
    for p in (runner, boot, sandal, retired):
        storage.new(p)
    storage.save()

    reviewer = auth_service.signup("reviewer@x.com", PASSWORD, "Rita", "View")["user"]
    storage.new(Review(product_id=runner.id, user_id=reviewer.id, rating=5, comment="Great",
                       created_at=base + timedelta(days=5)))
    storage.new(Review(product_id=runner.id, user_id=reviewer.id, rating=4, comment="Good",
                       created_at=base + timedelta(days=6)))
    storage.new(Review(product_id=runner.id, user_id=reviewer.id, rating=4,
                       created_at=base + timedelta(days=7)))
    storage.save()

    ids = {
        "shoes": shoes.id,
        "bags": bags.id,
        "hidden": hidden.id,
        "runner": runner.id,
        "boot": boot.id,
        "sandal": sandal.id,
        "retired": retired.id,
        "reviewer": reviewer.id,
    }
    storage.close()
    return ids

