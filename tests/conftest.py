import pytest

from storefront.app import create_app
from storefront.core.config import AppConfig, Config, DatabaseConfig, SecurityConfig
from storefront.core.security import hash_password, issue_access_token
from storefront.db import get_database
from storefront.models import Brand, Category, Product, ProductVariant, User, UserRole
from storefront.utils.formatting import FormattingUtils

PASSWORD = "correct-horse-42"
FRONTEND_ORIGIN = "https://shop.example.com"


@pytest.fixture
def config():
    """In-memory SQLite, a fixed JWT secret and the cheapest bcrypt cost."""
    return Config(
        database=DatabaseConfig(url="sqlite://"),
        security=SecurityConfig(jwt_secret_key="test-secret", password_hash_rounds=4),
        app=AppConfig(cors_origins=[FRONTEND_ORIGIN]),
    )


@pytest.fixture
def app(config):
    app = create_app(config)
    app.config["TESTING"] = True
    database = get_database(app)
    database.create_all()
    yield app
    database.drop_all()
    database.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    """A session outside any request; commit after every write so requests see it."""
    session = get_database(app).session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(session):
    def _make(email="jane@gmail.com", password=PASSWORD, role=UserRole.CUSTOMER.value):
        user = User(
            email=email,
            first_name="Jane",
            last_name="Doe",
            password_hash=hash_password(password, 4),
            role=role,
        )
        session.add(user)
        session.commit()
        return user
    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def other_user(make_user):
    return make_user(email="john@gmail.com")


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@gmail.com", role=UserRole.ADMIN.value)


def bearer(user, config):
    token = issue_access_token(user.id, user.role, config.security)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(user, config):
    return bearer(user, config)


@pytest.fixture
def other_headers(other_user, config):
    return bearer(other_user, config)


@pytest.fixture
def admin_headers(admin, config):
    return bearer(admin, config)


@pytest.fixture
def catalog(session):
    """
    Two categories, one brand, and products priced 5, 10, 25, 50 and 75.

    The 75.00 product is unpublished; the t-shirt has two variants.
    """
    shoes = Category(slug="shoes", title="Shoes")
    hats = Category(slug="hats", title="Hats")
    brand = Brand(slug="acme", name="Acme")
    session.add_all([shoes, hats, brand])

    def product(sku, title, price, category, stock=10, published=True, variants=None):
        variants = variants or []
        p = Product(
            sku=sku,
            slug=FormattingUtils.slugify(title),
            title=title,
            description=f"{title} description",
            price=FormattingUtils.to_decimal(price),
            stock=stock,
            in_stock=stock > 0 or any(v.stock > 0 for v in variants),
            published=published,
            category=category,
            brand=brand,
            variants=variants,
        )
        session.add(p)
        return p

    products = {
        "sock": product("SKU-SOCK", "Wool Sock", "5.00", shoes),
        "sandal": product("SKU-SANDAL", "Beach Sandal", "10.00", shoes, stock=3),
        "sneaker": product("SKU-SNEAKER", "Trail Sneaker", "50.00", shoes),
        "cap": product("SKU-CAP", "Baseball Cap", "25.00", hats),
        "boot": product("SKU-BOOT", "Leather Boot", "75.00", shoes, published=False),
        "tshirt": product(
            "SKU-TSHIRT",
            "Cotton Tee",
            "20.00",
            hats,
            stock=0,
            variants=[
                ProductVariant(sku="SKU-TSHIRT-M", stock=5, options={"size": "M"}),
                ProductVariant(sku="SKU-TSHIRT-L", price=FormattingUtils.to_decimal("22.00"), stock=1,
                               options={"size": "L"}),
            ],
        ),
    }
    session.commit()
    return {"shoes": shoes, "hats": hats, "brand": brand, **products}
