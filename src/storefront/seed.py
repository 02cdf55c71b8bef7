"""
Seed script -- populates the database with realistic development data.

Run with:
    flask --app storefront.app seed

The script is idempotent for categories, brands and products (checks before
inserting). An admin account is created only when ADMIN_EMAIL and
ADMIN_PASSWORD are set and no user with that email exists yet.
"""

import logging
import os

from flask import Flask
from sqlalchemy import select

from storefront.core.config import current_config
from storefront.core.security import hash_password
from storefront.db import get_session, transaction
from storefront.models import Brand, Category, Product, ProductVariant, User, UserRole
from storefront.utils.formatting import FormattingUtils

logger = logging.getLogger(__name__)

CATEGORIES = [("electronics", "Electronics"), ("clothing", "Clothing"), ("books", "Books")]
BRANDS = [("probook", "ProBook"), ("northwear", "Northwear"), ("oreilly", "O'Reilly")]

PRODUCTS = [
    {
        "sku": "ELEC-LAPTOP-001",
        "title": "ProBook Laptop 15",
        "description": "15-inch laptop, 16 GB RAM, 512 GB SSD.",
        "category": "electronics",
        "brand": "probook",
        "price": "1299.99",
        "variants": [
            {"sku": "ELEC-LAPTOP-001-SLV", "price": "1299.99",
             "options": {"color": "silver", "storage": "512GB"}, "stock": 25},
            {"sku": "ELEC-LAPTOP-001-BLK", "price": "1349.99",
             "options": {"color": "black", "storage": "1TB"}, "stock": 10},
        ],
    },
    {
        "sku": "ELEC-HEADPHONES-002",
        "title": "Wireless Headphones",
        "description": "Over-ear, noise cancelling, 30 hour battery.",
        "category": "electronics",
        "brand": "probook",
        "price": "199.00",
        "compare_at_price": "249.00",
        "stock": 40,
    },
    {
        "sku": "CLO-TSHIRT-001",
        "title": "Classic Cotton T-Shirt",
        "description": "100% organic cotton, unisex fit.",
        "category": "clothing",
        "brand": "northwear",
        "price": "29.99",
        "variants": [
            {"sku": "CLO-TSHIRT-001-S-WHT", "options": {"size": "S", "color": "white"}, "stock": 100},
            {"sku": "CLO-TSHIRT-001-M-WHT", "options": {"size": "M", "color": "white"}, "stock": 150},
            {"sku": "CLO-TSHIRT-001-L-BLK", "options": {"size": "L", "color": "black"}, "stock": 80},
        ],
    },
    {
        "sku": "BOOK-PYFLASK-001",
        "title": "Flask Web Development",
        "description": "Building web applications with Python and Flask.",
        "category": "books",
        "brand": "oreilly",
        "price": "39.99",
        "stock": 200,
    },
]


def _seed_catalog(session) -> int:
    categories = {}
    for slug, title in CATEGORIES:
        category = session.scalars(select(Category).where(Category.slug == slug)).first()
        if category is None:
            category = Category(slug=slug, title=title)
            session.add(category)
        categories[slug] = category

    brands = {}
    for slug, name in BRANDS:
        brand = session.scalars(select(Brand).where(Brand.slug == slug)).first()
        if brand is None:
            brand = Brand(slug=slug, name=name)
            session.add(brand)
        brands[slug] = brand

    created = 0
    for p in PRODUCTS:
        if session.scalars(select(Product).where(Product.sku == p["sku"])).first() is not None:
            continue

        variants = [
            ProductVariant(
                sku=v["sku"],
                price=FormattingUtils.to_decimal(v["price"]) if "price" in v else None,
                stock=v["stock"],
                options=v["options"],
            )
            for v in p.get("variants", [])
        ]
        stock = p.get("stock", 0)
        session.add(Product(
            sku=p["sku"],
            slug=FormattingUtils.slugify(p["title"]),
            title=p["title"],
            description=p["description"],
            price=FormattingUtils.to_decimal(p["price"]),
            compare_at_price=(
                FormattingUtils.to_decimal(p["compare_at_price"]) if "compare_at_price" in p else None
            ),
            stock=stock,
            in_stock=stock > 0 or any(v.stock > 0 for v in variants),
            category=categories[p["category"]],
            brand=brands[p["brand"]],
            variants=variants,
        ))
        created += 1
    return created


def _seed_admin(session) -> bool:
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        return False

    email = email.strip().lower()
    if session.scalars(select(User).where(User.email == email)).first() is not None:
        return False

    rounds = current_config().security.password_hash_rounds
    session.add(User(
        email=email,
        first_name="Store",
        last_name="Admin",
        password_hash=hash_password(password, rounds),
        role=UserRole.ADMIN.value,
    ))
    return True


def seed(app: Flask) -> None:
    with app.app_context():
        session = get_session()
        with transaction(session):
            created = _seed_catalog(session)
            admin_created = _seed_admin(session)

    print("  [+] Categories and brands seeded")
    print(f"  [+] Products seeded ({created} new)")
    if admin_created:
        print("  [+] Admin user created")
    else:
        print("  [-] Admin user skipped (set ADMIN_EMAIL and ADMIN_PASSWORD, or it already exists)")
    logger.info(f"Seed finished: {created} products created")
