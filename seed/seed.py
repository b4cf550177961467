"""Seed script: populate the database with demo data.

Run as:
    python -m seed.seed

Requires DATABASE_URL, JWT_SECRET_KEY and JWT_REFRESH_SECRET_KEY environment
variables (or a .env file). Safe to re-run: existing rows are left alone.
"""

import asyncio
import hashlib
import os
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from inventrack.enums import MovementType, Role
from inventrack.models import Category, Product, User
from inventrack.services.auth import hash_password
from inventrack.services.movements import record_movement

# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

USERS: list[dict] = [
    {
        "username": "admin",
        "email": "admin@inventrack.local",
        "password": "admin123",
        "role": Role.admin,
    },
    {
        "username": "demo",
        "email": "demo@inventrack.local",
        "password": "demo123",
        "role": Role.user,
    },
]

# ---------------------------------------------------------------------------
# Categories and products
# ---------------------------------------------------------------------------

CATEGORIES: list[dict] = [
    {"name": "Electronics", "description": "Devices, components and accessories"},
    {"name": "Office Supplies", "description": "Stationery and desk essentials"},
    {"name": "Furniture", "description": "Desks, chairs and storage"},
    {"name": "Cleaning", "description": "Janitorial and cleaning products"},
    {"name": "Tools", "description": "Hand and power tools"},
]

PRODUCTS: list[dict] = [
    # Electronics
    {"name": "USB-C Charger 65W", "category": "Electronics", "price": "39.90", "min_stock": 15, "barcode": "7501000000011"},
    {"name": "Wireless Mouse", "category": "Electronics", "price": "24.50", "min_stock": 20, "barcode": "7501000000028"},
    {"name": "Mechanical Keyboard", "category": "Electronics", "price": "89.00", "min_stock": 10, "barcode": "7501000000035"},
    {"name": "27in Monitor", "category": "Electronics", "price": "279.99", "min_stock": 5, "barcode": "7501000000042"},
    {"name": "HDMI Cable 2m", "category": "Electronics", "price": "8.75", "min_stock": 40, "barcode": "7501000000059"},
    # Office Supplies
    {"name": "A4 Paper Ream", "category": "Office Supplies", "price": "5.20", "min_stock": 50, "barcode": "7502000000010"},
    {"name": "Ballpoint Pens (12)", "category": "Office Supplies", "price": "3.95", "min_stock": 30, "barcode": "7502000000027"},
    {"name": "Stapler", "category": "Office Supplies", "price": "11.40", "min_stock": 10, "barcode": None},
    {"name": "Sticky Notes Pack", "category": "Office Supplies", "price": "4.10", "min_stock": 25, "barcode": "7502000000041"},
    # Furniture
    {"name": "Ergonomic Chair", "category": "Furniture", "price": "219.00", "min_stock": 4, "barcode": "7503000000019"},
    {"name": "Standing Desk", "category": "Furniture", "price": "399.00", "min_stock": 2, "barcode": "7503000000026"},
    {"name": "Filing Cabinet", "category": "Furniture", "price": "149.50", "min_stock": 3, "barcode": None},
    # Cleaning
    {"name": "Disinfectant 1L", "category": "Cleaning", "price": "6.30", "min_stock": 20, "barcode": "7504000000018"},
    {"name": "Microfiber Cloths (10)", "category": "Cleaning", "price": "9.90", "min_stock": 15, "barcode": "7504000000025"},
    {"name": "Trash Bags (50)", "category": "Cleaning", "price": "7.45", "min_stock": 20, "barcode": "7504000000032"},
    # Tools
    {"name": "Cordless Drill", "category": "Tools", "price": "129.00", "min_stock": 5, "barcode": "7505000000017"},
    {"name": "Screwdriver Set", "category": "Tools", "price": "19.99", "min_stock": 10, "barcode": "7505000000024"},
    {"name": "Tape Measure 5m", "category": "Tools", "price": "7.80", "min_stock": 12, "barcode": "7505000000031"},
]


def _det_int(seed_str: str, lo: int, hi: int) -> int:
    """Return a deterministic int in [lo, hi] derived from seed_str via SHA-256."""
    h = int(hashlib.sha256(seed_str.encode()).hexdigest(), 16)
    return lo + (h % (hi - lo + 1))


# ---------------------------------------------------------------------------
# Seed functions
# ---------------------------------------------------------------------------


async def seed_users(session: AsyncSession) -> dict[str, User]:
    """Create the demo users if they don't already exist.  Returns username -> User."""
    users: dict[str, User] = {}
    for data in USERS:
        result = await session.execute(select(User).where(User.email == data["email"]))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                username=data["username"],
                email=data["email"],
                password_hash=hash_password(data["password"]),
                role=data["role"].value,
            )
            session.add(user)
            await session.flush()
            print(f"  ✓ Created {data['role'].value} user: {data['email']}")
        else:
            print(f"  ✓ User already exists: {data['email']}")
        users[data["username"]] = user
    return users


async def seed_categories(session: AsyncSession) -> dict[str, Category]:
    """Create categories idempotently.  Returns a mapping of name -> Category."""
    category_map: dict[str, Category] = {}
    for data in CATEGORIES:
        result = await session.execute(
            select(Category).where(
                func.lower(Category.name) == data["name"].lower(),
                Category.is_active.is_(True),
            )
        )
        category = result.scalar_one_or_none()
        if category is None:
            category = Category(name=data["name"], description=data["description"])
            session.add(category)
            await session.flush()
            print(f"  ✓ Created category: {data['name']}")
        else:
            print(f"  ✓ Category already exists: {data['name']}")
        category_map[data["name"]] = category
    return category_map


async def seed_products(
    session: AsyncSession,
    category_map: dict[str, Category],
    owners: list[User],
) -> None:
    """Create products idempotently (checked by name) with a CREATE movement each.

    Quantities are derived from the product name so repeated runs on a fresh
    database produce the same mix of LOW / MEDIUM / HIGH stock.
    """
    for index, data in enumerate(PRODUCTS):
        result = await session.execute(
            select(Product).where(Product.name == data["name"], Product.is_active.is_(True))
        )
        if result.scalar_one_or_none() is not None:
            print(f"  ✓ Product already exists: {data['name']}")
            continue

        owner = owners[index % len(owners)]
        quantity = _det_int(data["name"], 0, data["min_stock"] * 4)
        product = Product(
            name=data["name"],
            description=f"{data['name']} ({data['category']})",
            category_id=category_map[data["category"]].id,
            price=Decimal(data["price"]),
            quantity=quantity,
            min_stock=data["min_stock"],
            barcode=data["barcode"],
            created_by=owner.id,
        )
        session.add(product)
        await session.flush()

        await record_movement(
            session,
            product_id=product.id,
            user_id=owner.id,
            movement_type=MovementType.CREATE,
            quantity_before=0,
            quantity_after=quantity,
            reason="Initial stock",
        )
        print(f"  ✓ Created product: {data['name']} (qty {quantity})")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def main() -> None:
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL environment variable is required")

    print("InvenTrack Seed Script")
    print("=" * 50)

    engine = create_async_engine(database_url, pool_pre_ping=True)
    session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session, session.begin():
        print("\n[1/3] Seeding users...")
        users = await seed_users(session)

        print("\n[2/3] Seeding categories...")
        category_map = await seed_categories(session)

        print("\n[3/3] Seeding products...")
        await seed_products(session, category_map, list(users.values()))

    await engine.dispose()
    print("\n✓ Seed complete!")


if __name__ == "__main__":
    asyncio.run(main())
