"""
Project management commands.

Usage:
    python -m ecofinds serve
    python -m ecofinds init-data
    python -m ecofinds seed-data
    python -m ecofinds check-data
"""

import argparse

from ecofinds import config
from ecofinds.config import COLLECTIONS
from ecofinds.database import get_storage


def serve():
    """Run the API with uvicorn"""
    import uvicorn

    uvicorn.run("ecofinds.main:app", host=config.API_HOST, port=config.API_PORT)


def init_data():
    """Create empty collections that do not exist yet"""
    get_storage().init_collections()
    print("Collections ready: " + ", ".join(COLLECTIONS))


def check_data():
    """Show how many records each collection holds"""
    storage = get_storage()
    for name in COLLECTIONS:
        print(f"{name:<10} {len(storage.get_all(name))}")


def seed_data():
    """Add demo users and listings"""
    from ecofinds import crud
    from ecofinds.errors import DomainError
    from ecofinds.schemas import Identity, ProductCreate, RegisterRequest

    storage = get_storage()
    storage.init_collections()

    demo_users = [
        {"email": "alice@example.com", "username": "alice", "password": "password123"},
        {"email": "bob@example.com", "username": "bob", "password": "password123"},
    ]
    demo_products = [
        {"title": "Vintage denim jacket", "description": "Barely worn, size M", "category": "Clothing", "price": "25.00"},
        {"title": "Oak bookshelf", "description": "Five shelves, solid wood", "category": "Furniture", "price": "60.00"},
        {"title": "Paperback bundle", "description": "Ten sci-fi classics", "category": "Books", "price": "12.50"},
    ]

    for user_data in demo_users:
        try:
            crud.create_user(storage, RegisterRequest(**user_data))
            print(f"Created user: {user_data['username']}")
        except DomainError:
            print(f"User {user_data['username']} already exists")

    seller = crud.get_user_by_email(storage, demo_users[0]["email"])
    identity = Identity(user_id=seller.id, email=seller.email)
    for product_data in demo_products:
        crud.create_product(storage, ProductCreate(**product_data), identity)
        print(f"Listed product: {product_data['title']}")


def main():
    parser = argparse.ArgumentParser(description="EcoFinds API management")
    parser.add_argument(
        "command",
        choices=["serve", "init-data", "seed-data", "check-data"],
        help="Command to run",
    )
    args = parser.parse_args()

    commands = {
        "serve": serve,
        "init-data": init_data,
        "seed-data": seed_data,
        "check-data": check_data,
    }

    commands[args.command]()


if __name__ == "__main__":
    main()
