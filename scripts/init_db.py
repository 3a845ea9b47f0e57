import asyncio
import os
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv

from app.core.security import get_password_hash
from app.db.mongodb import create_indexes
from app.models.user import UserRole

load_dotenv()

MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "blog_db")

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com").lower()
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "Admin123!")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Administrator")

DEFAULT_CATEGORY = os.getenv("DEFAULT_CATEGORY", "General")


async def init_db():
    client = AsyncIOMotorClient(MONGODB_URL)
    db = client[MONGODB_DB_NAME]
    now = datetime.now(timezone.utc)

    print("Creating indexes...")
    await create_indexes(db)

    print("Creating admin user...")

    # Проверка существования админа
    existing_admin = await db.users.find_one({"email": ADMIN_EMAIL})
    if existing_admin:
        print("Admin user already exists")
    else:
        admin_user = {
            "name": ADMIN_NAME,
            "email": ADMIN_EMAIL,
            "password": get_password_hash(ADMIN_PASSWORD),
            "role": UserRole.ADMIN.value,
            "created_at": now,
        }

        result = await db.users.insert_one(admin_user)
        print(f"Admin user created with ID: {result.inserted_id}")

    print("Creating default category...")

    if await db.categories.find_one({"name": DEFAULT_CATEGORY}):
        print("Default category already exists")
    else:
        result = await db.categories.insert_one({"name": DEFAULT_CATEGORY, "created_at": now})
        print(f"Category '{DEFAULT_CATEGORY}' created with ID: {result.inserted_id}")

    print("Database initialization completed")

    client.close()


if __name__ == "__main__":
    asyncio.run(init_db())
