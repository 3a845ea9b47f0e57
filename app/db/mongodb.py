import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

client = None
db = None


async def create_indexes(database: AsyncIOMotorDatabase) -> None:
    await database.categories.create_index("name", unique=True)
    await database.users.create_index("email", unique=True)
    await database.posts.create_index([("created_at", -1)])
    await database.posts.create_index("category")


async def connect_to_mongo():
    global client, db
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    db = client[settings.MONGODB_DB_NAME]

    await create_indexes(db)
    logger.info("Connected to MongoDB database '%s'", settings.MONGODB_DB_NAME)


async def close_mongo_connection():
    global client
    if client:
        client.close()
        logger.info("MongoDB connection closed")


def get_database():
    return db
