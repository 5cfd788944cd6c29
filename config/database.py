from motor.motor_asyncio import AsyncIOMotorClient
from typing import AsyncGenerator
import logging
import asyncio
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from config import settings

logger = logging.getLogger('database')


class Database:
    client = None
    db = None
    MAX_RETRIES = settings.DB_MAX_RETRIES
    RETRY_DELAY = settings.DB_RETRY_DELAY

    REQUIRED_COLLECTIONS = [
        'users', 'service_providers', 'bookings', 'reviews',
        'relatives', 'emergency_contacts', 'counters'
    ]

    @classmethod
    async def connect_db(cls):
        """Create database connection with retries."""
        retries = 0
        last_error = None

        while retries < cls.MAX_RETRIES:
            try:
                mongodb_url = settings.MONGODB_URL
                database_name = settings.DATABASE_NAME

                if not mongodb_url:
                    raise ValueError("MONGODB_URL environment variable is not set")

                logger.info(f"Attempting to connect to MongoDB (Attempt {retries + 1}/{cls.MAX_RETRIES})")

                cls.client = AsyncIOMotorClient(
                    mongodb_url,
                    serverSelectionTimeoutMS=5000,
                    connectTimeoutMS=10000,
                    socketTimeoutMS=10000,
                    maxPoolSize=50,
                    retryWrites=True,
                    retryReads=True,
                    tz_aware=True
                )
                cls.db = cls.client[database_name]

                # Test the connection
                await cls.db.command('ping')

                logger.info(f"Successfully connected to MongoDB database: {database_name}")

                collections = await cls.db.list_collection_names()
                for collection in cls.REQUIRED_COLLECTIONS:
                    if collection not in collections:
                        await cls.db.create_collection(collection)
                        logger.info(f"Created collection: {collection}")

                await cls._ensure_indexes()
                return

            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                last_error = e
                retries += 1
                if retries < cls.MAX_RETRIES:
                    logger.warning(f"Failed to connect to MongoDB (Attempt {retries}/{cls.MAX_RETRIES}). Retrying in {cls.RETRY_DELAY} seconds...")
                    await asyncio.sleep(cls.RETRY_DELAY)
                continue
            except Exception as e:
                logger.error(f"Unexpected error connecting to MongoDB: {str(e)}")
                raise

        logger.error(f"Failed to connect to MongoDB after {cls.MAX_RETRIES} attempts")
        raise last_error

    @classmethod
    async def _ensure_indexes(cls):
        await cls.db.users.create_index("id", unique=True)
        await cls.db.service_providers.create_index("id", unique=True)
        await cls.db.service_providers.create_index([("service_type", ASCENDING), ("rating", DESCENDING)])
        await cls.db.bookings.create_index("id", unique=True)
        await cls.db.bookings.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
        await cls.db.reviews.create_index("id", unique=True)
        # One review per booking
        await cls.db.reviews.create_index("booking_id", unique=True)
        await cls.db.reviews.create_index([("provider_id", ASCENDING), ("created_at", DESCENDING)])
        await cls.db.relatives.create_index(
            [("senior_citizen_id", ASCENDING), ("relative_id", ASCENDING)], unique=True
        )
        await cls.db.emergency_contacts.create_index([("user_id", ASCENDING), ("is_primary", DESCENDING)])

    @classmethod
    async def close_db(cls):
        """Close database connection."""
        if cls.client is not None:
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("MongoDB connection closed.")

    def __init__(self):
        """Initialize database instance."""
        if self.db is None:
            raise Exception("Database not initialized. Call connect_db() first.")

        self.users = self.db.users
        self.service_providers = self.db.service_providers
        self.bookings = self.db.bookings
        self.reviews = self.db.reviews
        self.relatives = self.db.relatives
        self.emergency_contacts = self.db.emergency_contacts
        self.counters = self.db.counters

    @classmethod
    def get_db(cls) -> 'Database':
        """Get database instance."""
        if cls.db is None:
            raise Exception("Database not initialized. Call connect_db() first.")
        return cls()


async def get_db() -> AsyncGenerator[Database, None]:
    """FastAPI dependency for getting database instance."""
    if Database.db is None:
        await Database.connect_db()

    db = Database()
    try:
        yield db
    finally:
        pass  # Connection is managed by the class methods
