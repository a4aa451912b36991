from motor.motor_asyncio import AsyncIOMotorClient
import os
from dotenv import load_dotenv
import logging

load_dotenv()

logger = logging.getLogger(__name__)

# For Docker: mongodb://mongo:27017
# For local dev: mongodb://localhost:27017
default_mongo_uri = "mongodb://localhost:27017"
mongo_uri = os.getenv("MONGO_URI", default_mongo_uri)
db_name = os.getenv("MONGO_DB_NAME", "TrueFit")

# Collection names
USERS = "Users"
SUBSCRIBERS = "Subscribers"
FORUMS = "Forums"
CLASSES = "Classes"
APPLICATIONS = "Applications"
SLOTS = "Slots"
PAYMENTS = "Payments"
REVIEWS = "Reviews"

connection_options = {
    "serverSelectionTimeoutMS": 30000,
    "connectTimeoutMS": 30000,
    "socketTimeoutMS": 30000,
    "retryWrites": True,
    "retryReads": True,
    "maxPoolSize": 50,
    "minPoolSize": 5,
    "maxIdleTimeMS": 45000,  # Close idle connections after 45 seconds
    "w": "majority",
}


class Database:
    """Process-wide MongoDB connection pool.

    The client is opened by the startup hook and closed by the shutdown hook;
    request handlers acquire the database handle through ``get_db``.
    """

    def __init__(self, uri: str = mongo_uri, name: str = db_name):
        self.uri = uri
        self.name = name
        self.client = None

    def connect(self):
        if self.client is not None:
            return self.client
        try:
            self.client = AsyncIOMotorClient(self.uri, **connection_options)
            logger.info(f"✅ MongoDB client initialized (database: {self.name}, URI: {self.uri[:50]}...)")
            logger.info(f"   Connection options: pool_size={connection_options['maxPoolSize']}")
        except Exception as e:
            logger.error(f"❌ Failed to initialize MongoDB client: {e}")
            raise
        return self.client

    def close(self):
        if self.client is not None:
            self.client.close()
            self.client = None
            logger.info("🔌 MongoDB client closed")

    @property
    def db(self):
        if self.client is None:
            self.connect()
        return self.client[self.name]

    async def ping(self) -> bool:
        try:
            await self.db.command("ping")
            return True
        except Exception as e:
            logger.warning(f"⚠️ MongoDB ping failed: {e}")
            return False


database = Database()


async def get_db():
    """FastAPI dependency yielding the database handle for one request."""
    yield database.db


async def ensure_indexes(db):
    await db[USERS].create_index("email")
    await db[APPLICATIONS].create_index("userEmail")
    await db[PAYMENTS].create_index("userEmail")
    await db[SLOTS].create_index("trainerId")
    logger.info("✅ MongoDB indexes created successfully")
