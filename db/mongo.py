from motor.motor_asyncio import AsyncIOMotorClient
import os
import re
from dotenv import load_dotenv
import logging
import certifi
from datetime import timezone
import sys
from services.errors import StoreError

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017/calendar_app")
MONGODB_DB = os.getenv("MONGODB_DB")
DEFAULT_DB_NAME = "calendar_app"

EVENTS_COLLECTION = "events"
TODO_LISTS_COLLECTION = "todolists"


def mask_mongo_uri(uri):
    """Hide the credentials part of a MongoDB URI for logging"""
    if not uri:
        return uri
    return re.sub(r'(mongodb(\+srv)?://)[^@/]+(@)', r'\1***:***\3', uri)


def client_options(uri):
    """Connection options for the given URI"""
    options = {
        "connectTimeoutMS": 30000,
        "serverSelectionTimeoutMS": 30000,
        "retryWrites": True,
        "retryReads": True,
        # BSON dates are UTC; hand them back as aware datetimes
        "tz_aware": True,
        "tzinfo": timezone.utc,
    }
    if uri.startswith("mongodb+srv://"):
        # Atlas clusters require TLS
        options["tls"] = True
        options["tlsCAFile"] = certifi.where()
    return options


# Log basic info
logger.info(f"Python version: {sys.version}")
logger.info(f"Environment: {os.getenv('ENVIRONMENT', 'development')}")
logger.info(f"MongoDB URI: {mask_mongo_uri(MONGODB_URI)}")

# Initialize MongoDB client
try:
    logger.info("Creating MongoDB client...")
    client = AsyncIOMotorClient(MONGODB_URI, **client_options(MONGODB_URI))
    if MONGODB_DB:
        db = client.get_database(MONGODB_DB)
    else:
        db = client.get_default_database(DEFAULT_DB_NAME)
    logger.info(f"MongoDB client created for database '{db.name}'")
except Exception as e:
    logger.error(f"MongoDB connection error: {str(e)}")
    client = None
    db = None


async def verify_connection():
    """Verify MongoDB connection"""
    if client is None:
        logger.error("MongoDB client not initialized")
        raise ValueError("MongoDB client not initialized")

    try:
        await client.admin.command('ping')
        logger.info("MongoDB connection verified")
        return True
    except Exception as e:
        logger.error(f"MongoDB connection verification failed: {str(e)}")
        raise


def get_db():
    """Get database instance"""
    if db is None:
        logger.error("Database not initialized")
        raise StoreError("Database not available")
    return db


async def init_db():
    """Initialize database collections and indexes"""
    if client is None or db is None:
        logger.error("Database not initialized")
        raise ValueError("Database not initialized")

    try:
        await verify_connection()
        logger.info("Creating database indexes...")
        await db[EVENTS_COLLECTION].create_index([("status", 1)])
        await db[EVENTS_COLLECTION].create_index([("todoLists", 1)])
        await db[TODO_LISTS_COLLECTION].create_index([("status", 1)])
        logger.info("Database initialization complete")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise


def close_db():
    """Close the process-wide client"""
    if client is not None:
        client.close()
        logger.info("MongoDB connection closed")


# Initialize database if run directly
if __name__ == "__main__":
    import asyncio
    if client is not None and db is not None:
        asyncio.run(init_db())
    else:
        logger.error("Cannot initialize database - client or db not initialized")
