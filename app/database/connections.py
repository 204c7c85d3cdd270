from contextlib import asynccontextmanager
import logging
from fastapi import Request
from pymongo import errors

from app.database.db import create_client
from app.database.memory_storage import MemStorage
from app.database.mongo_storage import MongoStorage
from app.database.storage import Storage
from config import DATABASE_NAME, DATABASE_URL, SEED_MEMORY_STORAGE, STORAGE_BACKEND

logger = logging.getLogger(__name__)


class StorageConfigurationError(RuntimeError):
    pass


def connect(url: str = DATABASE_URL, database_name: str = DATABASE_NAME) -> MongoStorage:
    try:
        storage = MongoStorage(create_client(url), database_name)
        storage.ping()
        return storage
    except errors.ConfigurationError as err:
        raise StorageConfigurationError(f"Invalid MongoDB configuration: {err}") from err
    except errors.ConnectionFailure as err:
        raise StorageConfigurationError(f"Unable to connect to the MongoDB server: {err}") from err
    except errors.OperationFailure as err:
        raise StorageConfigurationError(f"Authentication or command error: {err}") from err


def create_storage(backend: str = STORAGE_BACKEND) -> Storage:
    backend = backend.lower()
    if backend == "memory":
        logger.info("🧠 Using in-memory storage (seeded=%s)", SEED_MEMORY_STORAGE)
        return MemStorage(seed=SEED_MEMORY_STORAGE)
    if backend == "mongo":
        storage = connect()
        logger.info("✅ MongoDB connection established for database %s", DATABASE_NAME)
        return storage
    raise StorageConfigurationError(f"Unknown storage backend: {backend}")


@asynccontextmanager
async def lifespan(app):
    """Storage lifecycle: chosen once at startup, shared by every request."""
    try:
        app.state.storage = create_storage()
    except Exception as e:
        logger.error(f"❌ Storage initialisation failed at startup: {e}")
        raise

    yield

    storage = getattr(app.state, "storage", None)
    if isinstance(storage, MongoStorage):
        storage.close()
    logger.info("🚪 Shutting down FastAPI app.")


def get_storage(request: Request) -> Storage:
    return request.app.state.storage
