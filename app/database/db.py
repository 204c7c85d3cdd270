from pymongo import MongoClient
from pymongo.database import Database
from config import (
    DATABASE_URL,
    DATABASE_NAME,
    USER_COLLECTION,
    DEALER_COLLECTION,
    CAR_COLLECTION,
    REVIEW_COLLECTION,
    FAVORITE_COLLECTION,
    INVENTORY_LOG_COLLECTION,
    SALE_COLLECTION,
    DEALER_ANALYTICS_COLLECTION,
    COURSE_COLLECTION,
    TEST_COLLECTION,
    ENROLLMENT_COLLECTION,
)


def create_client(url: str = DATABASE_URL) -> MongoClient:
    return MongoClient(url, serverSelectionTimeoutMS=5000, tz_aware=True)


class Collections:
    """Handles to every collection the application reads or writes."""

    def __init__(self, db: Database):
        self.db = db
        self.users = db[USER_COLLECTION]
        self.dealers = db[DEALER_COLLECTION]
        self.cars = db[CAR_COLLECTION]
        self.reviews = db[REVIEW_COLLECTION]
        self.favorites = db[FAVORITE_COLLECTION]
        self.inventory_logs = db[INVENTORY_LOG_COLLECTION]
        self.sales = db[SALE_COLLECTION]
        self.dealer_analytics = db[DEALER_ANALYTICS_COLLECTION]
        self.courses = db[COURSE_COLLECTION]
        self.tests = db[TEST_COLLECTION]
        self.enrollments = db[ENROLLMENT_COLLECTION]


def get_collections(client: MongoClient, name: str = DATABASE_NAME) -> Collections:
    return Collections(client[name])
