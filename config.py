import os
from dotenv import load_dotenv

load_dotenv()

# Storage
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory")
SEED_MEMORY_STORAGE = os.getenv("SEED_MEMORY_STORAGE", "true").lower() in ("1", "true", "yes")
DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "CarStore")

USER_COLLECTION = "users"
DEALER_COLLECTION = "dealers"
CAR_COLLECTION = "cars"
REVIEW_COLLECTION = "reviews"
FAVORITE_COLLECTION = "favorites"
INVENTORY_LOG_COLLECTION = "inventory_logs"
SALE_COLLECTION = "sales"
DEALER_ANALYTICS_COLLECTION = "dealer_analytics"
COURSE_COLLECTION = "courses"
TEST_COLLECTION = "tests"
ENROLLMENT_COLLECTION = "enrollments"

# Auth
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

# Server
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
