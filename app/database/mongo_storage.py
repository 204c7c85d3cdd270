import logging
import re
from typing import Any, Dict, List, Optional
from pymongo import DESCENDING, MongoClient
from pymongo.collection import Collection

from app.database.db import get_collections
from app.database.storage import FEATURED_LIMIT, TEXT_SEARCH_FIELDS, Storage, tokenize
from app.models.assessment.assessment import CourseTest
from app.models.base import utcnow
from app.models.car.car import Car
from app.models.course.course import Course
from app.models.dealer.dealer import Dealer
from app.models.enrollment.enrollment import Enrollment
from app.models.favorite.favorite import FavoriteCar
from app.models.inventory.inventory import DealerAnalytics, InventoryLog, Sale
from app.models.review.review import Review
from app.models.user.user import User
from app.utilities.convert_object_id import from_document, to_document, to_object_id
from config import DATABASE_NAME

logger = logging.getLogger(__name__)


def _contains(value: str) -> dict:
    return {"$regex": re.escape(value), "$options": "i"}


def _range(low=None, high=None) -> Optional[dict]:
    bounds = {}
    if low is not None:
        bounds["$gte"] = low
    if high is not None:
        bounds["$lte"] = high
    return bounds or None


def build_search_query(filters: Dict[str, Any]) -> dict:
    query: Dict[str, Any] = {"available": True}
    if filters.get("make"):
        query["make"] = _contains(filters["make"])
    if filters.get("model"):
        query["model"] = _contains(filters["model"])
    price = _range(filters.get("min_price"), filters.get("max_price"))
    if price:
        query["price"] = price
    year = _range(filters.get("min_year"), filters.get("max_year"))
    if year:
        query["year"] = year
    for key in ("fuel_type", "transmission", "body_type"):
        if filters.get(key):
            query[key] = filters[key]
    if filters.get("max_mileage") is not None:
        query["mileage"] = {"$lte": filters["max_mileage"]}
    return query


def build_text_query(tokens: List[str]) -> dict:
    clauses = []
    for token in tokens:
        alternatives: List[dict] = [{field: _contains(token)} for field in TEXT_SEARCH_FIELDS]
        if token.isascii() and token.isdigit():
            alternatives.append({"year": int(token)})
        clauses.append({"$or": alternatives})
    return {"$and": [{"available": True}, *clauses]}


class MongoStorage(Storage):
    """MongoDB store. One pymongo client, one document per entity, no transactions."""

    def __init__(self, client: MongoClient, database_name: str = DATABASE_NAME):
        self.client = client
        self.collections = get_collections(client, database_name)

    def ping(self):
        self.client.admin.command("ping")

    def close(self):
        self.client.close()
        logger.info("🔌 MongoDB connection closed.")

    # Collection helpers
    def _insert(self, collection: Collection, record):
        result = collection.insert_one(to_document(record))
        return record.model_copy(update={"id": str(result.inserted_id)})

    def _by_id(self, collection: Collection, model_cls, record_id):
        oid = to_object_id(record_id)
        if oid is None:
            return None
        return from_document(model_cls, collection.find_one({"_id": oid}))

    def _find(self, collection: Collection, model_cls, query: dict, sort=None, limit: int = 0):
        cursor = collection.find(query)
        if sort:
            cursor = cursor.sort(sort)
        if limit:
            cursor = cursor.limit(limit)
        return [from_document(model_cls, doc) for doc in cursor]

    def _update(self, collection: Collection, model_cls, record_id, updates: Dict[str, Any]):
        oid = to_object_id(record_id)
        if oid is None:
            return None
        if updates:
            collection.update_one({"_id": oid}, {"$set": updates})
        return from_document(model_cls, collection.find_one({"_id": oid}))

    # User operations
    def get_user(self, user_id):
        return self._by_id(self.collections.users, User, user_id)

    def get_user_by_username(self, username):
        return from_document(User, self.collections.users.find_one({"username": username}))

    def get_user_by_email(self, email):
        return from_document(User, self.collections.users.find_one({"email": email}))

    def create_user(self, user):
        return self._insert(self.collections.users, user)

    def update_user(self, user_id, updates):
        return self._update(self.collections.users, User, user_id, updates)

    def delete_user(self, user_id):
        oid = to_object_id(user_id)
        if oid is None:
            return False
        return self.collections.users.delete_one({"_id": oid}).deleted_count > 0

    def list_users(self, role=None, is_approved=None, is_active=None):
        query = {}
        if role is not None:
            query["role"] = role
        if is_approved is not None:
            query["is_approved"] = is_approved
        if is_active is not None:
            query["is_active"] = is_active
        return self._find(self.collections.users, User, query)

    # Dealer operations
    def get_dealer(self, dealer_id):
        return self._by_id(self.collections.dealers, Dealer, dealer_id)

    def get_all_dealers(self):
        return self._find(self.collections.dealers, Dealer, {})

    def get_dealers_by_location(self, location):
        return self._find(self.collections.dealers, Dealer, {"location": _contains(location)})

    def create_dealer(self, dealer):
        return self._insert(self.collections.dealers, dealer)

    def update_dealer_rating(self, dealer_id, rating, review_count):
        self._update(
            self.collections.dealers, Dealer, dealer_id,
            {"rating": rating, "review_count": review_count},
        )

    # Car operations
    def get_car(self, car_id):
        return self._by_id(self.collections.cars, Car, car_id)

    def get_all_cars(self):
        return self._find(self.collections.cars, Car, {"available": True})

    def get_cars_by_dealer(self, dealer_id, include_unavailable=False):
        query = {"dealer_id": dealer_id}
        if not include_unavailable:
            query["available"] = True
        return self._find(self.collections.cars, Car, query)

    def search_cars(self, filters):
        return self._find(self.collections.cars, Car, build_search_query(filters))

    def search_cars_by_text(self, query):
        tokens = tokenize(query)
        if not tokens:
            return []
        return self._find(self.collections.cars, Car, build_text_query(tokens))

    def get_featured_cars(self, limit=FEATURED_LIMIT):
        return self._find(
            self.collections.cars, Car, {"available": True},
            sort=[("created_at", DESCENDING)], limit=limit,
        )

    def create_car(self, car):
        return self._insert(self.collections.cars, car)

    def update_car(self, car_id, updates):
        return self._update(self.collections.cars, Car, car_id, {**updates, "updated_at": utcnow()})

    # Review operations
    def get_review(self, review_id):
        return self._by_id(self.collections.reviews, Review, review_id)

    def get_reviews_by_dealer(self, dealer_id):
        return self._find(self.collections.reviews, Review, {"dealer_id": dealer_id})

    def get_reviews_by_car(self, car_id):
        return self._find(self.collections.reviews, Review, {"car_id": car_id})

    def get_reviews_by_user(self, user_id):
        return self._find(self.collections.reviews, Review, {"user_id": user_id})

    def create_review(self, review):
        return self._insert(self.collections.reviews, review)

    # Favorite operations
    def get_user_favorites(self, user_id):
        return self._find(self.collections.favorites, FavoriteCar, {"user_id": user_id})

    def get_favorite(self, user_id, car_id):
        return from_document(
            FavoriteCar,
            self.collections.favorites.find_one({"user_id": user_id, "car_id": car_id}),
        )

    def add_to_favorites(self, favorite):
        return self._insert(self.collections.favorites, favorite)

    def remove_from_favorites(self, user_id, car_id):
        result = self.collections.favorites.delete_one({"user_id": user_id, "car_id": car_id})
        return result.deleted_count > 0

    # Inventory management
    def create_inventory_log(self, log):
        return self._insert(self.collections.inventory_logs, log)

    def get_inventory_logs(self, dealer_id):
        return self._find(
            self.collections.inventory_logs, InventoryLog, {"dealer_id": dealer_id},
            sort=[("created_at", DESCENDING)],
        )

    def create_sale(self, sale):
        return self._insert(self.collections.sales, sale)

    def get_sale(self, sale_id):
        return self._by_id(self.collections.sales, Sale, sale_id)

    def get_sales_by_dealer(self, dealer_id):
        return self._find(self.collections.sales, Sale, {"dealer_id": dealer_id})

    def update_sale(self, sale_id, updates):
        return self._update(self.collections.sales, Sale, sale_id, updates)

    def create_dealer_analytics(self, analytics):
        return self._insert(self.collections.dealer_analytics, analytics)

    def get_dealer_analytics(self, dealer_id, period=None):
        query = {"dealer_id": dealer_id}
        if period is not None:
            query["period"] = period
        return self._find(
            self.collections.dealer_analytics, DealerAnalytics, query,
            sort=[("date", DESCENDING)],
        )

    # Course operations
    def _course_query(self, category=None, course_ids=None, active_only=True) -> dict:
        query: Dict[str, Any] = {}
        if active_only:
            query["is_active"] = True
        if category is not None:
            query["category"] = category
        if course_ids is not None:
            oids = [oid for oid in (to_object_id(cid) for cid in course_ids) if oid is not None]
            query["_id"] = {"$in": oids}
        return query

    def get_course(self, course_id):
        return self._by_id(self.collections.courses, Course, course_id)

    def list_courses(self, category=None, course_ids=None, active_only=True):
        return self._find(
            self.collections.courses, Course,
            self._course_query(category, course_ids, active_only),
        )

    def count_courses(self, active_only=True):
        return self.collections.courses.count_documents(self._course_query(active_only=active_only))

    def create_course(self, course):
        return self._insert(self.collections.courses, course)

    def update_course(self, course_id, updates):
        return self._update(self.collections.courses, Course, course_id, updates)

    def _push(self, course_id, field: str, item) -> Optional[Course]:
        oid = to_object_id(course_id)
        if oid is None:
            return None
        result = self.collections.courses.update_one({"_id": oid}, {"$push": {field: item.model_dump()}})
        if result.matched_count == 0:
            return None
        return self.get_course(course_id)

    def add_module(self, course_id, module):
        return self._push(course_id, "modules", module)

    def add_note(self, course_id, note):
        return self._push(course_id, "notes", note)

    # Test operations
    def get_test(self, test_id):
        return self._by_id(self.collections.tests, CourseTest, test_id)

    def list_tests(self, course_id=None, active_only=True):
        query = {}
        if active_only:
            query["is_active"] = True
        if course_id is not None:
            query["course_id"] = course_id
        return self._find(self.collections.tests, CourseTest, query)

    def create_test(self, test):
        return self._insert(self.collections.tests, test)

    def save_test_result(self, test_id, result):
        test = self.get_test(test_id)
        if test is None:
            return None
        results = [r for r in test.results]
        for index, existing in enumerate(results):
            if existing.student_id == result.student_id:
                results[index] = result
                break
        else:
            results.append(result)
        return self._update(
            self.collections.tests, CourseTest, test_id,
            {"results": [r.model_dump() for r in results]},
        )

    # Enrollment operations
    def get_enrollment(self, student_id, course_id):
        return from_document(
            Enrollment,
            self.collections.enrollments.find_one({"student_id": student_id, "course_id": course_id}),
        )

    def list_enrollments(self, student_id):
        return self._find(self.collections.enrollments, Enrollment, {"student_id": student_id})

    def create_enrollment(self, enrollment):
        return self._insert(self.collections.enrollments, enrollment)

    def update_enrollment(self, student_id, course_id, updates):
        enrollment = self.get_enrollment(student_id, course_id)
        if enrollment is None:
            return None
        return self._update(self.collections.enrollments, Enrollment, enrollment.id, updates)
